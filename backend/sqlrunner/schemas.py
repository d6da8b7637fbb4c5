"""
Request/response schemas for the HTTP API.
"""

from typing import Any

from sqlmodel import Field, SQLModel

from sqlrunner.core.config import settings


class Message(SQLModel):
    message: str


class ExecuteIn(SQLModel):
    """Body for POST /sql/execute. Exactly one of sql/file (checked by the executor)."""

    connection_id: str = Field(..., min_length=1, max_length=255)
    sql: str | None = Field(default=None, description="Literal SQL script.")
    file: str | None = Field(
        default=None,
        max_length=1024,
        description="Script path relative to the SQL workspace directory.",
    )
    return_result: bool = Field(default=False)
    max_rows: int = Field(default=settings.SQL_DEFAULT_MAX_ROWS, ge=1)


class ExecutionOutcomePublic(SQLModel):
    """Outcome of one script run. Binary cells are base64 strings."""

    statements_executed: int
    rows: list[dict[str, Any]]
    truncated: bool
    update_counts: list[int]
    log: list[str] = Field(default_factory=list)


class ConnectionTestIn(SQLModel):
    """Body for POST /connections/test; connection params only, nothing cached."""

    driver_class: str | None = Field(default=None, max_length=255)
    url: str | None = Field(default=None, max_length=1024)
    username: str | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None, max_length=512, description="Optional.")


class ConnectionTestResult(SQLModel):
    """Response for /connections/test."""

    ok: bool
    message: str


class DriverPublic(SQLModel):
    name: str
    display_name: str
    driver_class: str
    url_template: str


class PoolStats(SQLModel):
    sources: int
    constructed: int
    checked_out: int
