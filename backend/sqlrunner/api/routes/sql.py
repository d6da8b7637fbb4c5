"""
Script execution endpoint.
"""

import base64
from typing import Any

from fastapi import APIRouter

from sqlrunner.api.deps import ExecutorDep
from sqlrunner.engines.sql import Row, log_sink
from sqlrunner.schemas import ExecuteIn, ExecutionOutcomePublic

router = APIRouter(prefix="/sql", tags=["sql"])


def _public_rows(rows: list[Row]) -> list[dict[str, Any]]:
    """Base64-encode binary cells so rows survive JSON."""
    return [
        {
            k: base64.b64encode(v).decode("ascii") if isinstance(v, bytes) else v
            for k, v in row.items()
        }
        for row in rows
    ]


@router.post("/execute", response_model=ExecutionOutcomePublic)
def execute_sql(executor: ExecutorDep, body: ExecuteIn) -> Any:
    """
    Run a SQL script (literal or workspace file) against a configured connection.

    Statements run in order on one pooled connection; progress lines are
    returned in ``log``.
    """
    lines: list[str] = []

    def sink(line: str) -> None:
        lines.append(line)
        log_sink(line)

    outcome = executor.execute(
        body.connection_id,
        sql=body.sql,
        file=body.file,
        return_result=body.return_result,
        max_rows=body.max_rows,
        sink=sink,
    )
    return ExecutionOutcomePublic(
        statements_executed=outcome.statements_executed,
        rows=_public_rows(outcome.rows),
        truncated=outcome.truncated,
        update_counts=outcome.update_counts,
        log=lines,
    )
