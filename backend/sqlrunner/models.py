"""
Connection profile model and the catalogue of predefined drivers.

A ConnectionProfile is owned by the profile store; the pool and the SQL
engine only read it. Identity is the ``id`` alone.
"""

from enum import Enum

from sqlmodel import Field, SQLModel


class DatabaseDriver(str, Enum):
    """Predefined drivers: value is the DBAPI module name."""

    MYSQL = "pymysql"
    POSTGRESQL = "psycopg"
    SQLSERVER = "pymssql"
    ORACLE = "oracledb"
    TRINO = "trino.dbapi"
    SQLITE = "sqlite3"

    @property
    def display_name(self) -> str:
        return _DRIVER_INFO[self][0]

    @property
    def url_template(self) -> str:
        return _DRIVER_INFO[self][1]


_DRIVER_INFO: dict[DatabaseDriver, tuple[str, str]] = {
    DatabaseDriver.MYSQL: ("MySQL", "mysql+pymysql://localhost:3306/database"),
    DatabaseDriver.POSTGRESQL: (
        "PostgreSQL",
        "postgresql+psycopg://localhost:5432/database",
    ),
    DatabaseDriver.SQLSERVER: (
        "SQL Server",
        "mssql+pymssql://localhost:1433/database",
    ),
    DatabaseDriver.ORACLE: (
        "Oracle",
        "oracle+oracledb://localhost:1521/?service_name=XE",
    ),
    DatabaseDriver.TRINO: ("Trino", "trino://localhost:8080/catalog/schema"),
    DatabaseDriver.SQLITE: ("SQLite", "sqlite:///database.db"),
}


class ConnectionProfile(SQLModel, table=True):
    __tablename__ = "connection_profile"

    id: str = Field(primary_key=True, max_length=255)
    name: str = Field(max_length=255)
    driver_class: str = Field(default="", max_length=255)
    custom_driver_class: str | None = Field(default=None, max_length=255)
    url: str = Field(max_length=1024)
    username: str | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None, max_length=512, repr=False)
    max_connections: int = Field(default=10, ge=1)
    connection_timeout: int = Field(default=30, ge=0)  # seconds
    test_on_borrow: bool = Field(default=True)

    @property
    def effective_driver_class(self) -> str:
        """Main driver class, or the custom one when the main one is blank."""
        if not (self.driver_class or "").strip() and (
            self.custom_driver_class or ""
        ).strip():
            return self.custom_driver_class.strip()  # type: ignore[union-attr]
        return (self.driver_class or "").strip()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConnectionProfile):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
