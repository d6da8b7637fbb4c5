"""
Error taxonomy for SQL script execution.

Every error carries the HTTP status the API layer answers with, so route
handlers can let them propagate to the handler registered in main.py.
"""


class SqlRunnerError(Exception):
    """Base class for errors surfaced to the caller of an execution."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SqlRunnerError):
    """Request is malformed: both or neither of sql/file, bad max_rows, bad path."""

    status_code = 400


class NotFoundError(SqlRunnerError):
    """No connection profile with the requested id."""

    status_code = 404

    def __init__(self, connection_id: str) -> None:
        super().__init__(
            f"Database connection '{connection_id}' not found in configuration"
        )
        self.connection_id = connection_id


class ConfigurationError(SqlRunnerError):
    """Driver unavailable, unknown dialect or malformed URL."""

    status_code = 400


class ConnectionFailedError(SqlRunnerError):
    """The database refused or dropped the physical connection while borrowing."""

    status_code = 502


class PoolExhaustedError(SqlRunnerError):
    """No pooled connection became available within the profile's timeout."""

    status_code = 503


class StatementError(SqlRunnerError):
    """Statement ``index`` (1-based) of the script failed; later ones were skipped."""

    status_code = 422

    def __init__(self, index: int, statement: str, message: str) -> None:
        super().__init__(f"Statement {index} failed: {message}")
        self.index = index
        self.statement = statement
        self.db_message = message


class ScriptFileError(SqlRunnerError, OSError):
    """SQL file could not be read from the workspace."""

    status_code = 400
