"""
Job step entrypoint.

StepExecutor.execute is what a host job calls: it checks the request, reads
the script (literal text or a file inside the workspace), writes the prelude
progress lines and hands over to SqlExecutor. Cache administration is exposed
here too so hosts need a single object.
"""

import logging
from pathlib import Path

from sqlrunner.core.config import settings
from sqlrunner.core.errors import ScriptFileError, SqlRunnerError, ValidationError
from sqlrunner.core.pool import PoolManager, get_pool_manager
from sqlrunner.engines.sql import (
    DEFAULT_MAX_ROWS,
    ExecutionOutcome,
    ProgressSink,
    SqlExecutor,
    log_sink,
)

_log = logging.getLogger(__name__)


def read_script_file(file: str, workspace: Path | None = None) -> str:
    """Read *file* relative to the workspace; paths escaping it are rejected."""
    root = Path(workspace if workspace is not None else settings.SQL_WORKSPACE_DIR)
    root = root.resolve()
    path = (root / file).resolve()
    if path != root and root not in path.parents:
        raise ValidationError(f"SQL file must be inside the workspace: {file}")
    if not path.is_file():
        raise ScriptFileError(f"SQL file not found: {file}")
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ScriptFileError(f"Cannot read SQL file {file}: {e}") from e


class StepExecutor:
    """
    execute(connection_id, sql=..., file=..., return_result=False, max_rows=1000)
    -> ExecutionOutcome
    """

    def __init__(
        self,
        pool_manager: PoolManager | None = None,
        *,
        workspace: Path | None = None,
    ) -> None:
        self._pool_manager = pool_manager
        self._workspace = workspace

    @property
    def pool_manager(self) -> PoolManager:
        return self._pool_manager or get_pool_manager()

    def execute(
        self,
        connection_id: str,
        sql: str | None = None,
        file: str | None = None,
        *,
        return_result: bool = False,
        max_rows: int = DEFAULT_MAX_ROWS,
        sink: ProgressSink | None = None,
    ) -> ExecutionOutcome:
        emit = sink or log_sink
        if sql is None and file is None:
            raise ValidationError("Either 'sql' or 'file' parameter must be provided")
        if sql is not None and file is not None:
            raise ValidationError("Only one of 'sql' or 'file' parameter can be provided")
        if not (connection_id or "").strip():
            raise ValidationError("connection_id is required")

        # Unknown ids fail here, before any file I/O or pool construction.
        self.pool_manager.resolve(connection_id)

        if sql is not None:
            script = sql
            emit("Executing SQL statement...")
        else:
            script = read_script_file(file, self._workspace)  # type: ignore[arg-type]
            emit(f"Executing SQL from file: {file}")
        emit(f"Using database connection: {connection_id}")

        try:
            return SqlExecutor(self.pool_manager).run(
                connection_id,
                script,
                return_results=return_result,
                max_rows=max_rows,
                sink=emit,
            )
        except SqlRunnerError as e:
            emit(f"SQL execution failed: {e.message}")
            raise

    def clear_cache(self) -> int:
        """Close every pooled source. Returns how many were cached."""
        return self.pool_manager.invalidate_all()

    def remove_cached_connection(self, connection_id: str) -> bool:
        return self.pool_manager.invalidate(connection_id)
