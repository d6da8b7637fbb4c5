"""
Run a multi-statement SQL script on one pooled connection.

Statements are split on ``;`` and executed strictly in order on a single
borrowed connection. Each successful statement is committed before the next
one runs (autocommit style), so a failing statement never undoes the work of
the statements before it.

Result sets are either captured into rows (capped across the whole script)
or closed unread; other statements contribute their rowcount.
"""

import logging
from collections.abc import Callable
from enum import Enum
from typing import NamedTuple

from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Connection, CursorResult

from sqlrunner.core.errors import StatementError, ValidationError
from sqlrunner.core.pool import PoolManager, get_pool_manager
from sqlrunner.engines.sql.collector import ResultCollector, Row
from sqlrunner.engines.sql.parser import split_statements
from sqlrunner.engines.sql.values import format_cell

_log = logging.getLogger(__name__)
_progress_log = logging.getLogger("sqlrunner.progress")

DEFAULT_MAX_ROWS = 1000

# Statements go to the driver verbatim; '%' and ':' are never bind markers.
_RAW_EXECUTION = {"no_parameters": True}

ProgressSink = Callable[[str], None]


def log_sink(line: str) -> None:
    """Default progress sink: one INFO record per line."""
    _progress_log.info("%s", line)


class ExecutionState(str, Enum):
    IDLE = "IDLE"
    ACQUIRING = "ACQUIRING"
    EXECUTING = "EXECUTING"
    CAPTURING = "CAPTURING"
    RECORDING = "RECORDING"
    FAILED = "FAILED"
    RELEASING = "RELEASING"
    DONE = "DONE"


class ExecutionOutcome(NamedTuple):
    statements_executed: int
    rows: list[Row]
    truncated: bool
    update_counts: list[int]


class SqlExecutor:
    """
    run(connection_id, script, *, return_results, max_rows, sink) -> ExecutionOutcome

    Raises ValidationError / NotFoundError before any connection is touched,
    ConfigurationError / ConnectionFailedError / PoolExhaustedError while
    acquiring, StatementError for the first failing statement.
    """

    def __init__(self, pool_manager: PoolManager | None = None) -> None:
        self._pool_manager = pool_manager

    @property
    def pool_manager(self) -> PoolManager:
        return self._pool_manager or get_pool_manager()

    def run(
        self,
        connection_id: str,
        script: str | None,
        *,
        return_results: bool = False,
        max_rows: int = DEFAULT_MAX_ROWS,
        sink: ProgressSink | None = None,
    ) -> ExecutionOutcome:
        emit = sink or log_sink
        if script is None:
            raise ValidationError("SQL script is required")
        if max_rows < 1:
            raise ValidationError("max_rows must be at least 1")

        statements = split_statements(script)
        collector = ResultCollector(max_rows) if return_results else None
        update_counts: list[int] = []
        executed = 0

        self._enter(connection_id, ExecutionState.ACQUIRING)
        with self.pool_manager.borrow(connection_id) as conn:
            try:
                for index, stmt in enumerate(statements, start=1):
                    self._enter(connection_id, ExecutionState.EXECUTING, index)
                    emit(f"Executing: {stmt}")
                    executed += 1
                    self._execute_one(
                        conn, index, stmt, collector, update_counts, emit, connection_id
                    )
            finally:
                self._enter(connection_id, ExecutionState.RELEASING)

        self._enter(connection_id, ExecutionState.DONE)
        rows, truncated = collector.finalize() if collector else ([], False)
        emit(f"Successfully executed {executed} statement(s)")
        return ExecutionOutcome(
            statements_executed=executed,
            rows=rows,
            truncated=truncated,
            update_counts=update_counts,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _execute_one(
        self,
        conn: Connection,
        index: int,
        stmt: str,
        collector: ResultCollector | None,
        update_counts: list[int],
        emit: ProgressSink,
        connection_id: str,
    ) -> None:
        try:
            result = conn.exec_driver_sql(stmt, execution_options=_RAW_EXECUTION)
            if result.returns_rows:
                if collector is not None:
                    self._enter(connection_id, ExecutionState.CAPTURING, index)
                    self._capture(result, collector, emit)
                else:
                    result.close()
            else:
                self._enter(connection_id, ExecutionState.RECORDING, index)
                count = result.rowcount
                update_counts.append(count)
                if count >= 0:
                    emit(f"Rows affected: {count}")
            conn.commit()
        except sa_exc.SQLAlchemyError as e:
            self._enter(connection_id, ExecutionState.FAILED, index)
            message = str(e.orig) if isinstance(e, sa_exc.DBAPIError) else str(e)
            _log.warning(
                "Statement %d on %s failed: %s", index, connection_id, message
            )
            self._rollback_quiet(conn)
            raise StatementError(index, stmt, message) from e

    @staticmethod
    def _capture(
        result: CursorResult, collector: ResultCollector, emit: ProgressSink
    ) -> None:
        columns = list(result.keys())
        emit("\t".join(columns))
        retrieved = 0
        rows_left = False
        try:
            for row in result:
                if collector.full:
                    rows_left = True
                    break
                collector.accumulate(dict(zip(columns, row)))
                emit("\t".join(format_cell(v) for v in row))
                retrieved += 1
        finally:
            result.close()
        emit(f"Retrieved {retrieved} row(s)")
        # one notice per script, however many result sets overflow the cap
        if rows_left and not collector.truncated:
            collector.mark_truncated()
            emit(f"... (output truncated at {collector.max_rows} rows)")

    @staticmethod
    def _enter(
        connection_id: str, state: ExecutionState, index: int | None = None
    ) -> None:
        if index is None:
            _log.debug("[%s] %s", connection_id, state.value)
        else:
            _log.debug("[%s] %s(%d)", connection_id, state.value, index)

    @staticmethod
    def _rollback_quiet(conn: Connection) -> None:
        try:
            conn.rollback()
        except sa_exc.SQLAlchemyError as e:
            _log.warning("Rollback after failed statement raised: %s", e)
