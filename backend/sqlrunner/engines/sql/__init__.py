"""
SQL script engine.

Exports: SqlExecutor, ExecutionOutcome, ResultCollector, split_statements.
"""

from sqlrunner.engines.sql.collector import ResultCollector, Row
from sqlrunner.engines.sql.executor import (
    DEFAULT_MAX_ROWS,
    ExecutionOutcome,
    ExecutionState,
    ProgressSink,
    SqlExecutor,
    log_sink,
)
from sqlrunner.engines.sql.parser import split_statements
from sqlrunner.engines.sql.values import ValueKind, classify, normalize_value

__all__ = [
    "DEFAULT_MAX_ROWS",
    "ExecutionOutcome",
    "ExecutionState",
    "ProgressSink",
    "ResultCollector",
    "Row",
    "SqlExecutor",
    "ValueKind",
    "classify",
    "log_sink",
    "normalize_value",
    "split_statements",
]
