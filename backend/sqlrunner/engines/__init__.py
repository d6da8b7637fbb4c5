"""
Engines: SQL script execution (SqlExecutor) and the job step entrypoint
(StepExecutor).
"""

from sqlrunner.engines.executor import StepExecutor, read_script_file
from sqlrunner.engines.sql import ExecutionOutcome, SqlExecutor, split_statements

__all__ = [
    "StepExecutor",
    "SqlExecutor",
    "ExecutionOutcome",
    "read_script_file",
    "split_statements",
]
