"""
Connection pool cache for named connection profiles.

Each profile id gets one SQLAlchemy engine on QueuePool, built on first use.
"""

from .connect import build_engine, load_driver, test_connection
from .health import health_check
from .manager import (
    BorrowedConnection,
    PooledSource,
    PoolManager,
    get_pool_manager,
    set_pool_manager,
)

__all__ = [
    "build_engine",
    "load_driver",
    "test_connection",
    "health_check",
    "BorrowedConnection",
    "PooledSource",
    "PoolManager",
    "get_pool_manager",
    "set_pool_manager",
]
