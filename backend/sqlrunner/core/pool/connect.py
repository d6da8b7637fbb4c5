"""
Engine construction for connection profiles.

driver_class names the DBAPI module (psycopg, pymysql, sqlite3, ...); url is a
SQLAlchemy URL. Every engine uses QueuePool so max_connections is a hard
ceiling regardless of dialect defaults.
"""

import importlib
import logging
from types import ModuleType
from typing import Any

from sqlalchemy import create_engine, exc as sa_exc
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.pool import NullPool, QueuePool

from sqlrunner.core.config import settings
from sqlrunner.core.errors import ConfigurationError
from sqlrunner.models import ConnectionProfile

from .health import health_check

_log = logging.getLogger(__name__)


def load_driver(driver_class: str | None) -> ModuleType:
    """Import the DBAPI module named by *driver_class*."""
    name = (driver_class or "").strip()
    if not name:
        raise ConfigurationError("Driver class is required")
    try:
        return importlib.import_module(name)
    except ImportError as e:
        raise ConfigurationError(f"Driver class not found: {name}") from e


def build_url(
    raw_url: str | None, username: str | None = None, password: str | None = None
) -> URL:
    """Parse *raw_url* and fill in credentials the URL does not carry itself."""
    if not (raw_url or "").strip():
        raise ConfigurationError("URL is required")
    try:
        url = make_url(raw_url.strip())  # type: ignore[union-attr]
    except sa_exc.ArgumentError as e:
        raise ConfigurationError(f"Malformed URL: {e}") from e
    if username and url.username is None:
        url = url.set(username=username)
    if password and url.password is None:
        url = url.set(password=password)
    return url


def pool_sizing(max_connections: int) -> tuple[int, int]:
    """(pool_size, max_overflow) whose sum is exactly *max_connections*."""
    total = max(1, max_connections)
    pool_size = max(1, total // 2)
    return pool_size, total - pool_size


def build_engine(profile: ConnectionProfile, *, pooled: bool = True) -> Engine:
    """
    Create the engine backing one pooled source.

    Nothing connects here; bad drivers and URLs fail fast with
    ConfigurationError, unreachable databases only fail at borrow time.
    """
    module = load_driver(profile.effective_driver_class)
    url = build_url(profile.url, profile.username, profile.password)

    kwargs: dict[str, Any] = {"module": module}
    if pooled:
        pool_size, max_overflow = pool_sizing(profile.max_connections)
        kwargs.update(
            poolclass=QueuePool,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=profile.connection_timeout,
            pool_pre_ping=profile.test_on_borrow,
        )
    else:
        kwargs["poolclass"] = NullPool

    try:
        return create_engine(url, **kwargs)
    except sa_exc.NoSuchModuleError as e:
        raise ConfigurationError(
            f"Unsupported database URL for connection '{profile.id}': {e}"
        ) from e
    except (sa_exc.ArgumentError, TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid configuration for connection '{profile.id}': {e}"
        ) from e


def test_connection(
    driver_class: str | None,
    url: str | None,
    username: str | None = None,
    password: str | None = None,
) -> tuple[bool, str]:
    """
    Open a throwaway connection, run the liveness query, close it.

    Never touches the pool cache. Returns (ok, message).
    """
    if not (driver_class or "").strip():
        return False, "Driver class is required"
    if not (url or "").strip():
        return False, "URL is required"

    profile = ConnectionProfile(
        id="__connection_test__",
        name="connection test",
        driver_class=driver_class.strip(),  # type: ignore[union-attr]
        url=url.strip(),  # type: ignore[union-attr]
        username=username or None,
        password=password or None,
        max_connections=1,
        connection_timeout=settings.CONNECTION_TEST_TIMEOUT,
        test_on_borrow=False,
    )
    try:
        engine = build_engine(profile, pooled=False)
    except ConfigurationError as e:
        return False, e.message

    try:
        with engine.connect() as conn:
            if health_check(conn):
                return True, "Connection successful!"
            return False, "Connection is not valid"
    except sa_exc.DBAPIError as e:
        return False, f"Connection failed: {e.orig}"
    except Exception as e:
        _log.warning("Connection test failed unexpectedly: %s", e, exc_info=True)
        return False, f"Connection failed: {e}"
    finally:
        engine.dispose()
