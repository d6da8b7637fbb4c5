"""
Tests for core.pool.connect: engine construction and the out-of-band connection test.

Targets are SQLite files under tmp_path, so no external database is required.
"""

from pathlib import Path

import pytest
from sqlalchemy.pool import NullPool, QueuePool

from sqlrunner.core.errors import ConfigurationError
from sqlrunner.core.pool import connect as pool_connect
from tests.utils.profile import make_sqlite_profile


# --- pool sizing ---


@pytest.mark.parametrize(
    ("max_connections", "expected"),
    [(1, (1, 0)), (2, (1, 1)), (10, (5, 5)), (7, (3, 4))],
)
def test_pool_sizing_sums_to_max_connections(
    max_connections: int, expected: tuple[int, int]
) -> None:
    assert pool_connect.pool_sizing(max_connections) == expected


# --- build_engine ---


def test_build_engine_uses_queue_pool(tmp_path: Path) -> None:
    engine = pool_connect.build_engine(make_sqlite_profile(tmp_path, max_connections=6))
    try:
        assert isinstance(engine.pool, QueuePool)
        assert engine.pool.size() == 3
        assert engine.pool.timeout() == 2
    finally:
        engine.dispose()


def test_build_engine_unpooled(tmp_path: Path) -> None:
    engine = pool_connect.build_engine(make_sqlite_profile(tmp_path), pooled=False)
    try:
        assert isinstance(engine.pool, NullPool)
    finally:
        engine.dispose()


def test_build_engine_missing_driver_module(tmp_path: Path) -> None:
    profile = make_sqlite_profile(tmp_path, driver_class="no_such_dbapi_module")
    with pytest.raises(ConfigurationError, match="Driver class not found"):
        pool_connect.build_engine(profile)


def test_build_engine_blank_driver(tmp_path: Path) -> None:
    profile = make_sqlite_profile(tmp_path, driver_class="  ")
    with pytest.raises(ConfigurationError, match="Driver class is required"):
        pool_connect.build_engine(profile)


def test_build_engine_uses_custom_driver_when_main_is_blank(tmp_path: Path) -> None:
    profile = make_sqlite_profile(tmp_path, driver_class="", custom_driver_class="sqlite3")
    assert profile.effective_driver_class == "sqlite3"
    engine = pool_connect.build_engine(profile)
    engine.dispose()


def test_build_engine_malformed_url(tmp_path: Path) -> None:
    profile = make_sqlite_profile(tmp_path, url="definitely not a url")
    with pytest.raises(ConfigurationError):
        pool_connect.build_engine(profile)


def test_build_engine_unknown_dialect(tmp_path: Path) -> None:
    profile = make_sqlite_profile(tmp_path, url="nosuchdialect://localhost/db")
    with pytest.raises(ConfigurationError, match="Unsupported database URL"):
        pool_connect.build_engine(profile)


def test_build_url_fills_credentials() -> None:
    url = pool_connect.build_url("postgresql+psycopg://db.example:5432/app", "scott", "tiger")
    assert url.username == "scott"
    assert url.password == "tiger"


def test_build_url_keeps_credentials_from_url() -> None:
    url = pool_connect.build_url("postgresql+psycopg://alice:pw@db.example/app", "scott", "tiger")
    assert url.username == "alice"
    assert url.password == "pw"


# --- test_connection ---


def test_connection_test_ok(tmp_path: Path) -> None:
    ok, message = pool_connect.test_connection(
        "sqlite3", f"sqlite:///{tmp_path / 'probe.db'}", None, None
    )
    assert ok is True
    assert message == "Connection successful!"


def test_connection_test_requires_driver() -> None:
    assert pool_connect.test_connection("", "sqlite://") == (False, "Driver class is required")


def test_connection_test_requires_url() -> None:
    assert pool_connect.test_connection("sqlite3", "  ") == (False, "URL is required")


def test_connection_test_unknown_driver() -> None:
    ok, message = pool_connect.test_connection("no_such_dbapi_module", "sqlite://")
    assert ok is False
    assert message == "Driver class not found: no_such_dbapi_module"


def test_connection_test_unreachable_database(tmp_path: Path) -> None:
    url = f"sqlite:///{tmp_path / 'missing-dir' / 'x.db'}"
    ok, message = pool_connect.test_connection("sqlite3", url)
    assert ok is False
    assert message.startswith("Connection failed")
