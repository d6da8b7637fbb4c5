from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from sqlrunner.core.pool import PoolManager, set_pool_manager
from sqlrunner.core.profiles import InMemoryProfileStore
from sqlrunner.main import app
from tests.utils.profile import make_sqlite_profile


@pytest.fixture
def profile_store(tmp_path: Path) -> InMemoryProfileStore:
    """Store with one SQLite target, ``h2test``."""
    return InMemoryProfileStore([make_sqlite_profile(tmp_path)])


@pytest.fixture
def pool_manager(profile_store: InMemoryProfileStore) -> Generator[PoolManager, None, None]:
    pm = PoolManager(profile_store)
    profile_store.on_change(pm.invalidate_all)
    yield pm
    pm.invalidate_all()


@pytest.fixture
def client(pool_manager: PoolManager) -> Generator[TestClient, None, None]:
    previous = set_pool_manager(pool_manager)
    try:
        yield TestClient(app)
    finally:
        set_pool_manager(previous)
