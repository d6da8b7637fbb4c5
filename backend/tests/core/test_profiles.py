"""Tests for connection profile stores."""

import json
from pathlib import Path

import pytest
from sqlalchemy import inspect
from sqlmodel import Session, SQLModel, create_engine

from sqlrunner.core.config import settings
from sqlrunner.core.errors import ConfigurationError
from sqlrunner.core.pool.manager import build_profile_store
from sqlrunner.core.profiles import (
    InMemoryProfileStore,
    SqlModelProfileStore,
    load_profiles_file,
)
from tests.utils.profile import make_sqlite_profile


def test_in_memory_get(tmp_path: Path) -> None:
    store = InMemoryProfileStore([make_sqlite_profile(tmp_path)])
    assert store.get("h2test").driver_class == "sqlite3"
    assert store.get("missing") is None
    assert store.get(None) is None  # type: ignore[arg-type]


def test_in_memory_replace_all_notifies(tmp_path: Path) -> None:
    store = InMemoryProfileStore([make_sqlite_profile(tmp_path)])
    calls: list[int] = []
    store.on_change(lambda: calls.append(1))
    store.replace_all(
        [make_sqlite_profile(tmp_path, "x"), make_sqlite_profile(tmp_path, " ")]
    )
    assert calls == [1]
    assert [p.id for p in store.all()] == ["x"]


def test_profile_identity_is_id_only(tmp_path: Path) -> None:
    a = make_sqlite_profile(tmp_path, name="first")
    b = make_sqlite_profile(tmp_path, name="second", max_connections=1)
    assert a == b
    assert len({a, b}) == 1


def test_password_not_in_repr(tmp_path: Path) -> None:
    p = make_sqlite_profile(tmp_path, password="hunter2")
    assert "hunter2" not in repr(p)


def test_load_profiles_file(tmp_path: Path) -> None:
    path = tmp_path / "profiles.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": "reporting",
                    "name": "Reporting",
                    "driver_class": "psycopg",
                    "url": "postgresql+psycopg://db/reporting",
                    "username": "report",
                    "password": "secret",
                    "max_connections": 5,
                },
                {"name": "no id"},
            ]
        ),
        encoding="utf-8",
    )
    profiles = load_profiles_file(path)
    assert [p.id for p in profiles] == ["reporting"]
    assert profiles[0].max_connections == 5
    assert profiles[0].test_on_borrow is True


def test_load_profiles_file_not_a_list(tmp_path: Path) -> None:
    path = tmp_path / "profiles.json"
    path.write_text("{}", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="JSON list"):
        load_profiles_file(path)


def test_load_profiles_file_missing(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_profiles_file(tmp_path / "absent.json")


def test_sqlmodel_store(tmp_path: Path) -> None:
    engine = create_engine(f"sqlite:///{tmp_path / 'store.db'}")
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        session.add(make_sqlite_profile(tmp_path, password="pw"))
        session.commit()

    store = SqlModelProfileStore(engine)
    profile = store.get("h2test")
    assert profile is not None
    assert profile.password == "pw"
    assert profile.effective_driver_class == "sqlite3"
    assert store.get("missing") is None
    engine.dispose()


# --- store selection ---


def test_build_profile_store_memory_from_file(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "profiles.json"
    path.write_text(
        json.dumps([{"id": "a", "name": "A", "driver_class": "sqlite3", "url": "sqlite://"}]),
        encoding="utf-8",
    )
    monkeypatch.setattr(settings, "PROFILE_STORE", "memory")
    monkeypatch.setattr(settings, "PROFILES_FILE", path)
    store = build_profile_store()
    assert isinstance(store, InMemoryProfileStore)
    assert store.get("a").name == "A"


def test_build_profile_store_database(monkeypatch) -> None:
    monkeypatch.setattr(settings, "PROFILE_STORE", "database")
    assert isinstance(build_profile_store(), SqlModelProfileStore)


def test_init_db_creates_profile_table(tmp_path: Path, monkeypatch) -> None:
    from sqlrunner.core import db

    engine = create_engine(f"sqlite:///{tmp_path / 'app.db'}")
    monkeypatch.setattr(db, "engine", engine)
    db.init_db()
    assert "connection_profile" in inspect(engine).get_table_names()
    engine.dispose()
