"""
Connection profile stores.

The pool only needs ``get(connection_id) -> ConnectionProfile | None``.
InMemoryProfileStore is the default (optionally seeded from a JSON file);
SqlModelProfileStore reads the ConnectionProfile table.
"""

import json
import logging
import threading
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Protocol

from sqlalchemy.engine import Engine
from sqlmodel import Session

from sqlrunner.core.errors import ConfigurationError
from sqlrunner.models import ConnectionProfile

_log = logging.getLogger(__name__)


class ProfileStore(Protocol):
    def get(self, connection_id: str) -> ConnectionProfile | None: ...


class InMemoryProfileStore:
    """Thread-safe id -> profile map. ``on_change`` fires after a wholesale replace."""

    def __init__(self, profiles: Iterable[ConnectionProfile] = ()) -> None:
        self._profiles: dict[str, ConnectionProfile] = {}
        self._lock = threading.Lock()
        self._listeners: list[Callable[[], None]] = []
        for p in profiles:
            self._profiles[p.id] = p

    def get(self, connection_id: str) -> ConnectionProfile | None:
        if connection_id is None:
            return None
        return self._profiles.get(connection_id)

    def all(self) -> list[ConnectionProfile]:
        with self._lock:
            return list(self._profiles.values())

    def put(self, profile: ConnectionProfile) -> None:
        with self._lock:
            self._profiles[profile.id] = profile

    def replace_all(self, profiles: Iterable[ConnectionProfile]) -> None:
        """Swap the whole configuration; listeners (e.g. pool cache) are notified."""
        new = {p.id: p for p in profiles if p.id and p.id.strip()}
        with self._lock:
            self._profiles = new
        _log.info("Configured %d database connections", len(new))
        for listener in list(self._listeners):
            listener()

    def on_change(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)


def load_profiles_file(path: Path) -> list[ConnectionProfile]:
    """Read a JSON list of profile objects. Entries without an id are skipped."""
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot load profiles from {path}: {e}") from e
    if not isinstance(raw, list):
        raise ConfigurationError(f"Profiles file {path} must contain a JSON list")
    profiles: list[ConnectionProfile] = []
    for item in raw:
        if not isinstance(item, dict) or not str(item.get("id") or "").strip():
            _log.warning("Skipping connection profile without id in %s", path)
            continue
        profiles.append(ConnectionProfile.model_validate(item))
    return profiles


class SqlModelProfileStore:
    """Read-only lookup against the ConnectionProfile table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get(self, connection_id: str) -> ConnectionProfile | None:
        if connection_id is None:
            return None
        with Session(self._engine, expire_on_commit=False) as session:
            profile = session.get(ConnectionProfile, connection_id)
            if profile is not None:
                session.expunge(profile)
            return profile
