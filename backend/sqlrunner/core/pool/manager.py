"""
Connection pool cache for named connection profiles.

One PooledSource (a SQLAlchemy engine on QueuePool) per profile id, built
lazily on first acquire and kept until invalidated. Connections borrowed from
a source that is invalidated while they are out are closed on release instead
of going back to a pool nobody uses any more.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Connection, Engine

from sqlrunner.core.config import settings
from sqlrunner.core.errors import (
    ConfigurationError,
    ConnectionFailedError,
    NotFoundError,
    PoolExhaustedError,
)
from sqlrunner.core.profiles import (
    InMemoryProfileStore,
    ProfileStore,
    SqlModelProfileStore,
    load_profiles_file,
)
from sqlrunner.models import ConnectionProfile

from .connect import build_engine

_log = logging.getLogger(__name__)


class _SourceClosed(Exception):
    """Source was invalidated between lookup and borrow."""


class PooledSource:
    """Owns the engine (and thereby the physical connections) for one profile id."""

    def __init__(self, profile: ConnectionProfile, engine: Engine) -> None:
        self.connection_id = profile.id
        self.engine = engine
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def borrow(self, timeout: int) -> Connection:
        if self._closed:
            raise _SourceClosed(self.connection_id)
        try:
            return self.engine.connect()
        except sa_exc.TimeoutError as e:
            raise PoolExhaustedError(
                f"No connection available for '{self.connection_id}' "
                f"within {timeout}s"
            ) from e
        except sa_exc.DBAPIError as e:
            raise ConnectionFailedError(
                f"Could not connect to '{self.connection_id}': {e.orig}"
            ) from e
        except (TypeError, ValueError, AttributeError) as e:
            # driver module rejected the connect arguments the dialect built
            raise ConfigurationError(
                f"Driver does not match URL for connection '{self.connection_id}': {e}"
            ) from e

    def give_back(self, conn: Connection) -> bool:
        """Return *conn* to the pool; close it instead if this source is closed."""
        with self._lock:
            stale = self._closed
            if stale:
                conn.invalidate()
            conn.close()
        return not stale

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self.engine.dispose()


class BorrowedConnection:
    """A connection checked out from a PooledSource for one invocation."""

    def __init__(self, source: PooledSource, connection: Connection) -> None:
        self.source = source
        self.connection = connection
        self.released = False

    @property
    def connection_id(self) -> str:
        return self.source.connection_id


class PoolManager:
    """id -> PooledSource cache with borrow/return/invalidate."""

    def __init__(self, store: ProfileStore) -> None:
        self._store = store
        self._sources: dict[str, PooledSource] = {}
        self._lock = threading.Lock()
        self._constructed = 0
        self._checked_out = 0

    @property
    def store(self) -> ProfileStore:
        return self._store

    def resolve(self, connection_id: str) -> ConnectionProfile:
        profile = self._store.get(connection_id)
        if profile is None:
            raise NotFoundError(connection_id)
        return profile

    def acquire(self, connection_id: str) -> BorrowedConnection:
        """Resolve the profile, get or build its source, borrow one connection."""
        profile = self.resolve(connection_id)
        while True:
            source = self._get_or_create(profile)
            try:
                conn = source.borrow(profile.connection_timeout)
            except _SourceClosed:
                _log.debug("Source for %s invalidated before borrow; retrying", connection_id)
                continue
            except ConfigurationError:
                self._evict(source)
                raise
            with self._lock:
                self._checked_out += 1
            return BorrowedConnection(source, conn)

    def release(self, borrowed: BorrowedConnection) -> None:
        if borrowed.released:
            raise RuntimeError(
                f"Connection for '{borrowed.connection_id}' released twice"
            )
        borrowed.released = True
        with self._lock:
            self._checked_out -= 1
        try:
            returned = borrowed.source.give_back(borrowed.connection)
        except sa_exc.SQLAlchemyError as e:
            _log.warning(
                "Error returning connection for %s: %s", borrowed.connection_id, e
            )
            return
        if not returned:
            _log.info(
                "Closed connection for invalidated pool: %s", borrowed.connection_id
            )

    @contextmanager
    def borrow(self, connection_id: str) -> Iterator[Connection]:
        """``with pm.borrow(id) as conn:`` -- release is guaranteed on exit."""
        borrowed = self.acquire(connection_id)
        try:
            yield borrowed.connection
        finally:
            self.release(borrowed)

    def invalidate(self, connection_id: str) -> bool:
        """Close and evict the source for *connection_id*. False if none was cached."""
        with self._lock:
            source = self._sources.pop(connection_id, None)
        if source is None:
            return False
        _log.info("Removing cached data source for connection: %s", connection_id)
        self._close_quiet(source)
        return True

    def invalidate_all(self) -> int:
        _log.info("Clearing database connection cache")
        with self._lock:
            sources = list(self._sources.values())
            self._sources.clear()
        for source in sources:
            self._close_quiet(source)
        return len(sources)

    def cached_source(self, connection_id: str) -> PooledSource | None:
        return self._sources.get(connection_id)

    def stats(self) -> dict[str, int]:
        """Return pool statistics for monitoring."""
        with self._lock:
            return {
                "sources": len(self._sources),
                "constructed": self._constructed,
                "checked_out": self._checked_out,
            }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_or_create(self, profile: ConnectionProfile) -> PooledSource:
        source = self._sources.get(profile.id)
        if source is not None:
            return source
        with self._lock:
            source = self._sources.get(profile.id)
            if source is None:
                _log.info("Creating data source for connection: %s", profile.id)
                source = PooledSource(profile, build_engine(profile))
                self._sources[profile.id] = source
                self._constructed += 1
            return source

    def _evict(self, source: PooledSource) -> None:
        """Drop *source* if it is still the cached one for its id."""
        with self._lock:
            if self._sources.get(source.connection_id) is source:
                del self._sources[source.connection_id]
        _log.warning(
            "Discarding misconfigured data source for connection: %s",
            source.connection_id,
        )
        self._close_quiet(source)

    @staticmethod
    def _close_quiet(source: PooledSource) -> None:
        try:
            source.close()
        except Exception as e:
            _log.warning(
                "Error closing data source for connection %s: %s",
                source.connection_id,
                e,
            )


def build_profile_store() -> ProfileStore:
    """Profile store selected by PROFILE_STORE."""
    if settings.PROFILE_STORE == "database":
        from sqlrunner.core.db import engine

        return SqlModelProfileStore(engine)
    profiles = (
        load_profiles_file(settings.PROFILES_FILE) if settings.PROFILES_FILE else []
    )
    return InMemoryProfileStore(profiles)


_pool_manager: PoolManager | None = None
_pool_lock = threading.Lock()


def get_pool_manager() -> PoolManager:
    """Return the singleton PoolManager (thread-safe double-checked locking)."""
    global _pool_manager
    if _pool_manager is None:
        with _pool_lock:
            if _pool_manager is None:
                store = build_profile_store()
                pm = PoolManager(store)
                if isinstance(store, InMemoryProfileStore):
                    store.on_change(pm.invalidate_all)
                _pool_manager = pm
    return _pool_manager


def set_pool_manager(pm: PoolManager | None) -> PoolManager | None:
    """Swap the singleton (tests, embedding hosts). Returns the previous one."""
    global _pool_manager
    with _pool_lock:
        previous, _pool_manager = _pool_manager, pm
    return previous
