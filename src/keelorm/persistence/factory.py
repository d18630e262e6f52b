"""
SessionFactory owning the connection pool and the frozen metadata registry.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, List, Optional, Set

from ..dialects import get_dialect
from ..dialects.base import Dialect
from ..errors import OrmError, SessionClosedError
from ..mapping.metadata import MetadataRegistry
from ..pool import ConnectionPool
from ..utils import get_logger
from .session import Session

if TYPE_CHECKING:
    from ..config import DatabaseSettings


class SessionFactory:
    """
    Hands out sessions, each holding one pooled connection until closed.

    The factory itself is thread-safe; the sessions it opens are not.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        metadata: MetadataRegistry,
        dialect: Dialect,
        *,
        show_sql: bool = False,
        slow_query_ms: int | None = None,
    ) -> None:
        self._pool = pool
        self._metadata = metadata
        self._metadata.freeze()
        self._dialect = dialect
        self.show_sql = show_sql
        self.slow_query_ms = slow_query_ms
        self._sessions: Set[Session] = set()
        self._lock = threading.Lock()
        self._local = threading.local()
        self._closed = False
        self.logger = get_logger("persistence.factory")

    @classmethod
    def from_settings(
        cls, settings: "DatabaseSettings", metadata: MetadataRegistry
    ) -> "SessionFactory":
        pool = ConnectionPool.from_settings(settings)
        return cls(
            pool,
            metadata,
            get_dialect(settings.dialect),
            show_sql=settings.show_sql,
        )

    def __enter__(self) -> "SessionFactory":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Public API --------------------------------------------------------
    @property
    def metadata(self) -> MetadataRegistry:
        return self._metadata

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def pool(self) -> ConnectionPool:
        return self._pool

    def is_open(self) -> bool:
        return not self._closed

    def open_session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def open_session(self) -> Session:
        self._ensure_open()
        connection = self._pool.acquire()
        session = Session(
            connection,
            self._metadata,
            self._dialect,
            show_sql=self.show_sql,
            on_close=self._release,
            slow_query_ms=self.slow_query_ms,
        )
        with self._lock:
            if self._closed:
                closed = True
            else:
                closed = False
                self._sessions.add(session)
        if closed:
            self._pool.release(connection)
            raise SessionClosedError("SessionFactory was closed while opening a session.")
        self.logger.debug("Session opened (%s active)", self.open_session_count())
        return session

    def get_current_session(self) -> Session:
        """
        Session bound to the calling thread, opened on first use.
        """
        self._ensure_open()
        current: Optional[Session] = getattr(self._local, "session", None)
        if current is None or not current.is_open():
            current = self.open_session()
            self._local.session = current
        return current

    def close(self) -> None:
        """
        Close every open session and shut the pool down. Closing twice is harmless.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            sessions = list(self._sessions)

        errors: List[OrmError] = []
        for session in sessions:
            try:
                session.close()
            except OrmError as exc:
                self.logger.error("Failed to close session during factory shutdown: %s", exc)
                errors.append(exc)
        self._pool.shutdown()
        self.logger.info("SessionFactory closed (%s sessions released)", len(sessions))
        if errors:
            raise errors[0]

    # Internal helpers --------------------------------------------------
    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError("SessionFactory is closed.")

    def _release(self, session: Session) -> None:
        with self._lock:
            self._sessions.discard(session)
        self._pool.release(session.connection)

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<SessionFactory {self._dialect.name} {state} sessions={len(self._sessions)}>"
