"""
Bounded, validating connection pool shared by every session of a factory.
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, Iterator

from .adapters import DatabaseAdapter, adapter_class_for
from .dialects import get_dialect
from .errors import (
    ConfigurationError,
    DatabaseError,
    PoolExhaustedError,
    SessionClosedError,
    ValidationFailure,
)
from .utils import get_logger

if TYPE_CHECKING:
    from .config import DatabaseSettings


class ConnectionPool:
    """
    Thread-safe pool of connected adapters.

    ``connect`` is called to open one physical connection; ``min_size`` of them
    are opened eagerly, more on demand up to ``max_size``. ``acquire`` blocks
    for at most ``timeout_ms`` before raising :class:`PoolExhaustedError`.
    """

    def __init__(
        self,
        connect: Callable[[], DatabaseAdapter],
        *,
        min_size: int = 1,
        max_size: int = 10,
        timeout_ms: int = 30_000,
        validation_query: str | None = None,
        label: str = "pool",
    ) -> None:
        if min_size < 1:
            raise ConfigurationError(f"Pool min_size must be at least 1, got {min_size}")
        if min_size > max_size:
            raise ConfigurationError(
                f"Pool min_size ({min_size}) cannot exceed max_size ({max_size})"
            )
        if timeout_ms < 0:
            raise ConfigurationError(f"Pool timeout_ms must be non-negative, got {timeout_ms}")

        self._connect = connect
        self._min_size = min_size
        self._max_size = max_size
        self.timeout_ms = timeout_ms
        self.validation_query = validation_query
        self.label = label
        self.logger = get_logger("pool")

        self._condition = threading.Condition(threading.Lock())
        self._idle: list[DatabaseAdapter] = []
        self._leased: set[int] = set()
        self._total = 0
        self._waiting = 0
        self._shutdown = False

        created: list[DatabaseAdapter] = []
        try:
            for _ in range(min_size):
                created.append(self._connect())
        except Exception:
            for connection in created:
                connection.close()
            raise
        self._idle.extend(created)
        self._total = len(created)
        self.logger.info(
            "Connection pool %s initialised (min=%s, max=%s, timeout=%sms)",
            label,
            min_size,
            max_size,
            timeout_ms,
        )

    @classmethod
    def from_settings(cls, settings: "DatabaseSettings") -> "ConnectionPool":
        """
        Build a pool of adapters matching ``settings.dialect``.

        The driver import is checked before any connection is attempted so a
        missing driver fails with :class:`AdapterConfigurationError`.
        """
        dialect = get_dialect(settings.dialect)
        adapter_cls = adapter_class_for(dialect.name)
        adapter_cls.load_driver()

        def connect() -> DatabaseAdapter:
            adapter = adapter_cls()
            adapter.connect(settings)
            return adapter

        return cls(
            connect,
            min_size=settings.pool_min,
            max_size=settings.pool_max,
            timeout_ms=settings.pool_timeout_ms,
            validation_query=settings.validation_query or dialect.validation_query(),
            label=settings.descriptive_label(),
        )

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #
    @property
    def min_size(self) -> int:
        return self._min_size

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def total(self) -> int:
        with self._condition:
            return self._total

    @property
    def available(self) -> int:
        with self._condition:
            return len(self._idle)

    @property
    def in_use(self) -> int:
        with self._condition:
            return len(self._leased)

    @property
    def is_shutdown(self) -> bool:
        with self._condition:
            return self._shutdown

    def stats(self) -> dict[str, Any]:
        with self._condition:
            return {
                "total": self._total,
                "available": len(self._idle),
                "in_use": len(self._leased),
                "waiting": self._waiting,
                "min_size": self._min_size,
                "max_size": self._max_size,
                "shutdown": self._shutdown,
            }

    # ------------------------------------------------------------------ #
    # Acquire / release
    # ------------------------------------------------------------------ #
    def acquire(self, timeout_ms: int | None = None) -> DatabaseAdapter:
        """
        Lease a validated connection.

        Raises :class:`PoolExhaustedError` when none frees up in time and
        :class:`SessionClosedError` once the pool is shut down.
        """
        wait_ms = self.timeout_ms if timeout_ms is None else timeout_ms
        deadline = time.monotonic() + wait_ms / 1000.0
        connection: DatabaseAdapter | None = None
        with self._condition:
            while True:
                if self._shutdown:
                    raise SessionClosedError(f"Connection pool {self.label} has been shut down.")
                if self._idle:
                    connection = self._idle.pop()
                    break
                if self._total < self._max_size:
                    # Reserve the slot; the connection is opened outside the lock.
                    self._total += 1
                    break
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    self.logger.warning(
                        "Connection pool %s exhausted (%s/%s) after %sms",
                        self.label,
                        self._total,
                        self._max_size,
                        wait_ms,
                    )
                    raise PoolExhaustedError(self._total, self._max_size, wait_ms)
                self._waiting += 1
                try:
                    self._condition.wait(remaining)
                finally:
                    self._waiting -= 1

        if connection is None:
            connection = self._grow()
        elif not self._is_valid(connection):
            connection = self._replace(connection)

        with self._condition:
            if self._shutdown:
                self._total -= 1
                stale = connection
            else:
                self._leased.add(id(connection))
                stale = None
        if stale is not None:
            stale.close()
            raise SessionClosedError(f"Connection pool {self.label} has been shut down.")
        return connection

    def release(self, connection: DatabaseAdapter) -> None:
        """
        Return a leased connection, resetting it to autocommit first.

        Connections that fail validation are discarded; if that leaves fewer
        than ``min_size`` connections a replacement is opened.
        """
        with self._condition:
            key = id(connection)
            if key not in self._leased:
                self.logger.warning(
                    "Ignoring release of a connection not leased from pool %s", self.label
                )
                return
            self._leased.discard(key)
            closing_after_shutdown = self._shutdown
        if closing_after_shutdown:
            connection.close()
            return

        if self._reset(connection) and self._is_valid(connection):
            with self._condition:
                if not self._shutdown:
                    self._idle.append(connection)
                    self._condition.notify()
                    return
                self._total -= 1
            connection.close()
            return

        self.logger.warning("Discarding invalid connection returned to pool %s", self.label)
        connection.close()
        with self._condition:
            self._total -= 1
            replace = not self._shutdown and self._total < self._min_size
            if replace:
                self._total += 1
            self._condition.notify()
        if replace:
            replacement = self._grow(failure=ValidationFailure)
            with self._condition:
                if not self._shutdown:
                    self._idle.append(replacement)
                    self._condition.notify()
                    return
                self._total -= 1
            replacement.close()

    @contextmanager
    def connection(self) -> Iterator[DatabaseAdapter]:
        """
        Context manager leasing one connection for the duration of the block.
        """
        leased = self.acquire()
        try:
            yield leased
        finally:
            self.release(leased)

    def shutdown(self) -> None:
        """
        Close every idle connection and refuse further acquisitions.
        """
        with self._condition:
            if self._shutdown:
                return
            self._shutdown = True
            idle = list(self._idle)
            self._idle.clear()
            self._total -= len(idle)
            self._condition.notify_all()
        for connection in idle:
            connection.close()
        self.logger.info(
            "Connection pool %s shut down (%s idle closed, %s still leased)",
            self.label,
            len(idle),
            self.in_use,
        )

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    def _grow(self, failure: type[Exception] | None = None) -> DatabaseAdapter:
        # Caller has already reserved a slot in ``_total``.
        try:
            connection = self._connect()
        except Exception as exc:
            with self._condition:
                self._total -= 1
                self._condition.notify()
            if failure is not None and isinstance(exc, DatabaseError):
                raise failure(f"Could not open a replacement connection for {self.label}") from exc
            raise
        self.logger.debug("Connection pool %s opened a new connection", self.label)
        return connection

    def _replace(self, connection: DatabaseAdapter) -> DatabaseAdapter:
        self.logger.warning(
            "Connection from pool %s failed validation; replacing it", self.label
        )
        connection.close()
        return self._grow(failure=ValidationFailure)

    def _reset(self, connection: DatabaseAdapter) -> bool:
        if connection.closed:
            return False
        if connection.autocommit:
            return True
        try:
            connection.rollback()
            connection.set_autocommit(True)
        except DatabaseError as exc:
            self.logger.warning("Could not reset connection state: %s", exc)
            return False
        return True

    def _is_valid(self, connection: DatabaseAdapter) -> bool:
        if connection.closed:
            return False
        if not self.validation_query:
            return True
        try:
            cursor = connection.execute(self.validation_query)
            cursor.fetchall()
        except DatabaseError as exc:
            self.logger.warning("Validation query failed: %s", exc)
            return False
        return True

    def __repr__(self) -> str:
        stats = self.stats()
        return (
            f"<ConnectionPool {self.label} total={stats['total']} "
            f"available={stats['available']} max={stats['max_size']}>"
        )
