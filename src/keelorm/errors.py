"""
Error hierarchy shared across KeelORM packages.
"""

from __future__ import annotations


class OrmError(RuntimeError):
    """Base error for every failure raised by KeelORM."""


class ConfigurationError(OrmError):
    """Raised when settings, pool bounds, drivers or mappings are unusable."""


class MappingError(ConfigurationError):
    """Raised when an entity cannot be mapped or a value cannot be converted."""


class EntityNotManagedError(MappingError):
    """Raised when an operation requires an entity tracked by the session."""


class PoolExhaustedError(OrmError):
    """Raised when no connection could be acquired within the pool timeout."""

    def __init__(self, total: int, max_size: int, timeout_ms: int) -> None:
        self.total = total
        self.max_size = max_size
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Connection acquisition timed out after {timeout_ms} ms "
            f"(pool size {total}/{max_size})."
        )


class ValidationFailure(OrmError):
    """Raised when a dead connection could not be replaced."""


class QueryError(OrmError):
    """Raised for malformed queries and unexpected result cardinality."""


class TransactionStateError(OrmError):
    """Raised when a transaction is used out of order."""


class UnsupportedDialectFeature(OrmError):
    """Raised when a dialect is asked for a feature it does not provide."""


class SessionClosedError(OrmError):
    """Raised when a closed session or factory is used."""


class DatabaseError(OrmError):
    """
    Wraps an error raised by the underlying database driver.

    The driver exception is chained as ``__cause__`` and exposed as ``cause``.
    """

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__


__all__ = [
    "OrmError",
    "ConfigurationError",
    "MappingError",
    "EntityNotManagedError",
    "PoolExhaustedError",
    "ValidationFailure",
    "QueryError",
    "TransactionStateError",
    "UnsupportedDialectFeature",
    "SessionClosedError",
    "DatabaseError",
]
