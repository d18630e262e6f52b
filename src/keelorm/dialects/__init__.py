"""
Dialect strategy registry.
"""

from __future__ import annotations

from ..errors import ConfigurationError
from .base import Dialect, DialectCapabilities, PaginationFragment
from .mysql import MySQLDialect
from .postgres import PostgresDialect
from .sqlite import SQLiteDialect
from .sqlserver import SQLServerDialect

_DIALECTS: dict[str, type] = {
    "mysql": MySQLDialect,
    "mariadb": MySQLDialect,
    "postgresql": PostgresDialect,
    "postgres": PostgresDialect,
    "psql": PostgresDialect,
    "sqlserver": SQLServerDialect,
    "mssql": SQLServerDialect,
    "sqlite": SQLiteDialect,
    "sqlite3": SQLiteDialect,
}


def get_dialect(name: str) -> Dialect:
    """
    Resolve a dialect from its identifier (case-insensitive, aliases allowed).
    """
    if not name or not name.strip():
        raise ConfigurationError("Dialect name cannot be empty")
    normalized = name.strip().lower().split("+", 1)[0]
    dialect_cls = _DIALECTS.get(normalized)
    if dialect_cls is None:
        raise ConfigurationError(
            f"Unsupported dialect '{name}'. Supported values: {', '.join(supported_dialects())}"
        )
    return dialect_cls()


def supported_dialects() -> list[str]:
    return sorted({cls.name for cls in _DIALECTS.values()})


__all__ = [
    "Dialect",
    "DialectCapabilities",
    "PaginationFragment",
    "MySQLDialect",
    "PostgresDialect",
    "SQLServerDialect",
    "SQLiteDialect",
    "get_dialect",
    "supported_dialects",
]
