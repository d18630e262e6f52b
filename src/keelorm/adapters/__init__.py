"""
Database adapter interfaces and implementations.
"""

from __future__ import annotations

from ..dialects import get_dialect
from .base import (
    AdapterConfigurationError,
    AdapterConnectionError,
    AdapterExecutionError,
    AdapterTransactionError,
    DatabaseAdapter,
    DBAPIAdapter,
)
from .mysql import MySQLAdapter
from .postgres import PostgresAdapter
from .sqlite import SQLiteAdapter
from .sqlserver import SQLServerAdapter

_ADAPTERS: dict[str, type[DBAPIAdapter]] = {
    "sqlite": SQLiteAdapter,
    "postgresql": PostgresAdapter,
    "mysql": MySQLAdapter,
    "sqlserver": SQLServerAdapter,
}


def adapter_class_for(dialect_name: str) -> type[DBAPIAdapter]:
    """
    Return the adapter class serving the given dialect identifier or alias.
    """
    dialect = get_dialect(dialect_name)
    return _ADAPTERS[dialect.name]


__all__ = [
    "DatabaseAdapter",
    "DBAPIAdapter",
    "AdapterConfigurationError",
    "AdapterConnectionError",
    "AdapterExecutionError",
    "AdapterTransactionError",
    "SQLiteAdapter",
    "PostgresAdapter",
    "MySQLAdapter",
    "SQLServerAdapter",
    "adapter_class_for",
]
