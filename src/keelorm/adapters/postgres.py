"""
PostgreSQL database adapter implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..dialects.postgres import PostgresDialect
from .base import AdapterConfigurationError, AdapterExecutionError, DBAPIAdapter

if TYPE_CHECKING:
    from ..config import DatabaseSettings


def _load_driver():
    try:
        import psycopg

        return psycopg
    except ImportError:
        return None


class PostgresAdapter(DBAPIAdapter):
    """
    Adapter wrapping the psycopg PostgreSQL driver.
    """

    name = "postgresql"
    driver_hint = "psycopg is required to use PostgresAdapter."

    def __init__(self, slow_query_ms: int | None = None) -> None:
        super().__init__(PostgresDialect(), slow_query_ms)

    @staticmethod
    def _import_driver() -> Any:
        return _load_driver()

    def _open(self, driver: Any, settings: "DatabaseSettings") -> Any:
        dsn = settings.dsn
        if dsn is None:
            raise AdapterConfigurationError(
                "DatabaseSettings must be built from a DSN for PostgreSQL connections."
            )
        connect_kwargs: dict[str, Any] = {
            "host": dsn.host or "localhost",
            "dbname": dsn.database,
            "user": settings.username,
            "password": settings.password,
        }
        if dsn.port:
            connect_kwargs["port"] = dsn.port
        connect_kwargs.update(settings.options)
        return driver.connect(**{k: v for k, v in connect_kwargs.items() if v is not None})

    def last_insert_id(self, cursor: Any, table: str, pk_column: str) -> Any:
        row = cursor.fetchone()
        if not row:
            raise AdapterExecutionError(
                f"No RETURNING data available for {table}.{pk_column}."
            )
        return row[0]
