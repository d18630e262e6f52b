"""
SQL Server database adapter implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..dialects.sqlserver import SQLServerDialect
from .base import AdapterConfigurationError, AdapterExecutionError, DBAPIAdapter

if TYPE_CHECKING:
    from ..config import DatabaseSettings


def _load_driver():
    try:
        import pymssql  # type: ignore[import-untyped]

        return pymssql
    except ImportError:
        return None


class SQLServerAdapter(DBAPIAdapter):
    """
    Adapter wrapping the pymssql SQL Server driver.
    """

    name = "sqlserver"
    driver_hint = "pymssql is required to use SQLServerAdapter."

    def __init__(self, slow_query_ms: int | None = None) -> None:
        super().__init__(SQLServerDialect(), slow_query_ms)

    @staticmethod
    def _import_driver() -> Any:
        return _load_driver()

    def _open(self, driver: Any, settings: "DatabaseSettings") -> Any:
        dsn = settings.dsn
        if dsn is None:
            raise AdapterConfigurationError(
                "DatabaseSettings must be built from a DSN for SQL Server connections."
            )
        connect_kwargs: dict[str, Any] = {
            "server": dsn.host or "localhost",
            "user": settings.username,
            "password": settings.password,
            "database": dsn.database,
            **settings.options,
        }
        if dsn.port:
            connect_kwargs["port"] = str(dsn.port)
        return driver.connect(**{k: v for k, v in connect_kwargs.items() if v is not None})

    def _apply_autocommit(self, connection: Any, enabled: bool) -> None:
        connection.autocommit(enabled)

    def last_insert_id(self, cursor: Any, table: str, pk_column: str) -> Any:
        # @@IDENTITY survives across batches on the same connection; SCOPE_IDENTITY() does not.
        identity_cursor = self.execute("SELECT @@IDENTITY")
        row = identity_cursor.fetchone()
        if not row or row[0] is None:
            raise AdapterExecutionError(
                f"No identity value available for {table}.{pk_column}."
            )
        return row[0]
