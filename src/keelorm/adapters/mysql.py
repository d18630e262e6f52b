"""
MySQL database adapter implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..dialects.mysql import MySQLDialect
from .base import AdapterConfigurationError, DBAPIAdapter

if TYPE_CHECKING:
    from ..config import DatabaseSettings


def _load_driver():
    try:
        import pymysql  # type: ignore[import-untyped]

        return pymysql
    except ImportError:
        try:
            import MySQLdb

            return MySQLdb
        except ImportError:
            return None


class MySQLAdapter(DBAPIAdapter):
    """
    Adapter wrapping a MySQL DB-API driver (PyMySQL or mysqlclient).
    """

    name = "mysql"
    driver_hint = "PyMySQL or mysqlclient is required to use MySQLAdapter."

    def __init__(self, slow_query_ms: int | None = None) -> None:
        super().__init__(MySQLDialect(), slow_query_ms)

    @staticmethod
    def _import_driver() -> Any:
        return _load_driver()

    def _open(self, driver: Any, settings: "DatabaseSettings") -> Any:
        dsn = settings.dsn
        if dsn is None:
            raise AdapterConfigurationError(
                "DatabaseSettings must be built from a DSN for MySQL connections."
            )
        connect_kwargs: dict[str, Any] = {
            "host": dsn.host or "localhost",
            "user": settings.username,
            "password": settings.password,
            "database": dsn.database,
            **settings.options,
        }
        if dsn.port:
            connect_kwargs["port"] = dsn.port
        return driver.connect(**{k: v for k, v in connect_kwargs.items() if v is not None})

    def _apply_autocommit(self, connection: Any, enabled: bool) -> None:
        # Both PyMySQL and mysqlclient expose autocommit as a method.
        connection.autocommit(enabled)

    @property
    def closed(self) -> bool:
        if self._connection is None:
            return True
        is_open = getattr(self._connection, "open", True)
        return not bool(is_open)
