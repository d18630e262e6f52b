"""
SQLite database adapter implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..dialects.sqlite import SQLiteDialect
from .base import DBAPIAdapter

if TYPE_CHECKING:
    from ..config import DatabaseSettings


def _load_driver():
    try:
        import sqlite3

        return sqlite3
    except ImportError:
        return None


class SQLiteAdapter(DBAPIAdapter):
    """
    Adapter wrapping the Python stdlib sqlite3 module.
    """

    name = "sqlite"
    driver_hint = "The sqlite3 module is unavailable in this Python build."

    def __init__(self, slow_query_ms: int | None = None) -> None:
        super().__init__(SQLiteDialect(), slow_query_ms)

    @staticmethod
    def _import_driver() -> Any:
        return _load_driver()

    def _open(self, driver: Any, settings: "DatabaseSettings") -> Any:
        path = settings.dsn.file_path() if settings.dsn else settings.url
        options = dict(settings.options)
        timeout = float(options.pop("timeout", 5.0))
        connection = driver.connect(
            path,
            timeout=timeout,
            check_same_thread=False,
            **options,
        )
        connection.execute("PRAGMA foreign_keys = ON")
        return connection

    def _apply_autocommit(self, connection: Any, enabled: bool) -> None:
        # None disables the implicit BEGIN sqlite3 issues before DML.
        connection.isolation_level = None if enabled else ""

    @property
    def closed(self) -> bool:
        if self._connection is None:
            return True
        try:
            self._connection.execute("SELECT 1")
        except self._driver.ProgrammingError:
            return True
        return False
