"""
Adapter protocol and the shared DB-API 2.0 adapter implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, Sequence

from ..dialects.base import Dialect, count_placeholders
from ..errors import ConfigurationError, DatabaseError
from ..security.redaction import redact_params
from ..utils import get_logger, resolve_slow_query_ms, time_call

if TYPE_CHECKING:
    from ..config import DatabaseSettings


class AdapterConfigurationError(ConfigurationError):
    """Raised when configuration or required dependencies are invalid."""


class AdapterConnectionError(DatabaseError):
    """Raised when establishing or using a connection fails."""


class AdapterExecutionError(DatabaseError):
    """Raised when SQL execution or parameter validation fails."""


class AdapterTransactionError(DatabaseError):
    """Raised when transaction operations fail."""


class DatabaseAdapter(Protocol):
    """
    One physical database connection as seen by the pool, sessions and transactions.
    """

    dialect: Dialect
    slow_query_ms: int

    def connect(self, settings: "DatabaseSettings") -> Any:
        """
        Establish the physical connection described by ``settings``.
        """

    def close(self) -> None:
        """
        Close the physical connection. Implementations should be idempotent.
        """

    @property
    def closed(self) -> bool:
        """
        True once the connection is closed or was never opened.
        """

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        """
        Execute a single SQL statement returning a DB-API cursor.
        """

    def commit(self) -> None:
        """
        Commit the current transaction.
        """

    def rollback(self) -> None:
        """
        Roll back the current transaction.
        """

    @property
    def autocommit(self) -> bool:
        """
        Whether statements are committed as they execute.
        """

    def set_autocommit(self, enabled: bool) -> None:
        """
        Toggle autocommit; turning it off starts an explicit transaction scope.
        """

    def last_insert_id(self, cursor: Any, table: str, pk_column: str) -> Any:
        """
        Retrieve the primary key value generated by the previous insert.
        """


class DBAPIAdapter:
    """
    Base class wrapping one DB-API 2.0 connection.

    Subclasses supply the driver import, the ``driver.connect`` call and the
    autocommit toggle; execution, error wrapping and statement timing live here.
    """

    name = "dbapi"
    driver_hint = "A DB-API driver is required."

    def __init__(self, dialect: Dialect, slow_query_ms: int | None = None) -> None:
        self.dialect = dialect
        self.logger = get_logger(f"adapters.{self.name}")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)
        self._connection: Any = None
        self._driver: Any = None
        self._autocommit = True

    # ------------------------------------------------------------------ #
    # Driver loading
    # ------------------------------------------------------------------ #
    @staticmethod
    def _import_driver() -> Any:
        return None

    @classmethod
    def load_driver(cls) -> Any:
        driver = cls._import_driver()
        if driver is None:
            raise AdapterConfigurationError(cls.driver_hint)
        return driver

    # ------------------------------------------------------------------ #
    # Connection management
    # ------------------------------------------------------------------ #
    def connect(self, settings: "DatabaseSettings") -> Any:
        driver = self.load_driver()
        self.logger.info("Connecting to %s", settings.descriptive_label())
        try:
            connection = self._open(driver, settings)
        except ConfigurationError:
            raise
        except Exception as exc:
            raise AdapterConnectionError(
                f"Failed to connect to {settings.redacted_url()}."
            ) from exc
        self._driver = driver
        self._connection = connection
        self._apply_autocommit(connection, True)
        self._autocommit = True
        return connection

    def _open(self, driver: Any, settings: "DatabaseSettings") -> Any:
        raise NotImplementedError

    def _apply_autocommit(self, connection: Any, enabled: bool) -> None:
        connection.autocommit = enabled

    def close(self) -> None:
        if self._connection is None:
            return
        try:
            self._connection.close()
        except self._driver.Error as exc:
            self.logger.warning("Error while closing %s connection: %s", self.name, exc)
        finally:
            self._connection = None

    @property
    def closed(self) -> bool:
        if self._connection is None:
            return True
        # psycopg exposes ``closed`` as bool; other drivers only set it after close().
        return bool(getattr(self._connection, "closed", False))

    @property
    def raw_connection(self) -> Any:
        return self._connection

    def _ensure_connection(self) -> Any:
        if self._connection is None:
            raise AdapterConnectionError(f"{type(self).__name__} is not connected.")
        return self._connection

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #
    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        connection = self._ensure_connection()
        bound = tuple(params or ())
        self._validate_params(sql, bound)
        try:
            cursor = connection.cursor()
            with time_call(
                f"{self.name}.execute",
                self.logger,
                sql=sql,
                params=redact_params(bound),
                threshold_ms=self.slow_query_ms,
            ):
                if bound:
                    cursor.execute(sql, bound)
                else:
                    cursor.execute(sql)
        except self._driver.Error as exc:
            raise AdapterExecutionError(f"Statement failed: {sql}") from exc
        return cursor

    def _validate_params(self, sql: str, params: Sequence[Any]) -> None:
        if self.dialect.parameter_placeholder() != "%s":
            return
        placeholder_count = count_placeholders(sql, "%s")
        if placeholder_count != len(params):
            raise AdapterExecutionError(
                f"Parameter count mismatch: expected {placeholder_count}, received {len(params)}."
            )

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #
    @property
    def autocommit(self) -> bool:
        return self._autocommit

    def set_autocommit(self, enabled: bool) -> None:
        connection = self._ensure_connection()
        try:
            self._apply_autocommit(connection, enabled)
        except self._driver.Error as exc:
            raise AdapterTransactionError(
                f"Failed to set autocommit={enabled} on {self.name} connection."
            ) from exc
        self._autocommit = enabled

    def commit(self) -> None:
        connection = self._ensure_connection()
        try:
            connection.commit()
        except self._driver.Error as exc:
            raise AdapterTransactionError(f"Commit failed on {self.name} connection.") from exc

    def rollback(self) -> None:
        connection = self._ensure_connection()
        try:
            connection.rollback()
        except self._driver.Error as exc:
            raise AdapterTransactionError(f"Rollback failed on {self.name} connection.") from exc

    def last_insert_id(self, cursor: Any, table: str, pk_column: str) -> Any:
        return cursor.lastrowid

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<{type(self).__name__} {state}>"
