"""
Session implementing the Unit of Work pattern over a single pooled connection.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Type, TypeVar

from ..adapters.base import DatabaseAdapter
from ..dialects.base import Dialect
from ..errors import EntityNotManagedError, MappingError, SessionClosedError
from ..mapping.metadata import EntityMetadata, MetadataRegistry
from ..query.builder import Query
from ..security.redaction import redact_params
from ..sql.generator import SQLGenerator
from ..utils import get_logger, resolve_slow_query_ms, time_call
from .identity_map import EntityKey, IdentityMap
from .transaction import Transaction
from .unit_of_work import UnitOfWork

T = TypeVar("T")


class Session:
    """
    Unit of work tied to one connection leased from the pool.

    Every row loaded or persisted through the session is tracked in an
    identity map together with a snapshot of its values; :meth:`flush`
    writes only the columns that changed since. A session is meant for a
    single thread and is not safe to share.
    """

    def __init__(
        self,
        connection: DatabaseAdapter,
        metadata: MetadataRegistry,
        dialect: Dialect,
        *,
        show_sql: bool = False,
        on_close: Optional[Callable[["Session"], None]] = None,
        slow_query_ms: int | None = None,
    ) -> None:
        self._connection = connection
        self.metadata = metadata
        self.dialect = dialect
        self.show_sql = show_sql
        self._on_close = on_close
        self.generator = SQLGenerator(dialect)
        self.identity_map = IdentityMap()
        self.unit_of_work = UnitOfWork()
        self._transaction = Transaction(connection, ensure_open=self._ensure_open)
        self._closed = False
        self.logger = get_logger("persistence.session")
        self.slow_query_ms = resolve_slow_query_ms(default=200, override=slow_query_ms)

    def __enter__(self) -> "Session":
        self._ensure_open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    @property
    def connection(self) -> DatabaseAdapter:
        return self._connection

    def is_open(self) -> bool:
        return not self._closed

    def close(self) -> None:
        """
        Roll back any open transaction, forget tracked entities and hand the
        connection back. Closing twice is harmless.
        """
        if self._closed:
            return
        try:
            if self._transaction.is_active():
                self.logger.warning("Session closed with an active transaction; rolling back")
                self._transaction.rollback()
        finally:
            self.identity_map.clear()
            self.unit_of_work.clear()
            self._closed = True
            if self._on_close is not None:
                self._on_close(self)
            self.logger.debug("Session closed")

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #
    def get_transaction(self) -> Transaction:
        self._ensure_open()
        return self._transaction

    def begin_transaction(self) -> Transaction:
        return self.get_transaction().begin()

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """
        Run the block in a transaction; commit on success, roll back on error.
        """
        tx = self.begin_transaction()
        try:
            yield tx
        except BaseException:
            if tx.is_active():
                tx.rollback()
            raise
        else:
            if tx.is_active():
                tx.commit()

    # ------------------------------------------------------------------ #
    # Entity operations
    # ------------------------------------------------------------------ #
    def persist(self, entity: Any) -> Any:
        """
        INSERT a new entity and start tracking it.

        Ids from sequence or UUID strategies are assigned before the INSERT,
        identity columns after it. Persisting an already-managed instance is
        a no-op.
        """
        self._ensure_open()
        meta = self.metadata.for_instance(entity)
        current_id = meta.get_id(entity)
        if current_id is not None:
            existing = self.identity_map.get(EntityKey(meta.entity_type, current_id))
            if existing is entity:
                return entity
            if existing is not None:
                raise MappingError(
                    f"Another {meta.entity_name} instance with id {current_id!r} is already "
                    "managed by this session."
                )

        generator = meta.id_generator
        if current_id is None and not generator.post_insert:
            generated = generator.generate(self._connection, self.dialect, meta.id_column)
            if generated is not None:
                meta.set_id(entity, generated)
                current_id = meta.get_id(entity)

        include_id = current_id is not None
        if not include_id and not generator.post_insert:
            raise MappingError(
                f"{meta.entity_name} has no id and its id is not generated; assign one first."
            )

        sql = self.generator.insert(meta, include_id=include_id)
        columns = self.generator.insert_columns(meta, include_id=include_id)
        params = meta.values(entity, columns, self.dialect)
        cursor = self._execute(sql, params)
        if not include_id:
            new_id = self._connection.last_insert_id(cursor, meta.table_name, meta.id_column.name)
            meta.set_id(entity, new_id)

        self._track(meta, entity)
        self.logger.debug("Persisted %s id=%r", meta.entity_name, meta.get_id(entity))
        return entity

    def find(self, entity_type: Type[T], id: Any) -> Optional[T]:
        """
        Load by primary key, answering from the identity map when possible.
        """
        self._ensure_open()
        meta = self.metadata.require(entity_type)
        if id is None:
            raise MappingError(f"find() requires an id for {meta.entity_name}.")
        key = EntityKey(meta.entity_type, meta.id_column.to_python(id))
        cached = self.identity_map.get(key)
        if cached is not None:
            return cached

        results = self._load_rows(
            meta, self.generator.select_by_id(meta), [self._bind_id(meta, key.id)], track=True
        )
        return results[0] if results else None

    def merge(self, entity: T) -> T:
        """
        Copy a detached entity's state onto the managed instance with the same id.

        Without an id, or when no row exists yet, the entity is persisted and
        becomes managed itself.
        """
        self._ensure_open()
        meta = self.metadata.for_instance(entity)
        current_id = meta.get_id(entity)
        if current_id is None:
            return self.persist(entity)

        managed = self.identity_map.get(EntityKey(meta.entity_type, current_id))
        if managed is entity:
            return entity
        if managed is None:
            managed = self.find(meta.entity_type, current_id)
        if managed is None:
            return self.persist(entity)

        for column in meta.data_columns:
            column.set_value(managed, column.get_value(entity))
        return managed

    def remove(self, entity: Any) -> None:
        self._ensure_open()
        meta = self.metadata.for_instance(entity)
        current_id = meta.get_id(entity)
        key = EntityKey(meta.entity_type, current_id) if current_id is not None else None
        if key is None or self.identity_map.get(key) is not entity:
            raise EntityNotManagedError(
                f"{meta.entity_name} instance is not managed by this session."
            )
        self._execute(self.generator.delete(meta), [self._bind_id(meta, current_id)])
        self.identity_map.remove(key)
        self.unit_of_work.discard(key)

    def contains(self, entity: Any) -> bool:
        meta = self.metadata.get(type(entity))
        if meta is None or self._closed:
            return False
        current_id = meta.get_id(entity)
        if current_id is None:
            return False
        return self.identity_map.get(EntityKey(meta.entity_type, current_id)) is entity

    def flush(self) -> int:
        """
        UPDATE every tracked entity whose values differ from its snapshot.

        Returns the number of entities written.
        """
        self._ensure_open()
        written = 0
        for key, entity in self.identity_map.items():
            meta = self.metadata.for_instance(entity)
            changed = meta.changed_columns(entity, self.unit_of_work.snapshot(key))
            if not changed:
                continue
            sql = self.generator.partial_update(meta, changed)
            params = meta.values(entity, changed, self.dialect) + [self._bind_id(meta, key.id)]
            self._execute(sql, params)
            self.unit_of_work.register(key, meta.snapshot(entity))
            written += 1
        if written:
            self.logger.debug("Flushed %s dirty entities", written)
        return written

    def create_query(self, entity_type: Type[T]) -> Query[T]:
        self._ensure_open()
        return Query(self, self.metadata.require(entity_type))

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        """
        Run a raw statement on the session connection and return the cursor.
        """
        self._ensure_open()
        return self._execute(sql, list(params or ()))

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError("Session is closed.")

    def _bind_id(self, meta: EntityMetadata, value: Any) -> Any:
        return meta.id_column.to_db(value, self.dialect)

    def _execute(self, sql: str, params: List[Any]) -> Any:
        redacted = redact_params(params)
        if self.show_sql:
            self.logger.info("SQL: %s | params=%s", sql, redacted)
        with time_call(
            "session.execute",
            self.logger,
            sql=sql,
            params=redacted,
            threshold_ms=self.slow_query_ms,
        ):
            return self._connection.execute(sql, params)

    def _load_rows(
        self, meta: EntityMetadata, sql: str, params: List[Any], *, track: bool
    ) -> List[Any]:
        self._ensure_open()
        cursor = self._execute(sql, params)
        results = []
        for row in self._fetch_dicts(cursor):
            if not meta.matches_row(row):
                continue
            if track:
                results.append(self._materialize(meta, row))
            else:
                results.append(meta.populate(meta.instantiate(), row))
        return results

    def _materialize(self, meta: EntityMetadata, row: Dict[str, Any]) -> Any:
        raw_id = row.get(meta.id_column.name.lower())
        if raw_id is None:
            return meta.populate(meta.instantiate(), row)
        key = EntityKey(meta.entity_type, meta.id_column.to_python(raw_id))
        existing = self.identity_map.get(key)
        if existing is not None:
            return existing
        entity = meta.populate(meta.instantiate(), row)
        self._track(meta, entity)
        return entity

    def _track(self, meta: EntityMetadata, entity: Any) -> None:
        key = EntityKey(meta.entity_type, meta.get_id(entity))
        self.identity_map.add(key, entity)
        self.unit_of_work.register(key, meta.snapshot(entity))

    @staticmethod
    def _fetch_dicts(cursor: Any) -> List[Dict[str, Any]]:
        rows = cursor.fetchall()
        description = cursor.description or ()
        names = [column[0].lower() for column in description]
        results = []
        for row in rows:
            if hasattr(row, "keys"):
                results.append({str(key).lower(): row[key] for key in row.keys()})
            else:
                results.append(dict(zip(names, row)))
        return results

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Session {state} tracked={len(self.identity_map)}>"
