"""
Fluent, immutable query builder bound to a session.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, Iterator, List, Optional, TypeVar

from ..errors import QueryError
from ..mapping.metadata import EntityMetadata
from .compiler import QueryCompiler
from .expressions import AND, OR, Condition, Order, QuerySpec

if TYPE_CHECKING:
    from ..persistence.session import Session

T = TypeVar("T")


class Query(Generic[T]):
    """
    Chainable SELECT builder for one entity type.

    Every call returns a new query; the accumulated :class:`QuerySpec` is only
    compiled when the query is executed or :meth:`to_sql` is called.
    Conditions are raw SQL fragments using the dialect's placeholder::

        session.create_query(Product).where("price > ?", 10).order_by("name").limit(5)
    """

    def __init__(
        self,
        session: "Session",
        metadata: EntityMetadata,
        spec: Optional[QuerySpec] = None,
    ) -> None:
        self._session = session
        self.metadata = metadata
        self.spec = spec or QuerySpec()

    # Public API --------------------------------------------------------
    def select(self, *columns: str) -> "Query[T]":
        if not columns:
            raise QueryError("select() requires at least one column.")
        return self._clone(self.spec.evolve(columns=tuple(columns)))

    def where(self, condition: str, *params: Any) -> "Query[T]":
        """
        Set the base predicate. A further ``where()`` is combined with AND.
        """
        return self._add(condition, params, AND)

    def and_(self, condition: str, *params: Any) -> "Query[T]":
        return self._add(condition, params, AND)

    def or_(self, condition: str, *params: Any) -> "Query[T]":
        return self._add(condition, params, OR)

    def group_by(self, *columns: str) -> "Query[T]":
        if not columns:
            raise QueryError("group_by() requires at least one column.")
        return self._clone(self.spec.evolve(group_by=self.spec.group_by + tuple(columns)))

    def having(self, condition: str, *params: Any) -> "Query[T]":
        if not condition or not condition.strip():
            raise QueryError("having() requires a condition.")
        return self._clone(self.spec.evolve(having=Condition(condition, tuple(params))))

    def order_by(self, column: str, order: Order | str = Order.ASC) -> "Query[T]":
        if isinstance(order, str):
            try:
                order = Order[order.upper()]
            except KeyError as exc:
                raise QueryError(f"Unknown sort order '{order}'") from exc
        return self._clone(self.spec.evolve(ordering=self.spec.ordering + ((column, order),)))

    def limit(self, value: int) -> "Query[T]":
        if value < 0:
            raise QueryError(f"Limit must be non-negative, got {value}")
        return self._clone(self.spec.evolve(limit=value))

    def offset(self, value: int) -> "Query[T]":
        if value < 0:
            raise QueryError(f"Offset must be non-negative, got {value}")
        return self._clone(self.spec.evolve(offset=value))

    def to_sql(self) -> tuple[str, list[Any]]:
        return QueryCompiler(self.metadata, self._session.dialect, self.spec).compile()

    # Execution ---------------------------------------------------------
    def get_result_list(self) -> List[T]:
        sql, params = self.to_sql()
        return self._session._load_rows(
            self.metadata, sql, params, track=self.spec.selects_all_columns
        )

    def get_single_result(self) -> T:
        results = self.get_result_list()
        if not results:
            raise QueryError(f"No {self.metadata.entity_name} matched the query.")
        if len(results) > 1:
            raise QueryError(
                f"Expected a single {self.metadata.entity_name} but the query returned "
                f"{len(results)} rows."
            )
        return results[0]

    def first(self) -> Optional[T]:
        query = self.limit(1) if self.spec.limit is None else self
        results = query.get_result_list()
        return results[0] if results else None

    def __iter__(self) -> Iterator[T]:
        return iter(self.get_result_list())

    def __repr__(self) -> str:
        return f"<Query {self.metadata.entity_name} {self.spec!r}>"

    # Internal helpers --------------------------------------------------
    def _add(self, condition: str, params: tuple[Any, ...], connective: str) -> "Query[T]":
        if not condition or not condition.strip():
            raise QueryError("Condition cannot be empty.")
        return self._clone(self.spec.with_condition(Condition(condition, tuple(params), connective)))

    def _clone(self, spec: QuerySpec) -> "Query[T]":
        return Query(self._session, self.metadata, spec)
