"""
Immutable query state accumulated by :class:`~keelorm.query.Query`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Any

AND = "AND"
OR = "OR"


class Order(enum.Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class Condition:
    """
    One predicate fragment with its bound values and the connective joining
    it to the predicates before it.
    """

    sql: str
    params: tuple[Any, ...] = ()
    connective: str = AND


@dataclass(frozen=True)
class QuerySpec:
    """
    Everything a query has accumulated so far; compiled by :class:`QueryCompiler`.
    """

    columns: tuple[str, ...] = ()
    conditions: tuple[Condition, ...] = ()
    group_by: tuple[str, ...] = ()
    having: Condition | None = None
    ordering: tuple[tuple[str, Order], ...] = ()
    limit: int | None = None
    offset: int | None = None

    def with_condition(self, condition: Condition) -> "QuerySpec":
        return replace(self, conditions=self.conditions + (condition,))

    def evolve(self, **changes: Any) -> "QuerySpec":
        return replace(self, **changes)

    @property
    def selects_all_columns(self) -> bool:
        return not self.columns and not self.group_by
