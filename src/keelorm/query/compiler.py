"""
SQL compilation translating a :class:`QuerySpec` into one parameterized SELECT.
"""

from __future__ import annotations

from typing import Any, List, Tuple

from ..dialects.base import Dialect, count_placeholders
from ..errors import QueryError
from ..mapping.metadata import EntityMetadata
from ..sql.generator import SQLGenerator
from ..types import to_db
from .expressions import Condition, QuerySpec


class QueryCompiler:
    """
    Compile query state in the fixed clause order
    SELECT, FROM, WHERE, GROUP BY, HAVING, ORDER BY, pagination.
    """

    def __init__(self, metadata: EntityMetadata, dialect: Dialect, spec: QuerySpec) -> None:
        self.metadata = metadata
        self.dialect = dialect
        self.spec = spec
        self.generator = SQLGenerator(dialect)

    def compile(self) -> Tuple[str, List[Any]]:
        params: List[Any] = []
        sql_parts: List[str] = [
            f"SELECT {self._select_list()}",
            f"FROM {self.generator.table(self.metadata)}",
        ]

        where_sql = self._where(params)
        if where_sql:
            sql_parts.append(f"WHERE {where_sql}")

        if self.spec.group_by:
            sql_parts.append(
                "GROUP BY " + ", ".join(self._column_ref(name) for name in self.spec.group_by)
            )

        if self.spec.having is not None:
            self._check_params(self.spec.having)
            sql_parts.append(f"HAVING {self.spec.having.sql}")
            params.extend(self._bind(self.spec.having))

        if self.spec.ordering:
            sql_parts.append(
                "ORDER BY "
                + ", ".join(
                    f"{self._column_ref(name)} {order.value}" for name, order in self.spec.ordering
                )
            )

        fragment = self.dialect.pagination_fragment(self.spec.limit, self.spec.offset)
        if fragment:
            if self.dialect.capabilities.requires_order_by_for_pagination and not self.spec.ordering:
                raise QueryError(
                    f"Dialect '{self.dialect.name}' requires order_by() when using limit/offset."
                )
            params.extend(fragment.params)

        return " ".join(sql_parts) + fragment.sql, params

    # Helpers -----------------------------------------------------------
    def _column_ref(self, name: str) -> str:
        """
        Quote mapped column or attribute names; pass expressions through untouched.
        """
        if self.metadata.has_column(name):
            return self.generator.quote(self.metadata.column(name).name)
        if self.metadata.has_attribute(name):
            return self.generator.quote(self.metadata.column_for_attribute(name).name)
        return name

    def _select_list(self) -> str:
        if not self.spec.columns:
            return self.generator.select_list(self.metadata)
        return ", ".join(self._column_ref(name) for name in self.spec.columns)

    def _where(self, params: List[Any]) -> str:
        clauses: List[str] = []
        for index, condition in enumerate(self.spec.conditions):
            self._check_params(condition)
            clauses.append(
                condition.sql if index == 0 else f"{condition.connective} {condition.sql}"
            )
            params.extend(self._bind(condition))
        user_sql = " ".join(clauses)

        discriminator = self.generator.discriminator_predicate(self.metadata)
        if discriminator and user_sql:
            # A single fragment may carry its own OR.
            return f"({user_sql}) AND {discriminator}"
        return user_sql or (discriminator or "")

    def _bind(self, condition: Condition) -> List[Any]:
        as_text = self.dialect.capabilities.binds_exact_types_as_text
        return [to_db(value, exact_types_as_text=as_text) for value in condition.params]

    def _check_params(self, condition: Condition) -> None:
        expected = count_placeholders(condition.sql, self.dialect.parameter_placeholder())
        if expected != len(condition.params):
            raise QueryError(
                f"Condition '{condition.sql}' has {expected} placeholder(s) "
                f"but {len(condition.params)} parameter(s) were supplied."
            )
