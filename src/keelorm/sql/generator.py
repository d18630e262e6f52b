"""
Fixed CRUD statement text for mapped entities.
"""

from __future__ import annotations

from typing import Iterable

from ..dialects.base import Dialect
from ..errors import QueryError
from ..mapping.metadata import ColumnMetadata, EntityMetadata


def sql_literal(value: str) -> str:
    """
    Render ``value`` as a single-quoted SQL string literal.
    """
    escaped = value.replace("'", "''")
    return f"'{escaped}'"


class SQLGenerator:
    """
    Builds INSERT, SELECT, UPDATE and DELETE statements from entity metadata.

    Values are always bound through the dialect's placeholder; the only
    literal ever inlined is the discriminator value of single-table entities.
    """

    def __init__(self, dialect: Dialect) -> None:
        self.dialect = dialect

    # ------------------------------------------------------------------ #
    # Fragments
    # ------------------------------------------------------------------ #
    def table(self, metadata: EntityMetadata) -> str:
        return self.dialect.format_table(metadata.table_name, metadata.schema)

    def quote(self, name: str) -> str:
        return self.dialect.quote_identifier(name)

    def placeholder(self) -> str:
        return self.dialect.parameter_placeholder()

    def select_list(
        self, metadata: EntityMetadata, columns: Iterable[ColumnMetadata] | None = None
    ) -> str:
        selected = metadata.columns if columns is None else tuple(columns)
        return ", ".join(self.quote(column.name) for column in selected)

    def discriminator_predicate(self, metadata: EntityMetadata) -> str | None:
        if metadata.discriminator is None:
            return None
        return (
            f"{self.quote(metadata.discriminator.column)} = "
            f"{sql_literal(metadata.discriminator.value)}"
        )

    def id_predicate(self, metadata: EntityMetadata) -> str:
        return f"{self.quote(metadata.id_column.name)} = {self.placeholder()}"

    # ------------------------------------------------------------------ #
    # Statements
    # ------------------------------------------------------------------ #
    def insert_columns(
        self, metadata: EntityMetadata, include_id: bool = True
    ) -> tuple[ColumnMetadata, ...]:
        """
        Columns bound by :meth:`insert`, in placeholder order.
        """
        if include_id:
            return metadata.columns
        return metadata.data_columns

    def insert(self, metadata: EntityMetadata, include_id: bool = True) -> str:
        """
        INSERT for every mapped column; the id is left out when the database assigns it.
        """
        columns = self.insert_columns(metadata, include_id)
        names = [self.quote(column.name) for column in columns]
        values = [self.placeholder() for _ in columns]
        if metadata.discriminator is not None:
            names.append(self.quote(metadata.discriminator.column))
            values.append(sql_literal(metadata.discriminator.value))
        if not names:
            raise QueryError(f"Entity '{metadata.entity_name}' has no columns to insert.")
        sql = f"INSERT INTO {self.table(metadata)} ({', '.join(names)}) VALUES ({', '.join(values)})"
        if not include_id and self.dialect.capabilities.supports_returning:
            sql += f" RETURNING {self.quote(metadata.id_column.name)}"
        return sql

    def select(self, metadata: EntityMetadata) -> str:
        sql = f"SELECT {self.select_list(metadata)} FROM {self.table(metadata)}"
        predicate = self.discriminator_predicate(metadata)
        if predicate:
            sql += f" WHERE {predicate}"
        return sql

    def select_by_id(self, metadata: EntityMetadata) -> str:
        sql = (
            f"SELECT {self.select_list(metadata)} FROM {self.table(metadata)} "
            f"WHERE {self.id_predicate(metadata)}"
        )
        predicate = self.discriminator_predicate(metadata)
        if predicate:
            sql += f" AND {predicate}"
        return sql

    def update_columns(self, metadata: EntityMetadata) -> tuple[ColumnMetadata, ...]:
        return metadata.data_columns

    def update(self, metadata: EntityMetadata) -> str:
        """
        UPDATE of every non-id column; parameters are the columns then the id.
        """
        return self.partial_update(metadata, self.update_columns(metadata))

    def partial_update(self, metadata: EntityMetadata, changed: Iterable[ColumnMetadata]) -> str:
        """
        UPDATE touching only ``changed``; id and discriminator are never assigned.
        """
        discriminator = (
            metadata.discriminator.column.lower() if metadata.discriminator is not None else None
        )
        assignments = [
            f"{self.quote(column.name)} = {self.placeholder()}"
            for column in changed
            if not column.is_id and column.name.lower() != discriminator
        ]
        if not assignments:
            raise QueryError(f"No columns to update for entity '{metadata.entity_name}'.")
        return (
            f"UPDATE {self.table(metadata)} SET {', '.join(assignments)} "
            f"WHERE {self.id_predicate(metadata)}"
        )

    def delete(self, metadata: EntityMetadata) -> str:
        return f"DELETE FROM {self.table(metadata)} WHERE {self.id_predicate(metadata)}"
