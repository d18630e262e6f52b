"""
PostgreSQL dialect implementation.
"""

from __future__ import annotations

from typing import Final

from ..types import SQLType
from .base import DialectCapabilities, PaginationFragment, check_pagination, sized


class PostgresDialect:
    """
    PostgreSQL dialect: double-quote identifiers, SERIAL keys, native sequences.
    """

    name: Final[str] = "postgresql"
    param_style: Final[str] = "pyformat"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        supports_sequences=True,
        supports_returning=True,
        supports_schema_namespaces=True,
    )

    def quote_identifier(self, identifier: str) -> str:
        escaped = identifier.replace('"', '""')
        return f'"{escaped}"'

    def identifier_quote_char(self) -> str:
        return '"'

    def format_table(self, table_name: str, schema: str | None = None) -> str:
        if schema is None and "." in table_name:
            schema, table_name = table_name.split(".", 1)
        if schema:
            return f"{self.quote_identifier(schema)}.{self.quote_identifier(table_name)}"
        return self.quote_identifier(table_name)

    def type_name(self, sql_type: SQLType, length: int = 0) -> str:
        if sql_type in (SQLType.CHAR, SQLType.NCHAR):
            return sized("CHAR", length, 1)
        if sql_type in (SQLType.VARCHAR, SQLType.LONGVARCHAR, SQLType.NVARCHAR):
            return sized("VARCHAR", length, 255)
        return _TYPE_NAMES.get(sql_type, "TEXT")

    def identity_column_syntax(self) -> str:
        return "SERIAL"

    def supports_sequences(self) -> bool:
        return True

    def next_sequence_value_sql(self, sequence_name: str) -> str:
        escaped = sequence_name.replace("'", "''")
        return f"SELECT nextval('{escaped}')"

    def pagination_fragment(self, limit: int | None, offset: int | None) -> PaginationFragment:
        check_pagination(limit, offset)
        placeholder = self.parameter_placeholder()
        sql = ""
        params: list[int] = []
        if limit is not None:
            sql += f" LIMIT {placeholder}"
            params.append(limit)
        if offset is not None and offset > 0:
            sql += f" OFFSET {placeholder}"
            params.append(offset)
        return PaginationFragment(sql, tuple(params))

    def parameter_placeholder(self, position: int | None = None) -> str:
        return "%s"

    def validation_query(self) -> str:
        return "SELECT 1"

    def driver_module(self) -> str:
        return "psycopg"


_TYPE_NAMES: Final[dict[SQLType, str]] = {
    SQLType.BOOLEAN: "BOOLEAN",
    SQLType.TINYINT: "SMALLINT",
    SQLType.SMALLINT: "SMALLINT",
    SQLType.INTEGER: "INTEGER",
    SQLType.BIGINT: "BIGINT",
    SQLType.FLOAT: "REAL",
    SQLType.REAL: "REAL",
    SQLType.DOUBLE: "DOUBLE PRECISION",
    SQLType.DECIMAL: "NUMERIC",
    SQLType.NUMERIC: "NUMERIC",
    SQLType.CLOB: "TEXT",
    SQLType.DATE: "DATE",
    SQLType.TIME: "TIME",
    SQLType.TIMESTAMP: "TIMESTAMP",
    SQLType.BINARY: "BYTEA",
    SQLType.VARBINARY: "BYTEA",
    SQLType.LONGVARBINARY: "BYTEA",
    SQLType.BLOB: "BYTEA",
    SQLType.UUID: "UUID",
}
