"""
SQLite dialect implementation.
"""

from __future__ import annotations

from typing import Final

from ..errors import UnsupportedDialectFeature
from ..types import SQLType
from .base import DialectCapabilities, PaginationFragment, check_pagination


class SQLiteDialect:
    """
    SQLite dialect using qmark param style and minimal capabilities.
    """

    name: Final[str] = "sqlite"
    param_style: Final[str] = "qmark"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        binds_exact_types_as_text=True,
    )

    def quote_identifier(self, identifier: str) -> str:
        escaped = identifier.replace('"', '""')
        return f'"{escaped}"'

    def identifier_quote_char(self) -> str:
        return '"'

    def format_table(self, table_name: str, schema: str | None = None) -> str:
        # Attached databases are the only namespaces SQLite knows about.
        if schema:
            return f"{self.quote_identifier(schema)}.{self.quote_identifier(table_name)}"
        return self.quote_identifier(table_name)

    def type_name(self, sql_type: SQLType, length: int = 0) -> str:
        return _TYPE_NAMES.get(sql_type, "TEXT")

    def identity_column_syntax(self) -> str:
        return "AUTOINCREMENT"

    def supports_sequences(self) -> bool:
        return False

    def next_sequence_value_sql(self, sequence_name: str) -> str:
        raise UnsupportedDialectFeature("SQLite does not support sequences.")

    def pagination_fragment(self, limit: int | None, offset: int | None) -> PaginationFragment:
        check_pagination(limit, offset)
        has_offset = offset is not None and offset > 0
        if limit is None and not has_offset:
            return PaginationFragment()
        if limit is None:
            return PaginationFragment(" LIMIT -1 OFFSET ?", (offset,))
        if has_offset:
            return PaginationFragment(" LIMIT ? OFFSET ?", (limit, offset))
        return PaginationFragment(" LIMIT ?", (limit,))

    def parameter_placeholder(self, position: int | None = None) -> str:
        return "?"

    def validation_query(self) -> str:
        return "SELECT 1"

    def driver_module(self) -> str:
        return "sqlite3"


_TYPE_NAMES: Final[dict[SQLType, str]] = {
    SQLType.BOOLEAN: "INTEGER",
    SQLType.TINYINT: "INTEGER",
    SQLType.SMALLINT: "INTEGER",
    SQLType.INTEGER: "INTEGER",
    SQLType.BIGINT: "INTEGER",
    SQLType.FLOAT: "REAL",
    SQLType.REAL: "REAL",
    SQLType.DOUBLE: "REAL",
    SQLType.DECIMAL: "NUMERIC",
    SQLType.NUMERIC: "NUMERIC",
    SQLType.BINARY: "BLOB",
    SQLType.VARBINARY: "BLOB",
    SQLType.LONGVARBINARY: "BLOB",
    SQLType.BLOB: "BLOB",
}
