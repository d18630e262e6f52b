"""
MySQL dialect implementation.
"""

from __future__ import annotations

from typing import Final

from ..errors import UnsupportedDialectFeature
from ..types import SQLType
from .base import DialectCapabilities, PaginationFragment, check_pagination, sized

# MySQL has no "no limit" keyword; the documented idiom is the largest BIGINT UNSIGNED.
_UNBOUNDED_LIMIT: Final[int] = 18446744073709551615


class MySQLDialect:
    """
    MySQL dialect: backtick quoting, AUTO_INCREMENT keys, no sequences.
    """

    name: Final[str] = "mysql"
    param_style: Final[str] = "pyformat"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        supports_sequences=False,
        supports_returning=False,
        supports_schema_namespaces=True,
    )

    def quote_identifier(self, identifier: str) -> str:
        escaped = identifier.replace("`", "``")
        return f"`{escaped}`"

    def identifier_quote_char(self) -> str:
        return "`"

    def format_table(self, table_name: str, schema: str | None = None) -> str:
        if schema is None and "." in table_name:
            schema, table_name = table_name.split(".", 1)
        if schema:
            return f"{self.quote_identifier(schema)}.{self.quote_identifier(table_name)}"
        return self.quote_identifier(table_name)

    def type_name(self, sql_type: SQLType, length: int = 0) -> str:
        if sql_type is SQLType.BOOLEAN:
            return "TINYINT(1)"
        if sql_type in (SQLType.VARCHAR, SQLType.LONGVARCHAR, SQLType.NVARCHAR):
            if length <= 0 or length > 65535:
                return "TEXT"
            return f"VARCHAR({length})"
        if sql_type in (SQLType.CHAR, SQLType.NCHAR):
            return sized("CHAR", length, 1)
        if sql_type is SQLType.BINARY:
            return sized("BINARY", length, 1)
        if sql_type in (SQLType.VARBINARY, SQLType.LONGVARBINARY):
            if length <= 0 or length > 65535:
                return "BLOB"
            return f"VARBINARY({length})"
        return _TYPE_NAMES.get(sql_type, "VARCHAR(255)")

    def identity_column_syntax(self) -> str:
        return "AUTO_INCREMENT"

    def supports_sequences(self) -> bool:
        return False

    def next_sequence_value_sql(self, sequence_name: str) -> str:
        raise UnsupportedDialectFeature(
            "MySQL does not support sequences; use GenerationType.IDENTITY instead."
        )

    def pagination_fragment(self, limit: int | None, offset: int | None) -> PaginationFragment:
        check_pagination(limit, offset)
        placeholder = self.parameter_placeholder()
        has_offset = offset is not None and offset > 0
        if limit is None and not has_offset:
            return PaginationFragment()
        if limit is None:
            return PaginationFragment(
                f" LIMIT {_UNBOUNDED_LIMIT} OFFSET {placeholder}", (offset,)
            )
        if has_offset:
            return PaginationFragment(
                f" LIMIT {placeholder} OFFSET {placeholder}", (limit, offset)
            )
        return PaginationFragment(f" LIMIT {placeholder}", (limit,))

    def parameter_placeholder(self, position: int | None = None) -> str:
        return "%s"

    def validation_query(self) -> str:
        return "SELECT 1"

    def driver_module(self) -> str:
        return "pymysql"


_TYPE_NAMES: Final[dict[SQLType, str]] = {
    SQLType.TINYINT: "TINYINT",
    SQLType.SMALLINT: "SMALLINT",
    SQLType.INTEGER: "INT",
    SQLType.BIGINT: "BIGINT",
    SQLType.FLOAT: "FLOAT",
    SQLType.REAL: "FLOAT",
    SQLType.DOUBLE: "DOUBLE",
    SQLType.DECIMAL: "DECIMAL",
    SQLType.NUMERIC: "DECIMAL",
    SQLType.CLOB: "TEXT",
    SQLType.BLOB: "BLOB",
    SQLType.DATE: "DATE",
    SQLType.TIME: "TIME",
    SQLType.TIMESTAMP: "DATETIME",
    SQLType.UUID: "CHAR(36)",
}
