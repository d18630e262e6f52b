"""
Microsoft SQL Server dialect implementation.
"""

from __future__ import annotations

from typing import Final

from ..types import SQLType
from .base import DialectCapabilities, PaginationFragment, check_pagination, sized


class SQLServerDialect:
    """
    SQL Server 2012+ dialect: bracket quoting, IDENTITY keys, sequences.

    ``OFFSET ... FETCH`` pagination is only valid after an ORDER BY, which the
    caller has to supply; the capabilities flag this requirement.
    """

    name: Final[str] = "sqlserver"
    param_style: Final[str] = "pyformat"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        supports_sequences=True,
        supports_returning=False,
        supports_schema_namespaces=True,
        requires_order_by_for_pagination=True,
    )

    def quote_identifier(self, identifier: str) -> str:
        escaped = identifier.replace("]", "]]")
        return f"[{escaped}]"

    def identifier_quote_char(self) -> str:
        return "["

    def format_table(self, table_name: str, schema: str | None = None) -> str:
        if schema is None and "." in table_name:
            schema, table_name = table_name.split(".", 1)
        if schema:
            return f"{self.quote_identifier(schema)}.{self.quote_identifier(table_name)}"
        return self.quote_identifier(table_name)

    def type_name(self, sql_type: SQLType, length: int = 0) -> str:
        if sql_type is SQLType.CHAR:
            return sized("CHAR", length, 1)
        if sql_type is SQLType.NCHAR:
            return sized("NCHAR", length, 1)
        if sql_type in (SQLType.VARCHAR, SQLType.LONGVARCHAR):
            return sized("VARCHAR", length, 255)
        if sql_type is SQLType.NVARCHAR:
            return sized("NVARCHAR", length, 255)
        return _TYPE_NAMES.get(sql_type, "VARCHAR(255)")

    def identity_column_syntax(self) -> str:
        return "IDENTITY"

    def supports_sequences(self) -> bool:
        return True

    def next_sequence_value_sql(self, sequence_name: str) -> str:
        return f"SELECT NEXT VALUE FOR {self.format_table(sequence_name)}"

    def pagination_fragment(self, limit: int | None, offset: int | None) -> PaginationFragment:
        check_pagination(limit, offset)
        if limit is None and not offset:
            return PaginationFragment()
        placeholder = self.parameter_placeholder()
        # FETCH NEXT is only legal after OFFSET, so OFFSET is always rendered.
        sql = f" OFFSET {placeholder} ROWS"
        params: list[int] = [offset or 0]
        if limit is not None:
            sql += f" FETCH NEXT {placeholder} ROWS ONLY"
            params.append(limit)
        return PaginationFragment(sql, tuple(params))

    def parameter_placeholder(self, position: int | None = None) -> str:
        return "%s"

    def validation_query(self) -> str:
        return "SELECT 1"

    def driver_module(self) -> str:
        return "pymssql"


_TYPE_NAMES: Final[dict[SQLType, str]] = {
    SQLType.BOOLEAN: "BIT",
    SQLType.TINYINT: "TINYINT",
    SQLType.SMALLINT: "SMALLINT",
    SQLType.INTEGER: "INT",
    SQLType.BIGINT: "BIGINT",
    SQLType.FLOAT: "REAL",
    SQLType.REAL: "REAL",
    SQLType.DOUBLE: "FLOAT",
    SQLType.DECIMAL: "DECIMAL",
    SQLType.NUMERIC: "DECIMAL",
    SQLType.CLOB: "TEXT",
    SQLType.DATE: "DATE",
    SQLType.TIME: "TIME",
    SQLType.TIMESTAMP: "DATETIME2",
    SQLType.BINARY: "VARBINARY(MAX)",
    SQLType.VARBINARY: "VARBINARY(MAX)",
    SQLType.LONGVARBINARY: "VARBINARY(MAX)",
    SQLType.BLOB: "VARBINARY(MAX)",
    SQLType.UUID: "UNIQUEIDENTIFIER",
}
