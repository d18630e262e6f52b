"""
Dialect strategy interfaces describing SQL rendering behaviours.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from ..errors import QueryError
from ..types import SQLType


@dataclass(frozen=True)
class DialectCapabilities:
    """
    Feature flags describing backend capabilities.
    """

    supports_sequences: bool = False
    supports_returning: bool = False
    supports_schema_namespaces: bool = False
    requires_order_by_for_pagination: bool = False
    # Decimal and date/time values are bound as ISO text.
    binds_exact_types_as_text: bool = False


@dataclass(frozen=True)
class PaginationFragment:
    """
    SQL suffix for LIMIT/OFFSET plus the values bound to its placeholders.
    """

    sql: str = ""
    params: tuple[Any, ...] = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return bool(self.sql)


class Dialect(Protocol):
    """
    Strategy interface consumed by the mapping, SQL, query and persistence layers.
    """

    @property
    def name(self) -> str: ...

    @property
    def param_style(self) -> str: ...

    @property
    def capabilities(self) -> DialectCapabilities: ...

    def quote_identifier(self, identifier: str) -> str: ...

    def identifier_quote_char(self) -> str: ...

    def format_table(self, table_name: str, schema: str | None = None) -> str: ...

    def type_name(self, sql_type: SQLType, length: int = 0) -> str: ...

    def identity_column_syntax(self) -> str: ...

    def supports_sequences(self) -> bool: ...

    def next_sequence_value_sql(self, sequence_name: str) -> str: ...

    def pagination_fragment(self, limit: int | None, offset: int | None) -> PaginationFragment: ...

    def parameter_placeholder(self, position: int | None = None) -> str: ...

    def validation_query(self) -> str: ...

    def driver_module(self) -> str: ...


def check_pagination(limit: int | None, offset: int | None) -> None:
    if limit is not None and limit < 0:
        raise QueryError(f"Limit must be non-negative, got {limit}")
    if offset is not None and offset < 0:
        raise QueryError(f"Offset must be non-negative, got {offset}")


def sized(name: str, length: int, default: int) -> str:
    return f"{name}({length if length > 0 else default})"


def count_placeholders(sql: str, placeholder: str) -> int:
    """
    Count bind markers in ``sql``.

    In format style ``%%`` is an escaped percent, and ``%s`` counts even inside
    quotes because the drivers substitute it there too. A ``?`` inside a quoted
    literal or identifier is not a marker.
    """
    if placeholder != "%s":
        return _count_unquoted(sql, placeholder)
    count = 0
    idx = 0
    while idx < len(sql) - 1:
        if sql[idx] == "%" and sql[idx + 1] == "s":
            count += 1
            idx += 2
            continue
        if sql[idx] == "%" and sql[idx + 1] == "%":
            idx += 2
            continue
        idx += 1
    return count


def _count_unquoted(sql: str, placeholder: str) -> int:
    count = 0
    quote: str | None = None
    for char in sql:
        if quote is not None:
            # A doubled quote closes and reopens, which leaves the state unchanged.
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == placeholder:
            count += 1
    return count
