"""
Bidirectional mapping between Python value types and generic SQL type codes.

Dialects render :class:`SQLType` codes into concrete type names, mapping
strategies derive a code for every column, and :func:`coerce` converts the
values a driver hands back into the type the entity attribute declares.
"""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import MappingError


class SQLType(enum.Enum):
    BOOLEAN = "BOOLEAN"
    TINYINT = "TINYINT"
    SMALLINT = "SMALLINT"
    INTEGER = "INTEGER"
    BIGINT = "BIGINT"
    FLOAT = "FLOAT"
    REAL = "REAL"
    DOUBLE = "DOUBLE"
    DECIMAL = "DECIMAL"
    NUMERIC = "NUMERIC"
    CHAR = "CHAR"
    VARCHAR = "VARCHAR"
    LONGVARCHAR = "LONGVARCHAR"
    CLOB = "CLOB"
    NCHAR = "NCHAR"
    NVARCHAR = "NVARCHAR"
    DATE = "DATE"
    TIME = "TIME"
    TIMESTAMP = "TIMESTAMP"
    BINARY = "BINARY"
    VARBINARY = "VARBINARY"
    LONGVARBINARY = "LONGVARBINARY"
    BLOB = "BLOB"
    UUID = "UUID"
    OTHER = "OTHER"


# bool precedes int: bool is an int subclass and must win the lookup.
_PYTHON_TO_SQL: tuple[tuple[type, SQLType], ...] = (
    (bool, SQLType.BOOLEAN),
    (int, SQLType.INTEGER),
    (float, SQLType.DOUBLE),
    (Decimal, SQLType.DECIMAL),
    (str, SQLType.VARCHAR),
    (datetime, SQLType.TIMESTAMP),
    (date, SQLType.DATE),
    (time, SQLType.TIME),
    (bytes, SQLType.VARBINARY),
    (bytearray, SQLType.VARBINARY),
    (uuid.UUID, SQLType.UUID),
)

_SQL_TO_PYTHON: dict[SQLType, type] = {
    SQLType.BOOLEAN: bool,
    SQLType.TINYINT: int,
    SQLType.SMALLINT: int,
    SQLType.INTEGER: int,
    SQLType.BIGINT: int,
    SQLType.FLOAT: float,
    SQLType.REAL: float,
    SQLType.DOUBLE: float,
    SQLType.DECIMAL: Decimal,
    SQLType.NUMERIC: Decimal,
    SQLType.CHAR: str,
    SQLType.VARCHAR: str,
    SQLType.LONGVARCHAR: str,
    SQLType.CLOB: str,
    SQLType.NCHAR: str,
    SQLType.NVARCHAR: str,
    SQLType.DATE: date,
    SQLType.TIME: time,
    SQLType.TIMESTAMP: datetime,
    SQLType.BINARY: bytes,
    SQLType.VARBINARY: bytes,
    SQLType.LONGVARBINARY: bytes,
    SQLType.BLOB: bytes,
    SQLType.UUID: uuid.UUID,
    SQLType.OTHER: object,
}

_TRUE_STRINGS = {"true", "t", "1", "yes", "y", "on"}
_FALSE_STRINGS = {"false", "f", "0", "no", "n", "off"}


def sql_type_for(python_type: type | None) -> SQLType:
    """
    Return the generic SQL type code for ``python_type``.

    Enum subclasses map to VARCHAR; unknown types fall back to VARCHAR.
    """
    if python_type is None:
        raise ValueError("Python type cannot be None")
    if isinstance(python_type, type) and issubclass(python_type, enum.Enum):
        return SQLType.VARCHAR
    for candidate, sql_type in _PYTHON_TO_SQL:
        if python_type is candidate:
            return sql_type
    for candidate, sql_type in _PYTHON_TO_SQL:
        if isinstance(python_type, type) and issubclass(python_type, candidate):
            return sql_type
    return SQLType.VARCHAR


def python_type_for(sql_type: SQLType) -> type:
    return _SQL_TO_PYTHON.get(sql_type, object)


def is_numeric_type(python_type: type | None) -> bool:
    if python_type is None or not isinstance(python_type, type):
        return False
    return issubclass(python_type, (int, float, Decimal)) and python_type is not bool


def is_uuid_compatible(python_type: type | None) -> bool:
    return python_type in (str, uuid.UUID)


def coerce(value: Any, target_type: type | None) -> Any:
    """
    Convert a driver value to ``target_type``.

    ``None`` passes through, as does any value already of the target type.
    Raises :class:`MappingError` when no conversion applies.
    """
    if value is None or target_type is None or target_type is object:
        return value
    if type(value) is target_type:
        return value
    if target_type is bool:
        return _to_bool(value)
    if isinstance(value, target_type) and not (target_type is int and isinstance(value, bool)):
        # datetime is a date subclass; narrow it explicitly.
        if target_type is date and isinstance(value, datetime):
            return value.date()
        return value
    try:
        converted = _convert(value, target_type)
    except (TypeError, ValueError, InvalidOperation, ArithmeticError) as exc:
        raise MappingError(
            f"Cannot convert {value!r} ({type(value).__name__}) to {target_type.__name__}"
        ) from exc
    if converted is _NO_CONVERSION:
        raise MappingError(
            f"Cannot convert {value!r} ({type(value).__name__}) to {target_type.__name__}"
        )
    return converted


_NO_CONVERSION = object()


def _convert(value: Any, target_type: type) -> Any:
    if issubclass(target_type, enum.Enum):
        return _to_enum(value, target_type)
    if target_type is str:
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value).decode("utf-8")
        return str(value)
    if target_type is int:
        if isinstance(value, (float, Decimal)) and value != int(value):
            raise ValueError("lossy integer conversion")
        return int(value)
    if target_type is float:
        return float(value)
    if target_type is Decimal:
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
    if target_type is uuid.UUID:
        if isinstance(value, (bytes, bytearray)) and len(value) == 16:
            return uuid.UUID(bytes=bytes(value))
        return uuid.UUID(str(value))
    if target_type is datetime:
        if isinstance(value, str):
            return datetime.fromisoformat(value)
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        return _NO_CONVERSION
    if target_type is date:
        if isinstance(value, str):
            return date.fromisoformat(value[:10])
        return _NO_CONVERSION
    if target_type is time:
        if isinstance(value, str):
            return time.fromisoformat(value)
        if isinstance(value, datetime):
            return value.time()
        return _NO_CONVERSION
    if target_type in (bytes, bytearray):
        if isinstance(value, (bytes, bytearray, memoryview)):
            return target_type(value)
        if isinstance(value, str):
            return target_type(value.encode("utf-8"))
        return _NO_CONVERSION
    return _NO_CONVERSION


def to_db(value: Any, *, exact_types_as_text: bool = False) -> Any:
    """
    Convert an attribute value into something every DB-API driver can bind.

    Enums bind by value and UUIDs as their canonical string. With
    ``exact_types_as_text`` (SQLite), Decimal and date/time values are
    rendered as text that :func:`coerce` parses back.
    """
    if isinstance(value, enum.Enum):
        return to_db(value.value, exact_types_as_text=exact_types_as_text)
    if isinstance(value, uuid.UUID):
        return str(value)
    if exact_types_as_text:
        if isinstance(value, Decimal):
            return str(value)
        if isinstance(value, (date, time)):
            # datetime is a date subclass and renders with its time part.
            return value.isoformat(sep=" ") if isinstance(value, datetime) else value.isoformat()
    return value


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise MappingError(f"Cannot convert {value!r} ({type(value).__name__}) to bool")


def _to_enum(value: Any, target_type: type[enum.Enum]) -> enum.Enum:
    try:
        return target_type(value)
    except ValueError:
        if isinstance(value, str) and value in target_type.__members__:
            return target_type[value]
        raise


__all__ = [
    "SQLType",
    "coerce",
    "is_numeric_type",
    "is_uuid_compatible",
    "python_type_for",
    "sql_type_for",
    "to_db",
]
