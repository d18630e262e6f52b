"""
Primary key generators.

A generator either produces the id before the INSERT (sequence, UUID) or
signals through ``post_insert`` that the database assigns it and the caller
must read it back afterwards (identity).
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any, Callable, Protocol

from ..errors import MappingError, UnsupportedDialectFeature
from ..types import coerce, is_uuid_compatible
from .description import GenerationType

if TYPE_CHECKING:
    from ..adapters import DatabaseAdapter
    from ..dialects import Dialect
    from .metadata import ColumnMetadata


class IdGenerator(Protocol):
    post_insert: bool

    def generate(
        self, connection: "DatabaseAdapter", dialect: "Dialect", column: "ColumnMetadata"
    ) -> Any: ...


class IdentityGenerator:
    post_insert = True

    def generate(self, connection, dialect, column) -> Any:
        return None

    def __repr__(self) -> str:
        return "IdentityGenerator()"


class SequenceGenerator:
    """
    Fetches the next value of a database sequence before the INSERT.
    """

    post_insert = False

    def __init__(self, sequence_name: str) -> None:
        self.sequence_name = sequence_name

    def generate(self, connection, dialect, column) -> Any:
        if not dialect.supports_sequences():
            raise UnsupportedDialectFeature(
                f"Dialect '{dialect.name}' does not support sequences "
                f"(needed for {self.sequence_name})."
            )
        cursor = connection.execute(dialect.next_sequence_value_sql(self.sequence_name))
        row = cursor.fetchone()
        if row is None or row[0] is None:
            raise MappingError(f"Sequence {self.sequence_name} returned no value")
        return coerce(row[0], column.python_type or int)

    def __repr__(self) -> str:
        return f"SequenceGenerator({self.sequence_name!r})"


class UUIDGenerator:
    post_insert = False

    def generate(self, connection, dialect, column) -> Any:
        if not is_uuid_compatible(column.python_type):
            type_name = getattr(column.python_type, "__name__", column.python_type)
            raise MappingError(
                f"UUID generation requires a str or UUID id column; "
                f"'{column.attribute}' is {type_name}"
            )
        value = uuid.uuid4()
        if column.python_type is str:
            return str(value)
        return value

    def __repr__(self) -> str:
        return "UUIDGenerator()"


class NoOpGenerator:
    post_insert = False

    def generate(self, connection, dialect, column) -> Any:
        return None

    def __repr__(self) -> str:
        return "NoOpGenerator()"


_GENERATOR_FACTORIES: dict[GenerationType, Callable[[str], IdGenerator]] = {
    GenerationType.IDENTITY: lambda sequence_name: IdentityGenerator(),
    GenerationType.SEQUENCE: SequenceGenerator,
    GenerationType.UUID: lambda sequence_name: UUIDGenerator(),
    GenerationType.NONE: lambda sequence_name: NoOpGenerator(),
}


def create_generator(generation: GenerationType, sequence_name: str) -> IdGenerator:
    return _GENERATOR_FACTORIES[generation](sequence_name)
