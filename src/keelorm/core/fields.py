"""
Column descriptors for declarative entities.
"""

from __future__ import annotations

from typing import Any, Optional

from ..errors import MappingError
from ..mapping.description import FieldDescription, GenerationType


class Column:
    """
    Descriptor declaring a mapped column on an :class:`Entity` subclass.

    Values live in the instance's ``_field_values`` dict; the descriptor
    only enforces nullability and supplies defaults.
    """

    _creation_counter = 0

    def __init__(
        self,
        python_type: type = str,
        *,
        name: Optional[str] = None,
        nullable: bool = True,
        unique: bool = False,
        length: int = 255,
        default: Any = None,
    ) -> None:
        self.python_type = python_type
        self.db_column = name
        self.nullable = nullable
        self.unique = unique
        self.length = length
        self.default = default

        self.name: str | None = None
        self.creation_counter = Column._creation_counter
        Column._creation_counter += 1

    is_id = False

    # Descriptor protocol -------------------------------------------------
    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: object | None, owner: type | None = None) -> Any:
        if instance is None:
            return self
        name = self.require_name()
        values = instance.__dict__.setdefault("_field_values", {})
        if name not in values:
            values[name] = self.get_default()
        return values[name]

    def __set__(self, instance: object, value: Any) -> None:
        name = self.require_name()
        if value is None and not self.nullable and not self.is_id:
            raise ValueError(f"Field '{name}' cannot be None")
        instance.__dict__.setdefault("_field_values", {})[name] = value

    # Metadata helpers ----------------------------------------------------
    def require_name(self) -> str:
        if self.name is None:
            raise MappingError("Column is not bound to an entity attribute.")
        return self.name

    def get_default(self) -> Any:
        if callable(self.default):
            return self.default()
        return self.default

    def describe(self) -> FieldDescription:
        return FieldDescription(
            attribute=self.require_name(),
            column=self.db_column,
            python_type=self.python_type,
            nullable=self.nullable,
            unique=self.unique,
            length=self.length,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} ({self.python_type.__name__})>"


class Id(Column):
    """
    The primary key column; ``generation`` selects how its value is produced.
    """

    is_id = True

    def __init__(
        self,
        python_type: type = int,
        *,
        name: Optional[str] = None,
        generation: GenerationType = GenerationType.IDENTITY,
        sequence_name: Optional[str] = None,
        initial_value: int = 1,
        length: int = 255,
    ) -> None:
        super().__init__(python_type, name=name, nullable=False, unique=True, length=length)
        self.generation = generation
        self.sequence_name = sequence_name
        self.initial_value = initial_value

    def describe(self) -> FieldDescription:
        return FieldDescription(
            attribute=self.require_name(),
            column=self.db_column,
            python_type=self.python_type,
            is_id=True,
            nullable=False,
            unique=True,
            length=self.length,
            generation=self.generation,
            sequence_name=self.sequence_name,
            initial_value=self.initial_value,
        )
