"""
Resolved entity descriptions consumed by the mapping strategies.

Descriptions are plain immutable values. They are produced either by hand or
by the declarative :class:`keelorm.core.Entity` base; the strategies never
look at the declarative syntax itself.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from ..errors import MappingError


class GenerationType(enum.Enum):
    NONE = "none"
    IDENTITY = "identity"
    SEQUENCE = "sequence"
    UUID = "uuid"


class InheritanceType(enum.Enum):
    DEFAULT = "default"
    SINGLE_TABLE = "single_table"
    JOINED = "joined"
    TABLE_PER_CLASS = "table_per_class"


@dataclass(frozen=True)
class FieldDescription:
    attribute: str
    column: str | None = None
    python_type: type | None = None
    is_id: bool = False
    nullable: bool = True
    unique: bool = False
    length: int = 255
    generation: GenerationType = GenerationType.NONE
    sequence_name: str | None = None
    initial_value: int = 1

    @property
    def column_name(self) -> str:
        return self.column or self.attribute


@dataclass(frozen=True)
class EntityDescription:
    """
    Everything the mapping layer needs to know about one entity type.

    ``parent`` links to the description of the nearest described base class,
    so a hierarchy is a chain of descriptions ending at its root.
    ``inheritance`` is only honoured on the root entity of a hierarchy.
    """

    entity_type: type
    fields: tuple[FieldDescription, ...] = ()
    is_entity: bool = True
    is_mapped_superclass: bool = False
    table: str | None = None
    schema: str | None = None
    inheritance: InheritanceType | None = None
    discriminator_column: str | None = None
    discriminator_value: str | None = None
    parent: "EntityDescription | None" = None
    factory: Callable[[], Any] | None = None

    @property
    def name(self) -> str:
        return self.entity_type.__name__

    def ancestors(self) -> Iterator["EntityDescription"]:
        """
        Yield parent descriptions, nearest first.
        """
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def instantiate(self) -> Any:
        if self.factory is not None:
            return self.factory()
        try:
            return self.entity_type()
        except TypeError as exc:
            raise MappingError(
                f"Entity '{self.name}' cannot be constructed without arguments; "
                "supply a factory in its description."
            ) from exc


def describe(target: Any) -> EntityDescription:
    """
    Resolve ``target`` (a description or a declarative entity type) into a description.
    """
    if isinstance(target, EntityDescription):
        return target
    describer = getattr(target, "describe", None)
    if isinstance(target, type) and callable(describer):
        description = describer()
        if isinstance(description, EntityDescription):
            return description
    raise MappingError(f"Cannot describe {target!r}: not an entity type or EntityDescription")
