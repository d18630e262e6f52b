"""
Immutable per-entity mapping metadata and the registry that owns it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator

from ..errors import ConfigurationError, MappingError
from ..types import SQLType, coerce, to_db
from .description import EntityDescription, GenerationType, InheritanceType, describe
from .generators import IdGenerator

if TYPE_CHECKING:
    from ..dialects.base import Dialect


@dataclass(frozen=True)
class ColumnMetadata:
    """
    One mapped column plus the accessors reading and writing its entity attribute.
    """

    attribute: str
    name: str
    python_type: type | None
    sql_type: SQLType
    nullable: bool = True
    unique: bool = False
    length: int = 255
    is_id: bool = False
    generation: GenerationType = GenerationType.NONE
    sequence_name: str | None = None
    initial_value: int = 1
    getter: Callable[[Any], Any] | None = field(default=None, compare=False, repr=False)
    setter: Callable[[Any, Any], None] | None = field(default=None, compare=False, repr=False)

    def get_value(self, entity: Any) -> Any:
        if self.getter is not None:
            return self.getter(entity)
        return getattr(entity, self.attribute, None)

    def set_value(self, entity: Any, value: Any) -> None:
        if self.setter is not None:
            self.setter(entity, value)
        else:
            setattr(entity, self.attribute, value)

    def to_python(self, value: Any) -> Any:
        return coerce(value, self.python_type)

    def to_db(self, value: Any, dialect: "Dialect | None" = None) -> Any:
        """
        Bind parameter for ``value``; the inverse of :meth:`to_python`.
        """
        as_text = dialect is not None and dialect.capabilities.binds_exact_types_as_text
        return to_db(value, exact_types_as_text=as_text)


@dataclass(frozen=True)
class Discriminator:
    column: str
    value: str


@dataclass(frozen=True)
class EntityMetadata:
    """
    Table, columns, id and discriminator for one registered entity type.
    """

    entity_type: type
    table_name: str
    columns: tuple[ColumnMetadata, ...]
    id_column: ColumnMetadata
    id_generator: IdGenerator
    schema: str | None = None
    discriminator: Discriminator | None = None
    inheritance: InheritanceType = InheritanceType.DEFAULT
    description: EntityDescription | None = field(default=None, compare=False, repr=False)
    _by_name: dict[str, ColumnMetadata] = field(
        default_factory=dict, init=False, compare=False, repr=False
    )
    _by_attribute: dict[str, ColumnMetadata] = field(
        default_factory=dict, init=False, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        for column in self.columns:
            self._by_name[column.name.lower()] = column
            self._by_attribute[column.attribute] = column

    @property
    def entity_name(self) -> str:
        return self.entity_type.__name__

    @property
    def qualified_table(self) -> str:
        if self.schema:
            return f"{self.schema}.{self.table_name}"
        return self.table_name

    @property
    def sequence_name(self) -> str:
        if self.id_column.sequence_name:
            return self.id_column.sequence_name
        return f"{self.table_name}_{self.id_column.name}_seq".lower()

    @property
    def data_columns(self) -> tuple[ColumnMetadata, ...]:
        """Columns other than the id."""
        return tuple(column for column in self.columns if not column.is_id)

    @property
    def post_insert_id(self) -> bool:
        return self.id_generator.post_insert

    def column(self, name: str) -> ColumnMetadata:
        try:
            return self._by_name[name.lower()]
        except KeyError as exc:
            raise MappingError(f"Unknown column '{name}' on entity '{self.entity_name}'") from exc

    def has_column(self, name: str) -> bool:
        return name.lower() in self._by_name

    def has_attribute(self, attribute: str) -> bool:
        return attribute in self._by_attribute

    def column_for_attribute(self, attribute: str) -> ColumnMetadata:
        try:
            return self._by_attribute[attribute]
        except KeyError as exc:
            raise MappingError(
                f"Unknown attribute '{attribute}' on entity '{self.entity_name}'"
            ) from exc

    # ------------------------------------------------------------------ #
    # Instance helpers
    # ------------------------------------------------------------------ #
    def instantiate(self) -> Any:
        if self.description is not None:
            return self.description.instantiate()
        return self.entity_type()

    def get_id(self, entity: Any) -> Any:
        return self.id_column.get_value(entity)

    def set_id(self, entity: Any, value: Any) -> None:
        self.id_column.set_value(entity, self.id_column.to_python(value))

    def values(
        self,
        entity: Any,
        columns: Iterable[ColumnMetadata] | None = None,
        dialect: "Dialect | None" = None,
    ) -> list[Any]:
        """
        Bind parameters for ``columns`` (default: all), converted for ``dialect``.
        """
        selected = self.columns if columns is None else columns
        return [column.to_db(column.get_value(entity), dialect) for column in selected]

    def snapshot(self, entity: Any) -> dict[str, Any]:
        """
        Capture attribute values for later dirty checking.
        """
        return {column.attribute: column.get_value(entity) for column in self.columns}

    def changed_columns(self, entity: Any, snapshot: dict[str, Any]) -> tuple[ColumnMetadata, ...]:
        """
        Non-id columns whose current value differs from ``snapshot``.
        """
        return tuple(
            column
            for column in self.data_columns
            if column.get_value(entity) != snapshot.get(column.attribute)
        )

    def populate(self, entity: Any, row: dict[str, Any]) -> Any:
        """
        Assign every column present in ``row`` (keyed by lower-cased column name).

        Columns missing from the row are left untouched.
        """
        for column in self.columns:
            key = column.name.lower()
            if key in row:
                column.set_value(entity, column.to_python(row[key]))
        return entity

    def matches_row(self, row: dict[str, Any]) -> bool:
        """
        False when a discriminated row belongs to a different subtype.
        """
        if self.discriminator is None:
            return True
        key = self.discriminator.column.lower()
        if key not in row:
            return True
        return row[key] == self.discriminator.value


class MetadataRegistry:
    """
    Metadata for every registered entity type.

    Built once when a session factory is created, then frozen.
    """

    def __init__(self) -> None:
        self._by_type: dict[type, EntityMetadata] = {}
        self._frozen = False

    @classmethod
    def from_entities(cls, entities: Iterable[Any]) -> "MetadataRegistry":
        registry = cls()
        for entity in entities:
            registry.register(entity)
        registry.freeze()
        return registry

    def register(self, entity: Any) -> EntityMetadata:
        """
        Build and store metadata for an entity type or :class:`EntityDescription`.
        """
        if self._frozen:
            raise ConfigurationError("Metadata registry is frozen; no further registrations.")
        from .strategies import build_metadata

        description = describe(entity)
        existing = self._by_type.get(description.entity_type)
        if existing is not None:
            return existing
        metadata = build_metadata(description)
        self._by_type[description.entity_type] = metadata
        return metadata

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, entity_type: type) -> EntityMetadata | None:
        return self._by_type.get(entity_type)

    def require(self, entity_type: type) -> EntityMetadata:
        metadata = self._by_type.get(entity_type)
        if metadata is None:
            name = getattr(entity_type, "__name__", repr(entity_type))
            raise MappingError(f"Entity type '{name}' is not registered.")
        return metadata

    def for_instance(self, entity: Any) -> EntityMetadata:
        return self.require(type(entity))

    def __iter__(self) -> Iterator[EntityMetadata]:
        return iter(list(self._by_type.values()))

    def __len__(self) -> int:
        return len(self._by_type)

    def __contains__(self, entity_type: object) -> bool:
        return entity_type in self._by_type
