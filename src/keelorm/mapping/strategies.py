"""
Inheritance mapping strategies deriving :class:`EntityMetadata` from descriptions.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from ..errors import MappingError
from ..types import SQLType, sql_type_for
from ..utils import camel_to_snake, get_logger
from .description import EntityDescription, FieldDescription, InheritanceType
from .generators import create_generator
from .metadata import ColumnMetadata, Discriminator, EntityMetadata

DEFAULT_DISCRIMINATOR_COLUMN = "dtype"

logger = get_logger("mapping")


def _accessors(attribute: str) -> tuple[Callable[[Any], Any], Callable[[Any, Any], None]]:
    def getter(entity: Any) -> Any:
        return getattr(entity, attribute, None)

    def setter(entity: Any, value: Any) -> None:
        setattr(entity, attribute, value)

    return getter, setter


def _column_from_field(field: FieldDescription) -> ColumnMetadata:
    sql_type = sql_type_for(field.python_type) if field.python_type is not None else SQLType.OTHER
    getter, setter = _accessors(field.attribute)
    return ColumnMetadata(
        attribute=field.attribute,
        name=field.column_name,
        python_type=field.python_type,
        sql_type=sql_type,
        nullable=field.nullable and not field.is_id,
        unique=field.unique or field.is_id,
        length=field.length,
        is_id=field.is_id,
        generation=field.generation,
        sequence_name=field.sequence_name,
        initial_value=field.initial_value,
        getter=getter,
        setter=setter,
    )


def _own_columns(description: EntityDescription) -> list[ColumnMetadata]:
    columns: list[ColumnMetadata] = []
    seen: set[str] = set()
    for field in description.fields:
        key = field.column_name.lower()
        if key in seen:
            raise MappingError(
                f"Duplicate column '{field.column_name}' declared on entity '{description.name}'"
            )
        seen.add(key)
        columns.append(_column_from_field(field))
    return columns


def _merge_columns(lineage: Iterable[EntityDescription]) -> list[ColumnMetadata]:
    """
    Flatten columns root first; a descendant's column replaces an ancestor's in place.
    """
    merged: list[ColumnMetadata] = []
    positions: dict[str, int] = {}
    for description in lineage:
        for column in _own_columns(description):
            key = column.name.lower()
            if key in positions:
                merged[positions[key]] = column
            else:
                positions[key] = len(merged)
                merged.append(column)
    return merged


def _require_single_id(description: EntityDescription, columns: list[ColumnMetadata]) -> ColumnMetadata:
    ids = [column for column in columns if column.is_id]
    if not ids:
        raise MappingError(f"Entity '{description.name}' declares no id field.")
    if len(ids) > 1:
        names = ", ".join(column.attribute for column in ids)
        raise MappingError(f"Entity '{description.name}' declares multiple id fields: {names}")
    return ids[0]


def _default_table(description: EntityDescription) -> str:
    return description.table or camel_to_snake(description.name)


def find_root(description: EntityDescription) -> EntityDescription:
    """
    Topmost ancestor still marked as an entity (``description`` itself if none).
    """
    root = description
    for ancestor in description.ancestors():
        if not ancestor.is_entity:
            break
        root = ancestor
    return root


def _finish(
    description: EntityDescription,
    *,
    table: str,
    schema: str | None,
    columns: list[ColumnMetadata],
    discriminator: Discriminator | None,
    inheritance: InheritanceType,
) -> EntityMetadata:
    id_column = _require_single_id(description, columns)
    if discriminator is not None and discriminator.column.lower() in {
        column.name.lower() for column in columns
    }:
        raise MappingError(
            f"Discriminator column '{discriminator.column}' of '{description.name}' "
            "collides with a mapped column."
        )
    sequence_name = id_column.sequence_name or f"{table}_{id_column.name}_seq".lower()
    metadata = EntityMetadata(
        entity_type=description.entity_type,
        table_name=table,
        schema=schema,
        columns=tuple(columns),
        id_column=id_column,
        id_generator=create_generator(id_column.generation, sequence_name),
        discriminator=discriminator,
        inheritance=inheritance,
        description=description,
    )
    logger.debug(
        "Mapped %s to %s (%s columns, %s)",
        description.name,
        metadata.qualified_table,
        len(columns),
        inheritance.value,
    )
    return metadata


class DefaultStrategy:
    """
    One table per entity; columns come from the entity and its mapped superclasses.
    """

    inheritance = InheritanceType.DEFAULT

    def build(self, description: EntityDescription) -> EntityMetadata:
        superclasses = []
        for ancestor in description.ancestors():
            if ancestor.is_mapped_superclass:
                superclasses.append(ancestor)
        lineage = list(reversed(superclasses)) + [description]
        return _finish(
            description,
            table=_default_table(description),
            schema=description.schema,
            columns=_merge_columns(lineage),
            discriminator=None,
            inheritance=self.inheritance,
        )


class SingleTableStrategy:
    """
    Whole hierarchy in the root entity's table, told apart by a discriminator column.
    """

    inheritance = InheritanceType.SINGLE_TABLE

    def build(self, description: EntityDescription) -> EntityMetadata:
        root = find_root(description)
        lineage = list(reversed(list(description.ancestors()))) + [description]
        discriminator = Discriminator(
            column=root.discriminator_column or DEFAULT_DISCRIMINATOR_COLUMN,
            value=description.discriminator_value or description.name,
        )
        return _finish(
            description,
            table=_default_table(root),
            schema=root.schema,
            columns=_merge_columns(lineage),
            discriminator=discriminator,
            inheritance=self.inheritance,
        )


_STRATEGIES: dict[InheritanceType, Any] = {
    InheritanceType.DEFAULT: DefaultStrategy(),
    InheritanceType.SINGLE_TABLE: SingleTableStrategy(),
}


def resolve_inheritance(description: EntityDescription) -> InheritanceType:
    """
    Inheritance type declared on the hierarchy root, DEFAULT when unset.
    """
    return find_root(description).inheritance or InheritanceType.DEFAULT


def build_metadata(description: EntityDescription) -> EntityMetadata:
    if not description.is_entity or description.is_mapped_superclass:
        raise MappingError(
            f"'{description.name}' is not an entity and cannot be registered directly."
        )
    inheritance = resolve_inheritance(description)
    strategy = _STRATEGIES.get(inheritance)
    if strategy is None:
        raise MappingError(
            f"Inheritance strategy {inheritance.name} requested by '{description.name}' "
            "is not supported."
        )
    return strategy.build(description)
