"""
Entity descriptions, mapping strategies, metadata and id generators.
"""

from .description import (
    EntityDescription,
    FieldDescription,
    GenerationType,
    InheritanceType,
    describe,
)
from .generators import (
    IdentityGenerator,
    IdGenerator,
    NoOpGenerator,
    SequenceGenerator,
    UUIDGenerator,
    create_generator,
)
from .metadata import ColumnMetadata, Discriminator, EntityMetadata, MetadataRegistry
from .strategies import (
    DEFAULT_DISCRIMINATOR_COLUMN,
    DefaultStrategy,
    SingleTableStrategy,
    build_metadata,
)

__all__ = [
    "EntityDescription",
    "FieldDescription",
    "GenerationType",
    "InheritanceType",
    "describe",
    "IdGenerator",
    "IdentityGenerator",
    "SequenceGenerator",
    "UUIDGenerator",
    "NoOpGenerator",
    "create_generator",
    "ColumnMetadata",
    "Discriminator",
    "EntityMetadata",
    "MetadataRegistry",
    "DEFAULT_DISCRIMINATOR_COLUMN",
    "DefaultStrategy",
    "SingleTableStrategy",
    "build_metadata",
]
