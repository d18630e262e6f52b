"""
Declarative entity surface: the :class:`Entity` base and its column descriptors.
"""

from .fields import Column, Id
from .model import Entity, EntityMeta

__all__ = ["Column", "Entity", "EntityMeta", "Id"]
