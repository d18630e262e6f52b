"""
Unit of Work snapshots backing dirty checking within a session.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Mapping

from .identity_map import EntityKey


class UnitOfWork:
    """
    Holds the attribute snapshot of every tracked entity.

    Snapshots are read-only once recorded; after a flush writes an entity
    its snapshot is replaced as a whole.
    """

    def __init__(self) -> None:
        self._snapshots: Dict[EntityKey, Mapping[str, Any]] = {}

    def register(self, key: EntityKey, snapshot: Dict[str, Any]) -> None:
        self._snapshots[key] = MappingProxyType(dict(snapshot))

    def snapshot(self, key: EntityKey) -> Mapping[str, Any]:
        return self._snapshots.get(key, MappingProxyType({}))

    def discard(self, key: EntityKey) -> None:
        self._snapshots.pop(key, None)

    def clear(self) -> None:
        self._snapshots.clear()

    def __contains__(self, key: EntityKey) -> bool:
        return key in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)
