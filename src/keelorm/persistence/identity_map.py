"""
Identity map ensuring a single in-memory instance per row.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Tuple

from ..errors import MappingError


@dataclass(frozen=True)
class EntityKey:
    """
    (entity type, primary key) pair identifying one row.
    """

    entity_type: type
    id: Any

    def __post_init__(self) -> None:
        if self.entity_type is None:
            raise MappingError("EntityKey requires an entity type.")
        if self.id is None:
            raise MappingError(
                f"EntityKey for '{self.entity_type.__name__}' requires a non-null id."
            )

    def __repr__(self) -> str:
        return f"EntityKey({self.entity_type.__name__}, {self.id!r})"


class IdentityMap:
    """
    Stores entity instances keyed by :class:`EntityKey`.

    Owned by one session and, like the session, not shared between threads.
    """

    def __init__(self) -> None:
        self._store: Dict[EntityKey, Any] = {}

    def add(self, key: EntityKey, instance: Any) -> None:
        self._store[key] = instance

    def get(self, key: EntityKey) -> Any | None:
        return self._store.get(key)

    def remove(self, key: EntityKey) -> None:
        self._store.pop(key, None)

    def clear(self) -> None:
        self._store.clear()

    def items(self) -> list[Tuple[EntityKey, Any]]:
        return list(self._store.items())

    def values(self) -> list[Any]:
        return list(self._store.values())

    def __contains__(self, key: EntityKey) -> bool:
        return key in self._store

    def __iter__(self) -> Iterator[EntityKey]:
        return iter(list(self._store))

    def __len__(self) -> int:
        return len(self._store)
