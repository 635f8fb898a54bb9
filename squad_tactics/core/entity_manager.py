"""Entity id allocation for the grid world."""

from __future__ import annotations

from typing import Set


class EntityManager:
    """Hand out entity ids and remember which ones are still alive."""

    def __init__(self) -> None:
        self._next_id: int = 0
        self._entities: Set[int] = set()

    def create_entity(self) -> int:
        """Create a new entity and return its unique ID."""

        self._next_id += 1
        self._entities.add(self._next_id)
        return self._next_id

    def destroy_entity(self, entity_id: int) -> None:
        self._entities.discard(entity_id)

    def has_entity(self, entity_id: int) -> bool:
        return entity_id in self._entities


__all__ = ["EntityManager"]
