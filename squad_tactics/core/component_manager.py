# Component storage for the grid world.
from __future__ import annotations

from typing import Any, Dict, Iterator, Optional, Tuple, Type, TypeVar

T = TypeVar("T")


class ComponentManager:
    """Map ``entity id -> component class -> instance``."""

    def __init__(self) -> None:
        self._components: Dict[int, Dict[type, Any]] = {}

    def add_component(self, entity_id: int, component: Any) -> None:
        """Attach ``component``, replacing any previous one of the same class."""
        self._components.setdefault(entity_id, {})[type(component)] = component

    def get_component(self, entity_id: int, component_cls: Type[T]) -> Optional[T]:
        return self._components.get(entity_id, {}).get(component_cls)

    def clear_entity(self, entity_id: int) -> None:
        """Drop every component attached to ``entity_id``."""
        self._components.pop(entity_id, None)

    def entities_with(self, component_cls: Type[T]) -> Iterator[Tuple[int, T]]:
        """Yield ``(entity_id, component)`` pairs in attachment order."""
        for entity_id, comps in self._components.items():
            comp = comps.get(component_cls)
            if comp is not None:
                yield entity_id, comp


__all__ = ["ComponentManager"]
