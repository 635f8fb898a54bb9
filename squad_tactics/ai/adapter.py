"""Interface the decision subsystem uses to observe and act on the world."""

from __future__ import annotations

from typing import Any, List, Optional, Protocol, runtime_checkable

from .types import AbilityKind, AgentConfig, EnemyDescriptor

# Distance reported when either side of a measurement is missing.
UNKNOWN_DISTANCE = 9999


@runtime_checkable
class WorldAdapter(Protocol):
    """Everything the squad AI needs from its host world.

    Handles returned by :meth:`character_for_agent` and :meth:`leader` are
    opaque to the AI; they are only ever passed back into this adapter.
    Movement methods are fire-and-forget intents.
    """

    # Roster and vitals -------------------------------------------------
    def leader(self) -> Optional[Any]: ...

    def leader_id(self) -> Optional[int]: ...

    def party_ids(self) -> List[int]: ...

    def config_for_agent(self, agent_id: int) -> Optional[AgentConfig]: ...

    def hp_percent(self, agent_id: int) -> Optional[float]: ...

    # Perception --------------------------------------------------------
    def character_for_agent(self, agent_id: int) -> Optional[Any]: ...

    def enemies_in_zone(self) -> List[EnemyDescriptor]: ...

    def locate_enemy(self, enemy_id: int) -> Optional[EnemyDescriptor]: ...

    def distance(self, a: Any, b: Any) -> int: ...

    # Intents -----------------------------------------------------------
    def move_toward(self, entity: Any, target: Any) -> None: ...

    def move_away(self, entity: Any, target: Any) -> None: ...

    def sidestep(self, entity: Any, target: Any) -> None: ...

    def use_ability(self, entity: Any, ability_id: str, kind: AbilityKind) -> bool: ...

    def apply_support_effect(
        self, user_agent_id: int, target_agent_id: int, effect_id: str
    ) -> bool: ...


def manhattan(a: Any, b: Any) -> int:
    """Grid distance between two objects exposing ``x`` and ``y``."""

    if a is None or b is None:
        return UNKNOWN_DISTANCE
    return abs(a.x - b.x) + abs(a.y - b.y)


__all__ = ["WorldAdapter", "UNKNOWN_DISTANCE", "manhattan"]
