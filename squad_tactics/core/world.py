"""In-memory grid world implementing the squad AI's world adapter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
import logging
import random

from ..ai.adapter import manhattan
from ..ai.types import AbilityKind, AgentConfig, EnemyDescriptor, EnemyType
from .component_manager import ComponentManager
from .components import Health, Hostile, PartyMember, Position
from .entity_manager import EntityManager

logger = logging.getLogger(__name__)


@dataclass
class Character:
    """Live handle to a party member; reads through to its Position."""

    entity_id: int
    position: Position

    @property
    def x(self) -> int:
        return self.position.x

    @property
    def y(self) -> int:
        return self.position.y


@dataclass(slots=True)
class Intent:
    """Record of a movement intent issued against the world."""

    kind: str
    actor_id: int
    target_id: int | None


@dataclass(slots=True)
class AbilityUse:
    """Record of an ability the world was asked to trigger."""

    caster_id: int
    ability_id: str
    kind: AbilityKind


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


class GridWorld:
    """Tile grid holding a party, its leader and hostile entities.

    Movement intents step one tile immediately; there is no pathfinding or
    collision beyond the grid bounds. Every intent and ability use is kept in
    :attr:`intents` and :attr:`ability_uses` for inspection.
    """

    def __init__(self, size: Tuple[int, int] = (40, 40), seed: int | None = None) -> None:
        self.size: Tuple[int, int] = size
        self.entity_manager = EntityManager()
        self.component_manager = ComponentManager()
        self._party: List[int] = []
        self._leader_id: Optional[int] = None
        self._rng = random.Random(seed)

        self.intents: List[Intent] = []
        self.ability_uses: List[AbilityUse] = []
        # effect id -> HP restored on the target
        self.support_effects: Dict[str, int] = {}

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------
    def spawn_member(
        self,
        name: str,
        x: int,
        y: int,
        hp: int = 100,
        config: AgentConfig | None = None,
        leader: bool = False,
    ) -> int:
        """Add a party member and return its entity id."""

        eid = self.entity_manager.create_entity()
        cm = self.component_manager
        cm.add_component(eid, Position(x, y))
        cm.add_component(eid, Health(cur=hp, max=hp))
        cm.add_component(eid, PartyMember(name=name, config=config))
        self._party.append(eid)
        if leader:
            self._leader_id = eid
        return eid

    def spawn_enemy(
        self, x: int, y: int, enemy_type: EnemyType = EnemyType.MELEE, hp: int = 50
    ) -> int:
        eid = self.entity_manager.create_entity()
        cm = self.component_manager
        cm.add_component(eid, Position(x, y))
        cm.add_component(eid, Health(cur=hp, max=hp))
        cm.add_component(eid, Hostile(enemy_type=enemy_type))
        return eid

    def remove_entity(self, entity_id: int) -> None:
        if not self.entity_manager.has_entity(entity_id):
            raise ValueError(f"Entity {entity_id} does not exist")
        self.leave_party(entity_id)
        self.entity_manager.destroy_entity(entity_id)
        self.component_manager.clear_entity(entity_id)

    def leave_party(self, entity_id: int) -> None:
        if entity_id in self._party:
            self._party.remove(entity_id)
        if self._leader_id == entity_id:
            self._leader_id = None

    def set_leader(self, entity_id: int) -> None:
        if entity_id not in self._party:
            raise ValueError(f"Entity {entity_id} is not in the party")
        self._leader_id = entity_id

    def set_config(self, entity_id: int, config: AgentConfig | None) -> None:
        member = self.component_manager.get_component(entity_id, PartyMember)
        if member is None:
            raise ValueError(f"Entity {entity_id} is not a party member")
        member.config = config

    def set_hp(self, entity_id: int, hp: int) -> None:
        health = self.component_manager.get_component(entity_id, Health)
        if health is None:
            raise ValueError(f"Entity {entity_id} has no health")
        health.cur = max(0, min(hp, health.max))

    def move_to(self, entity_id: int, x: int, y: int) -> None:
        pos = self.component_manager.get_component(entity_id, Position)
        if pos is None:
            raise ValueError(f"Entity {entity_id} has no position")
        pos.x, pos.y = self._clamp(x, y)

    def position_of(self, entity_id: int) -> Optional[Tuple[int, int]]:
        pos = self.component_manager.get_component(entity_id, Position)
        return (pos.x, pos.y) if pos is not None else None

    def clear_records(self) -> None:
        self.intents.clear()
        self.ability_uses.clear()

    # ------------------------------------------------------------------
    # Roster and vitals
    # ------------------------------------------------------------------
    def leader(self) -> Optional[Character]:
        if self._leader_id is None:
            return None
        return self.character_for_agent(self._leader_id)

    def leader_id(self) -> Optional[int]:
        return self._leader_id

    def party_ids(self) -> List[int]:
        return list(self._party)

    def config_for_agent(self, agent_id: int) -> Optional[AgentConfig]:
        member = self.component_manager.get_component(agent_id, PartyMember)
        return member.config if member is not None else None

    def hp_percent(self, agent_id: int) -> Optional[float]:
        if agent_id not in self._party:
            return None
        health = self.component_manager.get_component(agent_id, Health)
        if health is None or not health.alive:
            return None
        return health.percent

    # ------------------------------------------------------------------
    # Perception
    # ------------------------------------------------------------------
    def character_for_agent(self, agent_id: int) -> Optional[Character]:
        if agent_id not in self._party:
            return None
        cm = self.component_manager
        pos = cm.get_component(agent_id, Position)
        health = cm.get_component(agent_id, Health)
        if pos is None or (health is not None and not health.alive):
            return None
        return Character(agent_id, pos)

    def enemies_in_zone(self) -> List[EnemyDescriptor]:
        cm = self.component_manager
        enemies: List[EnemyDescriptor] = []
        for eid, hostile in cm.entities_with(Hostile):
            descriptor = self._describe_enemy(eid, hostile)
            if descriptor is not None:
                enemies.append(descriptor)
        return enemies

    def locate_enemy(self, enemy_id: int) -> Optional[EnemyDescriptor]:
        hostile = self.component_manager.get_component(enemy_id, Hostile)
        if hostile is None:
            return None
        return self._describe_enemy(enemy_id, hostile)

    def _describe_enemy(self, eid: int, hostile: Hostile) -> Optional[EnemyDescriptor]:
        cm = self.component_manager
        pos = cm.get_component(eid, Position)
        health = cm.get_component(eid, Health)
        if pos is None or (health is not None and not health.alive):
            return None
        return EnemyDescriptor(eid, pos.x, pos.y, hostile.enemy_type)

    def distance(self, a: Any, b: Any) -> int:
        return manhattan(a, b)

    # ------------------------------------------------------------------
    # Movement intents
    # ------------------------------------------------------------------
    def move_toward(self, entity: Any, target: Any) -> None:
        self._record("move_toward", entity, target)
        self._step(entity, target, toward=True)

    def move_away(self, entity: Any, target: Any) -> None:
        self._record("move_away", entity, target)
        self._step(entity, target, toward=False)

    def sidestep(self, entity: Any, target: Any) -> None:
        """Step one tile perpendicular to the line toward ``target``."""

        self._record("sidestep", entity, target)
        pos = self._position(entity)
        if pos is None or target is None:
            return
        dx = target.x - pos.x
        dy = target.y - pos.y
        offset = 1 if self._rng.random() < 0.5 else -1
        if abs(dx) > abs(dy):
            pos.x, pos.y = self._clamp(pos.x, pos.y + offset)
        else:
            pos.x, pos.y = self._clamp(pos.x + offset, pos.y)

    def _step(self, entity: Any, target: Any, toward: bool) -> None:
        pos = self._position(entity)
        if pos is None or target is None:
            return
        dx = target.x - pos.x
        dy = target.y - pos.y
        if not toward:
            dx, dy = -dx, -dy
        if abs(dx) > abs(dy):
            nx, ny = pos.x + _sign(dx), pos.y
        elif dy != 0:
            nx, ny = pos.x, pos.y + _sign(dy)
        else:
            return
        pos.x, pos.y = self._clamp(nx, ny)
        logger.debug("Entity %s stepped to (%s,%s)", getattr(entity, "entity_id", None), pos.x, pos.y)

    def _position(self, entity: Any) -> Optional[Position]:
        entity_id = getattr(entity, "entity_id", None)
        if entity_id is None:
            return None
        return self.component_manager.get_component(entity_id, Position)

    def _clamp(self, x: int, y: int) -> Tuple[int, int]:
        width, height = self.size
        return min(max(x, 0), width - 1), min(max(y, 0), height - 1)

    def _record(self, kind: str, entity: Any, target: Any) -> None:
        actor_id = getattr(entity, "entity_id", None)
        if actor_id is None:
            return
        self.intents.append(Intent(kind, actor_id, getattr(target, "entity_id", None)))

    # ------------------------------------------------------------------
    # Abilities
    # ------------------------------------------------------------------
    def use_ability(self, entity: Any, ability_id: str, kind: AbilityKind) -> bool:
        caster_id = getattr(entity, "entity_id", None)
        if caster_id is None or not ability_id:
            return False
        self.ability_uses.append(AbilityUse(caster_id, ability_id, kind))
        logger.debug("Entity %s used %s (%s)", caster_id, ability_id, kind.value)
        return True

    def apply_support_effect(
        self, user_agent_id: int, target_agent_id: int, effect_id: str
    ) -> bool:
        amount = self.support_effects.get(effect_id)
        if amount is None:
            logger.warning("Unknown support effect %s", effect_id)
            return False
        health = self.component_manager.get_component(target_agent_id, Health)
        if health is None or not health.alive:
            return False
        health.cur = min(health.max, health.cur + amount)
        logger.debug(
            "Entity %s applied %s to %s (hp %s/%s)",
            user_agent_id, effect_id, target_agent_id, health.cur, health.max,
        )
        return True


__all__ = ["Character", "Intent", "AbilityUse", "GridWorld"]
