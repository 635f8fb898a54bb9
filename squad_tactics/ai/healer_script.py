"""Heal and buff sequencing for HEALER agents."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional, Set, Tuple
import logging

from .types import AbilityKind, AgentState, Role

if TYPE_CHECKING:
    from .controller import Controller

logger = logging.getLogger(__name__)


class HealerAction(str, Enum):
    """Outcome of one healer decision."""

    CRITICAL_HEAL = "CRITICAL_HEAL"
    HEAL = "HEAL"
    BUFF = "BUFF"
    DEFEND = "DEFEND"
    REPOSITION = "REPOSITION"


class HealerScript:
    """Per-healer opening rotation and triage state.

    ``buff_queue`` is rebuilt once per combat window, the first time the
    healer acts after the blackboard records a new combat start tick.
    """

    def __init__(self) -> None:
        self.buff_queue: List[int] = []
        self.buffed: Set[int] = set()
        self.combat_start_seen: Optional[int] = None
        self.last_action: Optional[HealerAction] = None

    # ------------------------------------------------------------------
    # Combat window bookkeeping
    # ------------------------------------------------------------------
    def reset(self) -> None:
        """Forget buff progress; called on every think outside combat."""

        self.buff_queue = []
        self.buffed = set()
        self.combat_start_seen = None

    def begin_window(self, controller: "Controller") -> bool:
        """Rebuild the buff queue if a new combat window started.

        Returns ``True`` when the queue was rebuilt.
        """

        bb = controller.blackboard
        if not bb.combat_active or bb.combat_start_tick == self.combat_start_seen:
            return False
        self.combat_start_seen = bb.combat_start_tick
        self.buffed = set()
        self.buff_queue = build_buff_queue(controller.world)
        logger.debug(
            "[Tick %s] Healer %s: buff queue for combat window %s -> %s",
            bb.tick, controller.agent_id, bb.combat_start_tick, self.buff_queue,
        )
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def next_buff_target(self, world: Any) -> Optional[int]:
        for agent_id in self.buff_queue:
            if agent_id in self.buffed:
                continue
            if world.hp_percent(agent_id) is None:
                continue
            return agent_id
        return None

    # ------------------------------------------------------------------
    # Decision
    # ------------------------------------------------------------------
    def act(self, controller: "Controller", me: Any) -> AgentState:
        """Run one healer decision and return the controller's next state."""

        self.begin_window(controller)

        world = controller.world
        bb = controller.blackboard
        tactics = controller.tactics
        cfg = controller.config

        lowest = lowest_hp_ally(world)
        if lowest is not None:
            ally_id, pct = lowest
            if pct <= tactics.critical_threshold:
                self.last_action = HealerAction.CRITICAL_HEAL
                self._heal(controller, me, ally_id)
                return AgentState.ACT
            if pct <= tactics.heal_threshold:
                self.last_action = HealerAction.HEAL
                self._heal(controller, me, ally_id)
                return AgentState.ACT

        if (
            bb.combat_active
            and cfg.buff_ability
            and bb.ticks_since_combat_start() <= tactics.buff_window_ticks
        ):
            ally_id = self.next_buff_target(world)
            if ally_id is not None:
                self.last_action = HealerAction.BUFF
                self._buff(controller, me, ally_id)
                return AgentState.ACT

        threat = next(
            (
                e
                for e in bb.enemies
                if world.distance(me, e) <= tactics.healer_threat_radius
            ),
            None,
        )
        if threat is not None:
            self.last_action = HealerAction.DEFEND
            if cfg.defend_ability:
                controller.use_ability(me, cfg.defend_ability, AbilityKind.DEFEND)
            elif cfg.attack_ability:
                controller.use_ability(me, cfg.attack_ability, AbilityKind.ATTACK)
            else:
                world.move_away(me, threat)
            return AgentState.ACT

        self.last_action = HealerAction.REPOSITION
        leader = world.leader()
        if world.distance(me, leader) > tactics.healer_reposition_distance:
            world.move_toward(me, leader)
        return AgentState.ACQUIRE

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def _in_range_of(self, controller: "Controller", me: Any, ally_id: int) -> Optional[bool]:
        """Close in on ``ally_id``; ``None`` if the ally cannot be resolved."""

        world = controller.world
        ally = world.character_for_agent(ally_id)
        if ally is None:
            logger.debug(
                "Healer %s: ally %s has no character this tick",
                controller.agent_id, ally_id,
            )
            return None
        if world.distance(me, ally) > controller.config.preferred_range:
            world.move_toward(me, ally)
            return False
        return True

    def _heal(self, controller: "Controller", me: Any, ally_id: int) -> None:
        cfg = controller.config
        if not cfg.heal_ability and not cfg.attack_ability:
            return
        if not self._in_range_of(controller, me, ally_id):
            return
        if cfg.heal_ability:
            controller.use_ability(me, cfg.heal_ability, AbilityKind.HEAL)
        if cfg.heal_effect:
            controller.apply_support_effect(ally_id, cfg.heal_effect)
        logger.info(
            "[Tick %s] Healer %s heal -> %s",
            controller.blackboard.tick, controller.agent_id, ally_id,
        )

    def _buff(self, controller: "Controller", me: Any, ally_id: int) -> None:
        cfg = controller.config
        if not self._in_range_of(controller, me, ally_id):
            return
        controller.use_ability(me, cfg.buff_ability, AbilityKind.BUFF)
        if cfg.buff_effect:
            controller.apply_support_effect(ally_id, cfg.buff_effect)
        self.buffed.add(ally_id)
        logger.info(
            "[Tick %s] Healer %s buff -> %s",
            controller.blackboard.tick, controller.agent_id, ally_id,
        )


def lowest_hp_ally(world: Any) -> Optional[Tuple[int, float]]:
    """Return ``(agent_id, hp_percent)`` of the most wounded living ally."""

    best: Optional[Tuple[int, float]] = None
    for agent_id in world.party_ids():
        pct = world.hp_percent(agent_id)
        if pct is None:
            continue
        if best is None or pct < best[1]:
            best = (agent_id, pct)
    return best


def build_buff_queue(world: Any) -> List[int]:
    """Opening buff order: leader, melee and tanks, ranged, then healers."""

    leader_id = world.leader_id()
    melee: List[int] = []
    ranged: List[int] = []
    healers: List[int] = []
    for agent_id in world.party_ids():
        cfg = world.config_for_agent(agent_id)
        role = cfg.role if cfg is not None else Role.MELEE
        if role is Role.HEALER:
            healers.append(agent_id)
        elif role is Role.RANGED:
            ranged.append(agent_id)
        else:
            melee.append(agent_id)

    queue: List[int] = []
    if leader_id is not None:
        queue.append(leader_id)
    for group in (melee, ranged, healers):
        queue.extend(agent_id for agent_id in group if agent_id != leader_id)
    return queue


__all__ = ["HealerAction", "HealerScript", "build_buff_queue", "lowest_hp_ally"]
