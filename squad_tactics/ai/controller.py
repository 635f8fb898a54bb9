"""Per-agent finite-state controller."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional
import logging
import random

from ..config import TacticsConfig
from .adapter import WorldAdapter
from .behaviors import ROLE_BEHAVIORS
from .blackboard import Blackboard
from .healer_script import HealerScript
from .target_selector import select_target
from .types import (
    AbilityKind,
    AgentConfig,
    AgentState,
    EnemyDescriptor,
    Role,
    Stance,
    TargetSnapshot,
)

logger = logging.getLogger(__name__)


class Controller:
    """Drive one squad agent through FOLLOW/ACQUIRE/ACT/RECOVER/HOLD.

    The controller only decides every ``think_interval`` ticks. The first
    decision is offset by ``think_offset`` (drawn from ``rng`` when not
    given) so that agents created together do not all think on the same
    tick.
    """

    def __init__(
        self,
        agent_id: int,
        config: AgentConfig,
        blackboard: Blackboard,
        world: WorldAdapter,
        tactics: TacticsConfig | None = None,
        rng: random.Random | None = None,
        think_offset: int | None = None,
    ) -> None:
        self.agent_id = agent_id
        self.blackboard = blackboard
        self.world = world
        self.tactics = tactics or TacticsConfig()
        self.config = config
        self.healer: Optional[HealerScript] = None

        self.state: AgentState = AgentState.FOLLOW
        self.target: Optional[TargetSnapshot] = None
        if think_offset is None:
            think_offset = (rng or random.Random()).randrange(self.tactics.think_interval)
        self.think_countdown: int = min(max(think_offset, 0), self.tactics.think_interval - 1)

        self._handlers: Dict[AgentState, Callable[[Any], None]] = {
            AgentState.FOLLOW: self._think_follow,
            AgentState.HOLD: self._think_hold,
            AgentState.RECOVER: self._think_recover,
            AgentState.ACQUIRE: self._think_acquire,
            AgentState.ACT: self._think_act,
        }
        self.apply_config(config)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    @property
    def role(self) -> Role:
        return self.config.role

    def apply_config(self, config: AgentConfig) -> None:
        """Swap in a refreshed profile, keeping the current state."""

        self.config = config
        if config.role is Role.HEALER:
            if self.healer is None:
                self.healer = HealerScript()
        else:
            self.healer = None

    def idle_state(self) -> AgentState:
        return AgentState.HOLD if self.config.stance is Stance.HOLD else AgentState.FOLLOW

    # ------------------------------------------------------------------
    # Tick entry point
    # ------------------------------------------------------------------
    def update(self) -> bool:
        """Advance the think countdown; return ``True`` if the agent thought."""

        interval = self.tactics.think_interval
        if self.think_countdown > interval - 1:
            self.think_countdown = interval - 1
        if self.think_countdown > 0:
            self.think_countdown -= 1
            return False
        self.think_countdown = interval - 1
        self.think()
        return True

    def think(self) -> None:
        """Run one decision: leash check, healer window reset, state handler."""

        me = self.world.character_for_agent(self.agent_id)
        leader = self.world.leader()
        if me is None or leader is None:
            logger.debug(
                "[Tick %s] Agent %s: character or leader unavailable, skipping think",
                self.blackboard.tick, self.agent_id,
            )
            return

        if self.world.distance(me, leader) > self.config.leash_radius:
            if self.state is not AgentState.RECOVER:
                logger.info(
                    "[Tick %s] Agent %s leashed from %s, recovering to leader",
                    self.blackboard.tick, self.agent_id, self.state.value,
                )
            self.state = AgentState.RECOVER
            self.target = None

        if self.healer is not None and not self.blackboard.combat_active:
            self.healer.reset()

        previous = self.state
        self._handlers[self.state](me)
        if self.state is not previous:
            logger.debug(
                "[Tick %s] Agent %s (%s): %s -> %s",
                self.blackboard.tick, self.agent_id, self.role.value,
                previous.value, self.state.value,
            )

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------
    def _think_follow(self, me: Any) -> None:
        if self.config.stance is Stance.HOLD:
            self.state = AgentState.HOLD
            return
        if self.blackboard.combat_active:
            self.state = AgentState.ACQUIRE
            return
        leader = self.world.leader()
        if self.world.distance(me, leader) > self.tactics.follow_distance:
            self.world.move_toward(me, leader)

    def _think_hold(self, me: Any) -> None:
        if self.config.stance is not Stance.HOLD:
            self.state = AgentState.FOLLOW
            return
        radius = self.tactics.hold_defend_radius
        for enemy in self.blackboard.enemies:
            if self.world.distance(me, enemy) <= radius:
                self.set_target(enemy)
                self.state = AgentState.ACT
                return

    def _think_recover(self, me: Any) -> None:
        leader = self.world.leader()
        self.world.move_toward(me, leader)
        if self.world.distance(me, leader) <= self.tactics.recover_distance:
            self.state = self.idle_state()

    def _think_acquire(self, me: Any) -> None:
        if self.role is Role.HEALER:
            self.state = AgentState.ACT
            return
        if self.acquire_target(me, self.role) is None:
            self.state = self.idle_state()
            return
        self.state = AgentState.ACT

    def _think_act(self, me: Any) -> None:
        ROLE_BEHAVIORS[self.role](self, me)

    # ------------------------------------------------------------------
    # Targeting
    # ------------------------------------------------------------------
    def set_target(self, enemy: EnemyDescriptor) -> None:
        self.target = TargetSnapshot.of(enemy)

    def acquire_target(self, me: Any, role: Role) -> Optional[EnemyDescriptor]:
        """Select a fresh target from the blackboard and remember it."""

        enemy = select_target(role, self.blackboard.enemies, me, self.world.distance)
        if enemy is None:
            self.target = None
            return None
        self.set_target(enemy)
        return enemy

    def resolve_target(self) -> Optional[EnemyDescriptor]:
        """Look the current target up again; drop it if it has vanished."""

        if self.target is None:
            return None
        enemy = self.world.locate_enemy(self.target.entity_id)
        if enemy is None:
            logger.debug(
                "[Tick %s] Agent %s: target %s vanished",
                self.blackboard.tick, self.agent_id, self.target.entity_id,
            )
            self.target = None
            return None
        self.target.refresh(enemy)
        return enemy

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------
    def use_ability(self, entity: Any, ability_id: Optional[str], kind: AbilityKind) -> bool:
        """Ask the world to trigger ``ability_id``; failures are logged only."""

        if not ability_id:
            return False
        try:
            dispatched = bool(self.world.use_ability(entity, ability_id, kind))
        except Exception:
            logger.warning(
                "[Tick %s] Agent %s: ability %s (%s) raised",
                self.blackboard.tick, self.agent_id, ability_id, kind.value,
                exc_info=True,
            )
            return False
        if not dispatched:
            logger.warning(
                "[Tick %s] Agent %s: ability %s (%s) was not dispatched",
                self.blackboard.tick, self.agent_id, ability_id, kind.value,
            )
        return dispatched

    def apply_support_effect(self, target_agent_id: int, effect_id: str) -> bool:
        try:
            applied = bool(
                self.world.apply_support_effect(self.agent_id, target_agent_id, effect_id)
            )
        except Exception:
            logger.warning(
                "[Tick %s] Agent %s: support effect %s on %s raised",
                self.blackboard.tick, self.agent_id, effect_id, target_agent_id,
                exc_info=True,
            )
            return False
        if not applied:
            logger.warning(
                "[Tick %s] Agent %s: support effect %s on %s not applied",
                self.blackboard.tick, self.agent_id, effect_id, target_agent_id,
            )
        return applied


__all__ = ["Controller"]
