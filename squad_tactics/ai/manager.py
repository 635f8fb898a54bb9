"""Squad-wide tick dispatcher owning the blackboard and controllers."""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Optional
import logging
import random

from ..config import TacticsConfig
from .adapter import WorldAdapter
from .blackboard import Blackboard
from .controller import Controller

logger = logging.getLogger(__name__)


class Manager:
    """Keep one :class:`Controller` per AI-enabled party member and tick them.

    Each :meth:`tick` refreshes the blackboard exactly once before any
    controller runs, so every controller in a tick sees the same enemy
    snapshot and combat flag.
    """

    def __init__(
        self,
        world: WorldAdapter,
        config: TacticsConfig | None = None,
        rng: random.Random | None = None,
        seed: int | None = None,
    ) -> None:
        self.world = world
        self.config = config or TacticsConfig()
        self._rng = rng if rng is not None else random.Random(seed)
        self.blackboard = Blackboard(world, self.config)
        self._controllers: Dict[int, Controller] = {}

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def controllers(self) -> Mapping[int, Controller]:
        return MappingProxyType(self._controllers)

    def controller_for(self, agent_id: int) -> Optional[Controller]:
        return self._controllers.get(agent_id)

    # ------------------------------------------------------------------
    # Roster
    # ------------------------------------------------------------------
    def sync_roster(self) -> None:
        """Create, refresh and drop controllers to match the current party.

        The leader never gets a controller. Safe to call every tick.
        """

        if not self.config.enabled:
            return

        party = list(self.world.party_ids())
        leader_id = self.world.leader_id()

        for agent_id in party:
            if agent_id == leader_id:
                self._drop(agent_id, "is the leader")
                continue
            cfg = self.world.config_for_agent(agent_id)
            if cfg is None or not cfg.enabled:
                self._drop(agent_id, "has AI disabled")
                continue
            controller = self._controllers.get(agent_id)
            if controller is None:
                self._controllers[agent_id] = Controller(
                    agent_id, cfg, self.blackboard, self.world, self.config, rng=self._rng
                )
                logger.info(
                    "[Tick %s] Controller created for agent %s (%s)",
                    self.blackboard.tick, agent_id, cfg.role.value,
                )
            else:
                controller.apply_config(cfg)

        members = set(party)
        for agent_id in list(self._controllers):
            if agent_id not in members:
                self._drop(agent_id, "left the party")

    def _drop(self, agent_id: int, reason: str) -> None:
        if self._controllers.pop(agent_id, None) is not None:
            logger.info(
                "[Tick %s] Controller removed for agent %s: %s",
                self.blackboard.tick, agent_id, reason,
            )

    # ------------------------------------------------------------------
    # Tick dispatch
    # ------------------------------------------------------------------
    def tick(self) -> None:
        """Refresh the blackboard then update every controller once."""

        if not self.config.enabled:
            return

        self.blackboard.refresh()
        if self.config.sync_every_tick:
            try:
                self.sync_roster()
            except Exception:
                logger.exception(
                    "[Tick %s] Roster sync failed; keeping the previous roster",
                    self.blackboard.tick,
                )

        for agent_id, controller in list(self._controllers.items()):
            try:
                controller.update()
            except Exception:
                logger.exception(
                    "[Tick %s] Controller for agent %s failed; skipping this tick",
                    self.blackboard.tick, agent_id,
                )

    def reset_zone(self) -> None:
        """Discard all cached perception and controllers after a zone change."""

        logger.info("[Tick %s] Zone reset: clearing squad AI state", self.blackboard.tick)
        self.blackboard = Blackboard(self.world, self.config)
        self._controllers.clear()
        self.sync_roster()


__all__ = ["Manager"]
