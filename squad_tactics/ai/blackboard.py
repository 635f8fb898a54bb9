"""Shared per-zone perception cache."""

from __future__ import annotations

from typing import List
import logging

from ..config import TacticsConfig
from .adapter import WorldAdapter
from .types import EnemyDescriptor

logger = logging.getLogger(__name__)


class Blackboard:
    """Cache of known enemies plus the derived combat flag.

    Enemies are re-scanned every ``enemy_scan_interval`` ticks while the
    combat flag is recomputed every tick from the most recent scan, so the
    flag may lag enemy movement by up to one scan interval.
    """

    def __init__(self, world: WorldAdapter, config: TacticsConfig | None = None) -> None:
        self.world = world
        self.config = config or TacticsConfig()
        self.tick: int = 0
        self.enemies: List[EnemyDescriptor] = []
        self.combat_active: bool = False
        self.combat_start_tick: int = 0
        self._scan_countdown: int = 0

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------
    def refresh(self) -> None:
        """Advance one tick, rescanning enemies when the countdown elapses."""

        self.tick += 1

        self._scan_countdown -= 1
        if self._scan_countdown <= 0:
            self._scan_countdown = self.config.enemy_scan_interval
            self.enemies = self._scan()

        active = self._any_enemy_near_leader()
        if active and not self.combat_active:
            self.combat_start_tick = self.tick
            logger.info(
                "[Tick %s] Blackboard: combat started (%d enemies known)",
                self.tick, len(self.enemies),
            )
        elif not active and self.combat_active:
            logger.info("[Tick %s] Blackboard: combat ended", self.tick)
        self.combat_active = active

    def _scan(self) -> List[EnemyDescriptor]:
        try:
            enemies = list(self.world.enemies_in_zone() or [])
        except Exception:
            logger.warning(
                "[Tick %s] Blackboard: enemy scan failed; treating zone as empty",
                self.tick, exc_info=True,
            )
            return []
        logger.debug("[Tick %s] Blackboard: scanned %d enemies", self.tick, len(enemies))
        return enemies

    def _any_enemy_near_leader(self) -> bool:
        radius = self.config.global_aggro_radius
        try:
            leader = self.world.leader()
            if leader is None:
                return False
            return any(self.world.distance(leader, e) <= radius for e in self.enemies)
        except Exception:
            logger.warning(
                "[Tick %s] Blackboard: combat check failed; treating squad as out of combat",
                self.tick, exc_info=True,
            )
            return False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def ticks_since_combat_start(self) -> int:
        """Ticks elapsed in the current combat window, or ``-1`` outside combat."""

        if not self.combat_active:
            return -1
        return self.tick - self.combat_start_tick


__all__ = ["Blackboard"]
