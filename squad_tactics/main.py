"""Demo bootstrap: load a squad from YAML and run the tactics loop."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple
import argparse
import logging
import random

from .ai.manager import Manager
from .ai.types import AgentConfig, EnemyType
from .config import CONFIG, Config, PARTY_PROFILES_PATH, load_config, load_party_profiles
from .core.time_manager import TimeManager
from .core.world import GridWorld


log_level_str = CONFIG.logging.global_level
numeric_level = getattr(logging, log_level_str, logging.INFO)
logging.basicConfig(
    level=numeric_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)
logger = logging.getLogger(__name__)

# Apply per-module levels if defined
if CONFIG.logging.module_levels:
    for module_name, level_str in CONFIG.logging.module_levels.items():
        module_numeric_level = getattr(logging, level_str.upper(), None)
        if module_numeric_level is not None:
            logging.getLogger(module_name).setLevel(module_numeric_level)
        else:
            logger.warning("Invalid log level '%s' for module '%s' in config.", level_str, module_name)


def _position(entry: Dict[str, Any]) -> Tuple[int, int]:
    x, y = entry.get("position", (0, 0))
    return int(x), int(y)


def populate_world(world: GridWorld, scenario: Dict[str, List[Dict[str, Any]]], cfg: Config) -> None:
    """Spawn the party and enemies described by ``scenario`` into ``world``."""

    for entry in scenario.get("party", []):
        x, y = _position(entry)
        is_leader = bool(entry.get("leader", False))
        agent_cfg = None if is_leader else AgentConfig.from_mapping(entry, cfg.agent_defaults)
        eid = world.spawn_member(
            str(entry.get("name", "member")),
            x,
            y,
            hp=int(entry.get("hp", 100)),
            config=agent_cfg,
            leader=is_leader,
        )
        logger.info(
            "[Bootstrap] Party member %s '%s' at (%s,%s)%s",
            eid, entry.get("name"), x, y,
            " [leader]" if is_leader else f" role={agent_cfg.role.value}",
        )

    for entry in scenario.get("enemies", []):
        x, y = _position(entry)
        world.spawn_enemy(
            x, y, EnemyType.parse(entry.get("type")), hp=int(entry.get("hp", 50))
        )

    for entry in scenario.get("party", []):
        for key in ("healEffectId", "buffEffectId"):
            effect = entry.get(key)
            if effect:
                world.support_effects.setdefault(str(effect), 15)


def bootstrap(
    config_path: str | Path | None = None,
    party_path: str | Path | None = None,
) -> Tuple[GridWorld, Manager, Config]:
    """Build a populated world and a synced :class:`Manager`."""

    cfg = load_config(Path(config_path)) if config_path else CONFIG
    if party_path is None:
        configured = (cfg.paths or {}).get("party_profiles")
        candidate = Path(configured) if configured else PARTY_PROFILES_PATH
        party_path = candidate if candidate.is_file() else PARTY_PROFILES_PATH

    world = GridWorld(cfg.world.size, seed=cfg.world.seed)
    populate_world(world, load_party_profiles(Path(party_path)), cfg)

    manager = Manager(world, cfg.tactics, seed=cfg.world.seed)
    manager.sync_roster()
    logger.info(
        "[Bootstrap] %d controllers active, think interval %s, scan interval %s",
        len(manager.controllers), cfg.tactics.think_interval, cfg.tactics.enemy_scan_interval,
    )
    return world, manager, cfg


def _advance_enemies(world: GridWorld, rng: random.Random) -> None:
    """Let every enemy shuffle one tile toward the leader now and then."""

    leader = world.leader()
    if leader is None:
        return
    for enemy in world.enemies_in_zone():
        if rng.random() < 0.25:
            world.move_toward(enemy, leader)


def run(
    world: GridWorld, manager: Manager, ticks: int, tm: TimeManager, seed: int | None = None
) -> None:
    rng = random.Random(seed)
    while tm.tick_counter < ticks:
        _advance_enemies(world, rng)
        manager.tick()
        tm.sleep_until_next_tick()

    for agent_id, controller in manager.controllers.items():
        logger.info(
            "Agent %s (%s) finished in %s at %s",
            agent_id, controller.role.value, controller.state.value,
            world.position_of(agent_id),
        )
    logger.info("Ran %d ticks, %d ability uses", ticks, len(world.ability_uses))


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Run the squad tactics demo.")
    parser.add_argument("--ticks", type=int, default=300)
    parser.add_argument("--config", default=None)
    parser.add_argument("--party", default=None)
    parser.add_argument("--realtime", action="store_true")
    args = parser.parse_args(argv)

    world, manager, cfg = bootstrap(args.config, args.party)
    tm = TimeManager(cfg.world.tick_rate, realtime=args.realtime)
    run(world, manager, args.ticks, tm, seed=cfg.world.seed)


if __name__ == "__main__":
    main()
