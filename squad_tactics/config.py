"""Configuration loader for squad_tactics."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


CONFIG_PATH = Path(__file__).resolve().parents[1] / "config.yaml"
PARTY_PROFILES_PATH = Path(__file__).resolve().parent / "data" / "party.yaml"


@dataclass
class TacticsConfig:
    """Global tunables shared by the blackboard and every controller."""

    enabled: bool = True
    think_interval: int = 8
    enemy_scan_interval: int = 15
    global_aggro_radius: int = 6
    heal_threshold: float = 70.0
    critical_threshold: float = 35.0
    buff_window_ticks: int = 300
    sync_every_tick: bool = True
    follow_distance: int = 2
    recover_distance: int = 3
    hold_defend_radius: int = 3
    healer_threat_radius: int = 2
    healer_reposition_distance: int = 3


@dataclass
class AgentDefaults:
    """Fallback distances for agents whose profile omits them."""

    aggro_radius: int = 6
    leash_radius: int = 10
    preferred_range: int = 4
    keep_distance: int = 4
    protect_radius: int = 5


@dataclass
class WorldConfig:
    """Settings for the in-memory demo world."""

    size: tuple[int, int] = (40, 40)
    tick_rate: float = 20.0
    seed: Optional[int] = None


@dataclass
class LoggingConfig:
    """Root and per-module log levels."""

    global_level: str = "INFO"
    module_levels: Dict[str, str] = field(default_factory=dict)


@dataclass
class Config:
    """Top level configuration dataclass."""

    tactics: TacticsConfig
    agent_defaults: AgentDefaults
    world: WorldConfig
    logging: LoggingConfig
    paths: Optional[Dict[str, str]] = None


def as_flag(value: Any) -> bool:
    """Read a YAML or profile flag; strings like ``"false"`` or ``"off"`` are false."""

    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "on", "1")
    return bool(value)


def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def _non_negative_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 0 else default


def _percent(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return min(max(number, 0.0), 100.0)


def _parse_tactics(data: dict[str, Any]) -> TacticsConfig:
    base = TacticsConfig()
    return TacticsConfig(
        enabled=as_flag(data.get("enabled", base.enabled)),
        think_interval=_positive_int(data.get("think_interval"), base.think_interval),
        enemy_scan_interval=_positive_int(
            data.get("enemy_scan_interval"), base.enemy_scan_interval
        ),
        global_aggro_radius=_non_negative_int(
            data.get("global_aggro_radius"), base.global_aggro_radius
        ),
        heal_threshold=_percent(data.get("heal_threshold"), base.heal_threshold),
        critical_threshold=_percent(
            data.get("critical_threshold"), base.critical_threshold
        ),
        buff_window_ticks=_non_negative_int(
            data.get("buff_window_ticks"), base.buff_window_ticks
        ),
        sync_every_tick=as_flag(data.get("sync_every_tick", base.sync_every_tick)),
        follow_distance=_non_negative_int(
            data.get("follow_distance"), base.follow_distance
        ),
        recover_distance=_non_negative_int(
            data.get("recover_distance"), base.recover_distance
        ),
        hold_defend_radius=_non_negative_int(
            data.get("hold_defend_radius"), base.hold_defend_radius
        ),
        healer_threat_radius=_non_negative_int(
            data.get("healer_threat_radius"), base.healer_threat_radius
        ),
        healer_reposition_distance=_non_negative_int(
            data.get("healer_reposition_distance"), base.healer_reposition_distance
        ),
    )


def _parse_agent_defaults(data: dict[str, Any]) -> AgentDefaults:
    base = AgentDefaults()
    return AgentDefaults(
        aggro_radius=_non_negative_int(data.get("aggro_radius"), base.aggro_radius),
        leash_radius=_non_negative_int(data.get("leash_radius"), base.leash_radius),
        preferred_range=_non_negative_int(
            data.get("preferred_range"), base.preferred_range
        ),
        keep_distance=_non_negative_int(data.get("keep_distance"), base.keep_distance),
        protect_radius=_non_negative_int(
            data.get("protect_radius"), base.protect_radius
        ),
    )


def _parse_config(data: dict[str, Any]) -> Config:
    """Convert raw ``data`` into :class:`Config`."""

    tactics = _parse_tactics(data.get("tactics") or {})
    agent_defaults = _parse_agent_defaults(data.get("agent_defaults") or {})

    world_data = data.get("world") or {}
    seed = world_data.get("seed")
    world = WorldConfig(
        size=tuple(world_data.get("size", [40, 40])),
        tick_rate=float(world_data.get("tick_rate", 20.0)),
        seed=int(seed) if seed is not None else None,
    )

    logging_data = data.get("logging") or {}
    logging_cfg = LoggingConfig(
        global_level=str(logging_data.get("global_level", "INFO")).upper(),
        module_levels=dict(logging_data.get("module_levels") or {}),
    )

    return Config(
        tactics=tactics,
        agent_defaults=agent_defaults,
        world=world,
        logging=logging_cfg,
        paths=data.get("paths"),
    )


def load_config(path: Path = CONFIG_PATH) -> Config:
    """Load configuration from ``path`` and return a :class:`Config`."""

    if path.is_file():
        raw = yaml.safe_load(path.read_text()) or {}
    else:
        raw = {}
    return _parse_config(raw)


def load_party_profiles(path: Path = PARTY_PROFILES_PATH) -> Dict[str, List[Dict[str, Any]]]:
    """Return the ``party`` and ``enemies`` entries stored in ``path``.

    Party entries are mappings with at least ``name`` and ``position``; the
    remaining keys are handed to :meth:`AgentConfig.from_mapping` untouched.
    A missing file yields an empty scenario.
    """

    raw: dict[str, Any] = {}
    if path.is_file():
        raw = yaml.safe_load(path.read_text()) or {}
    return {
        key: [dict(entry) for entry in (raw.get(key) or []) if isinstance(entry, dict)]
        for key in ("party", "enemies")
    }


# Load configuration at module import time.
CONFIG = load_config()


__all__ = [
    "CONFIG",
    "Config",
    "TacticsConfig",
    "AgentDefaults",
    "WorldConfig",
    "LoggingConfig",
    "as_flag",
    "load_config",
    "load_party_profiles",
]
