"""Value types shared by the squad decision subsystem."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from ..config import AgentDefaults, as_flag


class Role(str, Enum):
    """Tactical role assigned to a squad agent."""

    RANGED = "RANGED"
    MELEE = "MELEE"
    TANK = "TANK"
    HEALER = "HEALER"

    @classmethod
    def parse(cls, value: Any) -> "Role":
        """Return the role named by ``value``, defaulting to :attr:`MELEE`."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().upper())
        except ValueError:
            return cls.MELEE


class Stance(str, Enum):
    """How willing an agent is to leave its post."""

    AGGRESSIVE = "AGGRESSIVE"
    DEFENSIVE = "DEFENSIVE"
    HOLD = "HOLD"

    @classmethod
    def parse(cls, value: Any) -> "Stance":
        """Return the stance named by ``value``, defaulting to :attr:`AGGRESSIVE`."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().upper())
        except ValueError:
            return cls.AGGRESSIVE


class EnemyType(str, Enum):
    """Coarse enemy tag used only for targeting heuristics."""

    RANGED = "RANGED"
    MELEE = "MELEE"

    @classmethod
    def parse(cls, value: Any) -> "EnemyType":
        if isinstance(value, cls):
            return value
        if str(value or "").strip().upper() == "RANGED":
            return cls.RANGED
        return cls.MELEE


class AbilityKind(str, Enum):
    """Purpose of an ability invocation, passed through to the world."""

    ATTACK = "ATTACK"
    DEFEND = "DEFEND"
    HEAL = "HEAL"
    BUFF = "BUFF"


class AgentState(str, Enum):
    """States of the per-agent controller."""

    FOLLOW = "FOLLOW"
    ACQUIRE = "ACQUIRE"
    ACT = "ACT"
    RECOVER = "RECOVER"
    HOLD = "HOLD"


@dataclass(frozen=True, slots=True)
class EnemyDescriptor:
    """Snapshot of a hostile entity as seen by the last enemy scan."""

    entity_id: int
    x: int
    y: int
    enemy_type: EnemyType = EnemyType.MELEE


@dataclass(slots=True)
class TargetSnapshot:
    """Weak reference to a controller's current target.

    Only the id and the last known position are kept; the live enemy is
    looked up again through the world every time the target is read.
    """

    entity_id: int
    x: int
    y: int
    enemy_type: EnemyType = EnemyType.MELEE

    @classmethod
    def of(cls, enemy: EnemyDescriptor) -> "TargetSnapshot":
        return cls(enemy.entity_id, enemy.x, enemy.y, enemy.enemy_type)

    def refresh(self, enemy: EnemyDescriptor) -> None:
        self.x = enemy.x
        self.y = enemy.y
        self.enemy_type = enemy.enemy_type


# Profile keys accepted by AgentConfig.from_mapping, snake_case -> camelCase.
_KEY_ALIASES = {
    "enabled": "enabled",
    "role": "role",
    "stance": "stance",
    "aggro_radius": "aggroRadius",
    "leash_radius": "leashRadius",
    "preferred_range": "preferredRange",
    "keep_distance": "keepDistance",
    "protect_radius": "protectRadius",
    "attack_ability": "attackAbilityId",
    "defend_ability": "defendAbilityId",
    "heal_ability": "healAbilityId",
    "buff_ability": "buffAbilityId",
    "heal_effect": "healEffectId",
    "buff_effect": "buffEffectId",
}


def _lookup(data: Mapping[str, Any], key: str) -> Any:
    if key in data:
        return data[key]
    return data.get(_KEY_ALIASES[key])


def _distance(value: Any, default: int) -> int:
    if value is None:
        return default
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return default


def _ability_id(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text == "0":
        return None
    return text


@dataclass(frozen=True, slots=True)
class AgentConfig:
    """Immutable tactical profile of one squad agent.

    Distances are tile counts. Ability ids are opaque strings understood
    by the world; ``None`` means the agent has no such ability.
    """

    enabled: bool = True
    role: Role = Role.MELEE
    stance: Stance = Stance.AGGRESSIVE
    aggro_radius: int = 6
    leash_radius: int = 10
    preferred_range: int = 4
    keep_distance: int = 4
    protect_radius: int = 5
    attack_ability: Optional[str] = None
    defend_ability: Optional[str] = None
    heal_ability: Optional[str] = None
    buff_ability: Optional[str] = None
    heal_effect: Optional[str] = None
    buff_effect: Optional[str] = None

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        defaults: AgentDefaults | None = None,
    ) -> "AgentConfig":
        """Build a config from a loose profile mapping.

        Unknown roles and stances fall back to MELEE and AGGRESSIVE, and
        distances that are missing, negative or unparseable use
        ``defaults``.
        """

        d = defaults or AgentDefaults()
        enabled = _lookup(data, "enabled")
        return cls(
            enabled=as_flag(enabled) if enabled is not None else False,
            role=Role.parse(_lookup(data, "role")),
            stance=Stance.parse(_lookup(data, "stance")),
            aggro_radius=_distance(_lookup(data, "aggro_radius"), d.aggro_radius),
            leash_radius=_distance(_lookup(data, "leash_radius"), d.leash_radius),
            preferred_range=_distance(
                _lookup(data, "preferred_range"), d.preferred_range
            ),
            keep_distance=_distance(_lookup(data, "keep_distance"), d.keep_distance),
            protect_radius=_distance(_lookup(data, "protect_radius"), d.protect_radius),
            attack_ability=_ability_id(_lookup(data, "attack_ability")),
            defend_ability=_ability_id(_lookup(data, "defend_ability")),
            heal_ability=_ability_id(_lookup(data, "heal_ability")),
            buff_ability=_ability_id(_lookup(data, "buff_ability")),
            heal_effect=_ability_id(_lookup(data, "heal_effect")),
            buff_effect=_ability_id(_lookup(data, "buff_effect")),
        )


__all__ = [
    "Role",
    "Stance",
    "EnemyType",
    "AbilityKind",
    "AgentState",
    "EnemyDescriptor",
    "TargetSnapshot",
    "AgentConfig",
]
