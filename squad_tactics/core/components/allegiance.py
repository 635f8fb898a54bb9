"""Components marking which side an entity fights on."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...ai.types import AgentConfig, EnemyType


@dataclass
class PartyMember:
    """Squad member; ``config`` is ``None`` for the human-driven leader."""

    name: str
    config: Optional[AgentConfig] = None


@dataclass
class Hostile:
    """Enemy with its coarse tactical tag."""

    enemy_type: EnemyType = EnemyType.MELEE


__all__ = ["PartyMember", "Hostile"]
