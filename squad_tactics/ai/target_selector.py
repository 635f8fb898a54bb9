"""Role-biased nearest-enemy target selection."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional, Sequence

from .adapter import UNKNOWN_DISTANCE, manhattan
from .types import EnemyDescriptor, EnemyType, Role

DistanceFn = Callable[[Any, Any], int]


def nearest(
    origin: Any,
    pool: Iterable[EnemyDescriptor],
    distance: DistanceFn = manhattan,
) -> Optional[EnemyDescriptor]:
    """Return the member of ``pool`` closest to ``origin``.

    The first minimum in iteration order wins ties.
    """

    best: Optional[EnemyDescriptor] = None
    best_dist = UNKNOWN_DISTANCE
    for enemy in pool:
        d = distance(origin, enemy)
        if best is None or d < best_dist:
            best = enemy
            best_dist = d
    return best


def select_target(
    role: Role,
    enemies: Sequence[EnemyDescriptor],
    origin: Any,
    distance: DistanceFn = manhattan,
) -> Optional[EnemyDescriptor]:
    """Pick the best enemy for an agent of ``role`` standing at ``origin``.

    RANGED agents prefer RANGED-tagged enemies and fall back to anything.
    Every other role takes the nearest enemy.
    """

    if not enemies:
        return None
    pool: Sequence[EnemyDescriptor] = enemies
    if role is Role.RANGED:
        ranged = [e for e in enemies if e.enemy_type is EnemyType.RANGED]
        if ranged:
            pool = ranged
    return nearest(origin, pool, distance)


__all__ = ["nearest", "select_target"]
