"""ACT-state behaviours for each squad role."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from .types import AbilityKind, AgentState, EnemyDescriptor, EnemyType, Role

if TYPE_CHECKING:
    from .controller import Controller

RoleBehavior = Callable[["Controller", Any], None]


def _current_or_new_target(
    controller: "Controller", me: Any, role: Role
) -> Optional[EnemyDescriptor]:
    enemy = controller.resolve_target()
    if enemy is None:
        enemy = controller.acquire_target(me, role)
    return enemy


def _attack(controller: "Controller", me: Any) -> None:
    if controller.config.attack_ability:
        controller.use_ability(me, controller.config.attack_ability, AbilityKind.ATTACK)


def act_ranged(controller: "Controller", me: Any) -> None:
    """Kite melee threats, close the gap on distant targets, and shoot."""

    world = controller.world
    cfg = controller.config
    target = _current_or_new_target(controller, me, Role.RANGED)
    if target is None:
        controller.state = controller.idle_state()
        return

    d = world.distance(me, target)
    if target.enemy_type is EnemyType.MELEE and d <= cfg.keep_distance:
        world.move_away(me, target)
        world.sidestep(me, target)
    elif d > cfg.preferred_range:
        world.move_toward(me, target)

    _attack(controller, me)
    controller.state = AgentState.ACQUIRE


def act_melee(controller: "Controller", me: Any) -> None:
    """Close on the target and swing."""

    target = _current_or_new_target(controller, me, Role.MELEE)
    if target is None:
        controller.state = controller.idle_state()
        return

    controller.world.move_toward(me, target)
    _attack(controller, me)
    controller.state = AgentState.ACQUIRE


def protected_ally(controller: "Controller", me: Any) -> Optional[Any]:
    """Character of the nearest RANGED or HEALER party member."""

    world = controller.world
    best = None
    best_dist = None
    for agent_id in world.party_ids():
        if agent_id == controller.agent_id:
            continue
        cfg = world.config_for_agent(agent_id)
        if cfg is None or cfg.role not in (Role.RANGED, Role.HEALER):
            continue
        ally = world.character_for_agent(agent_id)
        if ally is None:
            continue
        d = world.distance(me, ally)
        if best_dist is None or d < best_dist:
            best = ally
            best_dist = d
    return best


def peel_target(controller: "Controller", me: Any) -> Optional[EnemyDescriptor]:
    """First enemy (scan order) inside the protect radius of the nearest ward."""

    ward = protected_ally(controller, me)
    if ward is None:
        return None
    radius = controller.config.protect_radius
    for enemy in controller.blackboard.enemies:
        if controller.world.distance(ward, enemy) <= radius:
            return enemy
    return None


def act_tank(controller: "Controller", me: Any) -> None:
    """Peel enemies off support allies, otherwise engage the nearest enemy."""

    target = peel_target(controller, me)
    if target is not None:
        controller.set_target(target)
    else:
        target = controller.acquire_target(me, Role.TANK)
    if target is None:
        controller.state = controller.idle_state()
        return

    controller.world.move_toward(me, target)
    _attack(controller, me)
    controller.state = AgentState.ACQUIRE


def act_healer(controller: "Controller", me: Any) -> None:
    controller.state = controller.healer.act(controller, me)


ROLE_BEHAVIORS: Dict[Role, RoleBehavior] = {
    Role.RANGED: act_ranged,
    Role.MELEE: act_melee,
    Role.TANK: act_tank,
    Role.HEALER: act_healer,
}


__all__ = [
    "ROLE_BEHAVIORS",
    "act_ranged",
    "act_melee",
    "act_tank",
    "act_healer",
    "protected_ally",
    "peel_target",
]
