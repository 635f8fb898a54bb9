import logging

from squad_tactics.ai.blackboard import Blackboard
from squad_tactics.ai.controller import Controller
from squad_tactics.ai.types import AbilityKind, AgentConfig, AgentState, EnemyType, Role
from squad_tactics.core.world import GridWorld


def _engage(ctrl, world):
    """Run ACQUIRE then ACT, returning only the ACT think's records."""
    ctrl.blackboard.refresh()
    ctrl.state = AgentState.ACQUIRE
    ctrl.update()
    assert ctrl.state is AgentState.ACT
    world.clear_records()
    ctrl.update()


def test_ranged_kites_close_melee_threat(world, squad, make_controller):
    agent = squad(Role.RANGED, 10, 12, keep_distance=4, attack_ability="bow")
    world.spawn_enemy(10, 14, EnemyType.MELEE)
    ctrl = make_controller(agent)

    _engage(ctrl, world)

    kinds = [i.kind for i in world.intents]
    assert kinds == ["move_away", "sidestep"]
    assert "move_toward" not in kinds
    assert [(u.ability_id, u.kind) for u in world.ability_uses] == [("bow", AbilityKind.ATTACK)]
    assert ctrl.state is AgentState.ACQUIRE


def test_ranged_closes_distance_to_far_target(world, squad, make_controller):
    agent = squad(Role.RANGED, 10, 12, preferred_range=4, attack_ability="bow")
    enemy = world.spawn_enemy(10, 19, EnemyType.MELEE)
    ctrl = make_controller(agent)

    _engage(ctrl, world)

    assert [(i.kind, i.target_id) for i in world.intents] == [("move_toward", enemy)]
    assert world.position_of(agent) == (10, 13)


def test_ranged_holds_ground_against_close_ranged_enemy(world, squad, make_controller):
    agent = squad(Role.RANGED, 10, 12, keep_distance=4, attack_ability="bow")
    world.spawn_enemy(10, 14, EnemyType.RANGED)
    ctrl = make_controller(agent)

    _engage(ctrl, world)

    assert world.intents == []
    assert len(world.ability_uses) == 1


def test_melee_charges_and_attacks(world, squad, make_controller):
    agent = squad(Role.MELEE, 10, 11, attack_ability="axe")
    enemy = world.spawn_enemy(13, 11)
    ctrl = make_controller(agent)

    _engage(ctrl, world)

    assert [(i.kind, i.target_id) for i in world.intents] == [("move_toward", enemy)]
    assert world.position_of(agent) == (11, 11)
    assert [u.ability_id for u in world.ability_uses] == ["axe"]


def test_melee_without_attack_ability_only_moves(world, squad, make_controller):
    agent = squad(Role.MELEE, 10, 11)
    world.spawn_enemy(13, 11)
    ctrl = make_controller(agent)

    _engage(ctrl, world)

    assert len(world.intents) == 1
    assert world.ability_uses == []


def test_vanished_target_is_reacquired_or_dropped(world, squad, make_controller):
    agent = squad(Role.MELEE, 10, 11)
    first = world.spawn_enemy(12, 11)
    second = world.spawn_enemy(10, 15)
    ctrl = make_controller(agent)
    ctrl.blackboard.refresh()
    ctrl.state = AgentState.ACQUIRE
    ctrl.update()
    assert ctrl.target.entity_id == first

    world.remove_entity(first)
    ctrl.blackboard.refresh()
    ctrl.update()
    assert ctrl.target.entity_id == second
    assert ctrl.state is AgentState.ACQUIRE

    world.remove_entity(second)
    ctrl.blackboard.refresh()
    ctrl.state = AgentState.ACT
    ctrl.update()
    assert ctrl.target is None
    assert ctrl.state is AgentState.FOLLOW


def test_target_snapshot_follows_moving_enemy(world, squad, make_controller):
    agent = squad(Role.MELEE, 10, 11)
    enemy = world.spawn_enemy(12, 11)
    ctrl = make_controller(agent)
    ctrl.blackboard.refresh()
    ctrl.state = AgentState.ACQUIRE
    ctrl.update()

    world.move_to(enemy, 12, 14)
    resolved = ctrl.resolve_target()

    assert resolved.entity_id == enemy
    assert (ctrl.target.x, ctrl.target.y) == (12, 14)


def test_tank_peels_enemy_threatening_support_over_closer_enemy(world, squad, make_controller):
    tank = squad(Role.TANK, 10, 11, protect_radius=5, attack_ability="bash")
    squad(Role.HEALER, 16, 10)
    squad(Role.MELEE, 9, 10)
    close_to_tank = world.spawn_enemy(10, 13)
    threatening = world.spawn_enemy(18, 10)
    ctrl = make_controller(tank)
    ctrl.blackboard.refresh()
    ctrl.state = AgentState.ACT

    ctrl.update()

    assert ctrl.target.entity_id == threatening
    assert ctrl.target.entity_id != close_to_tank
    assert [(i.kind, i.target_id) for i in world.intents] == [("move_toward", threatening)]
    assert world.position_of(tank) == (11, 11)
    assert [u.ability_id for u in world.ability_uses] == ["bash"]
    assert ctrl.state is AgentState.ACQUIRE


def test_tank_guards_nearest_protected_ally_only(world, squad, make_controller):
    tank = squad(Role.TANK, 10, 11, protect_radius=5)
    squad(Role.RANGED, 12, 10)
    squad(Role.HEALER, 20, 10)
    world.spawn_enemy(21, 10)  # next to the far healer
    nearest = world.spawn_enemy(10, 15)
    ctrl = make_controller(tank)
    ctrl.blackboard.refresh()
    ctrl.state = AgentState.ACT

    ctrl.update()

    assert ctrl.target.entity_id == nearest


def test_tank_without_enemies_returns_to_follow(world, squad, make_controller):
    tank = squad(Role.TANK, 10, 11)
    ctrl = make_controller(tank)
    ctrl.state = AgentState.ACT

    ctrl.update()

    assert ctrl.state is AgentState.FOLLOW
    assert ctrl.target is None


class _FlakyWorld(GridWorld):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.raise_on_use = True

    def use_ability(self, entity, ability_id, kind):
        if self.raise_on_use:
            raise RuntimeError("tool pipeline unavailable")
        return False


def test_ability_failures_are_logged_not_raised(caplog, tactics):
    world = _FlakyWorld((30, 30))
    world.spawn_member("Leader", 10, 10, leader=True)
    agent = world.spawn_member(
        "m", 10, 11, config=AgentConfig(enabled=True, role=Role.MELEE, attack_ability="axe")
    )
    world.spawn_enemy(12, 11)
    ctrl = Controller(agent, world.config_for_agent(agent), Blackboard(world, tactics),
                      world, tactics, think_offset=0)
    ctrl.blackboard.refresh()
    ctrl.state = AgentState.ACT

    with caplog.at_level(logging.WARNING, logger="squad_tactics.ai.controller"):
        ctrl.update()
        world.raise_on_use = False
        ctrl.state = AgentState.ACT
        ctrl.update()

    messages = [r.getMessage() for r in caplog.records]
    assert any("raised" in m for m in messages)
    assert any("was not dispatched" in m for m in messages)
    assert ctrl.state is AgentState.ACQUIRE
