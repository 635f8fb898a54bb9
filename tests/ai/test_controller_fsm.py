import random

import pytest

from squad_tactics.ai.blackboard import Blackboard
from squad_tactics.ai.controller import Controller
from squad_tactics.ai.types import AgentConfig, AgentState, Role, Stance
from squad_tactics.config import TacticsConfig


def test_think_countdown_stays_in_bounds_and_thinks_every_interval(world, squad):
    agent = squad(Role.MELEE, 11, 10)
    tactics = TacticsConfig(think_interval=5)
    bb = Blackboard(world, tactics)
    ctrl = Controller(agent, world.config_for_agent(agent), bb, world, tactics,
                      rng=random.Random(3))

    think_ticks = []
    for tick in range(60):
        assert 0 <= ctrl.think_countdown < 5
        if ctrl.update():
            think_ticks.append(tick)
        assert 0 <= ctrl.think_countdown < 5

    gaps = {b - a for a, b in zip(think_ticks, think_ticks[1:])}
    assert gaps == {5}
    assert think_ticks[0] == random.Random(3).randrange(5)


def test_think_offset_is_seedable(world, squad):
    a = squad(Role.MELEE, 11, 10)
    tactics = TacticsConfig(think_interval=8)
    bb = Blackboard(world, tactics)
    cfg = world.config_for_agent(a)

    first = Controller(a, cfg, bb, world, tactics, rng=random.Random(42))
    second = Controller(a, cfg, bb, world, tactics, rng=random.Random(42))

    assert first.think_countdown == second.think_countdown
    assert first.state is AgentState.FOLLOW


def test_shrinking_think_interval_clamps_countdown(world, squad):
    agent = squad(Role.MELEE, 11, 10)
    tactics = TacticsConfig(think_interval=8)
    ctrl = Controller(agent, world.config_for_agent(agent), Blackboard(world, tactics),
                      world, tactics, think_offset=7)

    tactics.think_interval = 3
    ctrl.update()

    assert 0 <= ctrl.think_countdown < 3


@pytest.mark.parametrize(
    "prior", [AgentState.FOLLOW, AgentState.ACQUIRE, AgentState.ACT, AgentState.HOLD]
)
def test_leash_forces_recover_from_any_state(world, squad, make_controller, prior):
    agent = squad(Role.MELEE, 25, 10, leash_radius=10)
    world.spawn_enemy(26, 10)
    ctrl = make_controller(agent)
    ctrl.blackboard.refresh()
    ctrl.state = prior

    ctrl.update()

    assert ctrl.state is AgentState.RECOVER
    assert ctrl.target is None
    assert world.position_of(agent) == (24, 10)
    assert world.intents[-1].kind == "move_toward"
    assert world.intents[-1].target_id == squad.leader


@pytest.mark.parametrize(
    "stance, expected", [(Stance.AGGRESSIVE, AgentState.FOLLOW), (Stance.HOLD, AgentState.HOLD)]
)
def test_recover_returns_to_idle_state_near_leader(world, squad, make_controller, stance, expected):
    agent = squad(Role.RANGED, 13, 10, stance=stance)
    ctrl = make_controller(agent)
    ctrl.state = AgentState.RECOVER

    ctrl.update()

    assert world.position_of(agent) == (12, 10)
    assert ctrl.state is expected


def test_follow_moves_toward_distant_leader(world, squad, make_controller):
    agent = squad(Role.MELEE, 15, 10)
    ctrl = make_controller(agent)

    ctrl.update()

    assert ctrl.state is AgentState.FOLLOW
    assert world.position_of(agent) == (14, 10)


def test_follow_stays_put_when_close(world, squad, make_controller):
    agent = squad(Role.MELEE, 11, 11)
    ctrl = make_controller(agent)

    ctrl.update()

    assert world.intents == []
    assert ctrl.state is AgentState.FOLLOW


def test_follow_switches_to_acquire_in_combat(world, squad, make_controller):
    agent = squad(Role.MELEE, 11, 10)
    world.spawn_enemy(14, 10)
    ctrl = make_controller(agent)
    ctrl.blackboard.refresh()

    ctrl.update()

    assert ctrl.blackboard.combat_active
    assert ctrl.state is AgentState.ACQUIRE


def test_hold_stance_parks_in_hold(world, squad, make_controller):
    agent = squad(Role.MELEE, 11, 10, stance=Stance.HOLD)
    ctrl = make_controller(agent)

    ctrl.update()

    assert ctrl.state is AgentState.HOLD


def test_hold_defends_against_close_enemy_only(world, squad, make_controller):
    agent = squad(Role.MELEE, 10, 12, stance=Stance.HOLD)
    far = world.spawn_enemy(10, 20)
    ctrl = make_controller(agent)
    ctrl.state = AgentState.HOLD
    ctrl.blackboard.refresh()

    ctrl.update()
    assert ctrl.state is AgentState.HOLD
    assert world.intents == []

    near = world.spawn_enemy(10, 14)
    ctrl.blackboard.refresh()
    ctrl.update()

    assert ctrl.state is AgentState.ACT
    assert ctrl.target.entity_id == near
    assert ctrl.target.entity_id != far


def test_acquire_without_enemies_falls_back_per_stance(world, squad, make_controller):
    follower = make_controller(squad(Role.MELEE, 11, 10))
    holder = make_controller(squad(Role.RANGED, 10, 11, stance=Stance.HOLD))
    for ctrl in (follower, holder):
        ctrl.state = AgentState.ACQUIRE
        ctrl.update()

    assert follower.state is AgentState.FOLLOW
    assert holder.state is AgentState.HOLD


def test_acquire_stores_target_snapshot(world, squad, make_controller):
    agent = squad(Role.MELEE, 11, 10)
    enemy = world.spawn_enemy(13, 10)
    ctrl = make_controller(agent)
    ctrl.blackboard.refresh()
    ctrl.state = AgentState.ACQUIRE

    ctrl.update()

    assert ctrl.state is AgentState.ACT
    assert (ctrl.target.entity_id, ctrl.target.x, ctrl.target.y) == (enemy, 13, 10)


def test_healer_acquire_goes_straight_to_act(world, squad, make_controller):
    ctrl = make_controller(squad(Role.HEALER, 11, 10))
    ctrl.state = AgentState.ACQUIRE

    ctrl.update()

    assert ctrl.state is AgentState.ACT


def test_unresolvable_character_skips_think(world, squad, make_controller):
    agent = squad(Role.MELEE, 25, 10)
    ctrl = make_controller(agent)
    world.set_hp(agent, 0)

    assert ctrl.update() is True
    assert ctrl.state is AgentState.FOLLOW
    assert world.intents == []


def test_config_refresh_swaps_healer_script(world, squad, make_controller):
    agent = squad(Role.MELEE, 11, 10)
    ctrl = make_controller(agent)
    assert ctrl.healer is None

    ctrl.apply_config(AgentConfig(enabled=True, role=Role.HEALER))
    assert ctrl.healer is not None
    assert ctrl.role is Role.HEALER

    ctrl.apply_config(AgentConfig(enabled=True, role=Role.TANK))
    assert ctrl.healer is None
