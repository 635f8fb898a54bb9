# tests/conftest.py
import pytest

from squad_tactics.config import TacticsConfig
from squad_tactics.core.world import GridWorld
from squad_tactics.ai.blackboard import Blackboard
from squad_tactics.ai.controller import Controller
from squad_tactics.ai.types import AgentConfig, Role


@pytest.fixture
def world():
    return GridWorld((30, 30), seed=7)


@pytest.fixture
def tactics():
    # Think and scan every tick so tests can step decisions one by one.
    return TacticsConfig(think_interval=1, enemy_scan_interval=1)


@pytest.fixture
def squad(world):
    """Leader at (10,10) plus a controller factory bound to ``world``."""

    leader = world.spawn_member("Leader", 10, 10, hp=100, leader=True)

    def add(role: Role, x: int, y: int, hp: int = 100, **overrides):
        cfg = AgentConfig(enabled=True, role=role, **overrides)
        return world.spawn_member(role.value.lower(), x, y, hp=hp, config=cfg)

    add.leader = leader
    return add


@pytest.fixture
def make_controller(world, tactics):
    def factory(agent_id: int, blackboard: Blackboard | None = None) -> Controller:
        bb = blackboard or Blackboard(world, tactics)
        return Controller(
            agent_id,
            world.config_for_agent(agent_id),
            bb,
            world,
            tactics,
            think_offset=0,
        )

    return factory
