"""components package."""

from .allegiance import Hostile, PartyMember
from .health import Health
from .position import Position

__all__ = ["Health", "Hostile", "PartyMember", "Position"]
