"""Position component."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Position:
    """Tile coordinate on the grid."""

    x: int
    y: int


__all__ = ["Position"]
