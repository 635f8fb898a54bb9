"""Health component."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Health:
    """Track current and maximum health."""

    cur: int
    max: int

    @property
    def alive(self) -> bool:
        return self.cur > 0

    @property
    def percent(self) -> float:
        if self.max <= 0:
            return 0.0
        return self.cur * 100.0 / self.max


__all__ = ["Health"]
