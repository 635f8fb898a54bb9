"""Tick pacing for the demo loop."""

from __future__ import annotations

import time


class TimeManager:
    """Count simulation ticks, optionally pacing them to wall-clock time."""

    def __init__(self, tick_rate: float = 20.0, realtime: bool = True) -> None:
        self.tick_rate: float = tick_rate
        self.realtime: bool = realtime
        self.tick_counter: int = 0
        self._last_tick: float = time.perf_counter()

    def sleep_until_next_tick(self) -> None:
        """Advance the counter, blocking first when running in real time."""

        if self.realtime and self.tick_rate > 0:
            target = self._last_tick + 1.0 / self.tick_rate
            remaining = target - time.perf_counter()
            if remaining > 0:
                time.sleep(remaining)
                self._last_tick = target
            else:
                # Behind schedule; restart the cadence from now.
                self._last_tick = time.perf_counter()
        self.tick_counter += 1


__all__ = ["TimeManager"]
