from __future__ import annotations

import time
from typing import Protocol

from heromom.domain.models.timekeeping import WallClockMs, wall_clock_ms


class WallClock(Protocol):
    def now_ms(self) -> WallClockMs:
        ...


class SystemWallClock:
    def now_ms(self) -> WallClockMs:
        return wall_clock_ms(time.time() * 1000)


class FixedWallClock:
    """Manually advanced clock for tests and replays."""

    def __init__(self, start_ms: int = 0) -> None:
        self._now = wall_clock_ms(start_ms)

    def now_ms(self) -> WallClockMs:
        return self._now

    def set(self, value_ms: int) -> None:
        self._now = wall_clock_ms(value_ms)

    def advance(self, seconds: float = 0.0, *, ms: int = 0) -> WallClockMs:
        self._now = wall_clock_ms(int(self._now) + int(seconds * 1000) + int(ms))
        return self._now
