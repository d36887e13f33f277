from __future__ import annotations

from typing import NewType


# Session-local simulated seconds; advances only while the tick driver runs.
GameSeconds = NewType("GameSeconds", float)

# Epoch milliseconds read from a wall clock; keeps running while the app is closed.
WallClockMs = NewType("WallClockMs", int)


def game_seconds(value: float | int) -> GameSeconds:
    return GameSeconds(float(value))


def wall_clock_ms(value: float | int) -> WallClockMs:
    return WallClockMs(int(value))
