from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

from heromom.domain.models.items import Book
from heromom.domain.models.materials import MaterialKey
from heromom.domain.models.timekeeping import WallClockMs


class BattleOutcome(str, Enum):
    OVERWHELMING = "overwhelming"
    VICTORY = "victory"
    NARROW = "narrow"
    DEFEAT = "defeat"


@dataclass(frozen=True)
class Letter:
    id: str
    text: str
    timestamp: WallClockMs
    hp_percent: float = 100.0
    battles_completed: int = 0
    kind: str = "battle"


@dataclass(frozen=True)
class BattleResult:
    outcome: BattleOutcome
    is_boss: bool
    hp_lost: int
    exp_gained: int
    rewards: Dict[MaterialKey, int] = field(default_factory=dict)
    book_drop: Book | None = None


@dataclass
class Adventure:
    """A wall-clock timed run away from home.

    Remaining time is always derived from ``start_time`` and ``duration``;
    nothing on this record counts down in place.
    """

    start_time: WallClockMs
    duration: int
    active: bool = True
    letters: List[Letter] = field(default_factory=list)
    battle_results: List[BattleResult] = field(default_factory=list)
    total_battles: int = 0
    battles_reported: int = 0
    rewards: Dict[MaterialKey, int] = field(default_factory=dict)
    book_rewards: List[Book] = field(default_factory=list)
    exp_gained: int = 0
    failed: bool = False
    son_hp_percent: float = 100.0
    next_letter_at: WallClockMs = WallClockMs(0)
    returning_letter_sent: bool = False

    def elapsed_ms(self, now: WallClockMs) -> int:
        return max(0, int(now) - int(self.start_time))

    def remaining_ms(self, now: WallClockMs) -> int:
        return max(0, int(self.duration) - self.elapsed_ms(now))

    def progress(self, now: WallClockMs) -> float:
        if self.duration <= 0:
            return 1.0
        return min(1.0, self.elapsed_ms(now) / float(self.duration))

    def is_due(self, now: WallClockMs) -> bool:
        return self.elapsed_ms(now) >= int(self.duration)


@dataclass
class AdventureResult:
    battle_results: List[BattleResult]
    total_battles: int
    rewards: Dict[MaterialKey, int]
    book_rewards: List[Book]
    exp_gained: int
    failed: bool
    son_hp_percent: float
    letters: List[Letter] = field(default_factory=list)
