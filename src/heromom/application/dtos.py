from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

from heromom.domain.models.adventure import AdventureResult, Letter
from heromom.domain.models.equipment import Equipment, EquipmentGrade
from heromom.domain.models.items import Food, Potion
from heromom.domain.models.materials import MaterialKey


class IntentOutcome(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    BLOCKED = "blocked"
    NOT_FOUND = "not_found"


@dataclass
class ActionResult:
    outcome: IntentOutcome
    messages: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome == IntentOutcome.SUCCESS


@dataclass
class CraftResult(ActionResult):
    food: Food | None = None
    potion: Potion | None = None
    equipment: Equipment | None = None


@dataclass
class RefineResult(ActionResult):
    equipment: Equipment | None = None
    grade: EquipmentGrade | None = None
    refining_level: int = 0
    leveled_up: bool = False


@dataclass
class EnhanceResult(ActionResult):
    equipment_id: str = ""
    level_before: int = 0
    level_after: int = 0
    stones_spent: int = 0
    gold_spent: int = 0

    @property
    def succeeded(self) -> bool:
        return self.outcome == IntentOutcome.SUCCESS and self.level_after > self.level_before


@dataclass
class MaintainResult(ActionResult):
    equipment_id: str = ""
    durability_before: int = 0
    durability_after: int = 0


@dataclass
class SmeltResult(ActionResult):
    equipment_id: str = ""
    stones_gained: int = 0


@dataclass
class PlacementResult(ActionResult):
    item_id: str = ""


@dataclass
class DialogueResponseResult(ActionResult):
    choice_id: str = ""
    quest_id: str | None = None
    son_line: str | None = None


@dataclass
class TradeResult(ActionResult):
    gold_delta: int = 0
    item_id: str = ""


@dataclass
class FarmResult(ActionResult):
    plot_index: int = -1
    crop: str | None = None
    harvested: Dict[MaterialKey, int] = field(default_factory=dict)


@dataclass
class JobResult(ActionResult):
    gold_earned: int = 0
    job_level: int = 1
    leveled_up: bool = False


@dataclass
class TickResult:
    game_time: float
    son_action: str
    adventure_started: bool = False
    adventure_result: AdventureResult | None = None
    new_letters: List[Letter] = field(default_factory=list)
    completed_quests: List[str] = field(default_factory=list)
    failed_quests: List[str] = field(default_factory=list)
    levels_gained: int = 0
    messages: List[str] = field(default_factory=list)


@dataclass
class AdventureStatusView:
    active: bool
    remaining_ms: int
    progress: float
    battles_reported: int
    total_battles: int
    letters: List[Letter] = field(default_factory=list)

