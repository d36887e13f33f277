from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from heromom.domain.models.timekeeping import GameSeconds


class QuestObjectiveKind(str, Enum):
    CRAFT_FOOD = "craft_food"
    PLACE_FOOD = "place_food"
    PLACE_ANY_FOOD = "place_any_food"
    CRAFT_EQUIPMENT = "craft_equipment"
    PLACE_EQUIPMENT = "place_equipment"
    BREW_POTION = "brew_potion"
    PLACE_POTION = "place_potion"
    PLACE_BOOK = "place_book"
    GATHER_MATERIAL = "gather_material"


class QuestStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class QuestRewardKind(str, Enum):
    BUFF = "buff"
    EXP = "exp"
    MOOD = "mood"
    MATERIALS = "materials"


COMPLETED_QUEST_HISTORY = 10


@dataclass(frozen=True)
class QuestObjectiveSpec:
    kind: QuestObjectiveKind
    target_amount: int = 1
    target_id: str | None = None


@dataclass(frozen=True)
class QuestReward:
    kind: QuestRewardKind
    value: int
    description: str = ""
    stat: str | None = None


@dataclass(frozen=True)
class QuestPenalty:
    value: int
    description: str = ""


@dataclass(frozen=True)
class QuestData:
    objectives: tuple[QuestObjectiveSpec, ...]
    deadline_seconds: float
    reward: QuestReward
    fail_penalty: QuestPenalty


@dataclass
class QuestObjective:
    kind: QuestObjectiveKind
    target_amount: int = 1
    target_id: str | None = None
    current_amount: int = 0

    @property
    def is_met(self) -> bool:
        return self.current_amount >= int(self.target_amount)


@dataclass
class Quest:
    id: str
    request_text: str
    description: str
    objectives: List[QuestObjective]
    deadline: GameSeconds
    accepted_at: GameSeconds
    reward: QuestReward
    fail_penalty: QuestPenalty
    status: QuestStatus = QuestStatus.ACTIVE
    resolved_at: GameSeconds | None = None

    @property
    def is_active(self) -> bool:
        return self.status == QuestStatus.ACTIVE

    def all_objectives_met(self) -> bool:
        return all(objective.is_met for objective in self.objectives)


@dataclass
class QuestLog:
    active_quests: List[Quest] = field(default_factory=list)
    completed_quests: List[Quest] = field(default_factory=list)
    last_quest_offered_at: GameSeconds = GameSeconds(0.0)

    def archive(self, quest: Quest) -> None:
        self.completed_quests.append(quest)
        if len(self.completed_quests) > COMPLETED_QUEST_HISTORY:
            del self.completed_quests[:-COMPLETED_QUEST_HISTORY]
