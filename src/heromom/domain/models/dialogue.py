from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict

from heromom.domain.models.quest import QuestData
from heromom.domain.models.son_action import Furniture, SonAction
from heromom.domain.models.timekeeping import GameSeconds


class DialogueType(str, Enum):
    EMOTION = "emotion"
    BEDTIME = "bedtime"
    DAILY = "daily"
    REQUEST = "request"


class DialogueEffectKind(str, Enum):
    BUFF = "buff"
    HEAL = "heal"
    HUNGER = "hunger"
    MOOD = "mood"
    EXP = "exp"


ACCEPT_CHOICE_ID = "accept"
DECLINE_CHOICE_ID = "decline"

MOOD_MIN = 0
MOOD_MAX = 100
MOOD_NEUTRAL = 50


@dataclass(frozen=True)
class DialogueEffect:
    kind: DialogueEffectKind
    value: int
    source: str
    stat: str | None = None


@dataclass(frozen=True)
class DialogueChoice:
    id: str
    text: str
    effect: DialogueEffect | None = None


@dataclass(frozen=True)
class DialogueConditions:
    son_actions: tuple[SonAction, ...] = ()
    hp_percent_range: tuple[float, float] | None = None
    hunger_range: tuple[float, float] | None = None
    min_level: int | None = None
    is_injured: bool | None = None
    just_returned: bool = False
    near_furniture: tuple[Furniture, ...] = ()
    mood_range: tuple[int, int] | None = None


@dataclass(frozen=True)
class DialogueTemplate:
    id: str
    type: DialogueType
    son_text: str
    choices: tuple[DialogueChoice, ...]
    conditions: DialogueConditions = DialogueConditions()
    priority: int = 0
    quest_data: QuestData | None = None

    def find_choice(self, choice_id: str) -> DialogueChoice | None:
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None


@dataclass
class ActiveDialogue:
    template: DialogueTemplate
    started_at: GameSeconds
    responded: bool = False


def _per_type(value: float) -> Dict[DialogueType, float]:
    return {kind: value for kind in DialogueType}


@dataclass
class DialogueState:
    mood: int = 70
    active_dialogue: ActiveDialogue | None = None
    cooldowns: Dict[DialogueType, float] = field(default_factory=lambda: _per_type(0.0))
    counts: Dict[DialogueType, int] = field(default_factory=lambda: {kind: 0 for kind in DialogueType})
    ticks_since_return: int = 999

    def adjust_mood(self, delta: int) -> int:
        self.mood = max(MOOD_MIN, min(MOOD_MAX, int(self.mood) + int(delta)))
        return self.mood
