from dataclasses import dataclass


@dataclass
class TickAdvanced:
    game_time_after: float
    delta_seconds: float
    now_ms: int


@dataclass
class QuestCompleted:
    quest_id: str
    reward_kind: str
    game_time: float


@dataclass
class QuestFailed:
    quest_id: str
    penalty_value: int
    game_time: float


@dataclass
class QuestAccepted:
    quest_id: str
    template_id: str
    deadline: float


@dataclass
class EquipmentRefined:
    equipment_id: str
    grade: str
    refining_level: int


@dataclass
class EnhancementAttempted:
    equipment_id: str
    level_before: int
    level_after: int
    succeeded: bool


@dataclass
class AdventureStarted:
    start_time_ms: int
    duration_ms: int
    total_battles: int


@dataclass
class AdventureReturned:
    failed: bool
    exp_gained: int
    letters: int


@dataclass
class SonLeveledUp:
    from_level: int
    to_level: int
