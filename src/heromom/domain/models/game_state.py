from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from heromom.domain.models.adventure import Adventure, AdventureResult, Letter
from heromom.domain.models.dialogue import DialogueState
from heromom.domain.models.equipment import Equipment, EquippedGear
from heromom.domain.models.items import Book, Food, Potion, TempBuff
from heromom.domain.models.materials import MaterialKey, empty_materials
from heromom.domain.models.quest import QuestLog
from heromom.domain.models.son_action import SonAction
from heromom.domain.models.timekeeping import GameSeconds, WallClockMs


@dataclass
class SonStats:
    level: int = 1
    exp: int = 0
    max_exp: int = 50
    hp: float = 100
    max_hp: int = 100
    hunger: float = 100
    max_hunger: int = 100
    strength: int = 5
    defense: int = 3
    agility: int = 3
    intellect: int = 2

    @property
    def hp_ratio(self) -> float:
        if self.max_hp <= 0:
            return 0.0
        return float(self.hp) / float(self.max_hp)

    def base_stat(self, stat: str) -> int:
        return int(getattr(self, _STAT_ATTRS[stat]))

    def add_stat(self, stat: str, value: int) -> None:
        attr = _STAT_ATTRS[stat]
        setattr(self, attr, int(getattr(self, attr)) + int(value))


_STAT_ATTRS = {"str": "strength", "def": "defense", "agi": "agility", "int": "intellect"}


@dataclass
class Son:
    stats: SonStats = field(default_factory=SonStats)
    current_action: SonAction = SonAction.IDLE
    action_timer: float = 0.0
    is_home: bool = True
    is_injured: bool = False
    equipment: EquippedGear = field(default_factory=EquippedGear)
    dialogue: str | None = None
    dialogue_state: DialogueState = field(default_factory=DialogueState)
    quest_state: QuestLog = field(default_factory=QuestLog)
    temp_buffs: List[TempBuff] = field(default_factory=list)


@dataclass
class Mom:
    refining_level: int = 1
    refining_exp: int = 0
    refining_max_exp: int = 3
    job_level: int = 1
    job_exp: int = 0
    job_max_exp: int = 5
    last_job_at: WallClockMs = WallClockMs(0)


@dataclass
class Inventory:
    materials: Dict[MaterialKey, int] = field(default_factory=empty_materials)
    food: List[Food] = field(default_factory=list)
    potions: List[Potion] = field(default_factory=list)
    books: List[Book] = field(default_factory=list)
    equipment: List[Equipment] = field(default_factory=list)

    def count(self, key: MaterialKey) -> int:
        return int(self.materials.get(MaterialKey(key), 0))

    def add(self, key: MaterialKey, amount: int) -> None:
        key = MaterialKey(key)
        self.materials[key] = max(0, int(self.materials.get(key, 0)) + int(amount))


@dataclass
class Home:
    table: List[Food] = field(default_factory=list)
    potion_shelf: List[Potion] = field(default_factory=list)
    desk: List[Book] = field(default_factory=list)
    equipment_rack: List[Equipment] = field(default_factory=list)


@dataclass
class FarmPlot:
    crop: str | None = None
    planted_at: WallClockMs | None = None
    growth_time: float = 0.0
    ready: bool = False

    @property
    def is_empty(self) -> bool:
        return self.crop is None


@dataclass
class Farm:
    plots: List[FarmPlot] = field(default_factory=lambda: [FarmPlot() for _ in range(4)])
    max_plots: int = 4
    farm_level: int = 1
    farm_exp: int = 0
    farm_max_exp: int = 5


@dataclass
class Unlocks:
    alchemy: bool = False
    enhancement: bool = False
    smelting: bool = False
    farm_slots: int = 4
    potion_slots: int = 3
    milestones: Dict[int, bool] = field(default_factory=dict)


@dataclass
class GameState:
    game_time: GameSeconds = GameSeconds(0.0)
    son: Son = field(default_factory=Son)
    mom: Mom = field(default_factory=Mom)
    inventory: Inventory = field(default_factory=Inventory)
    home: Home = field(default_factory=Home)
    farm: Farm = field(default_factory=Farm)
    adventure: Adventure | None = None
    last_adventure_result: AdventureResult | None = None
    unlocks: Unlocks = field(default_factory=Unlocks)
    letters: List[Letter] = field(default_factory=list)
    next_id: int = 1

    def issue_id(self, prefix: str) -> str:
        value = f"{prefix}_{self.next_id}"
        self.next_id += 1
        return value
