from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict


class EquipmentSlot(str, Enum):
    WEAPON = "weapon"
    ARMOR = "armor"
    ACCESSORY = "accessory"


class EquipmentGrade(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"


EQUIPMENT_SLOTS: tuple[EquipmentSlot, ...] = (
    EquipmentSlot.WEAPON,
    EquipmentSlot.ARMOR,
    EquipmentSlot.ACCESSORY,
)

MAX_ENHANCE_LEVEL = 5

STAT_KEYS: tuple[str, ...] = ("str", "def", "agi", "int", "hp")


@dataclass
class Equipment:
    id: str
    name: str
    slot: EquipmentSlot
    grade: EquipmentGrade
    base_stats: Dict[str, int] = field(default_factory=dict)
    enhance_level: int = 0
    durability: int = 100
    max_durability: int = 100
    level: int = 1

    def __post_init__(self) -> None:
        self.slot = EquipmentSlot(self.slot)
        self.grade = EquipmentGrade(self.grade)
        self.enhance_level = max(0, min(MAX_ENHANCE_LEVEL, int(self.enhance_level)))
        self.max_durability = max(1, int(self.max_durability))
        self.durability = max(0, min(self.max_durability, int(self.durability)))
        self.base_stats = {str(key): int(value) for key, value in self.base_stats.items() if key in STAT_KEYS}

    @property
    def is_broken(self) -> bool:
        return self.durability <= 0

    @property
    def is_max_enhanced(self) -> bool:
        return self.enhance_level >= MAX_ENHANCE_LEVEL


@dataclass
class EquippedGear:
    weapon: Equipment | None = None
    armor: Equipment | None = None
    accessory: Equipment | None = None

    def get(self, slot: EquipmentSlot) -> Equipment | None:
        return getattr(self, EquipmentSlot(slot).value)

    def set(self, slot: EquipmentSlot, equipment: Equipment | None) -> None:
        setattr(self, EquipmentSlot(slot).value, equipment)

    def worn(self) -> list[Equipment]:
        return [item for item in (self.weapon, self.armor, self.accessory) if item is not None]
