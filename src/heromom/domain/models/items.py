from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StatType(str, Enum):
    STR = "str"
    DEF = "def"
    AGI = "agi"
    INT = "int"


# Buffs may target a single stat or every stat at once.
BUFF_ALL = "all"
HP_STAT = "hp"


class PotionEffect(str, Enum):
    INSTANT = "instant"
    BUFF = "buff"


@dataclass(frozen=True)
class FoodBuff:
    stat: str
    value: int


@dataclass
class Food:
    id: str
    name: str
    hunger_restore: int
    hp_restore: int = 0
    temp_buff: FoodBuff | None = None
    recipe_id: str | None = None


@dataclass
class Potion:
    id: str
    name: str
    effect: PotionEffect
    stat: str | None = None
    value: int = 0
    recipe_id: str | None = None

    def __post_init__(self) -> None:
        self.effect = PotionEffect(self.effect)

    @property
    def is_healing(self) -> bool:
        return self.effect == PotionEffect.INSTANT and self.stat == HP_STAT


@dataclass
class Book:
    id: str
    name: str
    stat: StatType
    value: int

    def __post_init__(self) -> None:
        self.stat = StatType(self.stat)


@dataclass(frozen=True)
class TempBuff:
    stat: str
    value: int
    source: str
