from __future__ import annotations

from enum import Enum
from typing import Dict, Mapping


class MaterialKey(str, Enum):
    GOLD = "gold"
    WOOD = "wood"
    LEATHER = "leather"
    IRON_ORE = "ironOre"
    MITHRIL = "mithril"
    GEMS = "gems"
    ENHANCEMENT_STONES = "enhancementStones"
    SPECIAL_ORE = "specialOre"
    MONSTER_TEETH = "monsterTeeth"
    MONSTER_SHELL = "monsterShell"
    MEAT = "meat"
    WHEAT = "wheat"
    POTATO = "potato"
    CARROT = "carrot"
    APPLE = "apple"
    RED_HERB = "redHerb"
    BLUE_HERB = "blueHerb"
    YELLOW_HERB = "yellowHerb"
    REFINING_STONE = "refiningStone"
    SEED = "seed"

    @classmethod
    def parse(cls, value: "MaterialKey | str") -> "MaterialKey":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip()
        for member in cls:
            if member.value == raw or member.name == raw.upper():
                return member
        raise ValueError(f"Unknown material: {value}")


MaterialCost = Mapping[MaterialKey, int]


def empty_materials() -> Dict[MaterialKey, int]:
    return {key: 0 for key in MaterialKey}


def normalize_materials(raw: Mapping[MaterialKey | str, int] | None) -> Dict[MaterialKey, int]:
    """Return a full material ledger: every key present, no negative counts."""

    ledger = empty_materials()
    for key, amount in (raw or {}).items():
        ledger[MaterialKey.parse(key)] = max(0, int(amount or 0))
    return ledger
