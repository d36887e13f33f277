from __future__ import annotations

from heromom.domain.models.equipment import Equipment, EquipmentGrade, EquipmentSlot, EquippedGear
from heromom.domain.models.game_state import GameState, Home, Inventory, Son
from heromom.domain.models.items import Book, Food, StatType
from heromom.domain.models.materials import MaterialKey, normalize_materials


STARTING_MATERIALS = {
    MaterialKey.GOLD: 50,
    MaterialKey.WOOD: 5,
    MaterialKey.WHEAT: 4,
    MaterialKey.SEED: 12,
}


def initial_state() -> GameState:
    """A fresh household: starter gear worn, two breads on the table, one book on the desk."""
    gear = EquippedGear(
        weapon=Equipment(
            id="starter_sword",
            name="Wooden Sword",
            slot=EquipmentSlot.WEAPON,
            grade=EquipmentGrade.COMMON,
            base_stats={"str": 3},
        ),
        armor=Equipment(
            id="starter_armor",
            name="Leather Armor",
            slot=EquipmentSlot.ARMOR,
            grade=EquipmentGrade.COMMON,
            base_stats={"def": 3},
        ),
    )
    home = Home(
        table=[
            Food(id="starter_bread_1", name="Bread", hunger_restore=20, recipe_id="bread"),
            Food(id="starter_bread_2", name="Bread", hunger_restore=20, recipe_id="bread"),
        ],
        desk=[Book(id="starter_book", name="Beginner Warrior's Guide", stat=StatType.STR, value=1)],
    )
    return GameState(
        son=Son(equipment=gear),
        inventory=Inventory(materials=normalize_materials(STARTING_MATERIALS)),
        home=home,
    )
