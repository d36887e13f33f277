from __future__ import annotations

from enum import Enum
from typing import List

from heromom.application.dtos import IntentOutcome, PlacementResult
from heromom.application.services.balance_tables import MAX_TABLE_FOOD
from heromom.domain.models.game_state import GameState


class ItemKind(str, Enum):
    FOOD = "food"
    POTION = "potion"
    BOOK = "book"
    EQUIPMENT = "equipment"


_LOCATION_NAMES = {
    ItemKind.FOOD: "table",
    ItemKind.POTION: "potion shelf",
    ItemKind.BOOK: "desk",
    ItemKind.EQUIPMENT: "equipment rack",
}


def _lists(state: GameState, kind: ItemKind) -> tuple[List, List]:
    inventory, home = state.inventory, state.home
    if kind == ItemKind.FOOD:
        return inventory.food, home.table
    if kind == ItemKind.POTION:
        return inventory.potions, home.potion_shelf
    if kind == ItemKind.BOOK:
        return inventory.books, home.desk
    return inventory.equipment, home.equipment_rack


def capacity(state: GameState, kind: ItemKind) -> int | None:
    if kind == ItemKind.FOOD:
        return MAX_TABLE_FOOD
    if kind == ItemKind.POTION:
        return int(state.unlocks.potion_slots)
    return None


def resolve_index(items: List, ref: int | str) -> int | None:
    """Food, potions and books are addressed by list index; equipment by id."""
    if isinstance(ref, int) and not isinstance(ref, bool):
        return ref if 0 <= ref < len(items) else None
    for index, item in enumerate(items):
        if item.id == ref:
            return index
    return None


class PlacementService:
    def can_place(self, state: GameState, kind: ItemKind, ref: int | str) -> bool:
        kind = ItemKind(kind)
        source, target = _lists(state, kind)
        if resolve_index(source, ref) is None:
            return False
        limit = capacity(state, kind)
        return limit is None or len(target) < limit

    def place(self, state: GameState, kind: ItemKind, ref: int | str) -> PlacementResult:
        kind = ItemKind(kind)
        source, target = _lists(state, kind)
        index = resolve_index(source, ref)
        if index is None:
            return PlacementResult(IntentOutcome.NOT_FOUND, [f"No {kind.value} at {ref!r} in the inventory."])
        if not self.can_place(state, kind, ref):
            return PlacementResult(
                IntentOutcome.BLOCKED,
                [f"The {_LOCATION_NAMES[kind]} is full."],
                item_id=source[index].id,
            )
        item = source.pop(index)
        target.append(item)
        return PlacementResult(IntentOutcome.SUCCESS, [f"Placed {item.name} on the {_LOCATION_NAMES[kind]}."], item_id=item.id)

    def remove(self, state: GameState, kind: ItemKind, ref: int | str) -> PlacementResult:
        kind = ItemKind(kind)
        inventory_list, placed = _lists(state, kind)
        index = resolve_index(placed, ref)
        if index is None:
            return PlacementResult(IntentOutcome.NOT_FOUND, [f"Nothing at {ref!r} on the {_LOCATION_NAMES[kind]}."])
        item = placed.pop(index)
        inventory_list.append(item)
        return PlacementResult(IntentOutcome.SUCCESS, [f"Took {item.name} back."], item_id=item.id)
