from __future__ import annotations

from typing import Mapping

from heromom.domain.models.game_state import Inventory
from heromom.domain.models.materials import MaterialKey


def has_materials(inventory: Inventory, required: Mapping[MaterialKey, int]) -> bool:
    return all(inventory.count(key) >= int(amount) for key, amount in required.items())


def consume(inventory: Inventory, required: Mapping[MaterialKey, int]) -> None:
    """All-or-nothing debit; callers check ``has_materials`` first."""
    if not has_materials(inventory, required):
        raise ValueError("Insufficient materials for debit")
    for key, amount in required.items():
        inventory.add(key, -int(amount))


def credit(inventory: Inventory, gained: Mapping[MaterialKey, int]) -> None:
    for key, amount in gained.items():
        if int(amount) > 0:
            inventory.add(key, int(amount))
