import sys
from collections import Counter
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from heromom.application.dtos import IntentOutcome
from heromom.application.services.new_game import initial_state
from heromom.application.services.placement_service import ItemKind, PlacementService
from heromom.domain.models.equipment import Equipment
from heromom.domain.models.items import Food, Potion


def _ids(*groups) -> Counter:
    return Counter(item.id for group in groups for item in group)


class PlacementTests(unittest.TestCase):
    def setUp(self) -> None:
        self.state = initial_state()
        self.service = PlacementService()

    def test_round_trip_conserves_items_for_every_location(self) -> None:
        state = self.state
        state.inventory.food.append(Food(id="food_a", name="Bread", hunger_restore=20))
        state.inventory.potions.append(Potion(id="potion_a", name="Health Potion", effect="instant", stat="hp", value=30))
        state.inventory.equipment.append(Equipment(id="eq_a", name="Charm", slot="accessory", grade="common"))
        # (kind, inventory list, placed list, place ref, remove ref)
        cases = (
            (ItemKind.FOOD, state.inventory.food, state.home.table, 0, 2),
            (ItemKind.POTION, state.inventory.potions, state.home.potion_shelf, 0, 0),
            (ItemKind.EQUIPMENT, state.inventory.equipment, state.home.equipment_rack, "eq_a", "eq_a"),
        )
        for kind, owned, placed, place_ref, remove_ref in cases:
            before = _ids(owned, placed)

            self.assertEqual(IntentOutcome.SUCCESS, self.service.place(state, kind, place_ref).outcome)
            self.assertEqual(before, _ids(owned, placed))
            self.assertEqual(IntentOutcome.SUCCESS, self.service.remove(state, kind, remove_ref).outcome)
            self.assertEqual(before, _ids(owned, placed))

        before = _ids(state.inventory.books, state.home.desk)
        self.service.remove(state, ItemKind.BOOK, 0)
        self.service.place(state, ItemKind.BOOK, 0)
        self.assertEqual(before, _ids(state.inventory.books, state.home.desk))
        self.assertEqual(["starter_book"], [book.id for book in state.home.desk])

    def test_removed_item_goes_to_the_end_of_the_inventory(self) -> None:
        self.state.inventory.food.append(Food(id="food_x", name="Soup", hunger_restore=35))

        result = self.service.remove(self.state, ItemKind.FOOD, 0)

        self.assertEqual("starter_bread_1", result.item_id)
        self.assertEqual(["food_x", "starter_bread_1"], [food.id for food in self.state.inventory.food])

    def test_table_is_capped_at_five(self) -> None:
        for index in range(4):
            self.state.inventory.food.append(Food(id=f"food_{index}", name="Bread", hunger_restore=20))
        for _ in range(3):
            self.service.place(self.state, ItemKind.FOOD, 0)

        result = self.service.place(self.state, ItemKind.FOOD, 0)

        self.assertEqual(IntentOutcome.BLOCKED, result.outcome)
        self.assertEqual(5, len(self.state.home.table))
        self.assertEqual(1, len(self.state.inventory.food))

    def test_potion_shelf_capacity_follows_unlocks(self) -> None:
        for index in range(5):
            self.state.inventory.potions.append(Potion(id=f"p{index}", name="Health Potion", effect="instant", stat="hp", value=30))
        for _ in range(3):
            self.service.place(self.state, ItemKind.POTION, 0)

        self.assertFalse(self.service.can_place(self.state, ItemKind.POTION, 0))
        self.state.unlocks.potion_slots = 5
        self.assertTrue(self.service.can_place(self.state, ItemKind.POTION, 0))

    def test_bad_references_are_not_found(self) -> None:
        self.assertEqual(IntentOutcome.NOT_FOUND, self.service.place(self.state, ItemKind.FOOD, 3).outcome)
        self.assertEqual(IntentOutcome.NOT_FOUND, self.service.remove(self.state, ItemKind.EQUIPMENT, "missing").outcome)
        self.assertEqual(IntentOutcome.NOT_FOUND, self.service.place(self.state, ItemKind.BOOK, -1).outcome)


if __name__ == "__main__":
    unittest.main()
