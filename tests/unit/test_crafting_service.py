import copy
import dataclasses
import random
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from heromom.application.dtos import IntentOutcome
from heromom.application.services.balance_tables import (
    DEFAULT_RULES,
    ENHANCEMENT_TABLE,
    EnhancementLevel,
    TierRates,
)
from heromom.application.services.crafting_service import CraftingService
from heromom.application.services.event_bus import EventBus
from heromom.application.services.new_game import initial_state
from heromom.application.services.registry import RecipeRegistry
from heromom.domain.events import EnhancementAttempted, EquipmentRefined
from heromom.domain.models.equipment import Equipment, EquipmentGrade, EquipmentSlot
from heromom.domain.models.materials import MaterialKey


class _ScriptedRandom(random.Random):
    """Hands out scripted ``random()`` rolls, then falls back to a seeded stream."""

    def __init__(self, rolls=(), seed: int = 3) -> None:
        super().__init__(seed)
        self.rolls = list(rolls)

    def random(self) -> float:
        if self.rolls:
            return self.rolls.pop(0)
        return super().random()

    def getrandbits(self, k: int) -> int:
        return super().getrandbits(k)


def _service(rules=DEFAULT_RULES, rolls=(), event_bus=None) -> CraftingService:
    return CraftingService(RecipeRegistry(rules), _ScriptedRandom(rolls), rules, event_bus)


class CookingAndBrewingTests(unittest.TestCase):
    def test_cook_consumes_materials_and_appends_food(self) -> None:
        state = initial_state()
        crafting = _service()

        result = crafting.cook_food(state, "bread")

        self.assertEqual(IntentOutcome.SUCCESS, result.outcome)
        self.assertEqual(2, state.inventory.count(MaterialKey.WHEAT))
        self.assertEqual(["Bread"], [food.name for food in state.inventory.food])
        self.assertEqual("bread", state.inventory.food[0].recipe_id)

    def test_cook_when_guard_is_false_leaves_inventory_untouched(self) -> None:
        state = initial_state()
        crafting = _service()
        crafting.cook_food(state, "bread")
        crafting.cook_food(state, "bread")
        before = copy.deepcopy(state.inventory)

        self.assertFalse(crafting.can_cook_food(state, "bread"))
        result = crafting.cook_food(state, "bread")

        self.assertEqual(IntentOutcome.BLOCKED, result.outcome)
        self.assertEqual(before.materials, state.inventory.materials)
        self.assertEqual(before.food, state.inventory.food)

    def test_unknown_recipe_is_reported_as_not_found(self) -> None:
        state = initial_state()

        result = _service().cook_food(state, "dragon_roast")

        self.assertEqual(IntentOutcome.NOT_FOUND, result.outcome)

    def test_recipe_unlock_level_gates_cooking(self) -> None:
        state = initial_state()
        state.inventory.add(MaterialKey.APPLE, 2)
        crafting = _service()

        self.assertFalse(crafting.can_cook_food(state, "fruit_pie"))
        state.son.stats.level = 5
        self.assertTrue(crafting.can_cook_food(state, "fruit_pie"))

    def test_brewing_needs_alchemy_unlock(self) -> None:
        state = initial_state()
        state.son.stats.level = 3
        state.inventory.add(MaterialKey.RED_HERB, 2)
        crafting = _service()

        self.assertFalse(crafting.can_brew_potion(state, "health_potion"))
        state.unlocks.alchemy = True
        result = crafting.brew_potion(state, "health_potion")

        self.assertEqual(IntentOutcome.SUCCESS, result.outcome)
        self.assertTrue(result.potion.is_healing)
        self.assertEqual(0, state.inventory.count(MaterialKey.RED_HERB))

    def test_craft_equipment_produces_common_gear(self) -> None:
        state = initial_state()

        result = _service().craft_equipment(state, "wooden_sword")

        self.assertEqual(IntentOutcome.SUCCESS, result.outcome)
        self.assertEqual(EquipmentGrade.COMMON, result.equipment.grade)
        self.assertEqual(2, state.inventory.count(MaterialKey.WOOD))
        self.assertEqual(40, state.inventory.count(MaterialKey.GOLD))


class RefinementTests(unittest.TestCase):
    def _rules(self, **overrides):
        scenario = {
            "refining_cost": 10,
            "refining_grade_rates": (
                TierRates(1, 10, {"common": 0.7, "uncommon": 0.25, "rare": 0.05, "epic": 0.0}),
            ),
        }
        scenario.update(overrides)
        return dataclasses.replace(DEFAULT_RULES, **scenario)

    def test_refine_spends_exact_cost_and_creates_one_item(self) -> None:
        state = initial_state()
        state.inventory.add(MaterialKey.REFINING_STONE, 10)

        result = _service(self._rules()).refine(state)

        self.assertEqual(IntentOutcome.SUCCESS, result.outcome)
        self.assertEqual(0, state.inventory.count(MaterialKey.REFINING_STONE))
        self.assertEqual([result.equipment], state.inventory.equipment)

    def test_refine_never_rolls_a_zero_weight_grade(self) -> None:
        for roll in (0.0, 0.3, 0.69, 0.7, 0.9, 0.95, 0.999999):
            state = initial_state()
            state.inventory.add(MaterialKey.REFINING_STONE, 10)

            result = _service(self._rules(), rolls=[roll]).refine(state)

            self.assertNotEqual(EquipmentGrade.EPIC, result.grade)

    def test_refine_grade_follows_the_roll(self) -> None:
        expectations = ((0.1, EquipmentGrade.COMMON), (0.8, EquipmentGrade.UNCOMMON), (0.97, EquipmentGrade.RARE))
        for roll, grade in expectations:
            state = initial_state()
            state.inventory.add(MaterialKey.REFINING_STONE, 10)

            result = _service(self._rules(), rolls=[roll]).refine(state)

            self.assertEqual(grade, result.grade)
            self.assertEqual(grade, state.inventory.equipment[0].grade)

    def test_refine_without_stones_is_blocked(self) -> None:
        state = initial_state()
        state.inventory.add(MaterialKey.REFINING_STONE, 9)

        result = _service(self._rules()).refine(state)

        self.assertEqual(IntentOutcome.BLOCKED, result.outcome)
        self.assertEqual(9, state.inventory.count(MaterialKey.REFINING_STONE))
        self.assertEqual([], state.inventory.equipment)

    def test_refining_exp_overflow_carries_by_default(self) -> None:
        state = initial_state()
        state.inventory.add(MaterialKey.REFINING_STONE, 3)
        rules = dataclasses.replace(DEFAULT_RULES, refining_exp_per_refine=5)

        result = _service(rules).refine(state)

        self.assertTrue(result.leveled_up)
        self.assertEqual(2, state.mom.refining_level)
        self.assertEqual(2, state.mom.refining_exp)
        self.assertEqual(5, state.mom.refining_max_exp)

    def test_refining_exp_overflow_can_be_discarded(self) -> None:
        state = initial_state()
        state.inventory.add(MaterialKey.REFINING_STONE, 3)
        rules = dataclasses.replace(DEFAULT_RULES, refining_exp_per_refine=5, refining_exp_overflow="discard")

        _service(rules).refine(state)

        self.assertEqual(2, state.mom.refining_level)
        self.assertEqual(0, state.mom.refining_exp)

    def test_refine_publishes_an_event(self) -> None:
        state = initial_state()
        state.inventory.add(MaterialKey.REFINING_STONE, 3)
        bus = EventBus()
        seen = []
        bus.subscribe(EquipmentRefined, seen.append)

        result = _service(event_bus=bus).refine(state)

        self.assertEqual([result.equipment.id], [event.equipment_id for event in seen])


class EnhancementTests(unittest.TestCase):
    def setUp(self) -> None:
        table = dict(ENHANCEMENT_TABLE)
        table[3] = EnhancementLevel(3, stones_required=5, gold_cost=100, success_rate=0.6, stat_bonus=0.35)
        self.rules = dataclasses.replace(DEFAULT_RULES, enhancement_table=table)
        self.state = initial_state()
        self.state.unlocks.enhancement = True
        self.item = Equipment(
            id="eq_test",
            name="Iron Sword",
            slot=EquipmentSlot.WEAPON,
            grade=EquipmentGrade.COMMON,
            base_stats={"str": 10},
            enhance_level=2,
            durability=50,
        )
        self.state.inventory.equipment.append(self.item)
        self.state.inventory.materials[MaterialKey.ENHANCEMENT_STONES] = 5
        self.state.inventory.materials[MaterialKey.GOLD] = 100

    def test_success_consumes_entry_cost_and_raises_level(self) -> None:
        result = _service(self.rules, rolls=[0.59]).enhance(self.state, "eq_test")

        self.assertEqual(IntentOutcome.SUCCESS, result.outcome)
        self.assertTrue(result.succeeded)
        self.assertEqual(3, self.item.enhance_level)
        self.assertEqual(0, self.state.inventory.count(MaterialKey.ENHANCEMENT_STONES))
        self.assertEqual(0, self.state.inventory.count(MaterialKey.GOLD))

    def test_failure_still_consumes_materials_but_keeps_level(self) -> None:
        result = _service(self.rules, rolls=[0.6]).enhance(self.state, "eq_test")

        self.assertEqual(IntentOutcome.FAILED, result.outcome)
        self.assertFalse(result.succeeded)
        self.assertEqual(2, self.item.enhance_level)
        self.assertEqual((2, 2), (result.level_before, result.level_after))
        self.assertEqual(0, self.state.inventory.count(MaterialKey.ENHANCEMENT_STONES))
        self.assertEqual(0, self.state.inventory.count(MaterialKey.GOLD))
        self.assertNotEqual(
            _service(self.rules, rolls=[0.0]).enhance(copy.deepcopy(self.state), "eq_test").messages,
            result.messages,
        )

    def test_max_level_fails_the_guard_without_spending(self) -> None:
        self.item.enhance_level = 5
        self.state.inventory.materials[MaterialKey.ENHANCEMENT_STONES] = 50
        self.state.inventory.materials[MaterialKey.GOLD] = 5000
        crafting = _service(self.rules)

        self.assertFalse(crafting.can_enhance(self.state, "eq_test"))
        result = crafting.enhance(self.state, "eq_test")

        self.assertEqual(IntentOutcome.BLOCKED, result.outcome)
        self.assertEqual(5, self.item.enhance_level)
        self.assertEqual(50, self.state.inventory.count(MaterialKey.ENHANCEMENT_STONES))
        self.assertEqual(5000, self.state.inventory.count(MaterialKey.GOLD))

    def test_enhance_level_is_clamped_on_construction(self) -> None:
        item = Equipment(id="x", name="X", slot="weapon", grade="common", enhance_level=9)

        self.assertEqual(5, item.enhance_level)

    def test_insufficient_stones_block_enhancement(self) -> None:
        self.state.inventory.materials[MaterialKey.ENHANCEMENT_STONES] = 4

        result = _service(self.rules).enhance(self.state, "eq_test")

        self.assertEqual(IntentOutcome.BLOCKED, result.outcome)
        self.assertEqual(100, self.state.inventory.count(MaterialKey.GOLD))

    def test_enhancement_needs_unlock(self) -> None:
        self.state.unlocks.enhancement = False

        self.assertFalse(_service(self.rules).can_enhance(self.state, "eq_test"))

    def test_unknown_equipment_is_not_found(self) -> None:
        result = _service(self.rules).enhance(self.state, "missing")

        self.assertEqual(IntentOutcome.NOT_FOUND, result.outcome)

    def test_equipped_items_can_be_enhanced(self) -> None:
        self.state.inventory.materials[MaterialKey.GOLD] = 20
        self.state.inventory.materials[MaterialKey.ENHANCEMENT_STONES] = 1
        bus = EventBus()
        seen = []
        bus.subscribe(EnhancementAttempted, seen.append)

        result = _service(self.rules, rolls=[0.0], event_bus=bus).enhance(self.state, "starter_sword")

        self.assertEqual(IntentOutcome.SUCCESS, result.outcome)
        self.assertEqual(1, self.state.son.equipment.weapon.enhance_level)
        self.assertEqual([True], [event.succeeded for event in seen])


class SmeltingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.state = initial_state()
        self.state.unlocks.smelting = True
        self.crafting = _service()

    def test_smelting_destroys_item_and_refunds_stones(self) -> None:
        item = Equipment(id="eq_rare", name="Rare Steel Sword", slot="weapon", grade="rare", level=16)
        self.state.inventory.equipment.append(item)

        result = self.crafting.smelt(self.state, "eq_rare")

        self.assertEqual(IntentOutcome.SUCCESS, result.outcome)
        self.assertEqual(5, result.stones_gained)
        self.assertEqual(5, self.state.inventory.count(MaterialKey.REFINING_STONE))
        self.assertEqual([], self.state.inventory.equipment)

    def test_rack_items_can_be_smelted(self) -> None:
        item = Equipment(id="eq_rack", name="Rare Steel Sword", slot="weapon", grade="rare", level=16)
        self.state.home.equipment_rack.append(item)

        self.assertTrue(self.crafting.can_smelt(self.state, "eq_rack"))
        result = self.crafting.smelt(self.state, "eq_rack")

        self.assertEqual(IntentOutcome.SUCCESS, result.outcome)
        self.assertEqual(5, self.state.inventory.count(MaterialKey.REFINING_STONE))
        self.assertNotIn("eq_rack", [entry.id for entry in self.state.home.equipment_rack])

    def test_equipped_items_cannot_be_smelted(self) -> None:
        result = self.crafting.smelt(self.state, "starter_sword")

        self.assertEqual(IntentOutcome.BLOCKED, result.outcome)
        self.assertIsNotNone(self.state.son.equipment.weapon)

    def test_smelting_needs_unlock(self) -> None:
        self.state.unlocks.smelting = False
        self.state.inventory.equipment.append(Equipment(id="eq_1", name="Charm", slot="accessory", grade="common"))

        self.assertFalse(self.crafting.can_smelt(self.state, "eq_1"))

    def test_unknown_item_is_not_found(self) -> None:
        self.assertEqual(IntentOutcome.NOT_FOUND, self.crafting.smelt(self.state, "nope").outcome)


if __name__ == "__main__":
    unittest.main()
