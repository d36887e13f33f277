from __future__ import annotations

import logging
import math
import random
from typing import List

from heromom.application.dtos import CraftResult, EnhanceResult, IntentOutcome, RefineResult, SmeltResult
from heromom.application.services.balance_tables import (
    DEFAULT_RULES,
    GRADE_PREFIX,
    REFINED_STAT_BASE,
    REFINING_LEVEL_CAP,
    REFINING_SLOT_MULTIPLIERS,
    GameRules,
    equipment_name_for,
    refining_exp_required,
    smelting_stones,
)
from heromom.application.services.equipment_service import find_equipment
from heromom.application.services.event_bus import EventBus
from heromom.application.services.materials_ledger import consume, has_materials
from heromom.application.services.probability_tables import draw_from_table
from heromom.application.services.registry import RecipeRegistry
from heromom.domain.events import EnhancementAttempted, EquipmentRefined
from heromom.domain.models.equipment import EQUIPMENT_SLOTS, Equipment, EquipmentGrade
from heromom.domain.models.game_state import GameState
from heromom.domain.models.items import Food, Potion
from heromom.domain.models.materials import MaterialKey


logger = logging.getLogger(__name__)

MAX_REFINED_ITEM_LEVEL = 30


class CraftingService:
    """Cooking, brewing, smithing, refinement, enhancement and smelting.

    Every mutator re-checks its guard and leaves the state untouched when the
    guard is false; the returned result carries the outcome discriminator.
    """

    def __init__(
        self,
        registry: RecipeRegistry,
        rng: random.Random,
        rules: GameRules = DEFAULT_RULES,
        event_bus: EventBus | None = None,
    ) -> None:
        self.registry = registry
        self.rng = rng
        self.rules = rules
        self.event_bus = event_bus

    # --- Cooking / brewing / smithing ------------------------------------

    @staticmethod
    def _unlocked(state: GameState, unlock_level: int) -> bool:
        return unlock_level <= 0 or state.son.stats.level >= unlock_level

    def can_cook_food(self, state: GameState, recipe_id: str) -> bool:
        recipe = self.registry.food(recipe_id)
        if recipe is None or not self._unlocked(state, recipe.unlock_level):
            return False
        return has_materials(state.inventory, recipe.materials)

    def can_brew_potion(self, state: GameState, recipe_id: str) -> bool:
        recipe = self.registry.potion(recipe_id)
        if recipe is None or not state.unlocks.alchemy:
            return False
        if not self._unlocked(state, recipe.unlock_level):
            return False
        return has_materials(state.inventory, recipe.materials)

    def can_craft_equipment(self, state: GameState, recipe_id: str) -> bool:
        recipe = self.registry.equipment(recipe_id)
        if recipe is None or not self._unlocked(state, recipe.unlock_level):
            return False
        return has_materials(state.inventory, recipe.materials)

    def cook_food(self, state: GameState, recipe_id: str) -> CraftResult:
        recipe = self.registry.food(recipe_id)
        if recipe is None:
            return CraftResult(IntentOutcome.NOT_FOUND, [f"Unknown food recipe {recipe_id}."])
        if not self.can_cook_food(state, recipe_id):
            return CraftResult(IntentOutcome.BLOCKED, [f"Cannot cook {recipe.name} right now."])
        consume(state.inventory, recipe.materials)
        food = Food(
            id=state.issue_id("food"),
            name=recipe.name,
            hunger_restore=recipe.hunger_restore,
            hp_restore=recipe.hp_restore,
            temp_buff=recipe.temp_buff,
            recipe_id=recipe.id,
        )
        state.inventory.food.append(food)
        return CraftResult(IntentOutcome.SUCCESS, [f"Cooked {food.name}."], food=food)

    def brew_potion(self, state: GameState, recipe_id: str) -> CraftResult:
        recipe = self.registry.potion(recipe_id)
        if recipe is None:
            return CraftResult(IntentOutcome.NOT_FOUND, [f"Unknown potion recipe {recipe_id}."])
        if not self.can_brew_potion(state, recipe_id):
            return CraftResult(IntentOutcome.BLOCKED, [f"Cannot brew {recipe.name} right now."])
        consume(state.inventory, recipe.materials)
        potion = Potion(
            id=state.issue_id("potion"),
            name=recipe.name,
            effect=recipe.effect,
            stat=recipe.stat,
            value=recipe.value,
            recipe_id=recipe.id,
        )
        state.inventory.potions.append(potion)
        return CraftResult(IntentOutcome.SUCCESS, [f"Brewed {potion.name}."], potion=potion)

    def craft_equipment(self, state: GameState, recipe_id: str) -> CraftResult:
        recipe = self.registry.equipment(recipe_id)
        if recipe is None:
            return CraftResult(IntentOutcome.NOT_FOUND, [f"Unknown equipment recipe {recipe_id}."])
        if not self.can_craft_equipment(state, recipe_id):
            return CraftResult(IntentOutcome.BLOCKED, [f"Cannot forge {recipe.name} right now."])
        consume(state.inventory, recipe.materials)
        item = Equipment(
            id=state.issue_id("equipment"),
            name=recipe.name,
            slot=recipe.slot,
            grade=EquipmentGrade.COMMON,
            base_stats=dict(recipe.base_stats),
        )
        state.inventory.equipment.append(item)
        return CraftResult(IntentOutcome.SUCCESS, [f"Forged {item.name}."], equipment=item)

    # --- Refinement --------------------------------------------------------

    def can_refine(self, state: GameState) -> bool:
        return state.inventory.count(MaterialKey.REFINING_STONE) >= int(self.rules.refining_cost)

    def refine(self, state: GameState) -> RefineResult:
        mom = state.mom
        if not self.can_refine(state):
            return RefineResult(
                IntentOutcome.BLOCKED,
                [f"Refining needs {self.rules.refining_cost} refining stones."],
                refining_level=mom.refining_level,
            )
        consume(state.inventory, {MaterialKey.REFINING_STONE: int(self.rules.refining_cost)})

        grade = EquipmentGrade(draw_from_table(self.rules.refining_grade_rates, mom.refining_level, self.rng))
        slot = self.rng.choice(EQUIPMENT_SLOTS)
        level = min(MAX_REFINED_ITEM_LEVEL, mom.refining_level + self.rng.randint(0, max(0, mom.refining_level // 2)))
        base_stats = {
            stat: max(1, int(math.floor((REFINED_STAT_BASE + level) * multiplier)))
            for stat, multiplier in REFINING_SLOT_MULTIPLIERS[slot].items()
        }
        item = Equipment(
            id=state.issue_id("equipment"),
            name=f"{GRADE_PREFIX[grade]}{equipment_name_for(slot, level)}",
            slot=slot,
            grade=grade,
            base_stats=base_stats,
            level=level,
        )
        state.inventory.equipment.append(item)

        leveled_up = self._gain_refining_exp(state, int(self.rules.refining_exp_per_refine))
        logger.info(
            "Refined %s (%s) at refining level %s",
            item.name,
            grade.value,
            mom.refining_level,
        )
        if self.event_bus is not None:
            self.event_bus.publish(EquipmentRefined(equipment_id=item.id, grade=grade.value, refining_level=mom.refining_level))
        messages = [f"Refined {item.name}."]
        if leveled_up:
            messages.append(f"Refining reached level {mom.refining_level}.")
        return RefineResult(
            IntentOutcome.SUCCESS,
            messages,
            equipment=item,
            grade=grade,
            refining_level=mom.refining_level,
            leveled_up=leveled_up,
        )

    def _gain_refining_exp(self, state: GameState, amount: int) -> bool:
        mom = state.mom
        if mom.refining_level >= REFINING_LEVEL_CAP:
            return False
        mom.refining_exp += amount
        leveled_up = False
        while mom.refining_exp >= mom.refining_max_exp and mom.refining_level < REFINING_LEVEL_CAP:
            if self.rules.refining_exp_overflow == "carry":
                mom.refining_exp -= mom.refining_max_exp
            else:
                mom.refining_exp = 0
            mom.refining_level += 1
            mom.refining_max_exp = refining_exp_required(mom.refining_level)
            leveled_up = True
        return leveled_up

    # --- Enhancement -------------------------------------------------------

    def can_enhance(self, state: GameState, equipment_id: str) -> bool:
        if not state.unlocks.enhancement:
            return False
        item = find_equipment(state, equipment_id)
        if item is None or item.is_max_enhanced:
            return False
        entry = self.rules.enhancement_table.get(item.enhance_level + 1)
        if entry is None:
            return False
        return (
            state.inventory.count(MaterialKey.ENHANCEMENT_STONES) >= entry.stones_required
            and state.inventory.count(MaterialKey.GOLD) >= entry.gold_cost
        )

    def enhance(self, state: GameState, equipment_id: str) -> EnhanceResult:
        item = find_equipment(state, equipment_id)
        if item is None:
            return EnhanceResult(IntentOutcome.NOT_FOUND, [f"No equipment with id {equipment_id}."], equipment_id=equipment_id)
        level_before = item.enhance_level
        if not self.can_enhance(state, equipment_id):
            return EnhanceResult(
                IntentOutcome.BLOCKED,
                [f"{item.name} cannot be enhanced right now."],
                equipment_id=equipment_id,
                level_before=level_before,
                level_after=level_before,
            )
        entry = self.rules.enhancement_table[level_before + 1]
        consume(
            state.inventory,
            {MaterialKey.ENHANCEMENT_STONES: entry.stones_required, MaterialKey.GOLD: entry.gold_cost},
        )
        succeeded = self.rng.random() < float(entry.success_rate)
        if succeeded:
            item.enhance_level = level_before + 1
        logger.info(
            "Enhancement of %s %s (+%s -> +%s)",
            item.id,
            "succeeded" if succeeded else "failed",
            level_before,
            item.enhance_level,
        )
        if self.event_bus is not None:
            self.event_bus.publish(
                EnhancementAttempted(
                    equipment_id=item.id,
                    level_before=level_before,
                    level_after=item.enhance_level,
                    succeeded=succeeded,
                )
            )
        if succeeded:
            message = f"{item.name} is now +{item.enhance_level}!"
        else:
            message = f"The enhancement failed. {item.name} stays at +{level_before}, and the materials are gone."
        return EnhanceResult(
            IntentOutcome.SUCCESS if succeeded else IntentOutcome.FAILED,
            [message],
            equipment_id=item.id,
            level_before=level_before,
            level_after=item.enhance_level,
            stones_spent=entry.stones_required,
            gold_spent=entry.gold_cost,
        )

    # --- Smelting ------------------------------------------------------------

    @staticmethod
    def _smeltable_list(state: GameState, equipment_id: str) -> List[Equipment] | None:
        for items in (state.inventory.equipment, state.home.equipment_rack):
            if any(item.id == equipment_id for item in items):
                return items
        return None

    def can_smelt(self, state: GameState, equipment_id: str) -> bool:
        if not state.unlocks.smelting:
            return False
        return self._smeltable_list(state, equipment_id) is not None

    def smelt(self, state: GameState, equipment_id: str) -> SmeltResult:
        if find_equipment(state, equipment_id) is None:
            return SmeltResult(IntentOutcome.NOT_FOUND, [f"No equipment with id {equipment_id}."], equipment_id=equipment_id)
        if not self.can_smelt(state, equipment_id):
            reason = "Worn gear cannot be smelted." if state.unlocks.smelting else "Smelting is not unlocked yet."
            return SmeltResult(
                IntentOutcome.BLOCKED,
                [reason],
                equipment_id=equipment_id,
            )
        items = self._smeltable_list(state, equipment_id)
        index = next(i for i, item in enumerate(items) if item.id == equipment_id)
        item = items.pop(index)
        stones = smelting_stones(item.grade, item.level)
        state.inventory.add(MaterialKey.REFINING_STONE, stones)
        logger.debug("Smelted %s into %s refining stones", item.id, stones)
        return SmeltResult(
            IntentOutcome.SUCCESS,
            [f"Smelted {item.name} into {stones} refining stones."],
            equipment_id=item.id,
            stones_gained=stones,
        )
