from __future__ import annotations

import logging
import math
from typing import Dict, Iterator

from heromom.application.dtos import IntentOutcome, MaintainResult
from heromom.application.services.balance_tables import (
    DEFAULT_RULES,
    DURABILITY_FAILURE_MULTIPLIER,
    DURABILITY_LOSS_BOSS_BONUS,
    DURABILITY_LOSS_PER_ADVENTURE,
    GameRules,
)
from heromom.application.services.materials_ledger import consume, has_materials
from heromom.domain.models.equipment import EQUIPMENT_SLOTS, STAT_KEYS, Equipment
from heromom.domain.models.game_state import GameState


logger = logging.getLogger(__name__)


def iter_owned_equipment(state: GameState) -> Iterator[tuple[str, Equipment]]:
    """Yield every equipment instance with the location that currently holds it."""
    for item in state.inventory.equipment:
        yield "inventory", item
    for item in state.home.equipment_rack:
        yield "rack", item
    for slot in EQUIPMENT_SLOTS:
        item = state.son.equipment.get(slot)
        if item is not None:
            yield "equipped", item


def find_equipment(state: GameState, equipment_id: str) -> Equipment | None:
    for _, item in iter_owned_equipment(state):
        if item.id == equipment_id:
            return item
    return None


def durability_scale(equipment: Equipment, rules: GameRules = DEFAULT_RULES) -> float:
    if equipment.durability <= 0:
        return 0.0
    threshold = int(rules.durability_penalty_threshold)
    if threshold > 0 and equipment.durability < threshold:
        return equipment.durability / float(threshold)
    return 1.0


def enhancement_bonus(equipment: Equipment, rules: GameRules = DEFAULT_RULES) -> float:
    entry = rules.enhancement_table.get(int(equipment.enhance_level))
    return float(entry.stat_bonus) if entry is not None else 0.0


def effective_stats(equipment: Equipment, rules: GameRules = DEFAULT_RULES) -> Dict[str, int]:
    """Base stats scaled by grade, enhancement and the durability penalty.

    Below the penalty threshold the discount is proportional to durability;
    a broken item contributes nothing but keeps its identity.
    """
    grade_multiplier = float(rules.grade_multipliers[equipment.grade])
    bonus = enhancement_bonus(equipment, rules)
    scale = durability_scale(equipment, rules)
    return {
        stat: int(math.floor(value * grade_multiplier * (1 + bonus) * scale))
        for stat, value in equipment.base_stats.items()
        if stat in STAT_KEYS
    }


def stat_total(equipment: Equipment, rules: GameRules = DEFAULT_RULES) -> float:
    """Ranking score used when the son picks gear off the rack."""
    stats = equipment.base_stats
    raw = sum(int(stats.get(key, 0)) for key in ("str", "def", "agi", "int")) + int(stats.get("hp", 0)) / 5.0
    raw += int(equipment.level) * 0.1
    return raw * durability_scale(equipment, rules)


def wear_from_adventure(state: GameState, *, had_boss: bool, failed: bool) -> Dict[str, int]:
    loss = DURABILITY_LOSS_PER_ADVENTURE
    if had_boss:
        loss += DURABILITY_LOSS_BOSS_BONUS
    if failed:
        loss = int(math.ceil(loss * DURABILITY_FAILURE_MULTIPLIER))
    worn: Dict[str, int] = {}
    for item in state.son.equipment.worn():
        before = item.durability
        item.durability = max(0, item.durability - loss)
        worn[item.id] = before - item.durability
    return worn


class EquipmentService:
    def __init__(self, rules: GameRules = DEFAULT_RULES) -> None:
        self.rules = rules

    def can_maintain(self, state: GameState, equipment_id: str) -> bool:
        item = find_equipment(state, equipment_id)
        if item is None:
            return False
        if item.durability >= item.max_durability:
            return False
        recipe = self.rules.maintenance_recipes.get(item.slot)
        if recipe is None:
            return False
        return has_materials(state.inventory, recipe.materials)

    def maintain(self, state: GameState, equipment_id: str) -> MaintainResult:
        item = find_equipment(state, equipment_id)
        if item is None:
            return MaintainResult(IntentOutcome.NOT_FOUND, [f"No equipment with id {equipment_id}."], equipment_id=equipment_id)
        before = item.durability
        if not self.can_maintain(state, equipment_id):
            reason = "Already in perfect condition." if before >= item.max_durability else "Not enough materials."
            return MaintainResult(
                IntentOutcome.BLOCKED,
                [reason],
                equipment_id=equipment_id,
                durability_before=before,
                durability_after=before,
            )
        recipe = self.rules.maintenance_recipes[item.slot]
        consume(state.inventory, recipe.materials)
        item.durability = min(item.max_durability, item.durability + int(recipe.restore))
        logger.debug("Maintained %s: %s -> %s", item.id, before, item.durability)
        return MaintainResult(
            IntentOutcome.SUCCESS,
            [f"{item.name} restored to {item.durability}/{item.max_durability}."],
            equipment_id=equipment_id,
            durability_before=before,
            durability_after=item.durability,
        )
