from __future__ import annotations

from enum import Enum
from typing import Dict, Union

from heromom.application.services.balance_tables import (
    DEFAULT_RULES,
    EquipmentRecipe,
    FoodRecipe,
    GameRules,
    PotionRecipe,
)


class RecipeKind(str, Enum):
    FOOD = "food"
    POTION = "potion"
    EQUIPMENT = "equipment"


Recipe = Union[FoodRecipe, PotionRecipe, EquipmentRecipe]


class RecipeRegistry:
    """Typed recipe lookup built once from a rules bundle."""

    def __init__(self, rules: GameRules = DEFAULT_RULES) -> None:
        self._by_kind: Dict[RecipeKind, Dict[str, Recipe]] = {
            RecipeKind.FOOD: {},
            RecipeKind.POTION: {},
            RecipeKind.EQUIPMENT: {},
        }
        self._register(RecipeKind.FOOD, rules.food_recipes)
        self._register(RecipeKind.POTION, rules.potion_recipes)
        self._register(RecipeKind.EQUIPMENT, rules.equipment_recipes)

    def _register(self, kind: RecipeKind, recipes) -> None:
        table = self._by_kind[kind]
        for recipe in recipes:
            if recipe.id in table:
                raise ValueError(f"Duplicate {kind.value} recipe id: {recipe.id}")
            table[recipe.id] = recipe

    def get(self, kind: RecipeKind, recipe_id: str) -> Recipe | None:
        return self._by_kind[RecipeKind(kind)].get(str(recipe_id))

    def food(self, recipe_id: str) -> FoodRecipe | None:
        return self._by_kind[RecipeKind.FOOD].get(str(recipe_id))  # type: ignore[return-value]

    def potion(self, recipe_id: str) -> PotionRecipe | None:
        return self._by_kind[RecipeKind.POTION].get(str(recipe_id))  # type: ignore[return-value]

    def equipment(self, recipe_id: str) -> EquipmentRecipe | None:
        return self._by_kind[RecipeKind.EQUIPMENT].get(str(recipe_id))  # type: ignore[return-value]

    def all(self, kind: RecipeKind) -> list[Recipe]:
        return list(self._by_kind[RecipeKind(kind)].values())

    def display_name(self, recipe_id: str) -> str:
        """Resolve an id from any table to its display name, falling back to the id itself."""
        for table in self._by_kind.values():
            recipe = table.get(str(recipe_id))
            if recipe is not None:
                return recipe.name
        return str(recipe_id)

    def equipment_name(self, recipe_id: str) -> str | None:
        recipe = self.equipment(recipe_id)
        return recipe.name if recipe is not None else None
