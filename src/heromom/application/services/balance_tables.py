from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from heromom.domain.models.dialogue import DialogueType
from heromom.domain.models.equipment import EquipmentGrade, EquipmentSlot
from heromom.domain.models.items import BUFF_ALL, HP_STAT, FoodBuff, PotionEffect, StatType
from heromom.domain.models.materials import MaterialKey
from heromom.domain.models.son_action import SonAction


M = MaterialKey


@dataclass(frozen=True)
class FoodRecipe:
    id: str
    name: str
    hunger_restore: int
    materials: Mapping[MaterialKey, int]
    unlock_level: int = 0
    hp_restore: int = 0
    temp_buff: FoodBuff | None = None


@dataclass(frozen=True)
class PotionRecipe:
    id: str
    name: str
    effect: PotionEffect
    materials: Mapping[MaterialKey, int]
    unlock_level: int = 0
    stat: str | None = None
    value: int = 0


@dataclass(frozen=True)
class EquipmentRecipe:
    id: str
    name: str
    slot: EquipmentSlot
    base_stats: Mapping[str, int]
    materials: Mapping[MaterialKey, int]
    unlock_level: int = 0


@dataclass(frozen=True)
class EnhancementLevel:
    level: int
    stones_required: int
    gold_cost: int
    success_rate: float
    stat_bonus: float


@dataclass(frozen=True)
class MaintenanceRecipe:
    materials: Mapping[MaterialKey, int]
    restore: int


@dataclass(frozen=True)
class TierRates:
    min_level: int
    max_level: int
    rates: Mapping[str, float]


@dataclass(frozen=True)
class LevelUpEntry:
    level: int
    exp_required: int
    hp_gain: int
    stat_gains: Mapping[str, int]


@dataclass(frozen=True)
class AdventureTier:
    min_level: int
    max_level: int
    duration_ms: int
    battles: tuple[int, int]


@dataclass(frozen=True)
class EnemyTier:
    min_level: int
    max_level: int
    enemy_power: tuple[int, int]
    boss_chance: float


@dataclass(frozen=True)
class LootEntry:
    item: MaterialKey
    chance: float
    min: int
    max: int


@dataclass(frozen=True)
class BookTemplate:
    name: str
    stat: StatType
    value: int
    min_level: int


@dataclass(frozen=True)
class JobLevel:
    level: int
    gold_reward: int
    cooldown_seconds: int
    exp_required: int


@dataclass(frozen=True)
class CropInfo:
    produce: MaterialKey
    yield_min: int
    yield_max: int


@dataclass(frozen=True)
class ShopItem:
    id: str
    name: str
    gold_cost: int
    book: BookTemplate | None = None
    material: MaterialKey | None = None
    amount: int = 0


# --- Son behaviour -------------------------------------------------------

TICK_SECONDS = 2.0
HUNGER_DECAY_PER_TICK = 0.1
STARVATION_HP_LOSS = 1

DEPARTURE_HUNGER_THRESHOLD = 80
DEPARTURE_HP_THRESHOLD = 0.8
DEPARTURE_SKIP_CHANCE = 0.6

SLEEP_HP_PER_TICK = 3
REST_HP_PER_TICK = 2
TRAINING_EXP_MIN = 8
TRAINING_EXP_MAX = 12

ACTION_DURATIONS: dict[SonAction, tuple[int, int]] = {
    SonAction.SLEEPING: (8, 12),
    SonAction.EATING: (5, 7),
    SonAction.TRAINING: (6, 10),
    SonAction.READING: (7, 10),
    SonAction.RESTING: (5, 8),
    SonAction.DRINKING_POTION: (3, 4),
    SonAction.DEPARTING: (3, 4),
}

LEVEL_CAP = 20

# --- Dialogue ------------------------------------------------------------

DIALOGUE_TRIGGER_CHANCE: dict[DialogueType, float] = {
    DialogueType.EMOTION: 0.08,
    DialogueType.BEDTIME: 0.25,
    DialogueType.DAILY: 0.05,
    DialogueType.REQUEST: 0.06,
}

DIALOGUE_COOLDOWNS: dict[DialogueType, float] = {
    DialogueType.EMOTION: 60,
    DialogueType.BEDTIME: 120,
    DialogueType.DAILY: 40,
    DialogueType.REQUEST: 120,
}

DIALOGUE_AUTO_DISMISS = 20
MAX_ACTIVE_QUESTS = 2
MOOD_DECAY_INTERVAL = 120
JUST_RETURNED_TICKS = 15

# --- Durability ----------------------------------------------------------

DURABILITY_MAX = 100
DURABILITY_LOSS_PER_ADVENTURE = 15
DURABILITY_LOSS_BOSS_BONUS = 5
DURABILITY_FAILURE_MULTIPLIER = 1.5
DURABILITY_PENALTY_THRESHOLD = 30

MAINTENANCE_RECIPES: dict[EquipmentSlot, MaintenanceRecipe] = {
    EquipmentSlot.WEAPON: MaintenanceRecipe({M.IRON_ORE: 1, M.WOOD: 1, M.GOLD: 10}, restore=40),
    EquipmentSlot.ARMOR: MaintenanceRecipe({M.LEATHER: 1, M.IRON_ORE: 1, M.GOLD: 10}, restore=40),
    EquipmentSlot.ACCESSORY: MaintenanceRecipe({M.GEMS: 1, M.GOLD: 15}, restore=40),
}

# --- Refining ------------------------------------------------------------

REFINING_COST = 3
REFINING_EXP_PER_REFINE = 1
REFINING_LEVEL_CAP = 20

REFINING_LEVEL_TABLE: dict[int, int] = {
    1: 3, 2: 5, 3: 8, 4: 12, 5: 17, 6: 23, 7: 30, 8: 38, 9: 47, 10: 57,
    11: 68, 12: 80, 13: 93, 14: 107, 15: 122, 16: 140, 17: 160, 18: 180, 19: 200, 20: 999,
}

REFINING_GRADE_RATES: tuple[TierRates, ...] = (
    TierRates(1, 4, {"common": 0.80, "uncommon": 0.20, "rare": 0.00, "epic": 0.00}),
    TierRates(5, 9, {"common": 0.60, "uncommon": 0.30, "rare": 0.10, "epic": 0.00}),
    TierRates(10, 14, {"common": 0.40, "uncommon": 0.35, "rare": 0.20, "epic": 0.05}),
    TierRates(15, 99, {"common": 0.20, "uncommon": 0.35, "rare": 0.30, "epic": 0.15}),
)

REFINING_SLOT_MULTIPLIERS: dict[EquipmentSlot, dict[str, float]] = {
    EquipmentSlot.WEAPON: {"str": 1.5, "agi": 0.3},
    EquipmentSlot.ARMOR: {"def": 1.5, "hp": 3.0},
    EquipmentSlot.ACCESSORY: {"int": 0.8, "agi": 0.6, "hp": 1.5},
}

# Base stat points before the slot multiplier: REFINED_STAT_BASE + item level.
REFINED_STAT_BASE = 2

EQUIPMENT_NAMES: dict[EquipmentSlot, tuple[tuple[int, str], ...]] = {
    EquipmentSlot.WEAPON: (
        (5, "Wooden Sword"), (10, "Iron Sword"), (15, "Steel Sword"),
        (20, "Magic Sword"), (25, "Mithril Sword"), (30, "Legendary Sword"),
    ),
    EquipmentSlot.ARMOR: (
        (5, "Leather Armor"), (10, "Iron Armor"), (15, "Steel Armor"),
        (20, "Magic Armor"), (25, "Mithril Armor"), (30, "Legendary Armor"),
    ),
    EquipmentSlot.ACCESSORY: (
        (5, "Charm"), (10, "Ring"), (15, "Bracelet"),
        (20, "Magic Necklace"), (25, "Shining Pendant"), (30, "Legendary Necklace"),
    ),
}

GRADE_PREFIX: dict[EquipmentGrade, str] = {
    EquipmentGrade.COMMON: "",
    EquipmentGrade.UNCOMMON: "Fine ",
    EquipmentGrade.RARE: "Rare ",
    EquipmentGrade.EPIC: "Heroic ",
}

GRADE_MULTIPLIERS: dict[EquipmentGrade, float] = {
    EquipmentGrade.COMMON: 1.0,
    EquipmentGrade.UNCOMMON: 1.3,
    EquipmentGrade.RARE: 1.7,
    EquipmentGrade.EPIC: 2.2,
}

SMELTING_OUTPUT: dict[EquipmentGrade, int] = {
    EquipmentGrade.COMMON: 1,
    EquipmentGrade.UNCOMMON: 2,
    EquipmentGrade.RARE: 3,
    EquipmentGrade.EPIC: 5,
}
SMELTING_LEVEL_FLOOR = 10
SMELTING_LEVEL_STEP = 3

# --- Enhancement ---------------------------------------------------------

ENHANCEMENT_TABLE: dict[int, EnhancementLevel] = {
    1: EnhancementLevel(1, stones_required=1, gold_cost=20, success_rate=1.00, stat_bonus=0.10),
    2: EnhancementLevel(2, stones_required=2, gold_cost=40, success_rate=0.90, stat_bonus=0.20),
    3: EnhancementLevel(3, stones_required=3, gold_cost=70, success_rate=0.75, stat_bonus=0.35),
    4: EnhancementLevel(4, stones_required=4, gold_cost=110, success_rate=0.55, stat_bonus=0.55),
    5: EnhancementLevel(5, stones_required=6, gold_cost=160, success_rate=0.35, stat_bonus=0.80),
}

# --- Recipes -------------------------------------------------------------

EQUIPMENT_RECIPES: tuple[EquipmentRecipe, ...] = (
    EquipmentRecipe("wooden_sword", "Wooden Sword", EquipmentSlot.WEAPON, {"str": 3}, {M.WOOD: 3, M.GOLD: 10}),
    EquipmentRecipe("leather_armor", "Leather Armor", EquipmentSlot.ARMOR, {"def": 3}, {M.LEATHER: 3, M.GOLD: 15}),
    EquipmentRecipe("amulet", "Charm", EquipmentSlot.ACCESSORY, {"int": 3}, {M.RED_HERB: 2, M.GEMS: 1, M.GOLD: 20}),
    EquipmentRecipe("agility_ring", "Ring of Agility", EquipmentSlot.ACCESSORY, {"agi": 5}, {M.GEMS: 2, M.GOLD: 35}, unlock_level=5),
    EquipmentRecipe(
        "life_pendant", "Pendant of Life", EquipmentSlot.ACCESSORY, {"hp": 30, "def": 2},
        {M.GEMS: 3, M.RED_HERB: 3, M.GOLD: 60}, unlock_level=12,
    ),
)

FOOD_RECIPES: tuple[FoodRecipe, ...] = (
    FoodRecipe("bread", "Bread", 20, {M.WHEAT: 2}),
    FoodRecipe("vegetable_soup", "Vegetable Soup", 35, {M.POTATO: 1, M.CARROT: 1}, hp_restore=5),
    FoodRecipe("meat_stew", "Meat Stew", 50, {M.MEAT: 2, M.POTATO: 1}, unlock_level=8, temp_buff=FoodBuff("str", 2)),
    FoodRecipe("fruit_pie", "Fruit Pie", 30, {M.APPLE: 2, M.WHEAT: 1}, unlock_level=5, hp_restore=15),
    FoodRecipe(
        "hero_lunchbox", "Hero's Lunchbox", 70, {M.MEAT: 2, M.WHEAT: 2, M.APPLE: 1},
        unlock_level=8, temp_buff=FoodBuff(BUFF_ALL, 1),
    ),
)

POTION_RECIPES: tuple[PotionRecipe, ...] = (
    PotionRecipe("health_potion", "Health Potion", PotionEffect.INSTANT, {M.RED_HERB: 2}, 3, HP_STAT, 30),
    PotionRecipe("strength_elixir", "Strength Elixir", PotionEffect.BUFF, {M.BLUE_HERB: 2, M.MONSTER_TEETH: 1}, 3, "str", 5),
    PotionRecipe("guardian_elixir", "Guardian Elixir", PotionEffect.BUFF, {M.YELLOW_HERB: 2, M.MONSTER_SHELL: 1}, 5, "def", 5),
    PotionRecipe("swiftness_elixir", "Swiftness Elixir", PotionEffect.BUFF, {M.BLUE_HERB: 1, M.YELLOW_HERB: 1}, 5, "agi", 5),
    PotionRecipe("wisdom_elixir", "Wisdom Elixir", PotionEffect.BUFF, {M.RED_HERB: 1, M.BLUE_HERB: 1, M.GEMS: 1}, 8, "int", 5),
    PotionRecipe(
        "universal_elixir", "Universal Elixir", PotionEffect.BUFF,
        {M.RED_HERB: 2, M.BLUE_HERB: 2, M.YELLOW_HERB: 2}, 8, BUFF_ALL, 3,
    ),
)

# --- Levels & unlocks ----------------------------------------------------

LEVEL_TABLE: dict[int, LevelUpEntry] = {
    entry.level: entry
    for entry in (
        LevelUpEntry(2, 50, 10, {"str": 1, "def": 1, "agi": 0, "int": 0}),
        LevelUpEntry(3, 80, 10, {"str": 1, "def": 0, "agi": 1, "int": 0}),
        LevelUpEntry(4, 120, 10, {"str": 0, "def": 1, "agi": 0, "int": 1}),
        LevelUpEntry(5, 170, 15, {"str": 2, "def": 1, "agi": 0, "int": 0}),
        LevelUpEntry(6, 230, 15, {"str": 1, "def": 0, "agi": 1, "int": 1}),
        LevelUpEntry(7, 300, 15, {"str": 0, "def": 2, "agi": 1, "int": 0}),
        LevelUpEntry(8, 380, 15, {"str": 1, "def": 1, "agi": 1, "int": 1}),
        LevelUpEntry(9, 470, 20, {"str": 2, "def": 2, "agi": 0, "int": 0}),
        LevelUpEntry(10, 570, 20, {"str": 1, "def": 1, "agi": 1, "int": 1}),
        LevelUpEntry(11, 700, 20, {"str": 2, "def": 0, "agi": 2, "int": 0}),
        LevelUpEntry(12, 850, 20, {"str": 0, "def": 2, "agi": 0, "int": 2}),
        LevelUpEntry(13, 1020, 25, {"str": 2, "def": 1, "agi": 1, "int": 0}),
        LevelUpEntry(14, 1210, 25, {"str": 1, "def": 2, "agi": 0, "int": 1}),
        LevelUpEntry(15, 1420, 25, {"str": 2, "def": 2, "agi": 2, "int": 2}),
        LevelUpEntry(16, 1660, 30, {"str": 3, "def": 0, "agi": 2, "int": 0}),
        LevelUpEntry(17, 1930, 30, {"str": 0, "def": 3, "agi": 0, "int": 2}),
        LevelUpEntry(18, 2230, 30, {"str": 2, "def": 2, "agi": 2, "int": 0}),
        LevelUpEntry(19, 2560, 35, {"str": 2, "def": 2, "agi": 2, "int": 2}),
        LevelUpEntry(20, 2920, 40, {"str": 3, "def": 3, "agi": 3, "int": 3}),
    )
}

UNLOCK_LEVELS: dict[str, int] = {
    "alchemy": 3,
    "enhancement": 5,
    "smelting": 8,
    "farm_expansion": 10,
    "potion_shelf_expansion": 15,
}

MILESTONE_LEVELS: tuple[int, ...] = (5, 10, 15, 20)

MAX_TABLE_FOOD = 5
MAX_POTION_SHELF = 3
EXPANDED_POTION_SHELF = 5
EXPANDED_FARM_PLOTS = 6

# --- Adventure -----------------------------------------------------------

ADVENTURE_FIRST_LETTER_MS = (5_000, 15_000)
ADVENTURE_LETTER_INTERVAL_MS = (30_000, 60_000)
ADVENTURE_RETURNING_LETTER_MS = 15_000
ADVENTURE_FAILURE_LOOT_FACTOR = 0.5
ADVENTURE_RETURN_HP_PERCENT = (25, 40)
ADVENTURE_RETURN_HUNGER_LOSS = 30
MAX_STORED_LETTERS = 50

ADVENTURE_DURATION_TABLE: tuple[AdventureTier, ...] = (
    AdventureTier(1, 3, 180_000, (2, 3)),
    AdventureTier(4, 7, 210_000, (3, 4)),
    AdventureTier(8, 12, 240_000, (4, 5)),
    AdventureTier(13, 17, 270_000, (5, 6)),
    AdventureTier(18, 20, 300_000, (6, 7)),
)

ENEMY_POWER_TABLE: tuple[EnemyTier, ...] = (
    EnemyTier(1, 3, (10, 25), 0.10),
    EnemyTier(4, 7, (25, 50), 0.15),
    EnemyTier(8, 12, (50, 90), 0.20),
    EnemyTier(13, 17, (90, 150), 0.25),
    EnemyTier(18, 20, (150, 250), 0.30),
)

BOSS_POWER_MULTIPLIER = 1.8
BOSS_REWARD_MULTIPLIER = 2.5

LOOT_TABLE: tuple[LootEntry, ...] = (
    LootEntry(M.GOLD, 1.00, 5, 15),
    LootEntry(M.MONSTER_TEETH, 0.40, 1, 2),
    LootEntry(M.MONSTER_SHELL, 0.35, 1, 2),
    LootEntry(M.LEATHER, 0.30, 1, 2),
    LootEntry(M.IRON_ORE, 0.25, 1, 2),
    LootEntry(M.MEAT, 0.35, 1, 2),
)

HERB_DROP_CHANCE = 0.45
HERB_DROP_RANGE = (1, 3)
HERB_TYPES: tuple[MaterialKey, ...] = (M.RED_HERB, M.BLUE_HERB, M.YELLOW_HERB)
SEED_DROP_CHANCE = 0.20

BOSS_MITHRIL_CHANCE = 0.50
BOSS_GEMS_CHANCE = 0.40
ENHANCEMENT_STONE_CHANCE = 0.15
ENHANCEMENT_STONE_MIN_LEVEL = 5
SPECIAL_ORE_CHANCE = 0.30
SPECIAL_ORE_MIN_LEVEL = 8

BOOK_TEMPLATES: tuple[BookTemplate, ...] = (
    BookTemplate("Beginner Warrior's Guide", StatType.STR, 1, 1),
    BookTemplate("Basics of Defence", StatType.DEF, 1, 1),
    BookTemplate("Reflex Drills", StatType.AGI, 1, 1),
    BookTemplate("Intro to Magic", StatType.INT, 1, 1),
    BookTemplate("Intermediate Swordplay", StatType.STR, 2, 5),
    BookTemplate("The Iron Wall", StatType.DEF, 2, 5),
    BookTemplate("Secrets of Speed", StatType.AGI, 2, 8),
    BookTemplate("Advanced Grimoire", StatType.INT, 2, 8),
    BookTemplate("Tales of Heroes", StatType.STR, 3, 12),
    BookTemplate("The Undying Shield", StatType.DEF, 3, 12),
)
BOOK_DROP_CHANCE = 0.12
BOOK_DROP_BOSS_CHANCE = 0.35

# --- Mom's job -----------------------------------------------------------

JOB_LEVEL_TABLE: dict[int, JobLevel] = {
    row.level: row
    for row in (
        JobLevel(1, 3, 5, 5), JobLevel(2, 4, 5, 8), JobLevel(3, 5, 5, 12),
        JobLevel(4, 6, 5, 17), JobLevel(5, 8, 4, 23), JobLevel(6, 9, 4, 30),
        JobLevel(7, 10, 4, 38), JobLevel(8, 12, 4, 47), JobLevel(9, 13, 3, 57),
        JobLevel(10, 15, 3, 68), JobLevel(11, 17, 3, 80), JobLevel(12, 19, 3, 93),
        JobLevel(13, 21, 3, 107), JobLevel(14, 23, 2, 122), JobLevel(15, 25, 2, 999),
    )
}
JOB_LEVEL_CAP = 15

# --- Farm ----------------------------------------------------------------

UNIVERSAL_GROWTH_TIME = 30

CROP_DATA: dict[str, CropInfo] = {
    "wheat": CropInfo(M.WHEAT, 2, 3),
    "potato": CropInfo(M.POTATO, 2, 3),
    "carrot": CropInfo(M.CARROT, 2, 3),
    "apple": CropInfo(M.APPLE, 1, 2),
    "redHerb": CropInfo(M.RED_HERB, 1, 2),
    "blueHerb": CropInfo(M.BLUE_HERB, 1, 2),
    "yellowHerb": CropInfo(M.YELLOW_HERB, 1, 2),
}

FARM_LEVEL_EXP: dict[int, int] = {1: 5, 2: 8, 3: 12, 4: 17, 5: 23, 6: 30, 7: 38, 8: 47, 9: 57, 10: 999}
FARM_LEVEL_CAP = 10


def _crops(wheat, potato, carrot, apple, red, blue, yellow) -> dict[str, float]:
    return {
        "wheat": wheat, "potato": potato, "carrot": carrot, "apple": apple,
        "redHerb": red, "blueHerb": blue, "yellowHerb": yellow,
    }


FARM_CROP_RATES: tuple[TierRates, ...] = (
    TierRates(1, 2, _crops(0.40, 0.30, 0.30, 0, 0, 0, 0)),
    TierRates(3, 4, _crops(0.30, 0.25, 0.25, 0.10, 0.10, 0, 0)),
    TierRates(5, 6, _crops(0.20, 0.15, 0.15, 0.15, 0.15, 0.10, 0.10)),
    TierRates(7, 8, _crops(0.13, 0.13, 0.13, 0.13, 0.16, 0.16, 0.16)),
    TierRates(9, 10, _crops(0.12, 0.12, 0.12, 0.13, 0.17, 0.17, 0.17)),
)

# --- Shop ----------------------------------------------------------------

SHOP_INVENTORY: tuple[ShopItem, ...] = (
    ShopItem("shop_str_book", "Warrior's Guide", 80, book=BookTemplate("Warrior's Guide", StatType.STR, 1, 1)),
    ShopItem("shop_def_book", "Basics of Defence", 80, book=BookTemplate("Basics of Defence", StatType.DEF, 1, 1)),
    ShopItem("shop_agi_book", "Reflex Drills", 80, book=BookTemplate("Reflex Drills", StatType.AGI, 1, 1)),
    ShopItem("shop_int_book", "Intro to Magic", 80, book=BookTemplate("Intro to Magic", StatType.INT, 1, 1)),
    ShopItem("shop_seed", "Seeds x5", 50, material=M.SEED, amount=5),
)

SELL_PRICE_FOOD = 5
SELL_PRICE_POTION = 10
SELL_PRICE_BOOK = 15
SELL_PRICE_EQUIPMENT: dict[EquipmentGrade, int] = {
    EquipmentGrade.COMMON: 15,
    EquipmentGrade.UNCOMMON: 40,
    EquipmentGrade.RARE: 100,
    EquipmentGrade.EPIC: 250,
}


def refining_exp_required(level: int) -> int:
    safe_level = max(1, min(REFINING_LEVEL_CAP, int(level)))
    return REFINING_LEVEL_TABLE[safe_level]


def smelting_stones(grade: EquipmentGrade, equipment_level: int) -> int:
    base = SMELTING_OUTPUT[EquipmentGrade(grade)]
    level_bonus = max(0, (int(equipment_level) - SMELTING_LEVEL_FLOOR) // SMELTING_LEVEL_STEP)
    return base + level_bonus


def equipment_name_for(slot: EquipmentSlot, level: int) -> str:
    names = EQUIPMENT_NAMES[EquipmentSlot(slot)]
    for max_level, name in names:
        if int(level) <= max_level:
            return name
    return names[-1][1]


def job_level_data(level: int) -> JobLevel:
    return JOB_LEVEL_TABLE.get(int(level), JOB_LEVEL_TABLE[JOB_LEVEL_CAP])


@dataclass(frozen=True)
class GameRules:
    """Every balance table the engine reads, bundled so a session can swap them."""

    food_recipes: tuple[FoodRecipe, ...] = FOOD_RECIPES
    potion_recipes: tuple[PotionRecipe, ...] = POTION_RECIPES
    equipment_recipes: tuple[EquipmentRecipe, ...] = EQUIPMENT_RECIPES
    enhancement_table: Mapping[int, EnhancementLevel] = field(default_factory=lambda: dict(ENHANCEMENT_TABLE))
    refining_grade_rates: tuple[TierRates, ...] = REFINING_GRADE_RATES
    refining_cost: int = REFINING_COST
    refining_exp_per_refine: int = REFINING_EXP_PER_REFINE
    refining_exp_overflow: str = "carry"
    maintenance_recipes: Mapping[EquipmentSlot, MaintenanceRecipe] = field(
        default_factory=lambda: dict(MAINTENANCE_RECIPES)
    )
    grade_multipliers: Mapping[EquipmentGrade, float] = field(default_factory=lambda: dict(GRADE_MULTIPLIERS))
    durability_penalty_threshold: int = DURABILITY_PENALTY_THRESHOLD
    departure_hunger_threshold: float = DEPARTURE_HUNGER_THRESHOLD
    departure_hp_threshold: float = DEPARTURE_HP_THRESHOLD
    max_active_quests: int = MAX_ACTIVE_QUESTS
    dialogue_auto_dismiss: float = DIALOGUE_AUTO_DISMISS
    tick_seconds: float = TICK_SECONDS

    def __post_init__(self) -> None:
        if self.refining_exp_overflow not in {"carry", "discard"}:
            raise ValueError(f"Unsupported refining exp overflow policy: {self.refining_exp_overflow}")
        if int(self.refining_cost) <= 0:
            raise ValueError("Refining cost must be positive")


DEFAULT_RULES = GameRules()
