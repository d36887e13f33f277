from __future__ import annotations

import logging
import math
import random
from typing import Dict, List

from heromom.application.dtos import AdventureStatusView
from heromom.application.services.balance_tables import (
    ADVENTURE_DURATION_TABLE,
    ADVENTURE_FAILURE_LOOT_FACTOR,
    ADVENTURE_FIRST_LETTER_MS,
    ADVENTURE_LETTER_INTERVAL_MS,
    ADVENTURE_RETURN_HP_PERCENT,
    ADVENTURE_RETURN_HUNGER_LOSS,
    ADVENTURE_RETURNING_LETTER_MS,
    BOOK_DROP_BOSS_CHANCE,
    BOOK_DROP_CHANCE,
    BOOK_TEMPLATES,
    BOSS_GEMS_CHANCE,
    BOSS_MITHRIL_CHANCE,
    BOSS_POWER_MULTIPLIER,
    BOSS_REWARD_MULTIPLIER,
    DEFAULT_RULES,
    ENEMY_POWER_TABLE,
    ENHANCEMENT_STONE_CHANCE,
    ENHANCEMENT_STONE_MIN_LEVEL,
    HERB_DROP_CHANCE,
    HERB_DROP_RANGE,
    HERB_TYPES,
    LOOT_TABLE,
    MAX_STORED_LETTERS,
    SEED_DROP_CHANCE,
    SPECIAL_ORE_CHANCE,
    SPECIAL_ORE_MIN_LEVEL,
    AdventureTier,
    EnemyTier,
    GameRules,
)
from heromom.application.services.dialogue_content import LETTER_TEMPLATES, pick_line
from heromom.application.services.equipment_service import effective_stats, wear_from_adventure
from heromom.application.services.event_bus import EventBus
from heromom.application.services.materials_ledger import credit
from heromom.domain.events import AdventureReturned, AdventureStarted
from heromom.domain.models.adventure import (
    Adventure,
    AdventureResult,
    BattleOutcome,
    BattleResult,
    Letter,
)
from heromom.domain.models.dialogue import DialogueType
from heromom.domain.models.game_state import GameState
from heromom.domain.models.items import BUFF_ALL, Book
from heromom.domain.models.materials import MaterialKey
from heromom.domain.models.son_action import SonAction
from heromom.domain.models.timekeeping import WallClockMs, wall_clock_ms


logger = logging.getLogger(__name__)

COMBAT_WEIGHTS = {"str": 2.0, "def": 1.5, "agi": 1.2, "int": 0.8}
LOW_HP_LETTER_PERCENT = 30
TREASURE_LETTER_CHANCE = 0.2
FAILED_RETURN_HUNGER_FLOOR = 10
RETURN_HUNGER_FLOOR = 20

# outcome: (power ratio it must beat, hp lost % range, reward multiplier, exp base, exp per enemy level)
_OUTCOME_BANDS = (
    (BattleOutcome.OVERWHELMING, 1.5, (0, 5), 1.2, 15, 3),
    (BattleOutcome.VICTORY, 1.0, (5, 15), 1.0, 20, 4),
    (BattleOutcome.NARROW, 0.7, (15, 30), 0.8, 25, 5),
)
_DEFEAT_BAND = (BattleOutcome.DEFEAT, 0.0, (30, 50), 0.3, 5, 1)


def _tier_for(level: int, table):
    for tier in table:
        if tier.min_level <= level <= tier.max_level:
            return tier
    return table[0]


def duration_tier(level: int) -> AdventureTier:
    return _tier_for(level, ADVENTURE_DURATION_TABLE)


def enemy_tier(level: int) -> EnemyTier:
    return _tier_for(level, ENEMY_POWER_TABLE)


def combat_power(state: GameState, rules: GameRules = DEFAULT_RULES) -> float:
    """Weighted sum of base stats, worn gear and temporary buffs."""
    stats = state.son.stats
    totals = {stat: float(stats.base_stat(stat)) for stat in COMBAT_WEIGHTS}
    for item in state.son.equipment.worn():
        for stat, value in effective_stats(item, rules).items():
            if stat in totals:
                totals[stat] += value
    for buff in state.son.temp_buffs:
        if buff.stat == BUFF_ALL:
            for stat in totals:
                totals[stat] += buff.value
        elif buff.stat in totals:
            totals[buff.stat] += buff.value
    return sum(totals[stat] * weight for stat, weight in COMBAT_WEIGHTS.items())


class AdventureService:
    def __init__(
        self,
        rng: random.Random,
        rules: GameRules = DEFAULT_RULES,
        event_bus: EventBus | None = None,
    ) -> None:
        self.rng = rng
        self.rules = rules
        self.event_bus = event_bus

    # --- Battle resolution -----------------------------------------------------

    def _band(self, power: float, enemy_power: int):
        for band in _OUTCOME_BANDS:
            if power > enemy_power * band[1]:
                return band
        return _DEFEAT_BAND

    def roll_loot(self, level: int, multiplier: float, is_boss: bool, outcome: BattleOutcome) -> Dict[MaterialKey, int]:
        rng = self.rng
        loot: Dict[MaterialKey, int] = {}

        def add(key: MaterialKey, amount: int) -> None:
            loot[key] = loot.get(key, 0) + int(amount)

        level_bonus = 1 + (level - 1) * 0.15
        for entry in LOOT_TABLE:
            if rng.random() < entry.chance * multiplier:
                add(entry.item, math.ceil(rng.randint(entry.min, entry.max) * level_bonus))
        if rng.random() < HERB_DROP_CHANCE * multiplier:
            add(rng.choice(HERB_TYPES), rng.randint(*HERB_DROP_RANGE))
        if rng.random() < SEED_DROP_CHANCE * multiplier:
            add(MaterialKey.SEED, rng.randint(1, 2))
        if is_boss:
            if rng.random() < BOSS_MITHRIL_CHANCE:
                add(MaterialKey.MITHRIL, 1)
            if rng.random() < BOSS_GEMS_CHANCE:
                add(MaterialKey.GEMS, 1)
            if level >= SPECIAL_ORE_MIN_LEVEL and rng.random() < SPECIAL_ORE_CHANCE:
                add(MaterialKey.SPECIAL_ORE, 1)
        if (
            level >= ENHANCEMENT_STONE_MIN_LEVEL
            and outcome != BattleOutcome.DEFEAT
            and rng.random() < ENHANCEMENT_STONE_CHANCE
        ):
            add(MaterialKey.ENHANCEMENT_STONES, 1)
        return loot

    def roll_book(self, state: GameState, level: int, is_boss: bool, outcome: BattleOutcome) -> Book | None:
        if outcome == BattleOutcome.DEFEAT:
            return None
        chance = BOOK_DROP_BOSS_CHANCE if is_boss else BOOK_DROP_CHANCE
        if self.rng.random() >= chance:
            return None
        eligible = [template for template in BOOK_TEMPLATES if level >= template.min_level]
        if not eligible:
            return None
        template = self.rng.choice(eligible)
        return Book(id=state.issue_id("book"), name=template.name, stat=template.stat, value=template.value)

    def resolve_battle(self, state: GameState, power: float, enemy_power: int, is_boss: bool) -> BattleResult:
        stats = state.son.stats
        outcome, _, hp_range, reward_multiplier, exp_base, exp_per_level = self._band(power, enemy_power)
        hp_lost = int(math.floor(stats.max_hp * self.rng.randint(*hp_range) / 100.0))
        if is_boss:
            reward_multiplier *= BOSS_REWARD_MULTIPLIER
        enemy_level = max(1, stats.level + self.rng.randint(-1, 1))
        return BattleResult(
            outcome=outcome,
            is_boss=is_boss,
            hp_lost=hp_lost,
            exp_gained=exp_base + enemy_level * exp_per_level,
            rewards=self.roll_loot(stats.level, reward_multiplier, is_boss, outcome),
            book_drop=self.roll_book(state, stats.level, is_boss, outcome),
        )

    def simulate_battles(self, state: GameState, total_battles: int) -> List[BattleResult]:
        power = combat_power(state, self.rules)
        tier = enemy_tier(state.son.stats.level)
        results = []
        for index in range(total_battles):
            is_boss = index == total_battles - 1 and self.rng.random() < tier.boss_chance
            enemy_power = self.rng.randint(*tier.enemy_power)
            if is_boss:
                enemy_power = int(math.floor(enemy_power * BOSS_POWER_MULTIPLIER))
            results.append(self.resolve_battle(state, power, enemy_power, is_boss))
        return results

    # --- Lifecycle -------------------------------------------------------------

    def _letter(self, state: GameState, pool_key: str, now: WallClockMs, hp_percent: float, battles: int, kind: str) -> Letter:
        text = pick_line(self.rng, LETTER_TEMPLATES.get(pool_key), "...")
        return Letter(
            id=state.issue_id("letter"),
            text=text,
            timestamp=now,
            hp_percent=hp_percent,
            battles_completed=battles,
            kind=kind,
        )

    def _post(self, state: GameState, letter: Letter) -> None:
        if state.adventure is not None:
            state.adventure.letters.append(letter)
        state.letters.append(letter)
        if len(state.letters) > MAX_STORED_LETTERS:
            del state.letters[:-MAX_STORED_LETTERS]

    def start_adventure(self, state: GameState, now: WallClockMs) -> Adventure:
        son = state.son
        tier = duration_tier(son.stats.level)
        total_battles = self.rng.randint(*tier.battles)
        all_results = self.simulate_battles(state, total_battles)

        rewards: Dict[MaterialKey, int] = {}
        books: List[Book] = []
        exp_gained = 0
        hp = float(son.stats.hp)
        failed = False
        fought: List[BattleResult] = []
        for battle in all_results:
            fought.append(battle)
            exp_gained += battle.exp_gained
            for key, amount in battle.rewards.items():
                rewards[key] = rewards.get(key, 0) + amount
            if battle.book_drop is not None:
                books.append(battle.book_drop)
            hp -= battle.hp_lost
            if hp <= 0:
                failed = True
                rewards = {key: int(math.ceil(amount * ADVENTURE_FAILURE_LOOT_FACTOR)) for key, amount in rewards.items()}
                break

        son_hp_percent = 0.0 if failed else max(0.0, hp / son.stats.max_hp * 100.0)
        adventure = Adventure(
            start_time=now,
            duration=tier.duration_ms,
            battle_results=fought,
            total_battles=total_battles,
            rewards=rewards,
            book_rewards=books,
            exp_gained=exp_gained,
            failed=failed,
            son_hp_percent=son_hp_percent,
            next_letter_at=wall_clock_ms(int(now) + self.rng.randint(*ADVENTURE_FIRST_LETTER_MS)),
        )
        state.adventure = adventure
        self._post(state, self._letter(state, "start", now, 100.0, 0, "start"))

        son.is_home = False
        son.current_action = SonAction.ADVENTURING
        son.action_timer = 0.0
        logger.info(
            "Adventure started: %s battles over %ss (failed=%s)",
            total_battles,
            tier.duration_ms // 1000,
            failed,
        )
        if self.event_bus is not None:
            self.event_bus.publish(
                AdventureStarted(start_time_ms=int(now), duration_ms=tier.duration_ms, total_battles=total_battles)
            )
        return adventure

    def battle_letter(self, state: GameState, battle: BattleResult, battles_completed: int, now: WallClockMs) -> Letter:
        adventure = state.adventure
        if battle.is_boss:
            key = "boss"
        elif adventure.son_hp_percent < LOW_HP_LETTER_PERCENT:
            key = "low_hp"
        else:
            key = battle.outcome.value
        letter = self._letter(state, key, now, adventure.son_hp_percent, battles_completed, "battle")
        if battle.outcome != BattleOutcome.DEFEAT and self.rng.random() < TREASURE_LETTER_CHANCE:
            treasure = pick_line(self.rng, LETTER_TEMPLATES.get("treasure"), "")
            letter = Letter(
                id=letter.id,
                text=f"{letter.text} {treasure}".strip(),
                timestamp=letter.timestamp,
                hp_percent=letter.hp_percent,
                battles_completed=letter.battles_completed,
                kind=letter.kind,
            )
        return letter

    def process_adventure(self, state: GameState, now: WallClockMs) -> tuple[List[Letter], AdventureResult | None]:
        """Release letters for battles the clock has passed, or bring the son home."""
        adventure = state.adventure
        if adventure is None or not adventure.active:
            return [], None
        if adventure.is_due(now):
            result = self.complete_adventure(state, now)
            return [], result

        new_letters: List[Letter] = []
        if int(now) >= int(adventure.next_letter_at):
            battles_completed = int(math.floor(adventure.progress(now) * adventure.total_battles))
            if battles_completed > adventure.battles_reported and adventure.battle_results:
                index = min(battles_completed - 1, len(adventure.battle_results) - 1)
                letter = self.battle_letter(state, adventure.battle_results[index], battles_completed, now)
                self._post(state, letter)
                new_letters.append(letter)
                adventure.battles_reported = battles_completed
            adventure.next_letter_at = wall_clock_ms(int(now) + self.rng.randint(*ADVENTURE_LETTER_INTERVAL_MS))

        if adventure.remaining_ms(now) < ADVENTURE_RETURNING_LETTER_MS and not adventure.returning_letter_sent:
            letter = self._letter(state, "returning", now, adventure.son_hp_percent, adventure.total_battles, "returning")
            self._post(state, letter)
            new_letters.append(letter)
            adventure.returning_letter_sent = True
        return new_letters, None

    def complete_adventure(self, state: GameState, now: WallClockMs) -> AdventureResult:
        adventure = state.adventure
        son = state.son
        stats = son.stats

        result = AdventureResult(
            battle_results=list(adventure.battle_results),
            total_battles=adventure.total_battles,
            rewards=dict(adventure.rewards),
            book_rewards=list(adventure.book_rewards),
            exp_gained=adventure.exp_gained,
            failed=adventure.failed,
            son_hp_percent=adventure.son_hp_percent,
            letters=list(adventure.letters),
        )
        state.last_adventure_result = result

        credit(state.inventory, adventure.rewards)
        state.inventory.books.extend(adventure.book_rewards)
        stats.exp += adventure.exp_gained

        son.is_home = True
        son.current_action = SonAction.IDLE
        son.action_timer = 0.0
        son.temp_buffs = []
        son.is_injured = adventure.failed
        son.dialogue_state.ticks_since_return = 0
        son.dialogue_state.cooldowns[DialogueType.EMOTION] = 0.0

        if adventure.failed:
            stats.hp = 1
            stats.hunger = max(FAILED_RETURN_HUNGER_FLOOR, stats.hunger - ADVENTURE_RETURN_HUNGER_LOSS)
        else:
            hp_percent = self.rng.randint(*ADVENTURE_RETURN_HP_PERCENT) / 100.0
            stats.hp = max(1, int(math.floor(stats.max_hp * hp_percent)))
            stats.hunger = max(RETURN_HUNGER_FLOOR, stats.hunger - ADVENTURE_RETURN_HUNGER_LOSS)

        had_boss = any(battle.is_boss for battle in adventure.battle_results)
        wear_from_adventure(state, had_boss=had_boss, failed=adventure.failed)

        adventure.active = False
        state.adventure = None
        logger.info("Son returned home (failed=%s, exp=%s)", result.failed, result.exp_gained)
        if self.event_bus is not None:
            self.event_bus.publish(
                AdventureReturned(failed=result.failed, exp_gained=result.exp_gained, letters=len(result.letters))
            )
        return result

    def status(self, state: GameState, now: WallClockMs) -> AdventureStatusView:
        adventure = state.adventure
        if adventure is None:
            return AdventureStatusView(active=False, remaining_ms=0, progress=0.0, battles_reported=0, total_battles=0)
        return AdventureStatusView(
            active=adventure.active,
            remaining_ms=adventure.remaining_ms(now),
            progress=adventure.progress(now),
            battles_reported=adventure.battles_reported,
            total_battles=adventure.total_battles,
            letters=list(adventure.letters),
        )
