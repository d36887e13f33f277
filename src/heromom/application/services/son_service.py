from __future__ import annotations

import logging
import random

from heromom.application.services.balance_tables import (
    ACTION_DURATIONS,
    DEFAULT_RULES,
    DEPARTURE_SKIP_CHANCE,
    HUNGER_DECAY_PER_TICK,
    REST_HP_PER_TICK,
    SLEEP_HP_PER_TICK,
    STARVATION_HP_LOSS,
    TRAINING_EXP_MAX,
    TRAINING_EXP_MIN,
    GameRules,
)
from heromom.application.services.dialogue_content import SON_LINES, pick_line
from heromom.application.services.equipment_service import stat_total
from heromom.domain.models.equipment import EQUIPMENT_SLOTS
from heromom.domain.models.game_state import GameState
from heromom.domain.models.items import BUFF_ALL, HP_STAT, PotionEffect, TempBuff
from heromom.domain.models.son_action import SonAction


logger = logging.getLogger(__name__)

CRITICAL_HP_RATIO = 0.3
HUNGRY_THRESHOLD = 20
RECOVER_HP_RATIO = 0.8
READ_CHANCE = 0.4
TRAIN_CHANCE = 0.6
DEFAULT_ACTION_DURATION = (2, 4)


class SonService:
    """Default decision policy for the son while he is at home.

    Each call to ``tick`` advances one driver step: needs decay, the current
    action's timer runs down, and when it finishes the next action is chosen.
    """

    def __init__(self, rng: random.Random, rules: GameRules = DEFAULT_RULES) -> None:
        self.rng = rng
        self.rules = rules

    def can_depart(self, state: GameState) -> bool:
        stats = state.son.stats
        return (
            stats.hunger >= float(self.rules.departure_hunger_threshold)
            and stats.hp_ratio >= float(self.rules.departure_hp_threshold)
        )

    def departure_due(self, state: GameState) -> bool:
        son = state.son
        return son.is_home and son.current_action == SonAction.DEPARTING and son.action_timer <= 0

    def tick(self, state: GameState, delta_seconds: float | None = None) -> None:
        son = state.son
        if not son.is_home:
            return
        stats = son.stats

        stats.hunger = max(0.0, stats.hunger - HUNGER_DECAY_PER_TICK)
        if stats.hunger <= 0:
            stats.hp = max(1, stats.hp - STARVATION_HP_LOSS)
            son.dialogue = pick_line(self.rng, SON_LINES.get("no_food"))

        if son.action_timer > 0:
            level_bonus = stats.level // 5
            if son.current_action == SonAction.SLEEPING:
                stats.hp = min(stats.max_hp, stats.hp + SLEEP_HP_PER_TICK + level_bonus)
            elif son.current_action == SonAction.RESTING:
                stats.hp = min(stats.max_hp, stats.hp + REST_HP_PER_TICK + level_bonus)

            step = float(self.rules.tick_seconds if delta_seconds is None else delta_seconds)
            son.action_timer = max(0.0, son.action_timer - step)
            if son.action_timer > 0:
                return
            # The departing timer is picked up by the driver, which starts the adventure.
            if son.current_action == SonAction.DEPARTING:
                return
            self.finish_action(state)
            son.current_action = SonAction.IDLE

        son.dialogue_state.ticks_since_return += 1
        self.decide_next_action(state)

    # --- Decision tree -------------------------------------------------------

    def decide_next_action(self, state: GameState) -> SonAction:
        son = state.son
        home = state.home
        hp_ratio = son.stats.hp_ratio

        if hp_ratio < CRITICAL_HP_RATIO:
            if any(potion.is_healing for potion in home.potion_shelf):
                return self.start_action(state, SonAction.DRINKING_POTION)
            return self.start_action(state, SonAction.SLEEPING)

        if son.stats.hunger < HUNGRY_THRESHOLD:
            if home.table:
                return self.start_action(state, SonAction.EATING)
            return self.start_action(state, SonAction.RESTING)

        if self.can_depart(state):
            if self.rng.random() < DEPARTURE_SKIP_CHANCE:
                if home.desk and self.rng.random() < READ_CHANCE:
                    return self.start_action(state, SonAction.READING)
                if self.rng.random() < TRAIN_CHANCE:
                    return self.start_action(state, SonAction.TRAINING)
                return self.start_action(state, SonAction.RESTING)
            return self.prepare_departure(state)

        if hp_ratio < RECOVER_HP_RATIO:
            return self.start_action(state, SonAction.SLEEPING)

        if son.stats.hunger < float(self.rules.departure_hunger_threshold) and home.table:
            return self.start_action(state, SonAction.EATING)

        if home.desk and self.rng.random() < READ_CHANCE:
            return self.start_action(state, SonAction.READING)

        if self.rng.random() < TRAIN_CHANCE:
            return self.start_action(state, SonAction.TRAINING)
        return self.start_action(state, SonAction.RESTING)

    def start_action(self, state: GameState, action: SonAction) -> SonAction:
        son = state.son
        son.current_action = action
        low, high = ACTION_DURATIONS.get(action, DEFAULT_ACTION_DURATION)
        son.action_timer = float(self.rng.randint(low, high))
        line = pick_line(self.rng, SON_LINES.get(action))
        if line is not None:
            son.dialogue = line
        return action

    # --- Completion effects -------------------------------------------------------

    def finish_action(self, state: GameState) -> None:
        son = state.son
        home = state.home
        stats = son.stats
        action = son.current_action

        if action == SonAction.EATING and home.table:
            food = max(home.table, key=lambda item: item.hunger_restore)
            home.table.remove(food)
            stats.hunger = min(stats.max_hunger, stats.hunger + food.hunger_restore)
            if food.hp_restore:
                stats.hp = min(stats.max_hp, stats.hp + food.hp_restore)
            if food.temp_buff is not None:
                buff = TempBuff(stat=food.temp_buff.stat, value=food.temp_buff.value, source=food.name)
                # A second helping of the same dish refreshes its buff instead of stacking.
                son.temp_buffs = [existing for existing in son.temp_buffs if existing.source != food.name]
                son.temp_buffs.append(buff)
            logger.debug("Son ate %s", food.name)

        elif action == SonAction.TRAINING:
            stats.exp += self.rng.randint(TRAINING_EXP_MIN, TRAINING_EXP_MAX)

        elif action == SonAction.READING and home.desk:
            book = home.desk.pop(0)
            stats.add_stat(book.stat.value, book.value)
            logger.debug("Son read %s (+%s %s)", book.name, book.value, book.stat.value)

        elif action == SonAction.DRINKING_POTION:
            for index, potion in enumerate(home.potion_shelf):
                if potion.is_healing:
                    home.potion_shelf.pop(index)
                    if potion.value:
                        stats.hp = min(stats.max_hp, stats.hp + potion.value)
                    break

    # --- Departure ------------------------------------------------------------------

    def prepare_departure(self, state: GameState) -> SonAction:
        son = state.son
        home = state.home

        kept = []
        for potion in home.potion_shelf:
            if potion.effect != PotionEffect.BUFF:
                kept.append(potion)
                continue
            if potion.stat and potion.value:
                stat = BUFF_ALL if potion.stat == HP_STAT else potion.stat
                son.temp_buffs.append(TempBuff(stat=stat, value=int(potion.value), source=potion.name))
        home.potion_shelf = kept

        self.auto_equip(state)

        son.current_action = SonAction.DEPARTING
        low, high = ACTION_DURATIONS.get(SonAction.DEPARTING, (3, 4))
        son.action_timer = float(self.rng.randint(low, high))
        line = pick_line(self.rng, SON_LINES.get(SonAction.DEPARTING))
        if line is not None:
            son.dialogue = line
        logger.info("Son is getting ready to leave")
        return SonAction.DEPARTING

    def auto_equip(self, state: GameState) -> None:
        rack = state.home.equipment_rack
        gear = state.son.equipment
        for slot in EQUIPMENT_SLOTS:
            candidates = [item for item in rack if item.slot == slot]
            if not candidates:
                continue
            best = candidates[0]
            for item in candidates[1:]:
                if stat_total(item, self.rules) > stat_total(best, self.rules):
                    best = item
            current = gear.get(slot)
            if current is not None and stat_total(best, self.rules) <= stat_total(current, self.rules):
                continue
            rack.remove(best)
            if current is not None:
                rack.append(current)
            gear.set(slot, best)
