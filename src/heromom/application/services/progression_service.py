from __future__ import annotations

import logging
from typing import List

from heromom.application.services.balance_tables import (
    EXPANDED_FARM_PLOTS,
    EXPANDED_POTION_SHELF,
    LEVEL_CAP,
    LEVEL_TABLE,
    MILESTONE_LEVELS,
    UNLOCK_LEVELS,
)
from heromom.application.services.dialogue_content import MILESTONE_MESSAGES
from heromom.application.services.event_bus import EventBus
from heromom.domain.events import SonLeveledUp
from heromom.domain.models.game_state import FarmPlot, GameState


logger = logging.getLogger(__name__)


def apply_unlocks(state: GameState) -> List[str]:
    """Flip every system unlock the son's level has reached; returns milestone messages."""
    level = state.son.stats.level
    unlocks = state.unlocks
    messages: List[str] = []

    if level >= UNLOCK_LEVELS["alchemy"] and not unlocks.alchemy:
        unlocks.alchemy = True
        messages.append("Alchemy unlocked: potions can now be brewed.")
    if level >= UNLOCK_LEVELS["enhancement"] and not unlocks.enhancement:
        unlocks.enhancement = True
        messages.append("Enhancement unlocked at the blacksmith.")
    if level >= UNLOCK_LEVELS["smelting"] and not unlocks.smelting:
        unlocks.smelting = True
        messages.append("Smelting unlocked at the blacksmith.")
    if level >= UNLOCK_LEVELS["farm_expansion"] and unlocks.farm_slots < EXPANDED_FARM_PLOTS:
        unlocks.farm_slots = EXPANDED_FARM_PLOTS
        while len(state.farm.plots) < EXPANDED_FARM_PLOTS:
            state.farm.plots.append(FarmPlot())
        state.farm.max_plots = EXPANDED_FARM_PLOTS
        messages.append(f"The farm now has {EXPANDED_FARM_PLOTS} plots.")
    if level >= UNLOCK_LEVELS["potion_shelf_expansion"] and unlocks.potion_slots < EXPANDED_POTION_SHELF:
        unlocks.potion_slots = EXPANDED_POTION_SHELF
        messages.append(f"The potion shelf now holds {EXPANDED_POTION_SHELF} potions.")

    for milestone in MILESTONE_LEVELS:
        if level >= milestone and not unlocks.milestones.get(milestone):
            unlocks.milestones[milestone] = True
            messages.append(MILESTONE_MESSAGES.get(milestone, f"Milestone reached: level {milestone}."))
    return messages


def check_level_up(state: GameState, event_bus: EventBus | None = None) -> tuple[int, List[str]]:
    """Spend banked exp on as many levels as it covers.

    Excess exp carries into the next level. At the cap the exp bar keeps
    filling but nothing else changes.
    """
    stats = state.son.stats
    start_level = stats.level
    messages: List[str] = []

    while stats.exp >= stats.max_exp and stats.level < LEVEL_CAP:
        stats.exp -= stats.max_exp
        stats.level += 1
        entry = LEVEL_TABLE.get(stats.level)
        if entry is not None:
            stats.max_hp += entry.hp_gain
            for stat, gain in entry.stat_gains.items():
                stats.add_stat(stat, gain)
        stats.hp = stats.max_hp
        following = LEVEL_TABLE.get(stats.level + 1)
        if following is not None:
            stats.max_exp = following.exp_required
        messages.append(f"Your son reached level {stats.level}!")
        messages.extend(apply_unlocks(state))

    gained = stats.level - start_level
    if gained:
        logger.info("Son leveled up %s -> %s", start_level, stats.level)
        if event_bus is not None:
            event_bus.publish(SonLeveledUp(from_level=start_level, to_level=stats.level))
    return gained, messages
