from __future__ import annotations

import logging
import random

from heromom.application.dtos import FarmResult, IntentOutcome
from heromom.application.services.balance_tables import (
    CROP_DATA,
    FARM_CROP_RATES,
    FARM_LEVEL_CAP,
    FARM_LEVEL_EXP,
    UNIVERSAL_GROWTH_TIME,
)
from heromom.application.services.probability_tables import draw_from_table
from heromom.domain.models.game_state import FarmPlot, GameState
from heromom.domain.models.materials import MaterialKey
from heromom.domain.models.timekeeping import WallClockMs


logger = logging.getLogger(__name__)

BONUS_SEED_CHANCE = 0.5
FARM_EXP_PER_HARVEST = 1


def crop_progress(plot: FarmPlot, now: WallClockMs) -> float:
    """Growth fraction in [0, 1], derived from the planting timestamp."""
    if plot.crop is None or plot.planted_at is None:
        return 0.0
    if plot.ready or plot.growth_time <= 0:
        return 1.0
    elapsed = (int(now) - int(plot.planted_at)) / 1000.0
    return max(0.0, min(1.0, elapsed / plot.growth_time))


class FarmService:
    def __init__(self, rng: random.Random) -> None:
        self.rng = rng

    def _plot(self, state: GameState, plot_index: int) -> FarmPlot | None:
        farm = state.farm
        if not 0 <= plot_index < min(farm.max_plots, len(farm.plots)):
            return None
        return farm.plots[plot_index]

    def can_plant(self, state: GameState, plot_index: int) -> bool:
        plot = self._plot(state, plot_index)
        return plot is not None and plot.is_empty and state.inventory.count(MaterialKey.SEED) >= 1

    def plant(self, state: GameState, plot_index: int, now: WallClockMs) -> FarmResult:
        plot = self._plot(state, plot_index)
        if plot is None:
            return FarmResult(IntentOutcome.NOT_FOUND, [f"There is no plot {plot_index}."], plot_index=plot_index)
        if not self.can_plant(state, plot_index):
            reason = "That plot is already planted." if not plot.is_empty else "You have no seeds."
            return FarmResult(IntentOutcome.BLOCKED, [reason], plot_index=plot_index)
        state.inventory.add(MaterialKey.SEED, -1)
        crop = draw_from_table(FARM_CROP_RATES, state.farm.farm_level, self.rng)
        state.farm.plots[plot_index] = FarmPlot(
            crop=crop,
            planted_at=now,
            growth_time=float(UNIVERSAL_GROWTH_TIME),
        )
        return FarmResult(IntentOutcome.SUCCESS, [f"Planted a seed. It's sprouting into {crop}!"], plot_index=plot_index, crop=crop)

    def tick(self, state: GameState, now: WallClockMs) -> int:
        ripened = 0
        for plot in state.farm.plots:
            if plot.crop is None or plot.planted_at is None or plot.ready:
                continue
            if (int(now) - int(plot.planted_at)) / 1000.0 >= plot.growth_time:
                plot.ready = True
                ripened += 1
        return ripened

    def can_harvest(self, state: GameState, plot_index: int) -> bool:
        plot = self._plot(state, plot_index)
        return plot is not None and plot.crop is not None and plot.ready

    def harvest(self, state: GameState, plot_index: int) -> FarmResult:
        plot = self._plot(state, plot_index)
        if plot is None:
            return FarmResult(IntentOutcome.NOT_FOUND, [f"There is no plot {plot_index}."], plot_index=plot_index)
        if not self.can_harvest(state, plot_index):
            return FarmResult(IntentOutcome.BLOCKED, ["Nothing is ready to harvest there."], plot_index=plot_index)

        crop = plot.crop
        info = CROP_DATA[crop]
        amount = self.rng.randint(info.yield_min, info.yield_max)
        harvested = {info.produce: amount}
        state.inventory.add(info.produce, amount)
        if self.rng.random() < BONUS_SEED_CHANCE:
            state.inventory.add(MaterialKey.SEED, 1)
            harvested[MaterialKey.SEED] = 1
        state.farm.plots[plot_index] = FarmPlot()

        messages = [f"Harvested {amount} {info.produce.value}."]
        if self._gain_farm_exp(state, FARM_EXP_PER_HARVEST):
            messages.append(f"The farm reached level {state.farm.farm_level}.")
        return FarmResult(IntentOutcome.SUCCESS, messages, plot_index=plot_index, crop=crop, harvested=harvested)

    def _gain_farm_exp(self, state: GameState, amount: int) -> bool:
        farm = state.farm
        if farm.farm_level >= FARM_LEVEL_CAP:
            return False
        farm.farm_exp += amount
        leveled_up = False
        while farm.farm_exp >= farm.farm_max_exp and farm.farm_level < FARM_LEVEL_CAP:
            farm.farm_exp -= farm.farm_max_exp
            farm.farm_level += 1
            farm.farm_max_exp = FARM_LEVEL_EXP[farm.farm_level]
            leveled_up = True
        if leveled_up:
            logger.info("Farm reached level %s", farm.farm_level)
        return leveled_up
