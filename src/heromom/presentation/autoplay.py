from __future__ import annotations

import logging
from typing import List

from heromom.application.dtos import IntentOutcome, TickResult
from heromom.application.services.game_service import GameService
from heromom.application.services.placement_service import ItemKind
from heromom.domain.models.dialogue import ACCEPT_CHOICE_ID


logger = logging.getLogger(__name__)

TABLE_TARGET = 3


class ScriptedMom:
    """A very small housekeeping routine used by the demo driver.

    Each step it answers any open dialogue (accepting requests), keeps a
    few dishes on the table, works, tends the farm and refines when stones
    allow.
    """

    def __init__(self, game_service: GameService) -> None:
        self.game = game_service

    def step(self) -> List[str]:
        notes: List[str] = []
        state = self.game.snapshot()

        active = state.son.dialogue_state.active_dialogue
        if active is not None:
            choice = active.template.find_choice(ACCEPT_CHOICE_ID) or active.template.choices[0]
            result = self.game.respond_dialogue_intent(choice.id)
            notes.extend(result.messages)

        if self.game.can_cook_food("bread") and len(state.inventory.food) < TABLE_TARGET:
            notes.extend(self.game.cook_intent("bread").messages)

        state = self.game.snapshot()
        while len(state.home.table) < TABLE_TARGET and state.inventory.food:
            result = self.game.place_intent(ItemKind.FOOD, 0)
            if result.outcome != IntentOutcome.SUCCESS:
                break
            state = self.game.snapshot()

        for item in list(state.inventory.equipment):
            self.game.place_intent(ItemKind.EQUIPMENT, item.id)
        for _ in range(len(state.inventory.books)):
            self.game.place_intent(ItemKind.BOOK, 0)

        job = self.game.work_intent()
        if job.ok:
            notes.extend(job.messages)

        state = self.game.snapshot()
        for index, plot in enumerate(state.farm.plots):
            if plot.ready:
                notes.extend(self.game.harvest_intent(index).messages)
            elif plot.is_empty and self.game.plant_intent(index).ok:
                logger.debug("Planted plot %s", index)

        if self.game.can_refine():
            notes.extend(self.game.refine_intent().messages)
        return notes


def autoplay(game_service: GameService, ticks: int, on_tick=None) -> List[TickResult]:
    mom = ScriptedMom(game_service)
    results: List[TickResult] = []
    for _ in range(max(0, int(ticks))):
        notes = mom.step()
        result = game_service.tick_intent()
        result.messages = notes + result.messages
        results.append(result)
        if on_tick is not None:
            on_tick(result)
    return results
