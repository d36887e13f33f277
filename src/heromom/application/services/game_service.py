import copy
import logging
import random
from collections.abc import Callable
from typing import Any, List, Optional

from heromom.application.dtos import (
    ActionResult,
    AdventureStatusView,
    CraftResult,
    DialogueResponseResult,
    EnhanceResult,
    FarmResult,
    IntentOutcome,
    JobResult,
    MaintainResult,
    PlacementResult,
    RefineResult,
    SmeltResult,
    TickResult,
    TradeResult,
)
from heromom.application.services.adventure_service import AdventureService
from heromom.application.services.balance_tables import DEFAULT_RULES, GameRules
from heromom.application.services.crafting_service import CraftingService
from heromom.application.services.dialogue_service import DialogueService
from heromom.application.services.economy_service import EconomyService
from heromom.application.services.equipment_service import EquipmentService
from heromom.application.services.event_bus import EventBus
from heromom.application.services.farm_service import FarmService
from heromom.application.services.new_game import initial_state
from heromom.application.services.placement_service import ItemKind, PlacementService
from heromom.application.services.progression_service import check_level_up
from heromom.application.services.quest_service import QuestService
from heromom.application.services.registry import RecipeRegistry
from heromom.application.services.son_service import SonService
from heromom.domain.events import TickAdvanced
from heromom.domain.models.game_state import GameState
from heromom.domain.models.quest import Quest, QuestStatus
from heromom.domain.models.timekeeping import game_seconds
from heromom.domain.repositories import GameStateRepository


logger = logging.getLogger(__name__)


class GameService:
    """Intent surface for one household session.

    Every ``*_intent`` runs inside the atomic persistor: a failure anywhere in
    the operation, including a tick handler, leaves the stored state as it was.
    """

    def __init__(
        self,
        state_repo: GameStateRepository,
        *,
        event_bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
        clock=None,
        rules: GameRules = DEFAULT_RULES,
        registry: Optional[RecipeRegistry] = None,
        quest_service: Optional[QuestService] = None,
        dialogue_service: Optional[DialogueService] = None,
        atomic_state_persistor: Optional[Callable[[Callable[[GameState], Any]], Any]] = None,
    ) -> None:
        if clock is None:
            raise ValueError("GameService needs a wall clock")
        self.state_repo = state_repo
        self.event_bus = event_bus or EventBus()
        self.rng = rng or random.Random()
        self.clock = clock
        self.rules = rules
        self.registry = registry or RecipeRegistry(rules)
        self.crafting = CraftingService(self.registry, self.rng, rules, self.event_bus)
        self.equipment = EquipmentService(rules)
        self.placement = PlacementService()
        self.son = SonService(self.rng, rules)
        self.adventure = AdventureService(self.rng, rules, self.event_bus)
        self.farm = FarmService(self.rng)
        self.economy = EconomyService()
        self.quests = quest_service or QuestService(state_repo, self.event_bus, self.registry, self.rng)
        self.dialogue = dialogue_service or DialogueService(state_repo, self.event_bus, self.quests, self.rng, rules)
        self.atomic_state_persistor = atomic_state_persistor

    # --- Plumbing -----------------------------------------------------------------

    def _run(self, operation: Callable[[GameState], Any]) -> Any:
        if self.atomic_state_persistor is not None:
            return self.atomic_state_persistor(operation)
        state = self.state_repo.load_or_raise()
        result = operation(state)
        self.state_repo.save(state)
        return result

    def _require_state(self) -> GameState:
        return self.state_repo.load_or_raise()

    # --- Session ------------------------------------------------------------------

    def new_game_intent(self) -> ActionResult:
        self.state_repo.save(initial_state())
        logger.info("New household created")
        return ActionResult(IntentOutcome.SUCCESS, ["A new day begins at home."])

    def snapshot(self) -> GameState:
        """Deep copy of the current document; callers may read it freely."""
        return copy.deepcopy(self._require_state())

    # --- Crafting -------------------------------------------------------------------

    def can_cook_food(self, recipe_id: str) -> bool:
        return self.crafting.can_cook_food(self._require_state(), recipe_id)

    def can_brew_potion(self, recipe_id: str) -> bool:
        return self.crafting.can_brew_potion(self._require_state(), recipe_id)

    def can_craft_equipment(self, recipe_id: str) -> bool:
        return self.crafting.can_craft_equipment(self._require_state(), recipe_id)

    def can_refine(self) -> bool:
        return self.crafting.can_refine(self._require_state())

    def can_enhance(self, equipment_id: str) -> bool:
        return self.crafting.can_enhance(self._require_state(), equipment_id)

    def can_maintain(self, equipment_id: str) -> bool:
        return self.equipment.can_maintain(self._require_state(), equipment_id)

    def can_smelt(self, equipment_id: str) -> bool:
        return self.crafting.can_smelt(self._require_state(), equipment_id)

    def cook_intent(self, recipe_id: str) -> CraftResult:
        return self._run(lambda state: self.crafting.cook_food(state, recipe_id))

    def brew_intent(self, recipe_id: str) -> CraftResult:
        return self._run(lambda state: self.crafting.brew_potion(state, recipe_id))

    def craft_equipment_intent(self, recipe_id: str) -> CraftResult:
        return self._run(lambda state: self.crafting.craft_equipment(state, recipe_id))

    def refine_intent(self) -> RefineResult:
        return self._run(self.crafting.refine)

    def enhance_intent(self, equipment_id: str) -> EnhanceResult:
        return self._run(lambda state: self.crafting.enhance(state, equipment_id))

    def maintain_intent(self, equipment_id: str) -> MaintainResult:
        return self._run(lambda state: self.equipment.maintain(state, equipment_id))

    def smelt_intent(self, equipment_id: str) -> SmeltResult:
        return self._run(lambda state: self.crafting.smelt(state, equipment_id))

    # --- Home -----------------------------------------------------------------------

    def place_intent(self, kind: ItemKind, ref: int | str) -> PlacementResult:
        return self._run(lambda state: self.placement.place(state, kind, ref))

    def remove_intent(self, kind: ItemKind, ref: int | str) -> PlacementResult:
        return self._run(lambda state: self.placement.remove(state, kind, ref))

    # --- Dialogue -------------------------------------------------------------------

    def respond_dialogue_intent(self, choice_id: str) -> DialogueResponseResult:
        return self._run(lambda state: self.dialogue.respond(state, choice_id))

    def dismiss_dialogue_intent(self) -> ActionResult:
        return self._run(self.dialogue.dismiss)

    # --- Farm, job, shop ---------------------------------------------------------------

    def plant_intent(self, plot_index: int) -> FarmResult:
        return self._run(lambda state: self.farm.plant(state, plot_index, self.clock.now_ms()))

    def harvest_intent(self, plot_index: int) -> FarmResult:
        return self._run(lambda state: self.farm.harvest(state, plot_index))

    def work_intent(self) -> JobResult:
        return self._run(lambda state: self.economy.work(state, self.clock.now_ms()))

    def buy_intent(self, shop_item_id: str) -> TradeResult:
        return self._run(lambda state: self.economy.buy(state, shop_item_id))

    def sell_intent(self, kind: ItemKind, ref: int | str) -> TradeResult:
        return self._run(lambda state: self.economy.sell(state, kind, ref))

    # --- Queries ----------------------------------------------------------------------

    def adventure_status_intent(self) -> AdventureStatusView:
        return self.adventure.status(self._require_state(), self.clock.now_ms())

    def active_quests(self) -> List[Quest]:
        return list(self._require_state().son.quest_state.active_quests)

    # --- Tick -------------------------------------------------------------------------

    def tick_intent(self, delta_seconds: float | None = None) -> TickResult:
        delta = float(self.rules.tick_seconds if delta_seconds is None else delta_seconds)
        if delta < 0:
            raise ValueError("Ticks cannot run backwards")
        return self._run(lambda state: self._tick(state, delta))

    def _tick(self, state: GameState, delta: float) -> TickResult:
        now = self.clock.now_ms()
        state.game_time = game_seconds(state.game_time + delta)
        result = TickResult(game_time=float(state.game_time), son_action=state.son.current_action.value)

        self.farm.tick(state, now)

        if state.son.is_home:
            if self.son.departure_due(state):
                adventure = self.adventure.start_adventure(state, now)
                result.adventure_started = True
                result.new_letters.extend(adventure.letters)
            else:
                self.son.tick(state, delta)

        adventure = state.adventure
        if adventure is not None and adventure.active and not result.adventure_started:
            letters, returned = self.adventure.process_adventure(state, now)
            result.new_letters.extend(letters)
            result.adventure_result = returned

        gained, messages = check_level_up(state, self.event_bus)
        result.levels_gained = gained
        result.messages.extend(messages)

        tracked = list(state.son.quest_state.active_quests)
        self.state_repo.save(state)
        self.event_bus.publish_strict(
            TickAdvanced(game_time_after=float(state.game_time), delta_seconds=delta, now_ms=int(now))
        )

        for quest in tracked:
            if quest.status == QuestStatus.COMPLETED:
                result.completed_quests.append(quest.id)
                result.messages.append(f"Quest complete: {quest.description}")
            elif quest.status == QuestStatus.FAILED:
                result.failed_quests.append(quest.id)
                result.messages.append(f"Quest failed: {quest.description}")

        result.son_action = state.son.current_action.value
        return result
