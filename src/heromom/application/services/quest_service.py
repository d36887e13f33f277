from __future__ import annotations

import logging
import random
from typing import Iterable, List

from heromom.application.services.dialogue_content import FALLBACK_LINES, RESPONSE_LINES, pick_line
from heromom.application.services.event_bus import EventBus
from heromom.application.services.registry import RecipeRegistry
from heromom.domain.events import QuestAccepted, QuestCompleted, QuestFailed, TickAdvanced
from heromom.domain.models.dialogue import DialogueTemplate
from heromom.domain.models.equipment import Equipment, EquipmentSlot
from heromom.domain.models.game_state import GameState
from heromom.domain.models.items import BUFF_ALL, TempBuff
from heromom.domain.models.materials import MaterialKey
from heromom.domain.models.quest import (
    Quest,
    QuestObjective,
    QuestObjectiveKind,
    QuestRewardKind,
    QuestStatus,
)
from heromom.domain.models.timekeeping import game_seconds
from heromom.domain.repositories import GameStateRepository


logger = logging.getLogger(__name__)

QUEST_PROGRESS_PRIORITY = 10
QUEST_DEADLINE_PRIORITY = 20

_OBJECTIVE_DESCRIPTIONS = {
    QuestObjectiveKind.CRAFT_FOOD: "Cook food",
    QuestObjectiveKind.PLACE_FOOD: "Put food on the table",
    QuestObjectiveKind.PLACE_ANY_FOOD: "Put any food on the table",
    QuestObjectiveKind.CRAFT_EQUIPMENT: "Make equipment",
    QuestObjectiveKind.PLACE_EQUIPMENT: "Put equipment on the rack",
    QuestObjectiveKind.BREW_POTION: "Brew a potion",
    QuestObjectiveKind.PLACE_POTION: "Put a potion on the shelf",
    QuestObjectiveKind.PLACE_BOOK: "Put a book on the desk",
    QuestObjectiveKind.GATHER_MATERIAL: "Gather materials",
}


def describe_objective(objective: QuestObjective) -> str:
    return _OBJECTIVE_DESCRIPTIONS.get(objective.kind, objective.kind.value)


def _name_matches(item_name: str, wanted: str) -> bool:
    item_name = item_name.strip().lower()
    wanted = wanted.strip().lower()
    return item_name == wanted or item_name.endswith(" " + wanted)


class ObjectiveCounter:
    """Re-derives objective progress from what the household currently holds."""

    def __init__(self, registry: RecipeRegistry) -> None:
        self.registry = registry

    def _target_name(self, target_id: str) -> str:
        name = self.registry.display_name(target_id)
        if name == target_id:
            return target_id.replace("_", " ")
        return name

    def _count_named(self, items: Iterable, target_id: str) -> int:
        wanted = self._target_name(target_id)
        return sum(
            1
            for item in items
            if getattr(item, "recipe_id", None) == target_id or _name_matches(item.name, wanted)
        )

    def _count_equipment(self, items: Iterable[Equipment], target_id: str) -> int:
        slots = {slot.value for slot in EquipmentSlot}
        if target_id in slots:
            return sum(1 for item in items if item.slot.value == target_id)
        wanted = self._target_name(target_id)
        return sum(1 for item in items if _name_matches(item.name, wanted))

    def count(self, state: GameState, objective: QuestObjective) -> int:
        home, inventory = state.home, state.inventory
        kind = objective.kind
        target = objective.target_id

        if kind in (QuestObjectiveKind.CRAFT_FOOD, QuestObjectiveKind.PLACE_FOOD):
            if not target:
                return len(home.table) if kind == QuestObjectiveKind.PLACE_FOOD else len(home.table) + len(inventory.food)
            return self._count_named(list(home.table) + list(inventory.food), target)

        if kind == QuestObjectiveKind.PLACE_ANY_FOOD:
            return len(home.table)

        if kind in (QuestObjectiveKind.CRAFT_EQUIPMENT, QuestObjectiveKind.PLACE_EQUIPMENT):
            pool = list(home.equipment_rack) + list(inventory.equipment)
            if not target:
                return len(home.equipment_rack) if kind == QuestObjectiveKind.PLACE_EQUIPMENT else len(pool)
            return self._count_equipment(pool, target)

        if kind in (QuestObjectiveKind.BREW_POTION, QuestObjectiveKind.PLACE_POTION):
            if not target:
                if kind == QuestObjectiveKind.PLACE_POTION:
                    return len(home.potion_shelf)
                return len(home.potion_shelf) + len(inventory.potions)
            return self._count_named(list(home.potion_shelf) + list(inventory.potions), target)

        if kind == QuestObjectiveKind.PLACE_BOOK:
            return len(home.desk)

        if kind == QuestObjectiveKind.GATHER_MATERIAL:
            if not target:
                return 0
            try:
                return inventory.count(MaterialKey.parse(target))
            except ValueError:
                return 0

        return 0


class QuestService:
    def __init__(
        self,
        state_repo: GameStateRepository,
        event_bus: EventBus,
        registry: RecipeRegistry,
        rng: random.Random,
    ) -> None:
        self.state_repo = state_repo
        self.event_bus = event_bus
        self.counter = ObjectiveCounter(registry)
        self.rng = rng

    def register_handlers(self) -> None:
        self.event_bus.subscribe(TickAdvanced, self.on_tick_progress, priority=QUEST_PROGRESS_PRIORITY)
        self.event_bus.subscribe(TickAdvanced, self.on_tick_deadlines, priority=QUEST_DEADLINE_PRIORITY)

    def on_tick_progress(self, event: TickAdvanced) -> None:
        state = self.state_repo.load()
        if state is None:
            return
        self.check_quest_progress(state)
        self.state_repo.save(state)

    def on_tick_deadlines(self, event: TickAdvanced) -> None:
        state = self.state_repo.load()
        if state is None:
            return
        self.check_quest_deadlines(state)
        self.state_repo.save(state)

    # --- Creation ------------------------------------------------------------

    def create_quest_from_template(self, state: GameState, template: DialogueTemplate) -> Quest | None:
        data = template.quest_data
        if data is None:
            return None
        objectives = [
            QuestObjective(kind=entry.kind, target_amount=entry.target_amount, target_id=entry.target_id)
            for entry in data.objectives
        ]
        description = ", ".join(f"{describe_objective(objective)} x{objective.target_amount}" for objective in objectives)
        now = state.game_time
        quest = Quest(
            id=state.issue_id("quest"),
            request_text=template.son_text,
            description=description,
            objectives=objectives,
            deadline=game_seconds(now + float(data.deadline_seconds)),
            accepted_at=now,
            reward=data.reward,
            fail_penalty=data.fail_penalty,
        )
        log = state.son.quest_state
        log.active_quests.append(quest)
        log.last_quest_offered_at = now
        logger.info("Quest %s accepted from %s, due at %.1f", quest.id, template.id, quest.deadline)
        self.event_bus.publish(QuestAccepted(quest_id=quest.id, template_id=template.id, deadline=float(quest.deadline)))
        return quest

    # --- Per-tick checks -------------------------------------------------------

    def refresh_progress(self, state: GameState, quest: Quest) -> None:
        for objective in quest.objectives:
            objective.current_amount = self.counter.count(state, objective)

    def check_quest_progress(self, state: GameState) -> List[Quest]:
        log = state.son.quest_state
        completed: List[Quest] = []
        still_active: List[Quest] = []
        for quest in log.active_quests:
            if not quest.is_active:
                continue
            self.refresh_progress(state, quest)
            if quest.all_objectives_met():
                quest.status = QuestStatus.COMPLETED
                quest.resolved_at = state.game_time
                self.apply_reward(state, quest)
                log.archive(quest)
                completed.append(quest)
            else:
                still_active.append(quest)
        log.active_quests = still_active
        for quest in completed:
            logger.info("Quest %s completed", quest.id)
            self.event_bus.publish(
                QuestCompleted(quest_id=quest.id, reward_kind=quest.reward.kind.value, game_time=float(state.game_time))
            )
        return completed

    def check_quest_deadlines(self, state: GameState) -> List[Quest]:
        log = state.son.quest_state
        failed: List[Quest] = []
        still_active: List[Quest] = []
        for quest in log.active_quests:
            if not quest.is_active:
                continue
            if state.game_time > quest.deadline:
                quest.status = QuestStatus.FAILED
                quest.resolved_at = state.game_time
                self.apply_penalty(state, quest)
                log.archive(quest)
                failed.append(quest)
            else:
                still_active.append(quest)
        log.active_quests = still_active
        for quest in failed:
            logger.info("Quest %s failed at %.1f (deadline %.1f)", quest.id, state.game_time, quest.deadline)
            self.event_bus.publish(
                QuestFailed(quest_id=quest.id, penalty_value=abs(int(quest.fail_penalty.value)), game_time=float(state.game_time))
            )
        return failed

    # --- Rewards and penalties ---------------------------------------------------

    def apply_reward(self, state: GameState, quest: Quest) -> None:
        reward = quest.reward
        son = state.son
        if reward.kind == QuestRewardKind.BUFF:
            son.temp_buffs.append(TempBuff(stat=reward.stat or BUFF_ALL, value=int(reward.value), source=quest.description))
        elif reward.kind == QuestRewardKind.EXP:
            son.stats.exp += int(reward.value)
        elif reward.kind == QuestRewardKind.MOOD:
            son.dialogue_state.adjust_mood(int(reward.value))
        elif reward.kind == QuestRewardKind.MATERIALS:
            state.inventory.add(MaterialKey.GOLD, int(reward.value))
        son.dialogue = pick_line(self.rng, RESPONSE_LINES.get("quest_complete"), FALLBACK_LINES["quest_complete"])

    def apply_penalty(self, state: GameState, quest: Quest) -> None:
        # Penalty values are authored negative; the magnitude is what gets subtracted.
        state.son.dialogue_state.adjust_mood(-abs(int(quest.fail_penalty.value)))
        state.son.dialogue = pick_line(self.rng, RESPONSE_LINES.get("quest_fail"), FALLBACK_LINES["quest_fail"])


def register_quest_handlers(
    event_bus: EventBus,
    state_repo: GameStateRepository | None,
    registry: RecipeRegistry,
    rng: random.Random,
) -> QuestService | None:
    if state_repo is None:
        return None

    service = QuestService(
        state_repo=state_repo,
        event_bus=event_bus,
        registry=registry,
        rng=rng,
    )
    service.register_handlers()
    return service
