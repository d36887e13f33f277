from __future__ import annotations

import logging
import math
import random
from typing import List

from heromom.application.dtos import ActionResult, DialogueResponseResult, IntentOutcome
from heromom.application.services.balance_tables import (
    DEFAULT_RULES,
    DIALOGUE_COOLDOWNS,
    DIALOGUE_TRIGGER_CHANCE,
    JUST_RETURNED_TICKS,
    MOOD_DECAY_INTERVAL,
    GameRules,
)
from heromom.application.services.dialogue_content import (
    ALL_DIALOGUES,
    FALLBACK_LINES,
    RESPONSE_LINES,
    pick_line,
)
from heromom.application.services.event_bus import EventBus
from heromom.application.services.quest_service import QuestService
from heromom.domain.events import TickAdvanced
from heromom.domain.models.dialogue import (
    ACCEPT_CHOICE_ID,
    DECLINE_CHOICE_ID,
    MOOD_NEUTRAL,
    ActiveDialogue,
    DialogueEffect,
    DialogueEffectKind,
    DialogueTemplate,
    DialogueType,
)
from heromom.domain.models.game_state import GameState
from heromom.domain.models.items import BUFF_ALL, TempBuff
from heromom.domain.models.son_action import SonAction, furniture_for_action
from heromom.domain.repositories import GameStateRepository


logger = logging.getLogger(__name__)

DIALOGUE_PRIORITY = 30


def _in_range(value: float, bounds: tuple[float, float] | None) -> bool:
    if bounds is None:
        return True
    low, high = bounds
    return low <= value <= high


class DialogueService:
    """Offers son dialogue on ticks and resolves the player's answers."""

    def __init__(
        self,
        state_repo: GameStateRepository | None,
        event_bus: EventBus,
        quest_service: QuestService,
        rng: random.Random,
        rules: GameRules = DEFAULT_RULES,
        templates: tuple[DialogueTemplate, ...] = ALL_DIALOGUES,
    ) -> None:
        self.state_repo = state_repo
        self.event_bus = event_bus
        self.quest_service = quest_service
        self.rng = rng
        self.rules = rules
        self.templates = templates

    def register_handlers(self) -> None:
        self.event_bus.subscribe(TickAdvanced, self.on_tick, priority=DIALOGUE_PRIORITY)

    def on_tick(self, event: TickAdvanced) -> None:
        if self.state_repo is None:
            return
        state = self.state_repo.load()
        if state is None:
            return
        self.evaluate(state, event.delta_seconds)
        self.state_repo.save(state)

    # --- Trigger evaluation ----------------------------------------------------

    def matches_conditions(self, state: GameState, template: DialogueTemplate) -> bool:
        conditions = template.conditions
        son = state.son
        stats = son.stats

        if conditions.son_actions and son.current_action not in conditions.son_actions:
            return False
        if not _in_range(stats.hp_ratio * 100.0, conditions.hp_percent_range):
            return False
        if not _in_range(float(stats.hunger), conditions.hunger_range):
            return False
        if conditions.min_level is not None and stats.level < conditions.min_level:
            return False
        if conditions.is_injured is not None and son.is_injured != conditions.is_injured:
            return False
        if conditions.just_returned and son.dialogue_state.ticks_since_return >= JUST_RETURNED_TICKS:
            return False
        if conditions.near_furniture:
            furniture = furniture_for_action(son.current_action)
            if furniture is None or furniture not in conditions.near_furniture:
                return False
        if not _in_range(float(son.dialogue_state.mood), conditions.mood_range):
            return False
        if template.type == DialogueType.REQUEST:
            if len(son.quest_state.active_quests) >= int(self.rules.max_active_quests):
                return False
        return True

    def candidates(self, state: GameState) -> List[DialogueTemplate]:
        cooldowns = state.son.dialogue_state.cooldowns
        eligible = [
            template
            for template in self.templates
            if cooldowns.get(template.type, 0.0) <= state.game_time and self.matches_conditions(state, template)
        ]
        # sorted() is stable, so authoring order breaks priority ties.
        return sorted(eligible, key=lambda template: -template.priority)

    def decay_mood(self, state: GameState, delta_seconds: float) -> None:
        now = float(state.game_time)
        if now <= 0 or delta_seconds <= 0:
            return
        before = max(0.0, now - float(delta_seconds))
        if math.floor(now / MOOD_DECAY_INTERVAL) <= math.floor(before / MOOD_DECAY_INTERVAL):
            return
        dialogue_state = state.son.dialogue_state
        if dialogue_state.mood > MOOD_NEUTRAL:
            dialogue_state.adjust_mood(-1)
        elif dialogue_state.mood < MOOD_NEUTRAL:
            dialogue_state.adjust_mood(1)

    def evaluate(self, state: GameState, delta_seconds: float = 0.0) -> DialogueTemplate | None:
        dialogue_state = state.son.dialogue_state
        son = state.son

        active = dialogue_state.active_dialogue
        if active is not None:
            if state.game_time - active.started_at >= float(self.rules.dialogue_auto_dismiss):
                logger.debug("Dialogue %s dismissed after timeout", active.template.id)
                dialogue_state.active_dialogue = None
            return None

        if not son.is_home or son.current_action == SonAction.ADVENTURING:
            return None

        self.decay_mood(state, delta_seconds)

        candidates = self.candidates(state)
        if not candidates:
            return None
        top = candidates[0]
        chance = DIALOGUE_TRIGGER_CHANCE.get(top.type, 0.0)
        if self.rng.random() > chance:
            return None

        dialogue_state.active_dialogue = ActiveDialogue(template=top, started_at=state.game_time)
        son.dialogue = top.son_text
        logger.debug("Dialogue %s offered at %.1f", top.id, state.game_time)
        return top

    # --- Player answers -----------------------------------------------------------

    def apply_effect(self, state: GameState, effect: DialogueEffect) -> None:
        stats = state.son.stats
        if effect.kind == DialogueEffectKind.HEAL:
            stats.hp = min(stats.hp + effect.value, stats.max_hp)
        elif effect.kind == DialogueEffectKind.HUNGER:
            stats.hunger = min(stats.hunger + effect.value, stats.max_hunger)
        elif effect.kind == DialogueEffectKind.BUFF:
            state.son.temp_buffs.append(TempBuff(stat=effect.stat or BUFF_ALL, value=int(effect.value), source=effect.source))
        elif effect.kind == DialogueEffectKind.EXP:
            stats.exp += int(effect.value)
        elif effect.kind == DialogueEffectKind.MOOD:
            state.son.dialogue_state.adjust_mood(int(effect.value))

    def _close(self, state: GameState, dialogue_type: DialogueType) -> None:
        dialogue_state = state.son.dialogue_state
        dialogue_state.cooldowns[dialogue_type] = float(state.game_time) + float(DIALOGUE_COOLDOWNS.get(dialogue_type, 60))
        dialogue_state.active_dialogue = None

    def respond(self, state: GameState, choice_id: str) -> DialogueResponseResult:
        dialogue_state = state.son.dialogue_state
        active = dialogue_state.active_dialogue
        if active is None:
            return DialogueResponseResult(IntentOutcome.BLOCKED, ["Your son isn't saying anything right now."], choice_id=choice_id)

        template = active.template
        choice = template.find_choice(choice_id)
        if choice is None:
            return DialogueResponseResult(
                IntentOutcome.NOT_FOUND,
                [f"Dialogue {template.id} has no choice {choice_id!r}."],
                choice_id=choice_id,
            )

        if choice.effect is not None:
            self.apply_effect(state, choice.effect)

        active.responded = True
        self._close(state, template.type)
        dialogue_state.counts[template.type] = dialogue_state.counts.get(template.type, 0) + 1

        is_request = template.type == DialogueType.REQUEST
        if is_request and choice_id == DECLINE_CHOICE_ID:
            line = pick_line(self.rng, RESPONSE_LINES.get("decline"), FALLBACK_LINES["decline"])
        else:
            line = pick_line(self.rng, RESPONSE_LINES.get(template.type.value))
        if line is not None:
            state.son.dialogue = line

        quest_id = None
        if is_request and choice_id == ACCEPT_CHOICE_ID:
            quest = self.quest_service.create_quest_from_template(state, template)
            quest_id = quest.id if quest is not None else None

        messages = [f"You said: {choice.text}"]
        if quest_id is not None:
            messages.append(f"New quest {quest_id} accepted.")
        return DialogueResponseResult(
            IntentOutcome.SUCCESS,
            messages,
            choice_id=choice_id,
            quest_id=quest_id,
            son_line=state.son.dialogue,
        )

    def dismiss(self, state: GameState) -> ActionResult:
        active = state.son.dialogue_state.active_dialogue
        if active is None:
            return ActionResult(IntentOutcome.BLOCKED, ["There is no dialogue to dismiss."])
        # Only an answer starts the cooldown.
        state.son.dialogue_state.active_dialogue = None
        return ActionResult(IntentOutcome.SUCCESS, [])


def register_dialogue_handlers(
    event_bus: EventBus,
    state_repo: GameStateRepository | None,
    quest_service: QuestService,
    rng: random.Random,
    rules: GameRules = DEFAULT_RULES,
) -> DialogueService | None:
    if state_repo is None:
        return None

    service = DialogueService(
        state_repo=state_repo,
        event_bus=event_bus,
        quest_service=quest_service,
        rng=rng,
        rules=rules,
    )
    service.register_handlers()
    return service
