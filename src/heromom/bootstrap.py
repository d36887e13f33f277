import dataclasses
import logging
import os

from heromom.application.services.balance_tables import DEFAULT_RULES, GameRules
from heromom.application.services.dialogue_service import register_dialogue_handlers
from heromom.application.services.event_bus import EventBus
from heromom.application.services.game_service import GameService
from heromom.application.services.new_game import initial_state
from heromom.application.services.quest_service import register_quest_handlers
from heromom.application.services.registry import RecipeRegistry
from heromom.application.services.seed_policy import derive_rng
from heromom.infrastructure.clock import SystemWallClock
from heromom.infrastructure.inmemory.atomic_persistence import create_inmemory_atomic_persistor
from heromom.infrastructure.inmemory.inmemory_state_repo import InMemoryGameStateRepository


logger = logging.getLogger(__name__)


def _env_seed() -> int | None:
    raw = os.getenv("HEROMOM_SEED", "").strip()
    if not raw:
        return None
    return int(raw)


def rules_from_env(base: GameRules = DEFAULT_RULES) -> GameRules:
    overrides = {}
    tick_seconds = os.getenv("HEROMOM_TICK_SECONDS", "").strip()
    if tick_seconds:
        overrides["tick_seconds"] = float(tick_seconds)
    overflow = os.getenv("HEROMOM_REFINING_EXP_OVERFLOW", "").strip().lower()
    if overflow:
        overrides["refining_exp_overflow"] = overflow
    if not overrides:
        return base
    return dataclasses.replace(base, **overrides)


def log_level_from_env(default: str = "WARNING") -> int:
    name = os.getenv("HEROMOM_LOG_LEVEL", default).strip().upper() or default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def _build_inmemory_game_service(seed: int | None, clock, rules: GameRules) -> GameService:
    rng = derive_rng("session", {"seed": seed})
    state_repo = InMemoryGameStateRepository(initial_state())
    event_bus = EventBus()
    registry = RecipeRegistry(rules)

    quest_service = register_quest_handlers(
        event_bus=event_bus,
        state_repo=state_repo,
        registry=registry,
        rng=rng,
    )
    dialogue_service = register_dialogue_handlers(
        event_bus=event_bus,
        state_repo=state_repo,
        quest_service=quest_service,
        rng=rng,
        rules=rules,
    )

    return GameService(
        state_repo,
        event_bus=event_bus,
        rng=rng,
        clock=clock or SystemWallClock(),
        rules=rules,
        registry=registry,
        quest_service=quest_service,
        dialogue_service=dialogue_service,
        atomic_state_persistor=create_inmemory_atomic_persistor(state_repo),
    )


def create_game_service(seed: int | None = None, clock=None, rules: GameRules | None = None) -> GameService:
    if seed is None:
        seed = _env_seed()
    rules = rules or rules_from_env()
    logger.debug("Building in-memory session (seed=%s, tick=%ss)", seed, rules.tick_seconds)
    return _build_inmemory_game_service(seed, clock, rules)
