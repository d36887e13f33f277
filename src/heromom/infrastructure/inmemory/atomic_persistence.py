from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any

from heromom.domain.models.game_state import GameState


def create_inmemory_atomic_persistor(state_repo) -> Callable[[Callable[[GameState], Any]], Any]:
    def _persist(operation: Callable[[GameState], Any]) -> Any:
        snapshot = copy.deepcopy(getattr(state_repo, "_state", None))
        try:
            state = state_repo.load_or_raise()
            result = operation(state)
            state_repo.save(state)
            return result
        except Exception:
            if hasattr(state_repo, "_state"):
                state_repo._state = snapshot
            raise

    return _persist
