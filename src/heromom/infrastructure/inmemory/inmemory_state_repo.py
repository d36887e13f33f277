from typing import Optional

from heromom.domain.models.game_state import GameState
from heromom.domain.repositories import GameStateRepository


class InMemoryGameStateRepository(GameStateRepository):
    """Holds the single session document; load hands back the live object."""

    def __init__(self, state: Optional[GameState] = None) -> None:
        self._state = state

    def load(self) -> Optional[GameState]:
        return self._state

    def save(self, state: GameState) -> None:
        self._state = state
