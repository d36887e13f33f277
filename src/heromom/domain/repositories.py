from abc import ABC, abstractmethod
from typing import Optional

from heromom.domain.models.game_state import GameState


class GameStateRepository(ABC):
    @abstractmethod
    def load(self) -> Optional[GameState]:
        raise NotImplementedError

    @abstractmethod
    def save(self, state: GameState) -> None:
        raise NotImplementedError

    def load_or_raise(self) -> GameState:
        state = self.load()
        if state is None:
            raise LookupError("No game state is loaded for this session")
        return state
