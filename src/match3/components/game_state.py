"""Game state resource describing the active high-level mode."""
from dataclasses import dataclass
from enum import Enum, auto


class GameMode(Enum):
    """High-level modes; only PLAYING awards score and consumes moves."""
    MAIN_MENU = auto()
    PLAYING = auto()
    WIN = auto()
    GAME_OVER = auto()


@dataclass
class GameState:
    """Singleton component storing the currently active game mode."""
    mode: GameMode = GameMode.MAIN_MENU
    stage_index: int = 0
