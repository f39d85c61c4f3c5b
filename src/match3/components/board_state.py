from dataclasses import dataclass
from enum import Enum, auto


class BoardMode(Enum):
    IDLE = auto()
    GENERATING = auto()
    PROCESSING_MOVE = auto()


@dataclass(slots=True)
class BoardState:
    """Busy flag for the single active board.

    PROCESSING_MOVE is held for a whole swap-to-settle cycle, cascades included;
    GENERATING only while a new grid is being built.
    """

    mode: BoardMode = BoardMode.IDLE
