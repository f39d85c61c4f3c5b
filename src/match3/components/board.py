from dataclasses import dataclass
from typing import Optional, Tuple

from match3.components.grid import Grid

@dataclass(slots=True)
class Board:
    width: int
    height: int
    # usable flags indexed layout[y][x]; y == 0 is the bottom row
    layout: Tuple[Tuple[bool, ...], ...]
    grid: Optional[Grid] = None
