from dataclasses import dataclass
from typing import Tuple

from match3.components.piece import PieceView, Position


@dataclass(frozen=True, slots=True)
class GravityMove:
    source: Position
    target: Position
    piece_id: int
    kind: str


@dataclass(frozen=True, slots=True)
class SettleSnapshot:
    """Everything a renderer needs to animate one settle step."""

    removed: Tuple[PieceView, ...] = ()
    moved: Tuple[GravityMove, ...] = ()
    spawned: Tuple[PieceView, ...] = ()
    score_delta: int = 0
    cascade_depth: int = 0
    reason: str = "match"
