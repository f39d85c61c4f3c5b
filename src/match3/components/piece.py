"""Pieces occupying usable cells and their closed set of variants."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from itertools import count
from typing import Tuple, Union

Position = Tuple[int, int]

_piece_ids = count(1)


def as_position(value) -> Position:
    """Coerce an (x, y) pair such as a JSON list into the tuple form pieces store."""
    x, y = value
    return int(x), int(y)


class ConsumableKind(Enum):
    BOMB = "bomb"


@dataclass(frozen=True, slots=True)
class Normal:
    """Plain piece that only takes part in passive matching."""


@dataclass(frozen=True, slots=True)
class Consumable:
    """Piece with a triggered effect; ``radius`` describes a bomb's blast."""

    kind: ConsumableKind
    radius: int = 0


PieceVariant = Union[Normal, Consumable]
NORMAL = Normal()


@dataclass(slots=True)
class Piece:
    kind: str
    position: Position
    variant: PieceVariant = NORMAL
    piece_id: int = field(default_factory=lambda: next(_piece_ids))

    @property
    def is_consumable(self) -> bool:
        return isinstance(self.variant, Consumable)

    def view(self) -> "PieceView":
        consumable = self.variant.kind if isinstance(self.variant, Consumable) else None
        return PieceView(
            piece_id=self.piece_id,
            kind=self.kind,
            position=self.position,
            consumable=consumable,
        )


@dataclass(frozen=True, slots=True)
class PieceView:
    """Read-only copy of a piece handed to presentation collaborators."""

    piece_id: int
    kind: str
    position: Position
    consumable: ConsumableKind | None = None
