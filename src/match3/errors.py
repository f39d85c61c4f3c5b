"""Exception taxonomy raised by the grid model and the resolution engine."""
from __future__ import annotations

from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:
    from match3.components.grid import Grid

Position = Tuple[int, int]


class Match3Error(Exception):
    """Base class for every error raised by the engine."""


class OutOfBounds(Match3Error, IndexError):
    """A coordinate lies outside the grid."""

    def __init__(self, position: Position, width: int, height: int) -> None:
        super().__init__(f"position {position} outside {width}x{height} grid")
        self.position = position
        self.width = width
        self.height = height


class InvalidSwap(Match3Error, ValueError):
    """Swap targets are not adjacent, unusable, or empty."""


class InvalidActivation(InvalidSwap):
    """The targeted piece is not a consumable."""


class BoardGenerationExhausted(Match3Error, RuntimeError):
    """No match-free, playable board could be generated within the retry budget."""

    def __init__(self, attempts: int, last_candidate: "Grid | None" = None) -> None:
        super().__init__(f"unable to generate a playable board after {attempts} attempts")
        self.attempts = attempts
        self.last_candidate = last_candidate


class ReentrantOperation(Match3Error):
    """A request arrived while the board was not idle."""


class InvariantViolation(Match3Error, AssertionError):
    """Grid bookkeeping is inconsistent (always a programming error)."""
