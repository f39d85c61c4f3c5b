"""Retry-bounded generation of match-free, playable boards."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Sequence

from match3.components.grid import Grid
from match3.constants import EXTRA_CONNECTION_MIN_LENGTH, MAX_TRIES_TO_GENERATE_BOARD
from match3.errors import BoardGenerationExhausted
from match3.systems.board_ops import has_valid_move
from match3.systems.match_detection import board_contains_match

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GenerationResult:
    grid: Grid
    attempts: int


def fill_random(layout: Sequence[Sequence[bool]], kinds: Sequence[str], rng: random.Random) -> Grid:
    """Build a fresh grid with a uniformly random kind in every usable cell."""
    grid = Grid.from_layout(layout)
    for pos in grid.positions():
        grid.place(pos, rng.choice(kinds))
    return grid


def generate_playable_board(
    layout: Sequence[Sequence[bool]],
    kinds: Sequence[str],
    rng: random.Random | None = None,
    max_tries: int = MAX_TRIES_TO_GENERATE_BOARD,
    *,
    extra_connection_min_length: int = EXTRA_CONNECTION_MIN_LENGTH,
) -> GenerationResult:
    """Generate a grid with no match and at least one valid swap.

    Raises BoardGenerationExhausted after max_tries rejected candidates; the last
    candidate rides on the exception so callers can fall back to it.
    """
    if not kinds:
        raise ValueError("at least one symbol kind is required")
    rng = rng or random.Random()
    scan_kwargs = {"extra_connection_min_length": extra_connection_min_length}
    candidate: Grid | None = None
    for attempt in range(1, max_tries + 1):
        candidate = fill_random(layout, kinds, rng)
        if board_contains_match(candidate, **scan_kwargs):
            continue
        if not has_valid_move(candidate, **scan_kwargs):
            continue
        logger.debug("Generated playable board after %d attempt(s)", attempt)
        return GenerationResult(grid=candidate, attempts=attempt)
    raise BoardGenerationExhausted(max_tries, candidate)
