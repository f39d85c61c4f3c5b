"""Row-major detection of straight runs and super (branched) matches."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Set, Tuple

from match3.components.grid import Grid
from match3.components.piece import Piece, Position
from match3.constants import EXTRA_CONNECTION_MIN_LENGTH

RIGHT = (1, 0)
LEFT = (-1, 0)
UP = (0, 1)
DOWN = (0, -1)


class MatchOrientation(Enum):
    HORIZONTAL = auto()
    LONG_HORIZONTAL = auto()
    VERTICAL = auto()
    LONG_VERTICAL = auto()
    SUPER = auto()

    @property
    def is_horizontal(self) -> bool:
        return self in (MatchOrientation.HORIZONTAL, MatchOrientation.LONG_HORIZONTAL)

    @property
    def is_vertical(self) -> bool:
        return self in (MatchOrientation.VERTICAL, MatchOrientation.LONG_VERTICAL)


@dataclass(frozen=True, slots=True)
class MatchRun:
    pieces: Tuple[Piece, ...]
    orientation: MatchOrientation

    @property
    def length(self) -> int:
        return len(self.pieces)

    @property
    def kind(self) -> str:
        return self.pieces[0].kind

    @property
    def positions(self) -> List[Position]:
        return [piece.position for piece in self.pieces]


@dataclass(frozen=True, slots=True)
class ScanResult:
    runs: Tuple[MatchRun, ...] = ()

    @property
    def has_match(self) -> bool:
        return bool(self.runs)

    @property
    def pieces(self) -> List[Piece]:
        return [piece for run in self.runs for piece in run.pieces]

    @property
    def positions(self) -> List[Position]:
        return sorted(piece.position for piece in self.pieces)

    def __len__(self) -> int:
        return len(self.runs)


def _probe(grid: Grid, seed: Piece, direction: Position, matched: Set[Position]) -> List[Piece]:
    """Walk from seed (exclusive) while neighbours are usable, occupied, unmatched and same kind."""
    dx, dy = direction
    x, y = seed.position[0] + dx, seed.position[1] + dy
    found: List[Piece] = []
    while grid.in_bounds((x, y)):
        cell = grid.get(x, y)
        if not cell.usable or cell.piece is None:
            break
        neighbour = cell.piece
        if (x, y) in matched or neighbour.kind != seed.kind:
            break
        found.append(neighbour)
        x += dx
        y += dy
    return found


def _axis_run(grid: Grid, seed: Piece, forward: Position, backward: Position, matched: Set[Position]) -> List[Piece]:
    behind = _probe(grid, seed, backward, matched)
    ahead = _probe(grid, seed, forward, matched)
    return list(reversed(behind)) + [seed] + ahead


def check_for_match(grid: Grid, seed: Piece, matched: Set[Position] | None = None) -> MatchRun | None:
    """Return the straight run through seed, preferring the horizontal axis."""
    matched = matched if matched is not None else set()
    run = _axis_run(grid, seed, RIGHT, LEFT, matched)
    if len(run) == 3:
        return MatchRun(tuple(run), MatchOrientation.HORIZONTAL)
    if len(run) > 3:
        return MatchRun(tuple(run), MatchOrientation.LONG_HORIZONTAL)
    run = _axis_run(grid, seed, UP, DOWN, matched)
    if len(run) == 3:
        return MatchRun(tuple(run), MatchOrientation.VERTICAL)
    if len(run) > 3:
        return MatchRun(tuple(run), MatchOrientation.LONG_VERTICAL)
    return None


def check_for_super_match(
    grid: Grid,
    run: MatchRun,
    matched: Set[Position] | None = None,
    *,
    extra_connection_min_length: int = EXTRA_CONNECTION_MIN_LENGTH,
) -> MatchRun | None:
    """Merge every perpendicular branch long enough into run, or return None."""
    matched = matched if matched is not None else set()
    if run.orientation.is_horizontal:
        axis = (UP, DOWN)
    elif run.orientation.is_vertical:
        axis = (RIGHT, LEFT)
    else:
        return None
    in_run = {piece.position for piece in run.pieces}
    extras: List[Piece] = []
    for piece in run.pieces:
        branch = _probe(grid, piece, axis[1], matched) + _probe(grid, piece, axis[0], matched)
        if len(branch) >= extra_connection_min_length:
            for extra in branch:
                if extra.position not in in_run:
                    in_run.add(extra.position)
                    extras.append(extra)
    if not extras:
        return None
    return MatchRun(tuple(run.pieces) + tuple(extras), MatchOrientation.SUPER)


def scan_for_matches(
    grid: Grid,
    *,
    extra_connection_min_length: int = EXTRA_CONNECTION_MIN_LENGTH,
) -> ScanResult:
    """Scan every usable cell in row-major order and collect match runs.

    Matched positions are tracked only for the duration of this call so that a
    piece never seeds or joins two runs within one pass.
    """
    matched: Set[Position] = set()
    runs: List[MatchRun] = []
    for pos in grid.positions():
        if pos in matched:
            continue
        seed = grid.piece_at(pos)
        if seed is None:
            continue
        run = check_for_match(grid, seed, matched)
        if run is None:
            continue
        super_run = check_for_super_match(
            grid, run, matched, extra_connection_min_length=extra_connection_min_length
        )
        if super_run is not None:
            run = super_run
        matched.update(piece.position for piece in run.pieces)
        runs.append(run)
    return ScanResult(tuple(runs))


def board_contains_match(grid: Grid, **kwargs) -> bool:
    return scan_for_matches(grid, **kwargs).has_match
