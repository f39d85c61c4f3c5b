from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Tuple

from esper import World

from match3.components.board import Board
from match3.components.board_settings import BoardSettings
from match3.components.board_state import BoardState
from match3.components.grid import Grid
from match3.components.piece import Piece, PieceView, Position
from match3.components.session import Session
from match3.components.snapshot import GravityMove
from match3.components.symbol_kind_registry import SymbolKindRegistry
from match3.components.symbol_kinds import SymbolKinds
from match3.systems.match_detection import board_contains_match

KindPicker = Callable[[], str]


@dataclass(slots=True)
class RefillResult:
    removed: List[PieceView] = field(default_factory=list)
    moves: List[GravityMove] = field(default_factory=list)
    spawned: List[PieceView] = field(default_factory=list)


# ----------------------------------------------------------------------
# World lookups
# ----------------------------------------------------------------------

def get_symbol_kinds(world: World) -> SymbolKinds:
    for entity, _ in world.get_component(SymbolKindRegistry):
        return world.component_for_entity(entity, SymbolKinds)
    raise RuntimeError("SymbolKinds definitions not found")


def get_board_entity(world: World) -> int:
    for entity, _ in world.get_component(Board):
        return entity
    raise RuntimeError("Board entity not found")


def get_board(world: World) -> Board:
    return world.component_for_entity(get_board_entity(world), Board)


def get_board_settings(world: World) -> BoardSettings:
    return world.component_for_entity(get_board_entity(world), BoardSettings)


def get_board_state(world: World) -> BoardState:
    return world.component_for_entity(get_board_entity(world), BoardState)


def get_grid(world: World) -> Grid:
    grid = get_board(world).grid
    if grid is None:
        raise RuntimeError("Board has not been generated yet")
    return grid


def get_session(world: World) -> Session:
    for _, session in world.get_component(Session):
        return session
    raise RuntimeError("Session not found")


def world_rng(world: World) -> random.Random:
    candidate = getattr(world, "random", None)
    if isinstance(candidate, random.Random):
        return candidate
    rng = random.Random()
    setattr(world, "random", rng)
    return rng


def random_kind_picker(world: World) -> KindPicker:
    """Return a callable drawing uniformly from the stage's spawnable kinds."""
    registry = get_symbol_kinds(world)
    rng = world_rng(world)

    def pick() -> str:
        return rng.choice(registry.spawnable_kinds())

    return pick


# ----------------------------------------------------------------------
# Grid algorithms
# ----------------------------------------------------------------------

def is_adjacent(a: Position, b: Position) -> bool:
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1


def can_swap(grid: Grid, a: Position, b: Position) -> bool:
    for pos in (a, b):
        if not grid.in_bounds(pos):
            return False
        cell = grid.cell(pos)
        if not cell.usable or cell.piece is None:
            return False
    return True


def swap_creates_match(grid: Grid, a: Position, b: Position, **scan_kwargs) -> bool:
    """Tentatively swap a and b, rescan, and swap back."""
    if not can_swap(grid, a, b):
        return False
    grid.swap(a, b)
    try:
        return board_contains_match(grid, **scan_kwargs)
    finally:
        grid.swap(a, b)


def valid_swaps(grid: Grid, **scan_kwargs) -> Iterator[Tuple[Position, Position]]:
    """Yield adjacent swaps that would produce a match (each pair once)."""
    for x, y in grid.positions():
        for nx, ny in ((x + 1, y), (x, y + 1)):
            if swap_creates_match(grid, (x, y), (nx, ny), **scan_kwargs):
                yield (x, y), (nx, ny)


def has_valid_move(grid: Grid, **scan_kwargs) -> bool:
    return next(valid_swaps(grid, **scan_kwargs), None) is not None


def surrounding_positions(grid: Grid, center: Position, radius: int) -> List[Position]:
    """Occupied usable cells within a square radius of center, center excluded."""
    cx, cy = center
    found: List[Position] = []
    for y in range(max(0, cy - radius), min(grid.height - 1, cy + radius) + 1):
        for x in range(max(0, cx - radius), min(grid.width - 1, cx + radius) + 1):
            if (x, y) == center:
                continue
            cell = grid.get(x, y)
            if cell.usable and cell.piece is not None:
                found.append((x, y))
    return found


def apply_gravity(grid: Grid) -> List[GravityMove]:
    """Compact every column downward, skipping holes and preserving order."""
    moves: List[GravityMove] = []
    for x in range(grid.width):
        column = [y for y in range(grid.height) if grid.is_usable((x, y))]
        pieces: List[Piece] = [p for p in (grid.piece_at((x, y)) for y in column) if p is not None]
        for index, piece in enumerate(pieces):
            target = (x, column[index])
            if piece.position == target:
                continue
            source = piece.position
            grid.move(source, target)
            moves.append(GravityMove(source=source, target=target, piece_id=piece.piece_id, kind=piece.kind))
    return moves


def refill_empty_cells(grid: Grid, pick_kind: KindPicker) -> List[PieceView]:
    """Spawn a fresh piece in every empty usable cell, bottom-most first per column."""
    spawned: List[PieceView] = []
    for x in range(grid.width):
        for y in range(grid.height):
            cell = grid.get(x, y)
            if not cell.usable or cell.piece is not None:
                continue
            spawned.append(grid.place((x, y), pick_kind()).view())
    return spawned


def remove_and_refill(grid: Grid, positions: List[Position], pick_kind: KindPicker) -> RefillResult:
    """Remove pieces at positions, apply gravity, and spawn replacements at the top."""
    result = RefillResult()
    for pos in sorted(set(positions)):
        piece = grid.remove(pos)
        if piece is not None:
            result.removed.append(piece.view())
    result.moves = apply_gravity(grid)
    result.spawned = refill_empty_cells(grid, pick_kind)
    grid.check_invariants()
    return result
