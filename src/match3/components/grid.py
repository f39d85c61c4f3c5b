"""Grid model: a fixed matrix of cells that exclusively owns its pieces.

Coordinates are ``(x, y)`` with ``y == 0`` the bottom row. The grid never
triggers detection, scoring or generation; every mutation keeps each piece's
stored position equal to the coordinates of the cell holding it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from match3.components.piece import NORMAL, Piece, PieceVariant, PieceView, Position
from match3.errors import InvalidSwap, InvariantViolation, OutOfBounds


@dataclass(slots=True)
class Cell:
    usable: bool
    piece: Optional[Piece] = None


class Grid:
    def __init__(self, width: int, height: int, layout: Sequence[Sequence[bool]] | None = None) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._cells: List[List[Cell]] = []
        for y in range(height):
            row: List[Cell] = []
            for x in range(width):
                usable = True if layout is None else bool(layout[y][x])
                row.append(Cell(usable=usable))
            self._cells.append(row)

    @classmethod
    def from_layout(cls, layout: Sequence[Sequence[bool]]) -> "Grid":
        height = len(layout)
        width = len(layout[0]) if height else 0
        if any(len(row) != width for row in layout):
            raise ValueError("layout rows must all have the same width")
        return cls(width, height, layout)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def in_bounds(self, pos: Position) -> bool:
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> Cell:
        if not self.in_bounds((x, y)):
            raise OutOfBounds((x, y), self.width, self.height)
        return self._cells[y][x]

    def cell(self, pos: Position) -> Cell:
        return self.get(pos[0], pos[1])

    def is_usable(self, pos: Position) -> bool:
        return self.cell(pos).usable

    def is_empty(self, pos: Position) -> bool:
        return self.cell(pos).piece is None

    def piece_at(self, pos: Position) -> Optional[Piece]:
        return self.cell(pos).piece

    def positions(self) -> Iterator[Position]:
        """Usable positions in row-major order (y outer, x inner)."""
        for y in range(self.height):
            for x in range(self.width):
                if self._cells[y][x].usable:
                    yield (x, y)

    def pieces(self) -> Iterator[Piece]:
        for pos in self.positions():
            piece = self._cells[pos[1]][pos[0]].piece
            if piece is not None:
                yield piece

    def kind_at(self, pos: Position) -> Optional[str]:
        piece = self.piece_at(pos)
        return piece.kind if piece is not None else None

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def place(self, pos: Position, kind: str, variant: PieceVariant = NORMAL) -> Piece:
        """Create a piece in an empty usable cell."""
        cell = self.cell(pos)
        if not cell.usable:
            raise ValueError(f"cannot place a piece in unusable cell {pos}")
        if cell.piece is not None:
            raise ValueError(f"cell {pos} is already occupied")
        piece = Piece(kind=kind, position=pos, variant=variant)
        cell.piece = piece
        return piece

    def swap(self, a: Position, b: Position) -> None:
        cell_a = self.cell(a)
        cell_b = self.cell(b)
        for pos, cell in ((a, cell_a), (b, cell_b)):
            if not cell.usable:
                raise InvalidSwap(f"cell {pos} is unusable")
            if cell.piece is None:
                raise InvalidSwap(f"cell {pos} is empty")
        cell_a.piece, cell_b.piece = cell_b.piece, cell_a.piece
        cell_a.piece.position = a
        cell_b.piece.position = b

    def remove(self, pos: Position) -> Optional[Piece]:
        cell = self.cell(pos)
        piece = cell.piece
        if piece is None:
            return None
        cell.piece = None
        return piece

    def move(self, source: Position, target: Position) -> Piece:
        """Relocate a piece into an empty usable cell (gravity)."""
        src = self.cell(source)
        dst = self.cell(target)
        if src.piece is None:
            raise ValueError(f"no piece to move at {source}")
        if not dst.usable or dst.piece is not None:
            raise ValueError(f"cannot move into {target}")
        piece = src.piece
        src.piece = None
        dst.piece = piece
        piece.position = target
        return piece

    # ------------------------------------------------------------------
    # Invariants & views
    # ------------------------------------------------------------------

    def check_invariants(self) -> None:
        seen: set[int] = set()
        for y in range(self.height):
            for x in range(self.width):
                cell = self._cells[y][x]
                if cell.piece is None:
                    continue
                if not cell.usable:
                    raise InvariantViolation(f"unusable cell {(x, y)} holds a piece")
                if cell.piece.position != (x, y):
                    raise InvariantViolation(
                        f"piece {cell.piece.piece_id} at {(x, y)} believes it is at {cell.piece.position}"
                    )
                if cell.piece.piece_id in seen:
                    raise InvariantViolation(f"piece {cell.piece.piece_id} held by two cells")
                seen.add(cell.piece.piece_id)

    def snapshot(self) -> Tuple[PieceView, ...]:
        return tuple(piece.view() for piece in self.pieces())

    def kind_rows(self) -> List[List[Optional[str]]]:
        """Kinds indexed [y][x] (``None`` for holes and empty cells)."""
        return [[cell.piece.kind if cell.piece else None for cell in row] for row in self._cells]

    def __repr__(self) -> str:
        return f"Grid({self.width}x{self.height}, pieces={sum(1 for _ in self.pieces())})"
