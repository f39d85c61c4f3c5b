from __future__ import annotations

import logging
from typing import Optional, Sequence

from esper import World

from match3.components.board import Board
from match3.components.board_settings import BoardSettings
from match3.components.board_state import BoardMode, BoardState
from match3.components.game_state import GameMode
from match3.components.grid import Grid
from match3.components.piece import Consumable, ConsumableKind, Position
from match3.constants import GRID_HEIGHT, GRID_WIDTH
from match3.errors import BoardGenerationExhausted
from match3.events.bus import (
    EVENT_BOARD_GENERATED,
    EVENT_CONSUMABLE_ACTIVATE_REQUEST,
    EVENT_CONSUMABLE_SPAWN_REQUEST,
    EVENT_CONSUMABLE_SPAWNED,
    EVENT_SWAP_REQUEST,
    EVENT_SYMBOL_CLICK,
    EVENT_SYMBOL_DESELECTED,
    EVENT_SYMBOL_SELECTED,
    EventBus,
)
from match3.factories.stages import StageSpec, full_layout
from match3.systems.board_generator import generate_playable_board
from match3.systems.board_ops import (
    get_board,
    get_board_settings,
    get_grid,
    get_symbol_kinds,
    has_valid_move,
    is_adjacent,
    world_rng,
)
from match3.systems.session_system import SessionSystem
from match3.utils.board_state import board_is_idle, set_board_mode
from match3.utils.game_state import get_game_mode

logger = logging.getLogger(__name__)


class BoardSystem:
    """Owns the board entity: generation, reseeding, selection and consumable stock."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        width: int = GRID_WIDTH,
        height: int = GRID_HEIGHT,
        *,
        layout: Sequence[Sequence[bool]] | None = None,
        settings: BoardSettings | None = None,
        session_system: SessionSystem | None = None,
    ):
        self.world = world
        self.event_bus = event_bus
        self.session_system = session_system or SessionSystem(world, event_bus)
        # Create a single board entity with Board, BoardState and BoardSettings components
        board_layout = tuple(tuple(bool(v) for v in row) for row in layout) if layout else full_layout(width, height)
        self.board_entity = self.world.create_entity(
            Board(width=len(board_layout[0]), height=len(board_layout), layout=board_layout),
            BoardState(),
            settings or BoardSettings(),
        )
        self.selected: Optional[Position] = None
        self._register_consumable_kinds()
        self.event_bus.subscribe(EVENT_SYMBOL_CLICK, self.on_symbol_click)
        self.event_bus.subscribe(EVENT_CONSUMABLE_SPAWN_REQUEST, self.on_consumable_spawn_request)

    @property
    def board(self) -> Board:
        return get_board(self.world)

    @property
    def settings(self) -> BoardSettings:
        return get_board_settings(self.world)

    @property
    def grid(self) -> Grid:
        return get_grid(self.world)

    def _register_consumable_kinds(self) -> None:
        kinds = get_symbol_kinds(self.world)
        for consumable in ConsumableKind:
            if consumable.value not in kinds.scores:
                kinds.register_kind(consumable.value, 0, spawnable=False)

    # ------------------------------------------------------------------
    # Stage setup & generation
    # ------------------------------------------------------------------

    def configure(self, stage: StageSpec) -> None:
        board = self.board
        board.width = stage.width
        board.height = stage.height
        board.layout = stage.layout
        board.grid = None
        self.settings.bomb_radius = stage.bomb_radius
        get_symbol_kinds(self.world).replace(stage.symbol_scores())
        self._register_consumable_kinds()
        self.selected = None

    def generate_board(self, *, reason: str = "initial", accept_best_effort: bool | None = None) -> Grid:
        """Replace the grid with a freshly generated, match-free, playable one.

        BoardGenerationExhausted propagates unless best-effort acceptance is
        enabled, in which case the last rejected candidate is installed.
        """
        board = self.board
        settings = self.settings
        if accept_best_effort is None:
            accept_best_effort = settings.accept_best_effort_board
        kinds = get_symbol_kinds(self.world).spawnable_kinds()
        previous = set_board_mode(self.world, self.event_bus, BoardMode.GENERATING)
        best_effort = False
        try:
            try:
                result = generate_playable_board(
                    board.layout,
                    kinds,
                    world_rng(self.world),
                    settings.max_tries_to_generate_board,
                    extra_connection_min_length=settings.extra_connection_min_length,
                )
                grid, attempts = result.grid, result.attempts
            except BoardGenerationExhausted as exc:
                if not accept_best_effort or exc.last_candidate is None:
                    logger.error("Board generation exhausted after %d attempts (%s)", exc.attempts, reason)
                    raise
                logger.warning("Accepting best-effort board after %d attempts (%s)", exc.attempts, reason)
                grid, attempts, best_effort = exc.last_candidate, exc.attempts, True
        finally:
            set_board_mode(self.world, self.event_bus, previous if previous != BoardMode.GENERATING else BoardMode.IDLE)
        board.grid = grid
        self.selected = None
        logger.info("Board generated (%s) in %d attempt(s)", reason, attempts)
        self.event_bus.emit(EVENT_BOARD_GENERATED, attempts=attempts, reason=reason, best_effort=best_effort)
        return grid

    def set_grid(self, grid: Grid) -> None:
        """Install an externally built grid (fixtures, replays)."""
        grid.check_invariants()
        board = self.board
        board.width = grid.width
        board.height = grid.height
        board.layout = tuple(
            tuple(grid.get(x, y).usable for x in range(grid.width)) for y in range(grid.height)
        )
        board.grid = grid
        self.selected = None

    def ensure_playable(self, *, reason: str = "no_valid_move") -> bool:
        """Reseed the board when no swap can produce a match; returns True if it was playable."""
        settings = self.settings
        if has_valid_move(self.grid, extra_connection_min_length=settings.extra_connection_min_length):
            return True
        logger.info("No valid move left, regenerating board")
        self.generate_board(reason=reason)
        return False

    # ------------------------------------------------------------------
    # Consumables
    # ------------------------------------------------------------------

    def spawn_consumable(self, kind: ConsumableKind = ConsumableKind.BOMB, *, consume: bool = True) -> Position | None:
        """Replace a random normal piece with a consumable drawn from stock."""
        if not board_is_idle(self.world):
            return None
        session = self.session_system.session
        if session.bombs_remaining < 1:
            return None
        grid = self.grid
        position = self._find_normal_tile(grid)
        if position is None:
            logger.warning("No free tile found for %s after %d tries", kind.value, self.settings.max_tries_to_find_tile)
            return None
        if consume and not self.session_system.consume_bomb():
            return None
        grid.remove(position)
        grid.place(position, kind.value, Consumable(kind=kind, radius=self.settings.bomb_radius))
        grid.check_invariants()
        self.event_bus.emit(EVENT_CONSUMABLE_SPAWNED, position=position, kind=kind)
        return position

    def _find_normal_tile(self, grid: Grid) -> Position | None:
        positions = list(grid.positions())
        if not positions:
            return None
        rng = world_rng(self.world)
        for _ in range(self.settings.max_tries_to_find_tile):
            pos = rng.choice(positions)
            piece = grid.piece_at(pos)
            if piece is not None and not piece.is_consumable:
                return pos
        return None

    def on_consumable_spawn_request(self, sender, **kwargs):
        kind = kwargs.get('kind') or ConsumableKind.BOMB
        self.spawn_consumable(kind, consume=kwargs.get('consume', True))

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def accepts_input(self) -> bool:
        return get_game_mode(self.world) == GameMode.PLAYING and board_is_idle(self.world)

    def on_symbol_click(self, sender, **kwargs):
        x = kwargs.get('x')
        y = kwargs.get('y')
        if x is None or y is None:
            return
        if not self.accepts_input():
            logger.debug("Ignoring click at %s while board is busy", (x, y))
            return
        board = self.board
        if board.grid is None or not board.grid.in_bounds((x, y)):
            return
        piece = board.grid.piece_at((x, y))
        if piece is None:
            return
        clicked = (x, y)
        if self.selected is None and piece.is_consumable:
            self.event_bus.emit(EVENT_CONSUMABLE_ACTIVATE_REQUEST, position=clicked)
            return
        if self.selected is None:
            self._select(clicked)
        elif self.selected == clicked:
            self._deselect(reason='same_symbol')
        elif is_adjacent(self.selected, clicked):
            src = self.selected
            self._deselect(reason='swap')
            self.event_bus.emit(EVENT_SWAP_REQUEST, src=src, dst=clicked)
        else:
            # Change selection to the new symbol
            self._deselect(reason='reselect')
            self._select(clicked)

    def _select(self, pos: Position) -> None:
        self.selected = pos
        self.event_bus.emit(EVENT_SYMBOL_SELECTED, x=pos[0], y=pos[1])

    def _deselect(self, *, reason: str) -> None:
        prev = self.selected
        if prev is None:
            return
        self.selected = None
        self.event_bus.emit(EVENT_SYMBOL_DESELECTED, reason=reason, prev=prev)
