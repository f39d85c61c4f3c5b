"""Move resolution: swap, bomb detonation and the cascade loop.

Each accepted request runs as a generator task. Every ``yield`` hands back a
delay in seconds; the task resumes once enough tick time has accumulated (or
immediately under ``run_until_idle``). The board stays in PROCESSING_MOVE for
the whole task so any other request in the meantime is turned away.
"""
from __future__ import annotations

import logging
from typing import Generator, Optional

from esper import World

from match3.components.board_state import BoardMode
from match3.components.game_state import GameMode
from match3.components.grid import Grid
from match3.components.piece import Consumable, ConsumableKind, Piece, Position, as_position
from match3.components.snapshot import SettleSnapshot
from match3.errors import InvalidActivation, InvalidSwap, ReentrantOperation
from match3.events.bus import (
    EVENT_BOARD_SETTLED,
    EVENT_CASCADE_COMPLETE,
    EVENT_CASCADE_REWARD,
    EVENT_CASCADE_STEP,
    EVENT_CONSUMABLE_ACTIVATED,
    EVENT_MATCH_FOUND,
    EVENT_SWAP_APPLIED,
    EVENT_SWAP_REVERTED,
    EVENT_TICK,
    EVENT_TURN_RESOLVED,
    EventBus,
)
from match3.systems.board import BoardSystem
from match3.systems.board_ops import (
    RefillResult,
    get_board_settings,
    get_grid,
    get_symbol_kinds,
    is_adjacent,
    random_kind_picker,
    remove_and_refill,
    surrounding_positions,
)
from match3.systems.match_detection import ScanResult, scan_for_matches
from match3.systems.scoring import calculate_match_score, cumulated_score
from match3.systems.session_system import SessionSystem
from match3.utils.board_state import board_is_idle, set_board_mode
from match3.utils.game_state import get_game_mode

logger = logging.getLogger(__name__)

Task = Generator[float, None, None]

DEFAULT_TICK = 1 / 60


class ResolutionSystem:
    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        board_system: BoardSystem,
        session_system: SessionSystem,
    ):
        self.world = world
        self.event_bus = event_bus
        self.board_system = board_system
        self.session_system = session_system
        self._task: Optional[Task] = None
        self._wait = 0.0
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)

    @property
    def busy(self) -> bool:
        return self._task is not None

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def request_swap(self, src: Position, dst: Position) -> bool:
        """Start resolving a swap; returns False when the board is busy.

        Raises OutOfBounds or InvalidSwap before anything is mutated.
        """
        try:
            self._ensure_idle()
        except ReentrantOperation:
            logger.debug("Swap %s -> %s ignored, board is busy", src, dst)
            return False
        try:
            src, dst = as_position(src), as_position(dst)
        except (TypeError, ValueError) as exc:
            raise InvalidSwap(f"malformed coordinates {src!r}, {dst!r}") from exc
        grid = get_grid(self.world)
        for pos in (src, dst):
            cell = grid.cell(pos)
            if not cell.usable:
                raise InvalidSwap(f"cell {pos} is unusable")
            if cell.piece is None:
                raise InvalidSwap(f"cell {pos} is empty")
        if not is_adjacent(src, dst):
            raise InvalidSwap(f"{src} and {dst} are not adjacent")
        self._start(self._swap_cycle(src, dst))
        return True

    def request_consumable(self, position: Position) -> bool:
        """Start detonating the consumable at position; returns False when the board is busy."""
        try:
            self._ensure_idle()
        except ReentrantOperation:
            logger.debug("Activation at %s ignored, board is busy", position)
            return False
        try:
            position = as_position(position)
        except (TypeError, ValueError) as exc:
            raise InvalidActivation(f"malformed coordinates {position!r}") from exc
        piece = get_grid(self.world).piece_at(position)
        if piece is None or not piece.is_consumable:
            raise InvalidActivation(f"no consumable at {position}")
        self._start(self._consumable_cycle(position))
        return True

    def _ensure_idle(self) -> None:
        if self._task is not None or not board_is_idle(self.world):
            raise ReentrantOperation("board is resolving another operation")

    # ------------------------------------------------------------------
    # Task driving
    # ------------------------------------------------------------------

    def _start(self, task: Task) -> None:
        set_board_mode(self.world, self.event_bus, BoardMode.PROCESSING_MOVE)
        self._task = task
        self._wait = 0.0
        self._advance()

    def _advance(self) -> None:
        try:
            delay = next(self._task)
        except StopIteration:
            self._task = None
            set_board_mode(self.world, self.event_bus, BoardMode.IDLE)
            return
        except Exception:
            logger.exception("Resolution aborted")
            self._task = None
            set_board_mode(self.world, self.event_bus, BoardMode.IDLE)
            raise
        self._wait = max(0.0, float(delay))

    def on_tick(self, sender, **kwargs):
        if self._task is None:
            return
        self._wait -= kwargs.get('dt', DEFAULT_TICK)
        while self._task is not None and self._wait <= 0:
            self._advance()

    def run_until_idle(self, max_steps: int = 10_000) -> None:
        """Drive the current task to completion, skipping every delay."""
        steps = 0
        while self._task is not None:
            if steps >= max_steps:
                raise RuntimeError(f"resolution did not settle within {max_steps} steps")
            self._advance()
            steps += 1

    # ------------------------------------------------------------------
    # Cycles
    # ------------------------------------------------------------------

    def _swap_cycle(self, src: Position, dst: Position) -> Task:
        settings = get_board_settings(self.world)
        grid = get_grid(self.world)
        grid.swap(src, dst)
        grid.check_invariants()
        self.event_bus.emit(EVENT_SWAP_APPLIED, src=src, dst=dst)
        yield settings.symbol_swap_duration

        scan = self._scan(grid)
        if not scan.has_match:
            grid.swap(src, dst)
            self.event_bus.emit(EVENT_SWAP_REVERTED, src=src, dst=dst)
            yield settings.symbol_swap_duration
            self._finish_turn("swap", consumes_move=settings.revert_consumes_move, reverted=True)
            return

        yield from self._cascade(grid, scan)
        self._finish_turn("swap", consumes_move=True)

    def _consumable_cycle(self, position: Position) -> Task:
        settings = get_board_settings(self.world)
        grid = get_grid(self.world)
        piece = grid.piece_at(position)
        match piece.variant:
            case Consumable(kind=ConsumableKind.BOMB, radius=radius):
                self._detonate_bomb(grid, piece, radius)
            case _:
                raise InvalidActivation(f"piece at {position} cannot be activated")
        yield settings.consumable_settle_delay

        scan = self._scan(grid)
        if not scan.has_match:
            self._finish_turn("consumable", consumes_move=False)
            return
        yield from self._cascade(grid, scan)
        self._finish_turn("consumable", consumes_move=True)

    def _detonate_bomb(self, grid: Grid, bomb: Piece, radius: int) -> None:
        center = bomb.position
        affected = surrounding_positions(grid, center, radius)
        score_delta = 0
        if self._scoring_enabled():
            # Blast score is the plain sum of the surrounding pieces
            score = cumulated_score([grid.piece_at(pos) for pos in affected], get_symbol_kinds(self.world))
            if score > 0:
                score_delta = self.session_system.add_score(score)
        self.event_bus.emit(EVENT_CONSUMABLE_ACTIVATED, position=center, kind=ConsumableKind.BOMB, affected=affected)
        result = remove_and_refill(grid, affected + [center], random_kind_picker(self.world))
        self._emit_settled(result, score_delta=score_delta, depth=0, reason="bomb")

    def _cascade(self, grid: Grid, scan: ScanResult) -> Task:
        """Clear, score and refill until a scan comes back empty."""
        settings = get_board_settings(self.world)
        kinds = get_symbol_kinds(self.world)
        while True:
            depth = self.session_system.session.cascade_chain_count
            self.event_bus.emit(EVENT_MATCH_FOUND, runs=scan.runs, positions=scan.positions, depth=depth)
            score_delta = 0
            if self._scoring_enabled():
                score = calculate_match_score(scan.pieces, kinds, depth, settings)
                if score > 0:
                    score_delta = self.session_system.add_score(score)
            result = remove_and_refill(grid, scan.positions, random_kind_picker(self.world))
            self._maybe_reward(depth)
            self._emit_settled(result, score_delta=score_delta, depth=depth, reason="match")
            yield settings.delay_between_match_processing

            scan = self._scan(grid)
            if not scan.has_match:
                self.session_system.reset_cascade_chain()
                self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=depth)
                return
            depth = self.session_system.increment_cascade_chain()
            self.event_bus.emit(EVENT_CASCADE_STEP, depth=depth)

    def _maybe_reward(self, depth: int) -> None:
        settings = get_board_settings(self.world)
        interval = settings.cascade_reward_interval
        if depth <= 0 or interval <= 0 or depth % interval:
            return
        bombs = settings.cascade_reward_bombs
        self.session_system.add_bombs(bombs)
        logger.info("Cascade depth %d rewarded %d bomb(s)", depth, bombs)
        self.event_bus.emit(EVENT_CASCADE_REWARD, depth=depth, bombs=bombs)

    def _finish_turn(self, source: str, *, consumes_move: bool, reverted: bool = False) -> None:
        self.event_bus.emit(EVENT_TURN_RESOLVED, source=source, consumes_move=consumes_move, reverted=reverted)
        self.board_system.ensure_playable()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _scan(self, grid: Grid) -> ScanResult:
        settings = get_board_settings(self.world)
        return scan_for_matches(grid, extra_connection_min_length=settings.extra_connection_min_length)

    def _scoring_enabled(self) -> bool:
        return get_game_mode(self.world) == GameMode.PLAYING

    def _emit_settled(self, result: RefillResult, *, score_delta: int, depth: int, reason: str) -> None:
        snapshot = SettleSnapshot(
            removed=tuple(result.removed),
            moved=tuple(result.moves),
            spawned=tuple(result.spawned),
            score_delta=score_delta,
            cascade_depth=depth,
            reason=reason,
        )
        self.event_bus.emit(EVENT_BOARD_SETTLED, snapshot=snapshot)
