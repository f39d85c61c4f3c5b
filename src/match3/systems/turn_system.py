from __future__ import annotations

import logging

from esper import World

from match3.components.game_state import GameMode
from match3.errors import InvalidSwap, OutOfBounds
from match3.events.bus import (
    EVENT_CONSUMABLE_ACTIVATE_REQUEST,
    EVENT_CONSUMABLE_REJECTED,
    EVENT_GAME_OVER,
    EVENT_STAGE_WIN,
    EVENT_SWAP_REJECTED,
    EVENT_SWAP_REQUEST,
    EVENT_TURN_COMPLETED,
    EVENT_TURN_RESOLVED,
    EventBus,
)
from match3.systems.resolution import ResolutionSystem
from match3.systems.session_system import SessionSystem
from match3.utils.board_state import board_is_idle
from match3.utils.game_state import get_game_mode, set_game_mode

logger = logging.getLogger(__name__)


class TurnSystem:
    """Gates player requests and settles the move budget once a turn resolves.

    Flow:
      - Swap and activation requests are forwarded only while PLAYING and idle;
        malformed ones come back as rejection events.
      - On EVENT_TURN_RESOLVED a move is consumed when the turn asks for it,
        then win (score reached) and lose (no moves left) are checked.
    WIN and GAME_OVER are terminal, so each fires at most once per stage.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        resolution: ResolutionSystem,
        session_system: SessionSystem,
    ):
        self.world = world
        self.event_bus = event_bus
        self.resolution = resolution
        self.session_system = session_system
        self.event_bus.subscribe(EVENT_SWAP_REQUEST, self.on_swap_request)
        self.event_bus.subscribe(EVENT_CONSUMABLE_ACTIVATE_REQUEST, self.on_consumable_request)
        self.event_bus.subscribe(EVENT_TURN_RESOLVED, self.on_turn_resolved)

    def accepts_input(self) -> bool:
        return get_game_mode(self.world) == GameMode.PLAYING and board_is_idle(self.world)

    def on_swap_request(self, sender, **payload):
        src = payload.get('src')
        dst = payload.get('dst')
        if src is None or dst is None:
            return
        if not self.accepts_input():
            logger.debug("Swap request %s -> %s ignored", src, dst)
            return
        try:
            self.resolution.request_swap(src, dst)
        except (OutOfBounds, InvalidSwap) as exc:
            logger.debug("Swap %s -> %s rejected: %s", src, dst, exc)
            self.event_bus.emit(EVENT_SWAP_REJECTED, src=src, dst=dst, reason=str(exc))

    def on_consumable_request(self, sender, **payload):
        position = payload.get('position')
        if position is None:
            return
        if not self.accepts_input():
            logger.debug("Activation request at %s ignored", position)
            return
        try:
            self.resolution.request_consumable(position)
        except (OutOfBounds, InvalidSwap) as exc:
            logger.debug("Activation at %s rejected: %s", position, exc)
            self.event_bus.emit(EVENT_CONSUMABLE_REJECTED, position=position, reason=str(exc))

    def on_turn_resolved(self, sender, **payload):
        if get_game_mode(self.world) != GameMode.PLAYING:
            return
        if payload.get('consumes_move', True):
            self.session_system.consume_move()
        session = self.session_system.session
        self.event_bus.emit(
            EVENT_TURN_COMPLETED,
            source=payload.get('source'),
            moves_remaining=session.moves_remaining,
            score=session.score,
            reverted=payload.get('reverted', False),
        )
        self._check_outcome()

    def _check_outcome(self) -> None:
        session = self.session_system.session
        if session.score >= session.score_to_win:
            self._stage_won()
        elif session.moves_remaining <= 0:
            self._game_over()

    def _stage_won(self) -> None:
        set_game_mode(self.world, self.event_bus, GameMode.WIN)
        coins = self.session_system.award_stage_coins()
        session = self.session_system.session
        logger.info("Stage won with %d points", session.score)
        self.event_bus.emit(
            EVENT_STAGE_WIN,
            score=session.score,
            coins=coins,
            moves_remaining=session.moves_remaining,
        )

    def _game_over(self) -> None:
        set_game_mode(self.world, self.event_bus, GameMode.GAME_OVER)
        session = self.session_system.session
        logger.info("Game over at %d/%d points", session.score, session.score_to_win)
        self.event_bus.emit(EVENT_GAME_OVER, score=session.score, score_to_win=session.score_to_win)
