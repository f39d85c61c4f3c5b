from __future__ import annotations

import logging
import random

from esper import World

from match3.components.session import Session
from match3.constants import (
    COINS_PER_MOVE_REMAINING,
    MAX_BONUS_REMAINING_MOVES,
    MAX_RANDOM_EXTRA_COINS,
)
from match3.events.bus import (
    EVENT_BOMBS_CHANGED,
    EVENT_MOVES_CHANGED,
    EVENT_SCORE_CHANGED,
    EventBus,
)
from match3.factories.stages import StageSpec
from match3.systems.board_ops import get_session, world_rng

logger = logging.getLogger(__name__)


class SessionSystem:
    """Owns every mutation of the Session counters and reports them on the bus."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        coins_per_move_remaining: int = COINS_PER_MOVE_REMAINING,
        max_bonus_remaining_moves: int = MAX_BONUS_REMAINING_MOVES,
        max_random_extra_coins: int = MAX_RANDOM_EXTRA_COINS,
        rng: random.Random | None = None,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.coins_per_move_remaining = coins_per_move_remaining
        self.max_bonus_remaining_moves = max_bonus_remaining_moves
        self.max_random_extra_coins = max_random_extra_coins
        self._rng = rng or world_rng(world)

    @property
    def session(self) -> Session:
        return get_session(self.world)

    def reset(self, stage: StageSpec) -> None:
        session = self.session
        session.score = 0
        session.session_coins = 0
        session.cascade_chain_count = 0
        session.max_moves = stage.max_moves
        session.moves_remaining = stage.max_moves
        session.score_to_win = stage.score_to_win
        session.bombs_remaining = stage.bombs
        self.event_bus.emit(EVENT_SCORE_CHANGED, score=0, delta=0)
        self.event_bus.emit(EVENT_MOVES_CHANGED, moves_remaining=session.moves_remaining)
        self.event_bus.emit(EVENT_BOMBS_CHANGED, bombs_remaining=session.bombs_remaining, delta=0)

    # ------------------------------------------------------------------
    # Score
    # ------------------------------------------------------------------

    def add_score(self, amount: int) -> int:
        session = self.session
        previous = session.score
        session.score = max(0, session.score + amount)
        delta = session.score - previous
        self.event_bus.emit(EVENT_SCORE_CHANGED, score=session.score, delta=delta)
        return delta

    # ------------------------------------------------------------------
    # Moves & bombs
    # ------------------------------------------------------------------

    def consume_move(self) -> int:
        session = self.session
        session.moves_remaining = max(0, session.moves_remaining - 1)
        self.event_bus.emit(EVENT_MOVES_CHANGED, moves_remaining=session.moves_remaining)
        return session.moves_remaining

    def consume_bomb(self) -> bool:
        session = self.session
        if session.bombs_remaining < 1:
            return False
        session.bombs_remaining -= 1
        self.event_bus.emit(EVENT_BOMBS_CHANGED, bombs_remaining=session.bombs_remaining, delta=-1)
        return True

    def add_bombs(self, quantity: int) -> None:
        session = self.session
        previous = session.bombs_remaining
        session.bombs_remaining = max(0, session.bombs_remaining + quantity)
        self.event_bus.emit(
            EVENT_BOMBS_CHANGED,
            bombs_remaining=session.bombs_remaining,
            delta=session.bombs_remaining - previous,
        )

    # ------------------------------------------------------------------
    # Cascade chain
    # ------------------------------------------------------------------

    def increment_cascade_chain(self) -> int:
        session = self.session
        session.cascade_chain_count += 1
        return session.cascade_chain_count

    def reset_cascade_chain(self) -> None:
        self.session.cascade_chain_count = 0

    # ------------------------------------------------------------------
    # Stage reward
    # ------------------------------------------------------------------

    def award_stage_coins(self) -> int:
        """Compute the coins earned for a won stage and store them on the session."""
        session = self.session
        score_coins = session.score // 2
        moves_multiplier = min(max(session.moves_remaining, 1), self.max_bonus_remaining_moves)
        extra_moves_reward = self.coins_per_move_remaining * moves_multiplier
        max_random = min(self.max_random_extra_coins, extra_moves_reward) if session.moves_remaining > 1 else 0
        random_extra = self._rng.randrange(max_random) if max_random > 0 else 0
        session.session_coins = score_coins + extra_moves_reward + random_extra
        logger.info("Stage reward: %d coins", session.session_coins)
        return session.session_coins
