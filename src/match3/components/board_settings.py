from dataclasses import dataclass

from match3.constants import (
    BOMB_EXPLOSION_RADIUS,
    CASCADE_MAX_CHAIN,
    CASCADE_REWARD_BOMBS,
    CASCADE_REWARD_INTERVAL,
    CONSUMABLE_SETTLE_DELAY,
    DELAY_BETWEEN_MATCH_PROCESSING,
    EXTRA_CONNECTION_MIN_LENGTH,
    LONG_MATCH_MULTIPLIER,
    MAX_TRIES_TO_FIND_TILE,
    MAX_TRIES_TO_GENERATE_BOARD,
    SYMBOL_SWAP_DURATION,
    THREE_MATCH_MULTIPLIER,
)


@dataclass(slots=True)
class BoardSettings:
    """Tunables for generation, resolution timing, scoring and rewards."""

    max_tries_to_generate_board: int = MAX_TRIES_TO_GENERATE_BOARD
    max_tries_to_find_tile: int = MAX_TRIES_TO_FIND_TILE
    accept_best_effort_board: bool = False
    symbol_swap_duration: float = SYMBOL_SWAP_DURATION
    delay_between_match_processing: float = DELAY_BETWEEN_MATCH_PROCESSING
    consumable_settle_delay: float = CONSUMABLE_SETTLE_DELAY
    # Above 2, a shorter branch is neither merged nor reported on its own: the
    # shared piece is already matched by the crossbar, so the branch run is cut.
    extra_connection_min_length: int = EXTRA_CONNECTION_MIN_LENGTH
    three_match_multiplier: float = THREE_MATCH_MULTIPLIER
    long_match_multiplier: float = LONG_MATCH_MULTIPLIER
    cascade_max_chain: int = CASCADE_MAX_CHAIN
    cascade_reward_interval: int = CASCADE_REWARD_INTERVAL
    cascade_reward_bombs: int = CASCADE_REWARD_BOMBS
    bomb_radius: int = BOMB_EXPLOSION_RADIUS
    # A reverted (matchless) swap still spends a move.
    revert_consumes_move: bool = True
