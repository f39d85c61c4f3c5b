GRID_WIDTH = 6
GRID_HEIGHT = 8

# Board generation
MAX_TRIES_TO_GENERATE_BOARD = 100
MAX_TRIES_TO_FIND_TILE = 100

# Timing of the resolution task (seconds between suspension points)
SYMBOL_SWAP_DURATION = 0.2
DELAY_BETWEEN_MATCH_PROCESSING = 0.4
CONSUMABLE_SETTLE_DELAY = 0.0

# Matching
EXTRA_CONNECTION_MIN_LENGTH = 2

# Scoring
THREE_MATCH_MULTIPLIER = 1.0
LONG_MATCH_MULTIPLIER = 1.5
CASCADE_MAX_CHAIN = 3

# Cascade rewards: every Nth consecutive cascade grants bomb stock.
CASCADE_REWARD_INTERVAL = 2
CASCADE_REWARD_BOMBS = 1

# Consumables
BOMB_EXPLOSION_RADIUS = 2

# End-of-stage coin reward
COINS_PER_MOVE_REMAINING = 100
MAX_BONUS_REMAINING_MOVES = 3
MAX_RANDOM_EXTRA_COINS = 20
