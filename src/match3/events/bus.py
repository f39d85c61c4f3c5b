from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def emit(self, name: str, /, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float


# ============================================================================
# INPUT & SELECTION
# ============================================================================
EVENT_SYMBOL_CLICK = "symbol_click"                # payload: x, y
EVENT_SYMBOL_SELECTED = "symbol_selected"          # payload: x, y
EVENT_SYMBOL_DESELECTED = "symbol_deselected"      # payload: reason=str, prev=(x,y)


# ============================================================================
# SWAPS & CONSUMABLES
# ============================================================================
EVENT_SWAP_REQUEST = "swap_request"                        # payload: src=(x,y), dst=(x,y)
EVENT_SWAP_REJECTED = "swap_rejected"                      # payload: src, dst, reason=str
EVENT_SWAP_APPLIED = "swap_applied"                        # payload: src, dst
EVENT_SWAP_REVERTED = "swap_reverted"                      # payload: src, dst
EVENT_CONSUMABLE_ACTIVATE_REQUEST = "consumable_activate_request"  # payload: position=(x,y)
EVENT_CONSUMABLE_REJECTED = "consumable_rejected"          # payload: position, reason=str
EVENT_CONSUMABLE_ACTIVATED = "consumable_activated"        # payload: position, kind=ConsumableKind, affected=list[(x,y)]
EVENT_CONSUMABLE_SPAWN_REQUEST = "consumable_spawn_request"  # payload: kind=ConsumableKind|None, consume=bool
EVENT_CONSUMABLE_SPAWNED = "consumable_spawned"            # payload: position, kind=ConsumableKind


# ============================================================================
# MATCHING & CASCADES
# ============================================================================
EVENT_MATCH_FOUND = "match_found"                  # payload: runs=tuple[MatchRun], positions=list[(x,y)], depth=int
EVENT_BOARD_SETTLED = "board_settled"              # payload: snapshot=SettleSnapshot
EVENT_CASCADE_STEP = "cascade_step"                # payload: depth=int
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: depth=int
EVENT_CASCADE_REWARD = "cascade_reward"            # payload: depth=int, bombs=int


# ============================================================================
# BOARD LIFECYCLE
# ============================================================================
EVENT_BOARD_STATE_CHANGED = "board_state_changed"  # payload: previous=BoardMode, new=BoardMode
EVENT_BOARD_GENERATED = "board_generated"          # payload: attempts=int, reason=str, best_effort=bool


# ============================================================================
# TURNS & SESSION
# ============================================================================
EVENT_TURN_RESOLVED = "turn_resolved"              # payload: source=str, consumes_move=bool, reverted=bool
EVENT_TURN_COMPLETED = "turn_completed"            # payload: source=str, moves_remaining=int, score=int, reverted=bool
EVENT_SCORE_CHANGED = "score_changed"              # payload: score=int, delta=int
EVENT_MOVES_CHANGED = "moves_changed"              # payload: moves_remaining=int
EVENT_BOMBS_CHANGED = "bombs_changed"              # payload: bombs_remaining=int, delta=int


# ============================================================================
# GAME FLOW & STATE
# ============================================================================
EVENT_GAME_MODE_CHANGED = "game_mode_changed"      # payload: previous_mode=GameMode|None, new_mode=GameMode
EVENT_STAGE_LOAD_REQUEST = "stage_load_request"    # payload: stage_index=int
EVENT_STAGE_LOADED = "stage_loaded"                # payload: stage_index=int, name=str
EVENT_STAGE_WIN = "stage_win"                      # payload: score=int, coins=int, moves_remaining=int
EVENT_GAME_OVER = "game_over"                      # payload: score=int, score_to_win=int
