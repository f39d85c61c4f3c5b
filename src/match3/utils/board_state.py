from __future__ import annotations

from esper import World

from match3.components.board_state import BoardMode
from match3.events.bus import EVENT_BOARD_STATE_CHANGED, EventBus
from match3.systems.board_ops import get_board_state


def get_board_mode(world: World) -> BoardMode:
    return get_board_state(world).mode


def set_board_mode(world: World, event_bus: EventBus, mode: BoardMode) -> BoardMode:
    """Switch the board busy flag; returns the previous mode."""
    state = get_board_state(world)
    previous = state.mode
    if previous != mode:
        state.mode = mode
        event_bus.emit(EVENT_BOARD_STATE_CHANGED, previous=previous, new=mode)
    return previous


def board_is_idle(world: World) -> bool:
    return get_board_mode(world) == BoardMode.IDLE
