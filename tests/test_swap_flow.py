import pytest

from match3.components.board_settings import BoardSettings
from match3.components.board_state import BoardMode
from match3.errors import InvalidSwap, OutOfBounds
from match3.events.bus import (
    EVENT_BOARD_SETTLED,
    EVENT_MATCH_FOUND,
    EVENT_SWAP_APPLIED,
    EVENT_SWAP_REJECTED,
    EVENT_SWAP_REQUEST,
    EVENT_SWAP_REVERTED,
    EVENT_TICK,
    EVENT_TURN_COMPLETED,
)
from match3.systems.match_detection import MatchOrientation
from match3.utils.board_state import get_board_mode
from tests.helpers import build_engine, kinds_as_rows, record

ROWS = [
    "------",
    "------",
    "------",
    "------",
    "------",
    "------",
    "AA-A--",
    "CC-C--",
]


def test_matching_swap_clears_scores_and_refills():
    engine = build_engine(ROWS)
    seen = record(engine.event_bus, EVENT_MATCH_FOUND, EVENT_BOARD_SETTLED, EVENT_TURN_COMPLETED)

    engine.event_bus.emit(EVENT_SWAP_REQUEST, src=(2, 1), dst=(3, 1))
    engine.resolution.run_until_idle()

    assert len(seen[EVENT_MATCH_FOUND]) == 1
    runs = seen[EVENT_MATCH_FOUND][0]["runs"]
    assert [run.orientation for run in runs] == [MatchOrientation.HORIZONTAL]
    assert runs[0].positions == [(0, 1), (1, 1), (2, 1)]

    snapshot = seen[EVENT_BOARD_SETTLED][0]["snapshot"]
    assert len(snapshot.removed) == 3
    assert len(snapshot.spawned) == 3
    assert {view.position for view in snapshot.spawned} == {(0, 7), (1, 7), (2, 7)}
    assert snapshot.score_delta == 30
    # columns 0-2 fall by one row
    assert len(snapshot.moved) == 18

    assert engine.session.score == 30
    assert engine.session.moves_remaining == 19
    assert seen[EVENT_TURN_COMPLETED] == [
        {"source": "swap", "moves_remaining": 19, "score": 30, "reverted": False}
    ]
    assert get_board_mode(engine.world) == BoardMode.IDLE
    engine.grid.check_invariants()


def test_non_adjacent_swap_is_rejected_without_changes():
    engine = build_engine(ROWS)
    seen = record(engine.event_bus, EVENT_SWAP_REJECTED, EVENT_SWAP_APPLIED)
    before = engine.grid.kind_rows()

    engine.event_bus.emit(EVENT_SWAP_REQUEST, src=(0, 1), dst=(3, 1))

    assert len(seen[EVENT_SWAP_REJECTED]) == 1
    assert seen[EVENT_SWAP_APPLIED] == []
    assert engine.grid.kind_rows() == before
    assert engine.session.moves_remaining == 20
    assert get_board_mode(engine.world) == BoardMode.IDLE


def test_direct_requests_raise_for_bad_targets():
    engine = build_engine(ROWS)
    with pytest.raises(InvalidSwap):
        engine.resolution.request_swap((0, 1), (0, 3))
    with pytest.raises(OutOfBounds):
        engine.resolution.request_swap((5, 7), (6, 7))
    assert not engine.resolution.busy


def test_matchless_swap_is_reverted_and_costs_a_move():
    engine = build_engine(ROWS)
    seen = record(engine.event_bus, EVENT_SWAP_REVERTED, EVENT_MATCH_FOUND)
    before = kinds_as_rows(engine.grid)

    assert engine.resolution.request_swap((4, 3), (5, 3))
    engine.resolution.run_until_idle()

    assert len(seen[EVENT_SWAP_REVERTED]) == 1
    assert seen[EVENT_MATCH_FOUND] == []
    assert kinds_as_rows(engine.grid) == before
    assert engine.grid.kind_at((4, 3)) == "bg4_3"
    assert engine.session.moves_remaining == 19
    assert engine.session.score == 0


def test_reverted_swap_can_be_free():
    engine = build_engine(ROWS, settings=BoardSettings(revert_consumes_move=False))
    engine.resolution.request_swap((4, 3), (5, 3))
    engine.resolution.run_until_idle()
    assert engine.session.moves_remaining == 20


def test_ticks_drive_the_swap_through_its_delays():
    engine = build_engine(ROWS)
    seen = record(engine.event_bus, EVENT_MATCH_FOUND, EVENT_TURN_COMPLETED)

    engine.resolution.request_swap((2, 1), (3, 1))
    assert get_board_mode(engine.world) == BoardMode.PROCESSING_MOVE
    assert seen[EVENT_MATCH_FOUND] == []

    # swap duration is 0.2s
    engine.event_bus.emit(EVENT_TICK, dt=0.1)
    assert seen[EVENT_MATCH_FOUND] == []
    engine.event_bus.emit(EVENT_TICK, dt=0.1)
    assert len(seen[EVENT_MATCH_FOUND]) == 1
    assert seen[EVENT_TURN_COMPLETED] == []

    # settle delay between cascade passes is 0.4s
    for _ in range(5):
        engine.event_bus.emit(EVENT_TICK, dt=0.1)
    assert len(seen[EVENT_TURN_COMPLETED]) == 1
    assert not engine.resolution.busy
    assert get_board_mode(engine.world) == BoardMode.IDLE


def test_requests_while_resolving_are_ignored():
    engine = build_engine(ROWS)
    seen = record(engine.event_bus, EVENT_SWAP_REJECTED, EVENT_SWAP_APPLIED)

    assert engine.resolution.request_swap((2, 1), (3, 1))
    assert engine.resolution.request_swap((4, 3), (5, 3)) is False
    engine.event_bus.emit(EVENT_SWAP_REQUEST, src=(4, 3), dst=(5, 3))
    engine.resolution.run_until_idle()

    assert len(seen[EVENT_SWAP_APPLIED]) == 1
    assert seen[EVENT_SWAP_REJECTED] == []
    assert engine.session.moves_remaining == 19


def test_list_coordinates_from_the_bus_are_stored_as_tuples():
    engine = build_engine(ROWS)
    seen = record(engine.event_bus, EVENT_SWAP_APPLIED, EVENT_MATCH_FOUND)

    engine.event_bus.emit(EVENT_SWAP_REQUEST, src=[2, 1], dst=[3, 1])
    engine.resolution.run_until_idle()

    assert seen[EVENT_SWAP_APPLIED] == [{"src": (2, 1), "dst": (3, 1)}]
    assert len(seen[EVENT_MATCH_FOUND]) == 1
    assert engine.session.score == 30
    assert all(type(piece.position) is tuple for piece in engine.grid.pieces())
    engine.grid.check_invariants()


def test_malformed_coordinates_are_rejected_before_mutation():
    engine = build_engine(ROWS)
    seen = record(engine.event_bus, EVENT_SWAP_REJECTED, EVENT_SWAP_APPLIED)
    before = engine.grid.kind_rows()

    engine.event_bus.emit(EVENT_SWAP_REQUEST, src=[2], dst=[3, 1])
    with pytest.raises(InvalidSwap):
        engine.resolution.request_swap(("a", 1), (3, 1))

    assert len(seen[EVENT_SWAP_REJECTED]) == 1
    assert seen[EVENT_SWAP_APPLIED] == []
    assert engine.grid.kind_rows() == before
    assert get_board_mode(engine.world) == BoardMode.IDLE
