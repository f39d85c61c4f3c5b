import random

from match3.events.bus import (
    EVENT_BOMBS_CHANGED,
    EVENT_MOVES_CHANGED,
    EVENT_SCORE_CHANGED,
    EventBus,
)
from match3.factories.stages import StageSpec, SymbolSpec, full_layout
from match3.systems.session_system import SessionSystem
from match3.world import create_world
from tests.helpers import record


def make_stage(**overrides):
    values = dict(
        name="Test",
        width=6,
        height=8,
        layout=full_layout(6, 8),
        symbols=(SymbolSpec("apple"), SymbolSpec("leaf")),
        max_moves=10,
        score_to_win=500,
        bombs=2,
    )
    values.update(overrides)
    return StageSpec(**values)


def make_session_system(rng=None):
    bus = EventBus()
    world = create_world(bus, rng=rng or random.Random(0))
    return bus, SessionSystem(world, bus)


def test_reset_copies_stage_budget():
    bus, system = make_session_system()
    seen = record(bus, EVENT_MOVES_CHANGED, EVENT_BOMBS_CHANGED)
    system.session.score = 99
    system.reset(make_stage())
    session = system.session
    assert (session.score, session.moves_remaining, session.score_to_win, session.bombs_remaining) == (0, 10, 500, 2)
    assert seen[EVENT_MOVES_CHANGED] == [{"moves_remaining": 10}]
    assert seen[EVENT_BOMBS_CHANGED] == [{"bombs_remaining": 2, "delta": 0}]


def test_score_never_goes_negative():
    bus, system = make_session_system()
    seen = record(bus, EVENT_SCORE_CHANGED)
    system.add_score(30)
    delta = system.add_score(-100)
    assert system.session.score == 0
    assert delta == -30
    assert seen[EVENT_SCORE_CHANGED][-1] == {"score": 0, "delta": -30}


def test_moves_and_bombs_stop_at_zero():
    _, system = make_session_system()
    system.session.moves_remaining = 1
    system.session.bombs_remaining = 1
    assert system.consume_move() == 0
    assert system.consume_move() == 0
    assert system.consume_bomb() is True
    assert system.consume_bomb() is False
    system.add_bombs(2)
    assert system.session.bombs_remaining == 2


def test_stage_coins_include_move_bonus_and_bounded_random_extra():
    _, system = make_session_system(random.Random(5))
    session = system.session
    session.score = 301
    session.moves_remaining = 7
    coins = system.award_stage_coins()
    # 150 for score, 3 capped moves * 100, plus a random extra below 20
    assert 450 <= coins < 470
    assert session.session_coins == coins


def test_last_move_win_gets_no_random_extra():
    _, system = make_session_system()
    session = system.session
    session.score = 100
    session.moves_remaining = 0
    assert system.award_stage_coins() == 50 + 100


def test_score_progress_is_clamped():
    _, system = make_session_system()
    session = system.session
    assert session.score_progress == 0.0
    session.score_to_win = 200
    session.score = 50
    assert session.score_progress == 0.25
    session.score = 900
    assert session.score_progress == 1.0
