from __future__ import annotations

import random
from dataclasses import dataclass
from itertools import cycle
from typing import Sequence

from esper import World

from match3.components.board_settings import BoardSettings
from match3.components.game_state import GameMode
from match3.components.grid import Grid
from match3.components.piece import Consumable, ConsumableKind
from match3.events.bus import EventBus
from match3.systems.board import BoardSystem
from match3.systems.board_ops import get_symbol_kinds
from match3.systems.resolution import ResolutionSystem
from match3.systems.session_system import SessionSystem
from match3.systems.turn_system import TurnSystem
from match3.world import create_world

LETTERS = "ABCDEFGH"
FILLERS = tuple(f"f{i:02d}" for i in range(50))
FILL = None


def grid_from_rows(rows: Sequence[str], *, bomb_radius: int = 1) -> Grid:
    """Build a grid from ASCII rows written top row first.

    ``#`` is a hole, ``.`` an empty usable cell, ``-`` a background piece with a
    kind of its own (never matches), ``*`` a bomb and any other character a
    piece of that kind.
    """
    height = len(rows)
    width = len(rows[0])
    bottom_first = list(reversed(rows))
    layout = [[char != "#" for char in row] for row in bottom_first]
    grid = Grid(width, height, layout)
    for y, row in enumerate(bottom_first):
        for x, char in enumerate(row):
            if char in "#.":
                continue
            if char == "-":
                grid.place((x, y), f"bg{x}_{y}")
            elif char == "*":
                grid.place((x, y), ConsumableKind.BOMB.value, Consumable(ConsumableKind.BOMB, bomb_radius))
            else:
                grid.place((x, y), char)
    return grid


def kinds_as_rows(grid: Grid) -> list[str]:
    """Render letter kinds top row first; anything else becomes ``-``, empty ``.``."""
    rows = []
    for row in reversed(grid.kind_rows()):
        rows.append("".join(
            "." if kind is None else kind if kind in LETTERS else "-"
            for kind in row
        ))
    return rows


class ScriptedRandom(random.Random):
    """Random whose kind draws follow a script, then cycle through unique fillers.

    Position and other non-kind draws fall back to the seeded generator.
    """

    def __init__(self, script: Sequence[str | None] = (), seed: int = 0):
        super().__init__(seed)
        self.script = list(script)
        self._fillers = cycle(FILLERS)

    def choice(self, seq):
        if FILLERS[0] in seq:
            if self.script:
                value = self.script.pop(0)
                if value is not FILL:
                    return value
            return next(self._fillers)
        return super().choice(seq)


@dataclass
class Engine:
    event_bus: EventBus
    world: World
    board: BoardSystem
    session_system: SessionSystem
    resolution: ResolutionSystem
    turns: TurnSystem

    @property
    def grid(self) -> Grid:
        return self.board.grid

    @property
    def session(self):
        return self.session_system.session


def build_engine(
    rows: Sequence[str],
    *,
    script: Sequence[str | None] = (),
    rng: random.Random | None = None,
    settings: BoardSettings | None = None,
    moves: int = 20,
    score_to_win: int = 10_000,
    bombs: int = 0,
    mode: GameMode = GameMode.PLAYING,
    bomb_radius: int = 1,
) -> Engine:
    """Wire every system around a hand-built grid.

    Without an explicit rng, refills draw the scripted kinds first and unique
    filler kinds afterwards so nothing matches by accident.
    """
    event_bus = EventBus()
    scripted = rng is None
    world = create_world(event_bus, initial_mode=mode, rng=ScriptedRandom(script) if scripted else rng)
    session_system = SessionSystem(world, event_bus)
    board = BoardSystem(world, event_bus, settings=settings, session_system=session_system)
    kinds = get_symbol_kinds(world)
    if scripted:
        scores = {letter: 10 for letter in LETTERS}
        scores.update({filler: 0 for filler in FILLERS})
    else:
        scores = {letter: 10 for letter in LETTERS[:5]}
    kinds.replace(scores)
    kinds.register_kind(ConsumableKind.BOMB.value, 0, spawnable=False)
    session = session_system.session
    session.moves_remaining = moves
    session.max_moves = moves
    session.score_to_win = score_to_win
    session.bombs_remaining = bombs
    board.set_grid(grid_from_rows(rows, bomb_radius=bomb_radius))
    resolution = ResolutionSystem(world, event_bus, board_system=board, session_system=session_system)
    turns = TurnSystem(world, event_bus, resolution, session_system)
    return Engine(
        event_bus=event_bus,
        world=world,
        board=board,
        session_system=session_system,
        resolution=resolution,
        turns=turns,
    )


def record(event_bus: EventBus, *names: str) -> dict[str, list[dict]]:
    """Collect payloads of the named events in emission order."""
    seen: dict[str, list[dict]] = {name: [] for name in names}
    for name in names:
        event_bus.subscribe(name, lambda sender, _name=name, **payload: seen[_name].append(payload))
    return seen
