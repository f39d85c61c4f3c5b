"""Wires the world, the event bus and every system of the match-three engine.

A host (renderer, CLI, test) builds a ``Match3Game`` once, forwards clicks and
ticks through the bus, and listens for the events it cares about.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Sequence

from esper import World

from match3.components.board_settings import BoardSettings
from match3.components.game_state import GameMode
from match3.events.bus import EVENT_SYMBOL_CLICK, EVENT_TICK, EventBus
from match3.factories.stages import StageSpec, load_stages
from match3.systems.board import BoardSystem
from match3.systems.game_flow_system import GameFlowSystem
from match3.systems.resolution import ResolutionSystem
from match3.systems.session_system import SessionSystem
from match3.systems.turn_system import TurnSystem
from match3.world import create_world


@dataclass
class Match3Game:
    world: World
    event_bus: EventBus
    session_system: SessionSystem
    board_system: BoardSystem
    resolution_system: ResolutionSystem
    turn_system: TurnSystem
    game_flow_system: GameFlowSystem

    def click(self, x: int, y: int) -> None:
        self.event_bus.emit(EVENT_SYMBOL_CLICK, x=x, y=y)

    def tick(self, dt: float) -> None:
        self.event_bus.emit(EVENT_TICK, dt=dt)

    def run_until_idle(self) -> None:
        self.resolution_system.run_until_idle()


def build_game(
    stages: Sequence[StageSpec] | None = None,
    *,
    event_bus: EventBus | None = None,
    rng: random.Random | None = None,
    settings: BoardSettings | None = None,
    start_stage: int | None = 0,
) -> Match3Game:
    """Create a fully wired game; loads ``start_stage`` unless it is None."""
    stages = tuple(stages) if stages else load_stages()
    event_bus = event_bus or EventBus()
    world = create_world(event_bus, initial_mode=GameMode.MAIN_MENU, stage=stages[0], rng=rng)
    session_system = SessionSystem(world, event_bus)
    stage = stages[0]
    board_system = BoardSystem(
        world,
        event_bus,
        layout=stage.layout,
        settings=settings,
        session_system=session_system,
    )
    resolution_system = ResolutionSystem(
        world,
        event_bus,
        board_system=board_system,
        session_system=session_system,
    )
    turn_system = TurnSystem(world, event_bus, resolution_system, session_system)
    game_flow_system = GameFlowSystem(
        world,
        event_bus,
        board_system=board_system,
        session_system=session_system,
        stages=stages,
    )
    if start_stage is not None:
        game_flow_system.load_stage(start_stage)
    return Match3Game(
        world=world,
        event_bus=event_bus,
        session_system=session_system,
        board_system=board_system,
        resolution_system=resolution_system,
        turn_system=turn_system,
        game_flow_system=game_flow_system,
    )
