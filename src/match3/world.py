import random

from esper import World

from match3.components.game_state import GameMode, GameState
from match3.components.session import Session
from match3.components.symbol_kind_registry import SymbolKindRegistry
from match3.components.symbol_kinds import SymbolKinds
from match3.events.bus import EventBus
from match3.factories.stages import StageSpec


def create_world(
    event_bus: EventBus,
    initial_mode: GameMode = GameMode.PLAYING,
    *,
    stage: StageSpec | None = None,
    rng: random.Random | None = None,
) -> World:
    """Create a world holding the singleton game state, session and symbol kinds.

    The board entity itself is created by BoardSystem; the event bus is accepted
    here so every system shares the same wiring entry point.
    """
    world = World()
    setattr(world, "random", rng or random.Random())

    world.create_entity(GameState(mode=initial_mode))

    session = Session()
    kinds = SymbolKinds()
    if stage is not None:
        session.moves_remaining = stage.max_moves
        session.max_moves = stage.max_moves
        session.score_to_win = stage.score_to_win
        session.bombs_remaining = stage.bombs
        kinds.replace(stage.symbol_scores())
    world.create_entity(session)

    # Single registry entity with the stage's symbol kinds
    world.create_entity(SymbolKindRegistry(), kinds)
    return world
