"""High-level coordinator for stage loading and game mode transitions."""
from __future__ import annotations

import logging
from typing import Sequence

from esper import World

from match3.components.game_state import GameMode
from match3.components.piece import ConsumableKind
from match3.events.bus import EVENT_STAGE_LOAD_REQUEST, EVENT_STAGE_LOADED, EventBus
from match3.factories.stages import StageSpec, load_stages
from match3.systems.board import BoardSystem
from match3.systems.session_system import SessionSystem
from match3.utils.board_state import board_is_idle
from match3.utils.game_state import get_game_state, set_game_mode

logger = logging.getLogger(__name__)


class GameFlowSystem:
    """Loads stages into the board and session, and moves between menu and play."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        board_system: BoardSystem,
        session_system: SessionSystem,
        stages: Sequence[StageSpec] | None = None,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.board_system = board_system
        self.session_system = session_system
        self.stages: tuple[StageSpec, ...] = tuple(stages) if stages else load_stages()
        self.event_bus.subscribe(EVENT_STAGE_LOAD_REQUEST, self._on_stage_load_request)

    @property
    def stage_index(self) -> int:
        return get_game_state(self.world).stage_index

    @property
    def current_stage(self) -> StageSpec:
        return self.stages[self.stage_index]

    def is_valid_stage_index(self, index: int) -> bool:
        return 0 <= index < len(self.stages)

    # ------------------------------------------------------------------
    # Stage loading
    # ------------------------------------------------------------------

    def load_stage(self, index: int) -> bool:
        """Configure, generate and start the stage at index.

        Raises ValueError for an unknown index. Returns False without touching
        anything while a move is still resolving.
        """
        if not self.is_valid_stage_index(index):
            raise ValueError(f"stage index {index} out of range (0..{len(self.stages) - 1})")
        if not board_is_idle(self.world):
            logger.debug("Stage %d load ignored, board is busy", index)
            return False
        stage = self.stages[index]
        get_game_state(self.world).stage_index = index
        self.board_system.configure(stage)
        self.session_system.reset(stage)
        self.board_system.generate_board(reason="stage_load")
        if stage.bombs > 0:
            # Initial bomb is placed without drawing from stock
            self.board_system.spawn_consumable(ConsumableKind.BOMB, consume=False)
        set_game_mode(self.world, self.event_bus, GameMode.PLAYING)
        logger.info("Stage %d (%s) loaded", index, stage.name)
        self.event_bus.emit(EVENT_STAGE_LOADED, stage_index=index, name=stage.name)
        return True

    def load_first_stage(self) -> bool:
        return self.load_stage(0)

    def load_next_stage(self) -> bool:
        return self.load_stage(self.stage_index + 1)

    def restart_stage(self) -> bool:
        return self.load_stage(self.stage_index)

    def go_to_main_menu(self) -> None:
        set_game_mode(self.world, self.event_bus, GameMode.MAIN_MENU)

    def _on_stage_load_request(self, sender, **payload) -> None:
        index = payload.get("stage_index")
        if index is None:
            return
        if not self.is_valid_stage_index(index):
            logger.warning("Ignoring request for unknown stage %s", index)
            return
        self.load_stage(index)
