from __future__ import annotations

import math
from typing import Sequence

from match3.components.board_settings import BoardSettings
from match3.components.piece import Piece
from match3.components.symbol_kinds import SymbolKinds


def match_length_multiplier(count: int, settings: BoardSettings) -> float:
    if count >= 4:
        return settings.long_match_multiplier
    if count == 3:
        return settings.three_match_multiplier
    return 1.0


def cascade_combo_multiplier(chain_count: int, settings: BoardSettings) -> float:
    """Combo multiplier; saturates at cascade_max_chain while the counter keeps growing."""
    return min(float(settings.cascade_max_chain), 1.0 + chain_count)


def cumulated_score(pieces: Sequence[Piece], kinds: SymbolKinds) -> int:
    return sum(kinds.score_value(piece.kind) for piece in pieces)


def calculate_match_score(
    pieces: Sequence[Piece],
    kinds: SymbolKinds,
    chain_count: int,
    settings: BoardSettings,
) -> int:
    """Score for every piece cleared in one cascade pass, rounded up."""
    if not pieces:
        return 0
    base = cumulated_score(pieces, kinds)
    total = base * match_length_multiplier(len(pieces), settings) * cascade_combo_multiplier(chain_count, settings)
    return math.ceil(total)
