from dataclasses import dataclass


@dataclass(slots=True)
class Session:
    """Per-stage counters; reset whenever a stage is (re)loaded."""

    score: int = 0
    moves_remaining: int = 0
    max_moves: int = 0
    score_to_win: int = 0
    bombs_remaining: int = 0
    cascade_chain_count: int = 0
    session_coins: int = 0

    @property
    def score_progress(self) -> float:
        if self.score_to_win <= 0:
            return 0.0
        return min(1.0, max(0.0, self.score / self.score_to_win))
