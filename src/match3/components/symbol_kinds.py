from dataclasses import dataclass, field
from typing import Dict, List

@dataclass(slots=True)
class SymbolKinds:
    """Symbol kind definitions for the active stage, stored on a single entity.

    This component lives alongside SymbolKindRegistry (tag). ``scores`` maps every
    known kind (consumables included) to its base score value; ``spawnable`` lists
    the kinds random fills may draw from.
    """
    scores: Dict[str, int] = field(default_factory=dict)
    spawnable: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.spawnable:
            # Preserve order while dropping unknown and repeated kinds.
            self.spawnable = [name for name in dict.fromkeys(self.spawnable) if name in self.scores]
        else:
            self.spawnable = list(self.scores.keys())

    def score_value(self, kind: str) -> int:
        return self.scores.get(kind, 0)

    def spawnable_kinds(self) -> List[str]:
        return list(self.spawnable)

    def replace(self, scores: Dict[str, int]) -> None:
        """Swap in a new kind table; every kind in it becomes spawnable."""
        self.scores = dict(scores)
        self.spawnable = list(self.scores.keys())

    def register_kind(self, kind: str, score_value: int, *, spawnable: bool = True) -> None:
        self.scores[kind] = score_value
        if spawnable:
            if kind not in self.spawnable:
                self.spawnable.append(kind)
        elif kind in self.spawnable:
            self.spawnable = [name for name in self.spawnable if name != kind]
