from dataclasses import dataclass

@dataclass(slots=True)
class SymbolKindRegistry:
    """Empty tag component marking the single entity that stores the stage's symbol kinds.

    The same entity also carries a SymbolKinds component mapping kind name -> score value.
    """
    pass
