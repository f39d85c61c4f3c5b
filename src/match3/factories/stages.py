"""Stage configuration: frozen specs loaded from JSON.

Layout rows are written top row first, ``.`` for a usable cell and ``#`` for a
hole; ``StageSpec.layout`` stores them bottom row first as booleans so that
``layout[y][x]`` matches grid coordinates.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence, Tuple

from match3.constants import BOMB_EXPLOSION_RADIUS, GRID_HEIGHT, GRID_WIDTH

USABLE = "."
HOLE = "#"


@dataclass(frozen=True)
class SymbolSpec:
    name: str
    score_value: int = 10


@dataclass(frozen=True)
class StageSpec:
    name: str
    width: int
    height: int
    layout: Tuple[Tuple[bool, ...], ...]
    symbols: Tuple[SymbolSpec, ...]
    max_moves: int
    score_to_win: int
    bombs: int = 0
    bomb_radius: int = BOMB_EXPLOSION_RADIUS

    @property
    def symbol_names(self) -> Tuple[str, ...]:
        return tuple(symbol.name for symbol in self.symbols)

    def symbol_scores(self) -> dict[str, int]:
        return {symbol.name: symbol.score_value for symbol in self.symbols}


def parse_layout(rows: Sequence[str]) -> Tuple[Tuple[bool, ...], ...]:
    """Convert top-first ASCII rows into bottom-first usable flags."""
    if not rows:
        raise ValueError("layout must contain at least one row")
    width = len(rows[0])
    parsed = []
    for line in rows:
        if len(line) != width:
            raise ValueError("layout rows must all have the same width")
        flags = []
        for char in line:
            if char == USABLE:
                flags.append(True)
            elif char == HOLE:
                flags.append(False)
            else:
                raise ValueError(f"unknown layout character {char!r}")
        parsed.append(tuple(flags))
    return tuple(reversed(parsed))


def full_layout(width: int, height: int) -> Tuple[Tuple[bool, ...], ...]:
    return tuple(tuple(True for _ in range(width)) for _ in range(height))


def stage_from_dict(payload: Mapping[str, Any]) -> StageSpec:
    try:
        name = str(payload["name"])
        symbols_raw = payload["symbols"]
        max_moves = int(payload["max_moves"])
        score_to_win = int(payload["score_to_win"])
    except KeyError as exc:
        raise ValueError(f"stage definition missing required key {exc.args[0]!r}") from exc
    if "layout" in payload:
        layout = parse_layout(payload["layout"])
        height = len(layout)
        width = len(layout[0])
    else:
        width = int(payload.get("width", GRID_WIDTH))
        height = int(payload.get("height", GRID_HEIGHT))
        layout = full_layout(width, height)
    symbols = []
    for entry in symbols_raw:
        if isinstance(entry, str):
            symbols.append(SymbolSpec(name=entry))
        else:
            symbols.append(SymbolSpec(name=str(entry["name"]), score_value=int(entry.get("score_value", 10))))
    if not symbols:
        raise ValueError(f"stage {name!r} defines no symbols")
    if max_moves <= 0:
        raise ValueError(f"stage {name!r} must allow at least one move")
    return StageSpec(
        name=name,
        width=width,
        height=height,
        layout=layout,
        symbols=tuple(symbols),
        max_moves=max_moves,
        score_to_win=score_to_win,
        bombs=int(payload.get("bombs", 0)),
        bomb_radius=int(payload.get("bomb_radius", BOMB_EXPLOSION_RADIUS)),
    )


def default_stages_path() -> Path:
    return Path(__file__).resolve().parents[1] / "data" / "stages.json"


def load_stages(path: Path | str | None = None) -> Tuple[StageSpec, ...]:
    stage_path = Path(path) if path is not None else default_stages_path()
    with stage_path.open("r", encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid stage file {stage_path}: {exc}") from exc
    entries = payload.get("stages", []) if isinstance(payload, dict) else payload
    stages = tuple(stage_from_dict(entry) for entry in entries)
    if not stages:
        raise ValueError(f"no stages defined in {stage_path}")
    return stages
