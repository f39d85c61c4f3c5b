from match3.systems.board_ops import (
    apply_gravity,
    refill_empty_cells,
    remove_and_refill,
    surrounding_positions,
)
from tests.helpers import grid_from_rows, kinds_as_rows


def picker(*kinds):
    queue = list(kinds)
    return lambda: queue.pop(0)


def test_gravity_skips_holes_and_preserves_order():
    grid = grid_from_rows([
        "A",
        "#",
        "B",
        ".",
    ])
    a_id = grid.piece_at((0, 3)).piece_id
    b_id = grid.piece_at((0, 1)).piece_id
    moves = apply_gravity(grid)
    assert [(m.source, m.target) for m in moves] == [((0, 1), (0, 0)), ((0, 3), (0, 1))]
    assert grid.piece_at((0, 0)).piece_id == b_id
    assert grid.piece_at((0, 1)).piece_id == a_id
    assert grid.piece_at((0, 3)) is None
    grid.check_invariants()


def test_refill_spawns_only_in_empty_usable_cells():
    grid = grid_from_rows([
        ".#",
        "A.",
    ])
    spawned = refill_empty_cells(grid, picker("C", "D"))
    assert [(view.position, view.kind) for view in spawned] == [((0, 1), "C"), ((1, 0), "D")]
    assert grid.get(1, 1).piece is None


def test_remove_and_refill_reports_every_step():
    grid = grid_from_rows([
        "ABC",
        "DEF",
        "GHI",
    ])
    result = remove_and_refill(grid, [(1, 0), (1, 1)], picker("X", "Y"))
    assert sorted(view.kind for view in result.removed) == ["E", "H"]
    assert [(m.source, m.target, m.kind) for m in result.moves] == [((1, 2), (1, 0), "B")]
    assert [view.position for view in result.spawned] == [(1, 1), (1, 2)]
    assert kinds_as_rows(grid) == ["A-C", "D-F", "GB-"]


def test_surrounding_positions_clip_to_grid_and_skip_holes():
    grid = grid_from_rows([
        "A#C",
        "DEF",
        "GHI",
    ])
    assert surrounding_positions(grid, (0, 0), 1) == [(1, 0), (0, 1), (1, 1)]
    around_center = surrounding_positions(grid, (1, 1), 1)
    assert (1, 2) not in around_center
    assert (1, 1) not in around_center
    assert len(around_center) == 7
