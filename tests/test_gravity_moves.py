import random

from match3.constants import EMPTY
from match3.outcomes import GravityMove
from match3.systems.board_ops import (apply_gravity_moves, clear_positions, compute_gravity_moves,
                                      count_empty_cells, grid_snapshot, refill_empty_cells)

from helpers import build_rig


def column(grid, col):
    return [line[col] for line in grid]


def test_gravity_then_refill_single_gap():
    grid = [
        [2, 3, 1],
        [3, 1, 2],
        [1, 2, EMPTY],
        [2, 3, 4],
    ]
    rig = build_rig(grid, type_count=4)
    moves = compute_gravity_moves(rig.world)
    assert moves == [
        GravityMove(source=(1, 2), target=(2, 2), type_id=2),
        GravityMove(source=(0, 2), target=(1, 2), type_id=1),
    ]
    apply_gravity_moves(rig.world, moves)
    assert column(grid_snapshot(rig.world), 2) == [EMPTY, 1, 2, 4]

    refills = refill_empty_cells(rig.world)
    assert [pos for pos, _ in refills] == [(0, 2)]
    after = grid_snapshot(rig.world)
    assert 1 <= after[0][2] <= 4
    assert column(after, 2)[1:] == [1, 2, 4]
    assert column(after, 0) == [2, 3, 1, 2]


def test_clear_positions_reports_former_types():
    rig = build_rig([[1, 2, 3], [2, 3, 1], [3, 1, 2]])
    typed = clear_positions(rig.world, [(1, 1), (0, 0), (1, 1)])
    assert typed == [(0, 0, 1), (1, 1, 3)]
    assert count_empty_cells(rig.world) == 2
    # Clearing an already empty cell is a no-op.
    assert clear_positions(rig.world, [(0, 0)]) == []


def test_no_moves_when_gaps_already_on_top():
    grid = [
        [EMPTY, EMPTY, 1],
        [1, EMPTY, 2],
        [2, 3, 1],
    ]
    rig = build_rig(grid)
    assert compute_gravity_moves(rig.world) == []


def test_gravity_preserves_relative_order():
    rng = random.Random(4)
    for _ in range(25):
        grid = [[rng.choice([EMPTY, 1, 2, 3, 4]) for _ in range(5)] for _ in range(6)]
        rig = build_rig(grid, type_count=4)
        apply_gravity_moves(rig.world, compute_gravity_moves(rig.world))
        after = grid_snapshot(rig.world)
        for col in range(5):
            before_values = [v for v in column(grid, col) if v != EMPTY]
            after_col = column(after, col)
            gap = len(after_col) - len(before_values)
            assert after_col[:gap] == [EMPTY] * gap
            assert after_col[gap:] == before_values


def test_refill_draws_from_world_rng_in_range():
    grid = [[EMPTY] * 4 for _ in range(4)]
    rig = build_rig([[1, 2, 3, 1]] * 4, type_count=5)
    rig.board.load(grid)
    refills = refill_empty_cells(rig.world)
    assert len(refills) == 16
    assert all(1 <= type_id <= 5 for _, type_id in refills)
    assert count_empty_cells(rig.world) == 0
