import random

import pytest

from match3.components.swap_state import SwapPhase
from match3.constants import EMPTY
from match3.errors import CascadeDidNotConverge, OutOfBounds
from match3.events.bus import (EVENT_BOARD_RESET, EVENT_CASCADE_COMPLETE, EVENT_TICK, EVENT_TILE_SWAP_INVALID,
                               EVENT_TILE_SWAP_REQUEST, EVENT_TILE_SWAP_VALID)
from match3.outcomes import SwapRejection
from match3.systems.match import find_all_matches

from helpers import FixedRandom, assert_settled, build_rig

GRID = [
    [1, 1, 2, 3],
    [2, 2, 1, 1],
    [3, 1, 2, 2],
    [1, 2, 3, 1],
]


def drive_ticks(bus, count=200, dt=0.05):
    for _ in range(count):
        bus.emit(EVENT_TICK, dt=dt)


def test_board_starts_without_matches():
    rig = build_rig(GRID)
    assert not find_all_matches(rig.world)


@pytest.mark.parametrize("seeded", [False, True])
def test_swap_without_match_reverts_exactly(seeded):
    rig = build_rig(GRID, seeded_detection=seeded)
    invalid = {}
    rig.bus.subscribe(EVENT_TILE_SWAP_INVALID, lambda s, **k: invalid.update(k))

    outcome = rig.swaps.request_swap((0, 2), (0, 3))

    assert not outcome.accepted
    assert outcome.reason is SwapRejection.NO_MATCH
    assert outcome.steps == []
    assert rig.board.snapshot() == GRID
    assert invalid == {'src': (0, 2), 'dst': (0, 3), 'reason': SwapRejection.NO_MATCH}
    assert rig.swaps.state.phase is SwapPhase.IDLE


@pytest.mark.parametrize("seeded", [False, True])
def test_swap_creating_run_is_accepted(seeded):
    rig = build_rig(GRID, type_count=8, rng=random.Random(5), seeded_detection=seeded)
    valid = {}
    rig.bus.subscribe(EVENT_TILE_SWAP_VALID, lambda s, **k: valid.update(k))

    outcome = rig.swaps.request_swap((0, 1), (1, 1))

    assert outcome.accepted
    assert outcome.reason is None
    assert valid['positions'] == [(1, 1), (1, 2), (1, 3)]
    assert outcome.steps[0].eliminated == [(1, 1), (1, 2), (1, 3)]
    assert outcome.eliminated_count >= 3
    assert rig.swaps.state.phase is SwapPhase.IDLE
    assert rig.swaps.state.cascade_depth == len(outcome.steps)
    assert_settled(rig.world)


def test_not_adjacent_rejected_without_touching_board():
    rig = build_rig(GRID)
    for a, b in [((0, 0), (0, 2)), ((0, 0), (1, 1)), ((2, 2), (2, 2))]:
        outcome = rig.swaps.request_swap(a, b)
        assert outcome.reason is SwapRejection.NOT_ADJACENT
    assert rig.board.snapshot() == GRID


def test_out_of_bounds_swap_raises():
    rig = build_rig(GRID)
    with pytest.raises(OutOfBounds):
        rig.swaps.request_swap((3, 3), (3, 4))
    assert rig.swaps.state.phase is SwapPhase.IDLE
    assert rig.board.snapshot() == GRID


def test_busy_rejects_instead_of_queueing():
    rig = build_rig(GRID, type_count=8, settle_delay=0.1)
    first = rig.swaps.begin_swap((0, 1), (1, 1))
    assert first.accepted
    assert rig.swaps.busy
    # Elimination already happened; later phases wait for ticks.
    assert [rig.board.get(1, c) for c in (1, 2, 3)] == [EMPTY, EMPTY, EMPTY]

    snapshot = rig.board.snapshot()
    second = rig.swaps.request_swap((3, 0), (3, 1))
    assert second.reason is SwapRejection.BUSY
    assert rig.board.snapshot() == snapshot

    complete = {}
    rig.bus.subscribe(EVENT_CASCADE_COMPLETE, lambda s, **k: complete.update(k))
    drive_ticks(rig.bus)
    assert not rig.swaps.busy
    assert first.steps and first.steps[0].eliminated == [(1, 1), (1, 2), (1, 3)]
    assert complete['depth'] == len(first.steps)
    assert_settled(rig.world)


def test_settle_delay_paces_phases():
    rig = build_rig(GRID, type_count=8, settle_delay=0.1)
    rig.swaps.begin_swap((0, 1), (1, 1))
    rig.bus.emit(EVENT_TICK, dt=0.05)
    # Not yet settled: gravity has not run.
    assert rig.board.get(1, 1) == EMPTY
    rig.bus.emit(EVENT_TICK, dt=0.05)
    assert rig.board.get(1, 1) != EMPTY
    assert rig.board.get(0, 1) == EMPTY


def test_swap_request_event_starts_paced_swap():
    rig = build_rig(GRID, type_count=8)
    valid = []
    rig.bus.subscribe(EVENT_TILE_SWAP_VALID, lambda s, **k: valid.append(k))
    rig.bus.emit(EVENT_TILE_SWAP_REQUEST, src=(0, 1), dst=(1, 1))
    assert valid and rig.swaps.busy
    drive_ticks(rig.bus)
    assert not rig.swaps.busy
    assert_settled(rig.world)


def test_non_converging_cascade_resets_board():
    grid = [
        [1, 1, 2],
        [2, 3, 1],
        [3, 2, 3],
    ]
    rig = build_rig(grid, rng=FixedRandom())
    resets = []
    rig.bus.subscribe(EVENT_BOARD_RESET, lambda s, **k: resets.append(k))

    with pytest.raises(CascadeDidNotConverge):
        rig.swaps.request_swap((0, 2), (1, 2))

    assert resets == [{'reason': 'cascade_did_not_converge'}]
    assert rig.swaps.state.phase is SwapPhase.IDLE
    assert_settled(rig.world)


def test_non_converging_paced_cascade_resets_board():
    grid = [
        [1, 1, 2],
        [2, 3, 1],
        [3, 2, 3],
    ]
    rig = build_rig(grid, rng=FixedRandom())
    rig.swaps.begin_swap((0, 2), (1, 2))
    with pytest.raises(CascadeDidNotConverge):
        drive_ticks(rig.bus)
    assert not rig.swaps.busy
    assert not rig.resolver.active
    assert_settled(rig.world)
