"""Run detection: every horizontal or vertical line of 3+ equal tile types.

Two entry points return the same kind of result, a set of positions:

* ``find_all_matches`` scans every row and column and is the ground truth.
* ``find_matches_from`` starts at a few changed cells and only follows runs
  reachable from them, remembering per tile type which rows and columns it
  already scanned.
"""
from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from esper import World

from match3.constants import EMPTY, MIN_RUN_LENGTH
from match3.events.bus import EventBus, EVENT_MATCH_FOUND
from match3.systems.board_ops import Grid, grid_snapshot

Position = Tuple[int, int]


def _scan_line(grid: Grid, line: Sequence[Position]) -> List[List[Position]]:
    runs: List[List[Position]] = []
    run: List[Position] = []
    last_type = EMPTY
    for row, col in line:
        tval = grid[row][col]
        if tval != EMPTY and tval == last_type:
            run.append((row, col))
        else:
            if len(run) >= MIN_RUN_LENGTH:
                runs.append(run)
            run = [(row, col)] if tval != EMPTY else []
            last_type = tval
    if len(run) >= MIN_RUN_LENGTH:
        runs.append(run)
    return runs


def _row_line(grid: Grid, row: int) -> List[Position]:
    return [(row, col) for col in range(len(grid[0]))]


def _col_line(grid: Grid, col: int) -> List[Position]:
    return [(row, col) for row in range(len(grid))]


def find_runs(grid: Grid) -> List[List[Position]]:
    """Every row run (left to right) followed by every column run (top to bottom)."""
    runs: List[List[Position]] = []
    for row in range(len(grid)):
        runs.extend(_scan_line(grid, _row_line(grid, row)))
    for col in range(len(grid[0])):
        runs.extend(_scan_line(grid, _col_line(grid, col)))
    return runs


def find_matches_in(grid: Grid) -> Set[Position]:
    return {pos for run in find_runs(grid) for pos in run}


def find_all_matches(world: World) -> Set[Position]:
    """Full-board scan of the world's grid."""
    return find_matches_in(grid_snapshot(world))


def find_matches_from_in(grid: Grid, seeds: Iterable[Position]) -> Set[Position]:
    rows, cols = len(grid), len(grid[0])
    matched: Set[Position] = set()
    checked_rows: Dict[int, Set[int]] = {}
    checked_cols: Dict[int, Set[int]] = {}
    worklist = deque(pos for pos in seeds if 0 <= pos[0] < rows and 0 <= pos[1] < cols)
    while worklist:
        row, col = worklist.popleft()
        tval = grid[row][col]
        if tval == EMPTY:
            continue
        found: List[Position] = []
        rows_done = checked_rows.setdefault(tval, set())
        if row not in rows_done:
            rows_done.add(row)
            for run in _scan_line(grid, _row_line(grid, row)):
                if grid[run[0][0]][run[0][1]] == tval:
                    found.extend(run)
        cols_done = checked_cols.setdefault(tval, set())
        if col not in cols_done:
            cols_done.add(col)
            for run in _scan_line(grid, _col_line(grid, col)):
                if grid[run[0][0]][run[0][1]] == tval:
                    found.extend(run)
        for pos in found:
            if pos not in matched:
                matched.add(pos)
                worklist.append(pos)
    return matched


def find_matches_from(world: World, seeds: Iterable[Position]) -> Set[Position]:
    """Localized scan seeded at recently changed cells."""
    return find_matches_from_in(grid_snapshot(world), seeds)


def group_matches(grid: Grid, positions: Iterable[Position]) -> List[List[Position]]:
    """Split a match set into orthogonally connected groups of one tile type."""
    remaining = set(positions)
    groups: List[List[Position]] = []
    while remaining:
        start = min(remaining)
        remaining.discard(start)
        tval = grid[start[0]][start[1]]
        group = [start]
        frontier = [start]
        while frontier:
            row, col = frontier.pop()
            for neighbour in ((row - 1, col), (row + 1, col), (row, col - 1), (row, col + 1)):
                if neighbour in remaining and grid[neighbour[0]][neighbour[1]] == tval:
                    remaining.discard(neighbour)
                    group.append(neighbour)
                    frontier.append(neighbour)
        groups.append(sorted(group))
    return groups


class MatchSystem:
    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus

    def detect(self, seeds: Optional[Iterable[Position]] = None, *, reason: str = "swap") -> Set[Position]:
        config = getattr(self.world, "config", None)
        if seeds is not None and config is not None and config.seeded_detection:
            matches = find_matches_from(self.world, seeds)
        else:
            matches = find_all_matches(self.world)
        if matches:
            positions = sorted(matches)
            self.event_bus.emit(EVENT_MATCH_FOUND, positions=positions, size=len(positions), reason=reason)
        return matches
