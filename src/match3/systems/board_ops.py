from __future__ import annotations

import random
from typing import Iterable, List, Sequence, Tuple

from esper import World

from match3.components.board import Board
from match3.components.tile import TileType
from match3.constants import EMPTY, MAX_GENERATION_RETRIES, MAX_RESPAWN_ATTEMPTS
from match3.errors import OutOfBounds
from match3.outcomes import GravityMove

Position = Tuple[int, int]
Grid = List[List[int]]
TypeEntry = Tuple[int, int, int]


def get_board(world: World) -> Board:
    for _, board in world.get_component(Board):
        return board
    raise RuntimeError("Board component not found")


def in_bounds(board: Board, row: int, col: int) -> bool:
    return 0 <= row < board.rows and 0 <= col < board.cols


def get_entity_at(world: World, row: int, col: int) -> int:
    board = get_board(world)
    if not in_bounds(board, row, col):
        raise OutOfBounds(row, col, board.rows, board.cols)
    return board.cells[(row, col)]


def get_cell(world: World, row: int, col: int) -> int:
    entity = get_entity_at(world, row, col)
    return world.component_for_entity(entity, TileType).type_id


def _check_type(board: Board, type_id: int) -> None:
    if type_id != EMPTY and not 1 <= type_id <= board.type_count:
        raise ValueError(f"tile type {type_id} outside 1..{board.type_count}")


def set_cell(world: World, row: int, col: int, type_id: int) -> None:
    """Write a cell unconditionally; only the value range is checked."""
    _check_type(get_board(world), type_id)
    entity = get_entity_at(world, row, col)
    world.component_for_entity(entity, TileType).type_id = type_id


def swap_cells(world: World, a: Position, b: Position) -> None:
    tile_a: TileType = world.component_for_entity(get_entity_at(world, *a), TileType)
    tile_b: TileType = world.component_for_entity(get_entity_at(world, *b), TileType)
    tile_a.type_id, tile_b.type_id = tile_b.type_id, tile_a.type_id


def is_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return (abs(ar - br) == 1 and ac == bc) or (abs(ac - bc) == 1 and ar == br)


def grid_snapshot(world: World) -> Grid:
    """Row-major copy of every cell value (row 0 is the top row)."""
    board = get_board(world)
    grid: Grid = [[EMPTY] * board.cols for _ in range(board.rows)]
    for (row, col), entity in board.cells.items():
        grid[row][col] = world.component_for_entity(entity, TileType).type_id
    return grid


def load_grid(world: World, grid: Sequence[Sequence[int]]) -> None:
    board = get_board(world)
    if len(grid) != board.rows or any(len(line) != board.cols for line in grid):
        raise ValueError(f"grid shape does not match {board.rows}x{board.cols} board")
    values = [[int(type_id) for type_id in line] for line in grid]
    # Nothing is written unless every value is valid.
    for line in values:
        for type_id in line:
            _check_type(board, type_id)
    for row, line in enumerate(values):
        for col, type_id in enumerate(line):
            set_cell(world, row, col, type_id)


def clear_positions(world: World, positions: Iterable[Position]) -> List[TypeEntry]:
    """Set each position to EMPTY and return (row, col, former_type) for the cells cleared."""
    cleared: List[TypeEntry] = []
    for row, col in sorted(set(positions)):
        tile: TileType = world.component_for_entity(get_entity_at(world, row, col), TileType)
        if tile.type_id == EMPTY:
            continue
        cleared.append((row, col, tile.type_id))
        tile.type_id = EMPTY
    return cleared


def compute_gravity_moves(world: World) -> List[GravityMove]:
    """Plan a stable downward compaction of every column.

    Moves are listed bottom-up per column so applying them in order never
    overwrites a tile that still has to move.
    """
    board = get_board(world)
    grid = grid_snapshot(world)
    moves: List[GravityMove] = []
    for col in range(board.cols):
        target = board.rows - 1
        for row in range(board.rows - 1, -1, -1):
            type_id = grid[row][col]
            if type_id == EMPTY:
                continue
            if row != target:
                moves.append(GravityMove(source=(row, col), target=(target, col), type_id=type_id))
            target -= 1
    return moves


def apply_gravity_moves(world: World, moves: List[GravityMove]) -> None:
    for move in moves:
        src_tile: TileType = world.component_for_entity(get_entity_at(world, *move.source), TileType)
        dst_tile: TileType = world.component_for_entity(get_entity_at(world, *move.target), TileType)
        dst_tile.type_id = src_tile.type_id
        src_tile.type_id = EMPTY


def refill_empty_cells(world: World, rng: random.Random | None = None) -> List[Tuple[Position, int]]:
    """Give every EMPTY cell a uniform draw from 1..type_count; runs are allowed."""
    board = get_board(world)
    rng = rng or getattr(world, "random", None) or random.Random()
    spawned: List[Tuple[Position, int]] = []
    for row in range(board.rows):
        for col in range(board.cols):
            tile: TileType = world.component_for_entity(board.cells[(row, col)], TileType)
            if tile.type_id != EMPTY:
                continue
            tile.type_id = rng.randint(1, board.type_count)
            spawned.append(((row, col), tile.type_id))
    return spawned


def count_empty_cells(world: World) -> int:
    return sum(1 for _, tile in world.get_component(TileType) if tile.type_id == EMPTY)


def _completes_run(layout: Grid, row: int, col: int, type_id: int) -> bool:
    """True if placing type_id at (row, col) finishes a run of 3 with already-placed cells."""
    if col >= 2 and layout[row][col - 1] == type_id and layout[row][col - 2] == type_id:
        return True
    if row >= 2 and layout[row - 1][col] == type_id and layout[row - 2][col] == type_id:
        return True
    return False


def generate_layout(rows: int, cols: int, type_count: int, rng: random.Random) -> Grid:
    """Row-major greedy fill that never completes a run of three.

    Only the two cells to the left and the two above are placed when a cell is
    drawn, so checking those is enough for the finished board to hold no run.
    A cell is re-drawn locally; after MAX_GENERATION_RETRIES it picks from the
    types still allowed (at most two are excluded).
    """
    layout: Grid = [[EMPTY] * cols for _ in range(rows)]
    for row in range(rows):
        for col in range(cols):
            type_id = rng.randint(1, type_count)
            retries = 0
            while _completes_run(layout, row, col, type_id):
                retries += 1
                if retries >= MAX_GENERATION_RETRIES:
                    allowed = [t for t in range(1, type_count + 1) if not _completes_run(layout, row, col, t)]
                    type_id = rng.choice(allowed)
                    break
                type_id = rng.randint(1, type_count)
            layout[row][col] = type_id
    return layout


def fill_without_matches(world: World, rng: random.Random | None = None) -> Grid:
    board = get_board(world)
    rng = rng or getattr(world, "random", None) or random.Random()
    layout = generate_layout(board.rows, board.cols, board.type_count, rng)
    load_grid(world, layout)
    return layout


def respawn_full_board(
    world: World,
    *,
    rng: random.Random | None = None,
    max_attempts: int = MAX_RESPAWN_ATTEMPTS,
) -> Grid:
    """Fill the entire board with fresh tiles that contain no matches and at least one valid move."""
    board = get_board(world)
    rng = rng or getattr(world, "random", None) or random.Random()
    for _ in range(max_attempts):
        layout = generate_layout(board.rows, board.cols, board.type_count, rng)
        if not find_valid_swaps_in(layout):
            continue
        load_grid(world, layout)
        return layout
    raise RuntimeError("Unable to respawn board without matches and valid swaps")


def _has_line_match(grid: Grid, pos: Position) -> bool:
    """Return True if a horizontal or vertical run of 3+ passes through pos."""
    row, col = pos
    tval = grid[row][col]
    if tval == EMPTY:
        return False
    rows, cols = len(grid), len(grid[0])
    # Horizontal sweep
    h_len = 1
    c_left = col - 1
    while c_left >= 0 and grid[row][c_left] == tval:
        h_len += 1
        c_left -= 1
    c_right = col + 1
    while c_right < cols and grid[row][c_right] == tval:
        h_len += 1
        c_right += 1
    if h_len >= 3:
        return True
    # Vertical sweep
    v_len = 1
    r_up = row - 1
    while r_up >= 0 and grid[r_up][col] == tval:
        v_len += 1
        r_up -= 1
    r_down = row + 1
    while r_down < rows and grid[r_down][col] == tval:
        v_len += 1
        r_down += 1
    return v_len >= 3


def predict_swap_creates_match(grid: Grid, src: Position, dst: Position) -> bool:
    """Return True if swapping src/dst in grid would create a run through either cell."""
    swapped = [list(line) for line in grid]
    (sr, sc), (dr, dc) = src, dst
    swapped[sr][sc], swapped[dr][dc] = swapped[dr][dc], swapped[sr][sc]
    return _has_line_match(swapped, src) or _has_line_match(swapped, dst)


def find_valid_swaps_in(grid: Grid) -> List[Tuple[Position, Position]]:
    rows, cols = len(grid), len(grid[0])
    swaps: List[Tuple[Position, Position]] = []
    for row in range(rows):
        for col in range(cols):
            pos = (row, col)
            if col + 1 < cols and predict_swap_creates_match(grid, pos, (row, col + 1)):
                swaps.append((pos, (row, col + 1)))
            if row + 1 < rows and predict_swap_creates_match(grid, pos, (row + 1, col)):
                swaps.append((pos, (row + 1, col)))
    return swaps


def find_valid_swaps(world: World) -> List[Tuple[Position, Position]]:
    """Enumerate adjacent swaps that would produce a match."""
    return find_valid_swaps_in(grid_snapshot(world))
