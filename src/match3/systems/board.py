import logging
from typing import List, Sequence, Tuple

from esper import World

from match3.components.board import Board
from match3.components.board_position import BoardPosition
from match3.components.tile import TileType
from match3.events.bus import EventBus, EVENT_BOARD_READY, EVENT_BOARD_RESET
from match3.systems import board_ops

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


class BoardSystem:
    """Owns the board entity and one entity per cell.

    Cell entities are created once and never move; swaps, gravity and refill
    rewrite their TileType values. Row 0 is the top row.
    """

    def __init__(self, world: World, event_bus: EventBus, rows: int | None = None, cols: int | None = None, *, fill: bool = True):
        self.world = world
        self.event_bus = event_bus
        config = getattr(world, "config")
        self.rows = rows if rows is not None else config.rows
        self.cols = cols if cols is not None else config.cols
        self.board_entity = self.world.create_entity()
        self.world.add_component(
            self.board_entity,
            Board(rows=self.rows, cols=self.cols, type_count=config.type_count),
        )
        self._create_cells()
        if fill:
            self.new_board()

    def _create_cells(self):
        board: Board = self.world.component_for_entity(self.board_entity, Board)
        for r in range(board.rows):
            for c in range(board.cols):
                ent = self.world.create_entity(BoardPosition(row=r, col=c), TileType())
                board.cells[(r, c)] = ent

    def new_board(self) -> List[List[int]]:
        """Fill every cell so that the board starts without any run of three.

        With reshuffle_on_stalemate the fill is also required to offer a move.
        """
        config = getattr(self.world, "config")
        if config.reshuffle_on_stalemate:
            layout = board_ops.respawn_full_board(self.world)
        else:
            layout = board_ops.fill_without_matches(self.world)
        logger.info("new %dx%d board", self.rows, self.cols)
        self.event_bus.emit(EVENT_BOARD_READY, rows=self.rows, cols=self.cols)
        return layout

    def reset(self, reason: str, *, require_moves: bool = False) -> List[List[int]]:
        if require_moves:
            layout = board_ops.respawn_full_board(self.world)
        else:
            layout = board_ops.fill_without_matches(self.world)
        logger.info("board reset: %s", reason)
        self.event_bus.emit(EVENT_BOARD_RESET, reason=reason)
        return layout

    def get(self, row: int, col: int) -> int:
        return board_ops.get_cell(self.world, row, col)

    def set(self, row: int, col: int, type_id: int) -> None:
        board_ops.set_cell(self.world, row, col, type_id)

    def swap_cells(self, a: Position, b: Position) -> None:
        board_ops.swap_cells(self.world, a, b)

    @staticmethod
    def is_adjacent(a: Position, b: Position) -> bool:
        return board_ops.is_adjacent(a, b)

    def snapshot(self) -> List[List[int]]:
        return board_ops.grid_snapshot(self.world)

    def load(self, grid: Sequence[Sequence[int]]) -> None:
        board_ops.load_grid(self.world, grid)

    def _get_entity_at(self, row: int, col: int) -> int:
        return board_ops.get_entity_at(self.world, row, col)
