from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from match3.constants import TILE_SIZE

BOARD_MAX_WIDTH_PCT = 0.9
BOARD_MAX_HEIGHT_PCT = 0.9
MIN_TILE_SIZE = 20


@dataclass(slots=True)
class BoardGeometry:
    """Maps screen points to grid cells.

    Screen y grows upward and (start_x, start_y) is the bottom-left corner of
    the board, while grid row 0 is the top row, so rows count down from the
    top edge.
    """

    rows: int
    cols: int
    tile_size: float = TILE_SIZE
    start_x: float = 0.0
    start_y: float = 0.0

    @property
    def width(self) -> float:
        return self.cols * self.tile_size

    @property
    def height(self) -> float:
        return self.rows * self.tile_size

    def cell_at(self, x: float, y: float) -> Tuple[int, int] | None:
        if x < self.start_x or x >= self.start_x + self.width:
            return None
        if y < self.start_y or y >= self.start_y + self.height:
            return None
        col = int((x - self.start_x) // self.tile_size)
        row = int((self.start_y + self.height - y) // self.tile_size)
        if 0 <= row < self.rows and 0 <= col < self.cols:
            return row, col
        return None

    def cell_center(self, row: int, col: int) -> Tuple[float, float]:
        x = self.start_x + (col + 0.5) * self.tile_size
        y = self.start_y + self.height - (row + 0.5) * self.tile_size
        return x, y


def compute_board_geometry(window_width: float, window_height: float, rows: int, cols: int) -> BoardGeometry:
    """Largest square-tiled board that fits the window, centred on both axes."""
    tile_by_w = window_width * BOARD_MAX_WIDTH_PCT / cols
    tile_by_h = window_height * BOARD_MAX_HEIGHT_PCT / rows
    tile_size = int(min(tile_by_w, tile_by_h))
    if tile_size < MIN_TILE_SIZE:
        tile_size = MIN_TILE_SIZE
    start_x = (window_width - cols * tile_size) / 2
    start_y = (window_height - rows * tile_size) / 2
    return BoardGeometry(rows=rows, cols=cols, tile_size=tile_size, start_x=start_x, start_y=start_y)
