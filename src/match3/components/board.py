from dataclasses import dataclass, field
from typing import Dict, Tuple

@dataclass(slots=True)
class Board:
    rows: int
    cols: int
    type_count: int
    # (row, col) -> cell entity; cells never move, only their TileType values do.
    cells: Dict[Tuple[int, int], int] = field(default_factory=dict, repr=False)
