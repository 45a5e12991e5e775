from dataclasses import dataclass

from match3.constants import EMPTY

@dataclass(slots=True)
class TileType:
    """Per-cell tile type assignment.

    type_id is in 1..type_count for an occupied cell, or EMPTY (0) for a cell
    cleared during an in-progress cascade step.
    """
    type_id: int = EMPTY

    @property
    def empty(self) -> bool:
        return self.type_id == EMPTY
