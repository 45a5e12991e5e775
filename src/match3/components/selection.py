from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(slots=True)
class SelectionState:
    """Which tile the player holds, plus the drag anchor.

    selected: cell currently under the player's finger/cursor selection.
    exchanged: cell the selected tile was last swapped with during this drag.
    anchor: screen point displacement is measured from; re-based after each swap.
    """

    selected: Optional[Tuple[int, int]] = None
    exchanged: Optional[Tuple[int, int]] = None
    anchor: Optional[Tuple[float, float]] = None
    dragging: bool = False

    def clear(self) -> None:
        self.selected = None
        self.exchanged = None
        self.anchor = None
        self.dragging = False
