"""Player selection state machine for tap and drag input.

Tap model: NoSelection → OneSelected → NoSelection. Drag model: pointer down
selects the tile under the pointer; each move past the displacement threshold
and the swap cooldown swaps toward the tile under the pointer and re-bases the
anchor, so one drag can chain several swaps. Releasing clears everything.

This system never writes to the board; it only asks the SwapSystem.
"""
from typing import Optional, Tuple

from esper import World

from match3.components.selection import SelectionState
from match3.events.bus import (EventBus, EVENT_POINTER_DOWN, EVENT_POINTER_MOVE, EVENT_POINTER_UP,
                               EVENT_TILE_CLICK, EVENT_TILE_SELECTED, EVENT_TILE_DESELECTED)
from match3.outcomes import SwapOutcome, SwapRejection
from match3.systems.board_ops import get_entity_at, is_adjacent
from match3.systems.swap import SwapSystem
from match3.ui.layout import BoardGeometry
from match3.utils.input_throttle import DragThrottle
from match3.world import get_selection_state

Position = Tuple[int, int]


class InputSystem:
    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        swaps: SwapSystem,
        geometry: Optional[BoardGeometry] = None,
        *,
        throttle: Optional[DragThrottle] = None,
        paced: bool = False,
    ):
        self.world = world
        self.event_bus = event_bus
        self.swaps = swaps
        self.geometry = geometry
        config = getattr(world, "config", None)
        if throttle is None and config is not None:
            throttle = DragThrottle(cooldown=config.swap_cooldown, min_distance=config.move_threshold)
        self.throttle = throttle or DragThrottle()
        # Each game starts with no drag in progress.
        self.throttle.reset()
        self.paced = paced
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)
        self.event_bus.subscribe(EVENT_POINTER_DOWN, self.on_pointer_down)
        self.event_bus.subscribe(EVENT_POINTER_MOVE, self.on_pointer_move)
        self.event_bus.subscribe(EVENT_POINTER_UP, self.on_pointer_up)

    @property
    def selection(self) -> SelectionState:
        return get_selection_state(self.world)

    @property
    def selected(self) -> Optional[Position]:
        return self.selection.selected

    # -- tap ---------------------------------------------------------------

    def select_tap(self, pos: Position) -> Optional[SwapOutcome]:
        get_entity_at(self.world, *pos)
        if self.swaps.busy:
            return None
        selection = self.selection
        if selection.selected is None:
            self._select(pos)
            return None
        if selection.selected == pos:
            self._deselect('same_tile')
            return None
        if not is_adjacent(selection.selected, pos):
            # Change selection to new tile
            self._select(pos)
            return None
        src = selection.selected
        self._deselect('swap')
        return self._swap(src, pos)

    def on_tile_click(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        self.select_tap((row, col))

    # -- drag --------------------------------------------------------------

    def pointer_down(self, x: float, y: float) -> Optional[Position]:
        if self.swaps.busy:
            return None
        cell = self._cell_at(x, y)
        if cell is None:
            return None
        self._select(cell)
        selection = self.selection
        selection.anchor = (x, y)
        selection.dragging = True
        self.throttle.set_anchor(x, y)
        return cell

    def pointer_move(self, x: float, y: float) -> Optional[SwapOutcome]:
        selection = self.selection
        if not selection.dragging or selection.selected is None or self.swaps.busy:
            return None
        if not self.throttle.allow(x, y):
            return None
        cell = self._cell_at(x, y)
        if cell is None:
            return None
        return self._drag_step(cell, (x, y))

    def drag_to(self, pos: Position) -> Optional[SwapOutcome]:
        """Grid-level drag step: the pointer already moved far enough onto pos."""
        get_entity_at(self.world, *pos)
        selection = self.selection
        if selection.selected is None or self.swaps.busy:
            return None
        if not self.throttle.ready():
            return None
        return self._drag_step(pos, None)

    def pointer_up(self) -> None:
        self.throttle.release()
        self._deselect('release')

    def on_pointer_down(self, sender, **kwargs):
        x = kwargs.get('x'); y = kwargs.get('y')
        if x is None or y is None:
            return
        self.pointer_down(float(x), float(y))

    def on_pointer_move(self, sender, **kwargs):
        x = kwargs.get('x'); y = kwargs.get('y')
        if x is None or y is None:
            return
        self.pointer_move(float(x), float(y))

    def on_pointer_up(self, sender, **kwargs):
        self.pointer_up()

    # -- helpers -----------------------------------------------------------

    def _drag_step(self, cell: Position, point: Optional[Tuple[float, float]]) -> Optional[SwapOutcome]:
        selection = self.selection
        current = selection.selected
        if current is None or cell == current:
            return None
        if selection.exchanged is not None and cell != selection.exchanged:
            self._deselect('target_changed')
            return None
        if not is_adjacent(current, cell):
            return None
        outcome = self._swap(current, cell)
        if outcome.reason is SwapRejection.BUSY:
            return outcome
        if point is not None:
            self.throttle.mark_swap(*point)
            selection.anchor = point
        else:
            self.throttle.mark_swap()
        if outcome.accepted:
            # The dragged tile now sits at cell; dragging back targets its old cell.
            selection.selected = cell
            selection.exchanged = current
            self.event_bus.emit(EVENT_TILE_SELECTED, row=cell[0], col=cell[1])
        return outcome

    def _swap(self, src: Position, dst: Position) -> SwapOutcome:
        if self.paced:
            return self.swaps.begin_swap(src, dst)
        return self.swaps.request_swap(src, dst)

    def _cell_at(self, x: float, y: float) -> Optional[Position]:
        if self.geometry is None:
            return None
        return self.geometry.cell_at(x, y)

    def _select(self, pos: Position) -> None:
        selection = self.selection
        selection.selected = pos
        selection.exchanged = None
        self.event_bus.emit(EVENT_TILE_SELECTED, row=pos[0], col=pos[1])

    def _deselect(self, reason: str) -> None:
        selection = self.selection
        prev = selection.selected
        selection.clear()
        if prev is not None:
            self.event_bus.emit(EVENT_TILE_DESELECTED, reason=reason, prev_row=prev[0], prev_col=prev[1])
