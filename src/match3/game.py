"""Host-facing entry point.

A presentation layer drives one ``Match3Game``: configure it, start a game,
forward taps/drags or explicit swap requests, and subscribe to the bus events
in ``match3.events.bus`` to animate what the engine reports.
"""
from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence, Tuple

from match3.config import MatchConfig, configure
from match3.events.bus import (EventBus, EVENT_TICK, EVENT_TILE_SWAP_REQUEST, EVENT_TILE_CLICK,
                               EVENT_POINTER_DOWN, EVENT_POINTER_MOVE, EVENT_POINTER_UP)
from match3.outcomes import SwapOutcome
from match3.systems.board import BoardSystem
from match3.systems.board_ops import find_valid_swaps
from match3.systems.input import InputSystem
from match3.systems.match import MatchSystem
from match3.systems.match_resolution import MatchResolutionSystem
from match3.systems.swap import SwapSystem
from match3.ui.layout import BoardGeometry
from match3.utils.input_throttle import DragThrottle
from match3.world import create_world

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


class Match3Game:
    def __init__(
        self,
        config: MatchConfig | None = None,
        *,
        event_bus: EventBus | None = None,
        rng: random.Random | None = None,
        geometry: BoardGeometry | None = None,
        throttle: DragThrottle | None = None,
        paced: bool = False,
    ):
        self.event_bus = event_bus or EventBus()
        self.config = (config or MatchConfig()).validate()
        self.rng = rng or random.Random()
        self.geometry = geometry
        self.throttle = throttle
        self.paced = paced
        self.world = None
        self.board: BoardSystem | None = None
        self.matcher: MatchSystem | None = None
        self.resolver: MatchResolutionSystem | None = None
        self.swaps: SwapSystem | None = None
        self.input: InputSystem | None = None

    def configure(self, rows: int, columns: int, type_count: int, **options) -> MatchConfig:
        """Replace the session configuration; takes effect on the next new_game()."""
        self.config = configure(rows, columns, type_count, **options)
        return self.config

    def new_game(self) -> List[List[int]]:
        self._detach_systems()
        self.world = create_world(self.event_bus, self.config, rng=self.rng)
        self.board = BoardSystem(self.world, self.event_bus, fill=False)
        self.matcher = MatchSystem(self.world, self.event_bus)
        self.resolver = MatchResolutionSystem(self.world, self.event_bus)
        self.swaps = SwapSystem(self.world, self.event_bus, self.board, self.matcher, self.resolver)
        geometry = self.geometry or BoardGeometry(rows=self.config.rows, cols=self.config.cols)
        self.input = InputSystem(self.world, self.event_bus, self.swaps, geometry, throttle=self.throttle, paced=self.paced)
        logger.info("new game %dx%d with %d tile types", self.config.rows, self.config.cols, self.config.type_count)
        return self.board.new_board()

    def _detach_systems(self) -> None:
        """Disconnect the previous game's systems so a new game starts with a clean bus."""
        if self.resolver is not None:
            self.event_bus.unsubscribe(EVENT_TICK, self.resolver.on_tick)
        if self.swaps is not None:
            self.event_bus.unsubscribe(EVENT_TILE_SWAP_REQUEST, self.swaps.on_swap_request)
        if self.input is not None:
            self.event_bus.unsubscribe(EVENT_TILE_CLICK, self.input.on_tile_click)
            self.event_bus.unsubscribe(EVENT_POINTER_DOWN, self.input.on_pointer_down)
            self.event_bus.unsubscribe(EVENT_POINTER_MOVE, self.input.on_pointer_move)
            self.event_bus.unsubscribe(EVENT_POINTER_UP, self.input.on_pointer_up)

    def _require_board(self) -> BoardSystem:
        if self.board is None:
            raise RuntimeError("new_game() has not been called")
        return self.board

    def request_swap(self, a: Position, b: Position) -> SwapOutcome:
        self._require_board()
        return self.swaps.request_swap(a, b)

    def select_tap(self, pos: Position) -> Optional[SwapOutcome]:
        self._require_board()
        return self.input.select_tap(pos)

    def pointer_down(self, x: float, y: float) -> Optional[Position]:
        self._require_board()
        return self.input.pointer_down(x, y)

    def pointer_move(self, x: float, y: float) -> Optional[SwapOutcome]:
        self._require_board()
        return self.input.pointer_move(x, y)

    def pointer_up(self) -> None:
        self._require_board()
        self.input.pointer_up()

    def drag_to(self, pos: Position) -> Optional[SwapOutcome]:
        self._require_board()
        return self.input.drag_to(pos)

    def tick(self, dt: float) -> None:
        self.event_bus.emit(EVENT_TICK, dt=dt)

    def get(self, row: int, col: int) -> int:
        return self._require_board().get(row, col)

    def board_state(self) -> List[List[int]]:
        return self._require_board().snapshot()

    def load(self, grid: Sequence[Sequence[int]]) -> None:
        self._require_board().load(grid)

    def valid_swaps(self) -> List[Tuple[Position, Position]]:
        self._require_board()
        return find_valid_swaps(self.world)

    @property
    def busy(self) -> bool:
        return self.swaps is not None and self.swaps.busy

    def subscribe(self, event: str, handler) -> None:
        self.event_bus.subscribe(event, handler)
