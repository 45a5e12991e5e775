import logging
from typing import List, Set, Tuple

from esper import World

from match3.components.swap_state import SwapPhase, SwapState
from match3.errors import CascadeDidNotConverge
from match3.events.bus import (EventBus, EVENT_TILE_SWAP_REQUEST, EVENT_TILE_SWAP_VALID,
                               EVENT_TILE_SWAP_INVALID)
from match3.outcomes import CascadeStep, SwapOutcome, SwapRejection
from match3.systems.board import BoardSystem
from match3.systems.match import MatchSystem
from match3.systems.match_resolution import MatchResolutionSystem
from match3.world import get_swap_state

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


class SwapSystem:
    """Swap controller: Idle → Pending → Resolving → Idle.

    Only one swap may be in flight. Requests that arrive while a swap is
    pending or resolving are rejected with BUSY, never queued.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        board: BoardSystem,
        matcher: MatchSystem,
        resolver: MatchResolutionSystem,
    ):
        self.world = world
        self.event_bus = event_bus
        self.board = board
        self.matcher = matcher
        self.resolver = resolver
        self.event_bus.subscribe(EVENT_TILE_SWAP_REQUEST, self.on_swap_request)

    @property
    def state(self) -> SwapState:
        return get_swap_state(self.world)

    @property
    def busy(self) -> bool:
        return self.state.busy

    def request_swap(self, src: Position, dst: Position) -> SwapOutcome:
        """Validate, apply and fully resolve one swap; returns the typed outcome."""
        outcome, matches = self._try_swap(src, dst)
        if not outcome.accepted:
            return outcome
        try:
            outcome.steps = self.resolver.resolve(matches)
        except CascadeDidNotConverge:
            self._abort()
            raise
        self._finish(outcome.steps)
        return outcome

    def begin_swap(self, src: Position, dst: Position) -> SwapOutcome:
        """Like request_swap, but the cascade advances on EVENT_TICK.

        The returned outcome's steps list fills in as the cascade completes.
        """
        outcome, matches = self._try_swap(src, dst)
        if not outcome.accepted:
            return outcome

        def on_complete(steps: List[CascadeStep]) -> None:
            outcome.steps = steps
            self._finish(steps)

        def on_failure(exc: CascadeDidNotConverge) -> None:
            self._abort()
            raise exc

        self.resolver.start(matches, on_complete=on_complete, on_failure=on_failure)
        return outcome

    def on_swap_request(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not src or not dst:
            return
        self.begin_swap(tuple(src), tuple(dst))

    def _try_swap(self, src: Position, dst: Position) -> Tuple[SwapOutcome, Set[Position]]:
        state = self.state
        if state.busy:
            return self._reject(src, dst, SwapRejection.BUSY), set()
        # Out-of-range cells are a caller bug: fail fast with OutOfBounds.
        self.board.get(*src)
        self.board.get(*dst)
        if not self.board.is_adjacent(src, dst):
            return self._reject(src, dst, SwapRejection.NOT_ADJACENT), set()

        state.phase = SwapPhase.PENDING
        state.src, state.dst = src, dst
        self.board.swap_cells(src, dst)
        matches = self.matcher.detect(seeds=(src, dst))
        if not matches:
            self.board.swap_cells(src, dst)
            self._reset_state()
            return self._reject(src, dst, SwapRejection.NO_MATCH), set()

        state.phase = SwapPhase.RESOLVING
        logger.debug("swap %s <-> %s matched %d tiles", src, dst, len(matches))
        self.event_bus.emit(EVENT_TILE_SWAP_VALID, src=src, dst=dst, positions=sorted(matches))
        return SwapOutcome(src=src, dst=dst, accepted=True), matches

    def _reject(self, src: Position, dst: Position, reason: SwapRejection) -> SwapOutcome:
        logger.debug("swap %s <-> %s rejected: %s", src, dst, reason.value)
        self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, reason=reason)
        return SwapOutcome.rejected(src, dst, reason)

    def _finish(self, steps: List[CascadeStep]) -> None:
        self.state.cascade_depth = len(steps)
        self._reset_state()

    def _abort(self) -> None:
        logger.error("cascade did not converge; resetting board")
        self.board.reset("cascade_did_not_converge")
        self._reset_state()

    def _reset_state(self) -> None:
        state = self.state
        state.phase = SwapPhase.IDLE
        state.src = None
        state.dst = None
