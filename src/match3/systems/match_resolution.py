import logging
from typing import Callable, Iterable, Iterator, List, Optional, Set, Tuple

from esper import World

from match3.errors import CascadeDidNotConverge
from match3.events.bus import (EventBus, EVENT_TICK, EVENT_MATCH_FOUND, EVENT_MATCH_CLEARED,
                               EVENT_GRAVITY_APPLIED, EVENT_REFILL_COMPLETED, EVENT_CASCADE_STEP,
                               EVENT_CASCADE_COMPLETE, EVENT_BOARD_RESET)
from match3.outcomes import CascadeStep
from match3.systems.board_ops import (apply_gravity_moves, clear_positions, compute_gravity_moves,
                                      find_valid_swaps, refill_empty_cells, respawn_full_board)
from match3.systems.match import find_all_matches

logger = logging.getLogger(__name__)

Position = Tuple[int, int]

PHASE_ELIMINATE = "eliminate"
PHASE_GRAVITY = "gravity"
PHASE_REFILL = "refill"


class MatchResolutionSystem:
    """Eliminate → gravity → refill → re-detect until the board settles.

    The cascade is a generator that suspends after each phase. ``resolve``
    drains it at once; ``start`` lets EVENT_TICK advance it one phase per
    settle interval so a host can animate between phases.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        self._run: Optional[Iterator[Tuple[str, CascadeStep]]] = None
        self._steps: List[CascadeStep] = []
        self._elapsed = 0.0
        self._on_complete: Optional[Callable[[List[CascadeStep]], None]] = None
        self._on_failure: Optional[Callable[[CascadeDidNotConverge], None]] = None

    @property
    def active(self) -> bool:
        return self._run is not None

    def cascade_limit(self) -> int:
        return getattr(self.world, "config").cascade_limit

    def iter_cascade(self, initial: Iterable[Position]) -> Iterator[Tuple[str, CascadeStep]]:
        limit = self.cascade_limit()
        matches: Set[Position] = set(initial)
        depth = 0
        while matches:
            depth += 1
            if depth > limit:
                logger.error("cascade did not settle after %d steps", limit)
                raise CascadeDidNotConverge(limit)
            positions = sorted(matches)
            step = CascadeStep(depth=depth)
            self.event_bus.emit(EVENT_CASCADE_STEP, depth=depth, positions=positions, step=step)

            typed = clear_positions(self.world, positions)
            step.eliminated = [(row, col) for row, col, _ in typed]
            self.event_bus.emit(EVENT_MATCH_CLEARED, positions=step.eliminated, types=typed, depth=depth)
            yield PHASE_ELIMINATE, step

            step.moves = compute_gravity_moves(self.world)
            apply_gravity_moves(self.world, step.moves)
            self.event_bus.emit(EVENT_GRAVITY_APPLIED, moves=list(step.moves), depth=depth)
            yield PHASE_GRAVITY, step

            step.refills = refill_empty_cells(self.world)
            self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tiles=list(step.refills), depth=depth)
            logger.debug("cascade step %d cleared %d tiles", depth, len(step.eliminated))
            yield PHASE_REFILL, step

            matches = find_all_matches(self.world)
            if matches:
                found = sorted(matches)
                self.event_bus.emit(EVENT_MATCH_FOUND, positions=found, size=len(found), reason="cascade")
        self._reshuffle_if_stalemate()
        self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=depth)

    def resolve(self, initial: Iterable[Position]) -> List[CascadeStep]:
        """Run the whole cascade synchronously and return its steps in order."""
        steps: List[CascadeStep] = []
        for phase, step in self.iter_cascade(initial):
            if phase == PHASE_REFILL:
                steps.append(step)
        return steps

    def start(
        self,
        initial: Iterable[Position],
        *,
        on_complete: Optional[Callable[[List[CascadeStep]], None]] = None,
        on_failure: Optional[Callable[[CascadeDidNotConverge], None]] = None,
    ) -> None:
        if self._run is not None:
            raise RuntimeError("a cascade is already running")
        self._run = self.iter_cascade(initial)
        self._steps = []
        self._elapsed = 0.0
        self._on_complete = on_complete
        self._on_failure = on_failure
        # Elimination happens right away; later phases wait for the settle delay.
        self._advance()

    def on_tick(self, sender, **kwargs):
        if self._run is None:
            return
        self._elapsed += kwargs.get('dt', 1/60)
        config = getattr(self.world, "config", None)
        delay = config.settle_delay if config is not None else 0.0
        if self._elapsed < delay:
            return
        self._elapsed = 0.0
        self._advance()

    def _advance(self) -> None:
        run = self._run
        if run is None:
            return
        try:
            phase, step = next(run)
        except StopIteration:
            self._finish()
            return
        except CascadeDidNotConverge as exc:
            on_failure = self._on_failure
            self._reset_run()
            if on_failure is None:
                raise
            on_failure(exc)
            return
        if phase == PHASE_REFILL:
            self._steps.append(step)

    def _finish(self) -> None:
        steps = self._steps
        on_complete = self._on_complete
        self._reset_run()
        if on_complete is not None:
            on_complete(steps)

    def _reset_run(self) -> None:
        self._run = None
        self._steps = []
        self._elapsed = 0.0
        self._on_complete = None
        self._on_failure = None

    def _reshuffle_if_stalemate(self) -> None:
        config = getattr(self.world, "config", None)
        if config is None or not config.reshuffle_on_stalemate:
            return
        if find_valid_swaps(self.world):
            return
        respawn_full_board(self.world)
        logger.info("no valid swaps left, board reshuffled")
        self.event_bus.emit(EVENT_BOARD_RESET, reason="stalemate")
