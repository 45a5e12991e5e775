from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Sequence

from esper import World

from match3.config import MatchConfig
from match3.constants import EMPTY
from match3.events.bus import EventBus
from match3.systems.board import BoardSystem
from match3.systems.match import MatchSystem, find_all_matches
from match3.systems.match_resolution import MatchResolutionSystem
from match3.systems.swap import SwapSystem
from match3.world import create_world


class FixedRandom(random.Random):
    """Every refill draw returns the lowest type, so cleared rows keep re-matching."""

    def randint(self, a, b):
        return a


class FakeClock:
    def __init__(self) -> None:
        self.value = 0.0

    def advance(self, amount: float) -> None:
        self.value += amount

    def __call__(self) -> float:
        return self.value


@dataclass
class Rig:
    bus: EventBus
    world: World
    board: BoardSystem
    matcher: MatchSystem
    resolver: MatchResolutionSystem
    swaps: SwapSystem


def build_rig(grid: Sequence[Sequence[int]], *, type_count: int | None = None, rng: random.Random | None = None, **options) -> Rig:
    """Wire board, matcher, resolver and swap controller around a hand-made grid."""
    rows, cols = len(grid), len(grid[0])
    if type_count is None:
        type_count = max(3, max(max(line) for line in grid))
    config = MatchConfig(rows=rows, cols=cols, type_count=type_count, **options)
    bus = EventBus()
    world = create_world(bus, config, rng=rng or random.Random(7))
    board = BoardSystem(world, bus, fill=False)
    board.load(grid)
    matcher = MatchSystem(world, bus)
    resolver = MatchResolutionSystem(world, bus)
    swaps = SwapSystem(world, bus, board, matcher, resolver)
    return Rig(bus=bus, world=world, board=board, matcher=matcher, resolver=resolver, swaps=swaps)


def assert_settled(world: World) -> None:
    from match3.systems.board_ops import grid_snapshot
    grid = grid_snapshot(world)
    assert all(value != EMPTY for line in grid for value in line), f"EMPTY cells left: {grid}"
    assert not find_all_matches(world), f"Board still has matches: {grid}"
