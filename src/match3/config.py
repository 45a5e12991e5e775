from __future__ import annotations

import numbers
from dataclasses import dataclass

from match3.constants import (
    GRID_COLS,
    GRID_ROWS,
    MAX_TYPE_COUNT,
    MIN_GRID_SIZE,
    MIN_TYPE_COUNT,
    MOVE_THRESHOLD,
    SETTLE_DELAY,
    SWAP_COOLDOWN,
    TILE_TYPE_COUNT,
)
from match3.errors import InvalidConfiguration


@dataclass(slots=True)
class MatchConfig:
    """Board dimensions, tile palette size and pacing for one game session."""

    rows: int = GRID_ROWS
    cols: int = GRID_COLS
    type_count: int = TILE_TYPE_COUNT
    settle_delay: float = SETTLE_DELAY
    max_cascade_steps: int | None = None
    swap_cooldown: float = SWAP_COOLDOWN
    move_threshold: float = MOVE_THRESHOLD
    seeded_detection: bool = False
    reshuffle_on_stalemate: bool = False

    def validate(self) -> "MatchConfig":
        if self.rows < MIN_GRID_SIZE or self.cols < MIN_GRID_SIZE:
            raise InvalidConfiguration(
                f"board must be at least {MIN_GRID_SIZE}x{MIN_GRID_SIZE}, got {self.rows}x{self.cols}"
            )
        if not MIN_TYPE_COUNT <= self.type_count <= MAX_TYPE_COUNT:
            raise InvalidConfiguration(
                f"type_count must be in [{MIN_TYPE_COUNT}, {MAX_TYPE_COUNT}], got {self.type_count}"
            )
        if self.settle_delay < 0.0:
            raise InvalidConfiguration("settle_delay must not be negative")
        if self.swap_cooldown < 0.0 or self.move_threshold < 0.0:
            raise InvalidConfiguration("swap_cooldown and move_threshold must not be negative")
        if self.max_cascade_steps is not None and self.max_cascade_steps < 1:
            raise InvalidConfiguration("max_cascade_steps must be positive")
        return self

    @property
    def cascade_limit(self) -> int:
        if self.max_cascade_steps is not None:
            return self.max_cascade_steps
        return self.rows * self.cols


def configure(rows: int, columns: int, type_count: int, **options) -> MatchConfig:
    """Build and validate a MatchConfig; unknown options raise InvalidConfiguration."""
    for name, value in (("rows", rows), ("columns", columns), ("type_count", type_count)):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
    try:
        config = MatchConfig(rows=int(rows), cols=int(columns), type_count=int(type_count), **options)
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(str(exc)) from exc
    return config.validate()
