from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

Position = Tuple[int, int]


class SwapRejection(Enum):
    NOT_ADJACENT = "not_adjacent"
    BUSY = "busy"
    NO_MATCH = "no_match"


@dataclass(slots=True)
class GravityMove:
    source: Position
    target: Position
    type_id: int


@dataclass(slots=True)
class CascadeStep:
    """Everything one elimination/gravity/refill round changed, in order."""

    depth: int
    eliminated: List[Position] = field(default_factory=list)
    moves: List[GravityMove] = field(default_factory=list)
    refills: List[Tuple[Position, int]] = field(default_factory=list)


@dataclass(slots=True)
class SwapOutcome:
    src: Position
    dst: Position
    accepted: bool
    reason: Optional[SwapRejection] = None
    steps: List[CascadeStep] = field(default_factory=list)

    @classmethod
    def rejected(cls, src: Position, dst: Position, reason: SwapRejection) -> "SwapOutcome":
        return cls(src=src, dst=dst, accepted=False, reason=reason)

    @property
    def eliminated_count(self) -> int:
        return sum(len(step.eliminated) for step in self.steps)
