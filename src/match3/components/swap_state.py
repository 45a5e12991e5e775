from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple


class SwapPhase(Enum):
    IDLE = auto()
    PENDING = auto()
    RESOLVING = auto()


@dataclass(slots=True)
class SwapState:
    """Singleton component holding the swap controller's exclusive flag."""

    phase: SwapPhase = SwapPhase.IDLE
    src: Optional[Tuple[int, int]] = None
    dst: Optional[Tuple[int, int]] = None
    cascade_depth: int = 0

    @property
    def busy(self) -> bool:
        return self.phase is not SwapPhase.IDLE
