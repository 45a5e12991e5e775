from __future__ import annotations

from dataclasses import dataclass, field
from time import monotonic
from typing import Callable, Tuple

from match3.constants import MOVE_THRESHOLD, SWAP_COOLDOWN


@dataclass(slots=True)
class DragThrottle:
	"""Gates drag steps so one continuous drag can chain swaps at a sane pace.

	A drag step is allowed when both hold:

	* the pointer moved at least ``min_distance`` away from the anchor, the
	  point where the drag started or where the previous swap happened;
	* ``cooldown`` seconds passed since the previous swap.

	"""

	cooldown: float = SWAP_COOLDOWN
	min_distance: float = MOVE_THRESHOLD
	clock: Callable[[], float] | None = field(default=None, repr=False)

	_clock: Callable[[], float] = field(init=False, repr=False)
	_cooldown: float = field(init=False, repr=False)
	_min_distance_sq: float = field(init=False, repr=False)
	_anchor: Tuple[float, float] | None = field(init=False, default=None, repr=False)
	_last_swap_time: float | None = field(init=False, default=None, repr=False)

	def __post_init__(self) -> None:
		self._clock = self.clock or monotonic
		self._cooldown = max(0.0, float(self.cooldown))
		dist = max(0.0, float(self.min_distance))
		self._min_distance_sq = dist * dist

	def set_anchor(self, x: float, y: float) -> None:
		self._anchor = (float(x), float(y))

	def ready(self) -> bool:
		if self._last_swap_time is None or self._cooldown == 0.0:
			return True
		return (self._clock() - self._last_swap_time) >= self._cooldown

	def allow(self, x: float, y: float) -> bool:
		if self._anchor is None or not self.ready():
			return False
		ax, ay = self._anchor
		dx = x - ax
		dy = y - ay
		return (dx * dx + dy * dy) >= self._min_distance_sq

	def mark_swap(self, x: float | None = None, y: float | None = None) -> None:
		self._last_swap_time = self._clock()
		if x is not None and y is not None:
			self._anchor = (float(x), float(y))

	def release(self) -> None:
		self._anchor = None

	def reset(self) -> None:
		self._anchor = None
		self._last_swap_time = None

	@property
	def anchor(self) -> Tuple[float, float] | None:
		return self._anchor
