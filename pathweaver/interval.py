"""
Real-valued intervals.

Used to bound acceptable ray parameters during intersection tests and to
clamp color channels before quantization.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar

INF = float('inf')


@dataclass(frozen=True)
class Interval:
    """A range [min, max] of real numbers. The default interval is empty."""

    min: float = INF
    max: float = -INF

    EMPTY: ClassVar[Interval]
    UNIVERSE: ClassVar[Interval]

    def size(self) -> float:
        return self.max - self.min

    def contains(self, x: float) -> bool:
        """Inclusive membership: min <= x <= max."""
        return self.min <= x <= self.max

    def surrounds(self, x: float) -> bool:
        """Exclusive membership: min < x < max."""
        return self.min < x < self.max

    def clamp(self, x: float) -> float:
        if x < self.min:
            return self.min
        if x > self.max:
            return self.max
        return x

    def with_max(self, new_max: float) -> Interval:
        """Return a copy with the upper bound replaced."""
        return Interval(self.min, new_max)


Interval.EMPTY = Interval(INF, -INF)
Interval.UNIVERSE = Interval(-INF, INF)
