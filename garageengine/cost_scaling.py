from __future__ import annotations

import math
from typing import Callable


class CostScaling:
    """Determines how a purchase's price changes with owned level/count.

    Prices are whole currency units: every curve floors its result.
    """

    def __init__(self, fn: Callable[[float, int], float]) -> None:
        self._fn = fn

    def compute(self, base_cost: float, level: int) -> int:
        return math.floor(self._fn(base_cost, level))

    @classmethod
    def fixed(cls) -> CostScaling:
        """Cost never changes."""
        return cls(lambda base, _level: base)

    @classmethod
    def exponential(cls, growth_rate: float = 1.15) -> CostScaling:
        """Cost = floor(base * growth_rate^level)."""
        gr = growth_rate  # capture

        def _compute(base: float, level: int) -> float:
            return base * gr ** level

        return cls(_compute)

    @classmethod
    def linear(cls, increment_pct: float = 0.10) -> CostScaling:
        """Cost = floor(base * (1 + increment_pct * level))."""
        pct = increment_pct

        def _compute(base: float, level: int) -> float:
            return base * (1.0 + pct * level)

        return cls(_compute)

    @classmethod
    def custom(cls, fn: Callable[[float, int], float]) -> CostScaling:
        """Arbitrary cost function."""
        return cls(fn)
