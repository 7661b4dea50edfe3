from __future__ import annotations

import math
from typing import Callable

# Cost of a level that can never be bought.
UNAFFORDABLE = math.inf


class CostScaling:
    """Determines how an upgrade's price changes with its owned level."""

    def __init__(self, fn: Callable[[float, int], float]) -> None:
        self._fn = fn

    def compute(self, base_cost: float, current_level: int) -> float:
        return self._fn(base_cost, current_level)

    @classmethod
    def exponential(cls, growth_rate: float = 1.5) -> CostScaling:
        """Cost = floor(base * growth_rate^level)."""

        def _compute(base: float, level: int) -> float:
            return float(math.floor(base * growth_rate ** level))

        return cls(_compute)
