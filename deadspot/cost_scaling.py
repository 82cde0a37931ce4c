from __future__ import annotations

from typing import Callable

DEFAULT_GROWTH = 1.5


def cost_for(level: int, base_cost: float, growth: float = DEFAULT_GROWTH) -> float:
    """Cost of the next purchase at *level*: base_cost * growth^level."""
    if level < 0:
        raise ValueError(f"level must be >= 0, got {level}")
    return base_cost * growth ** level


class CostScaling:
    """Determines how an upgrade's cost changes with its level."""

    def __init__(self, fn: Callable[[float, int], float]) -> None:
        self._fn = fn

    def compute(self, base_cost: float, level: int) -> float:
        return self._fn(base_cost, level)

    @classmethod
    def exponential(cls, growth_rate: float = DEFAULT_GROWTH) -> CostScaling:
        """Cost = base * growth_rate^level."""
        gr = growth_rate  # capture
        return cls(lambda base, level: cost_for(level, base, gr))
