"""Pure cost and effect functions over upgrade definitions."""

from __future__ import annotations

from idleeconomy.cost_scaling import UNAFFORDABLE
from idleeconomy.upgrade import UpgradeDefinition


def cost(definition: UpgradeDefinition, current_level: int) -> float:
    """Price of buying the next level, or ``UNAFFORDABLE`` once maxed."""
    if current_level >= definition.max_level:
        return UNAFFORDABLE
    return definition.cost_scaling.compute(definition.base_cost, current_level)


def cumulative_effect(definition: UpgradeDefinition, level: int) -> float:
    """Total effect magnitude granted by owning *level* levels."""
    if level <= 0:
        return 0.0
    return definition.effect_curve(level)


def total_cost(definition: UpgradeDefinition, from_level: int, to_level: int) -> float:
    """Sum of prices to go from *from_level* to *to_level*."""
    return sum(cost(definition, n) for n in range(from_level, to_level))
