from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Mapping

from idleeconomy.calculator import cumulative_effect
from idleeconomy.config import EconomyConfig
from idleeconomy.state import DerivedStats
from idleeconomy.upgrade import Category

if TYPE_CHECKING:
    from idleeconomy.catalog import UpgradeCatalog

logger = logging.getLogger(__name__)

TAP = "tap_income"
HOURLY = "hourly_income"
ENERGY = "energy_capacity"

# Which derived stat each category feeds. Categories not listed feed nothing.
STAT_FOR_CATEGORY: dict[Category, str] = {
    Category.TAP_INCOME: TAP,
    Category.HOURLY_INCOME: HOURLY,
    Category.PASSIVE_INCOME: HOURLY,
    Category.ENERGY_CAPACITY: ENERGY,
}


class StatPipeline:
    """Recomputes derived stats from a player's complete owned-level map.

    Always a full fold from the base floors; never applied as a delta.
    """

    def __init__(self, config: EconomyConfig | None = None) -> None:
        self.config = config or EconomyConfig()

    def raw_totals(
        self, levels: Mapping[str, int], catalog: UpgradeCatalog
    ) -> dict[str, float]:
        """Unclamped per-stat sums, base floors included."""
        totals = {
            TAP: float(self.config.base_tap_income),
            HOURLY: float(self.config.base_hourly_income),
            ENERGY: float(self.config.base_energy_capacity),
        }
        # Sorted so float summation order does not depend on dict order.
        for upgrade_id in sorted(levels):
            level = levels[upgrade_id]
            if level <= 0:
                continue
            definition = catalog.get(upgrade_id)
            if definition is None:
                logger.warning("Owned upgrade %r is not in the catalog; ignored", upgrade_id)
                continue
            stat = STAT_FOR_CATEGORY.get(definition.category)
            if stat is None:
                continue
            totals[stat] += cumulative_effect(definition, level)
        return totals

    def compute(
        self, levels: Mapping[str, int], catalog: UpgradeCatalog
    ) -> DerivedStats:
        totals = self.raw_totals(levels, catalog)
        cfg = self.config
        return DerivedStats(
            tap_income=max(cfg.min_tap_income, math.floor(totals[TAP])),
            hourly_income=max(cfg.min_hourly_income, math.floor(totals[HOURLY])),
            energy_capacity=max(cfg.base_energy_capacity, math.floor(totals[ENERGY])),
        )
