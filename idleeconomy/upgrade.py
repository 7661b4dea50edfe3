from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from idleeconomy.cost_scaling import CostScaling
from idleeconomy.effect import Curve, EffectCurve

DEFAULT_COMPOUND_EXEMPT_IDS: frozenset[str] = frozenset({"mega-tap"})


class Category(Enum):
    TAP_INCOME = "tapIncome"
    HOURLY_INCOME = "hourlyIncome"
    ENERGY_CAPACITY = "energyCapacity"
    PASSIVE_INCOME = "passiveIncome"
    CHARISMA = "charisma"
    SPECIAL = "special"

    @classmethod
    def parse(cls, raw: str) -> Category:
        """Accept canonical names and the legacy catalog aliases."""
        raw = _CATEGORY_ALIASES.get(raw, raw)
        return cls(raw)


_CATEGORY_ALIASES: dict[str, str] = {
    "lpPerTap": "tapIncome",
    "lpPerHour": "hourlyIncome",
    "energy": "energyCapacity",
    "passive": "passiveIncome",
}

# Display/catalog ordering of categories.
CATEGORY_ORDER: tuple[Category, ...] = (
    Category.TAP_INCOME,
    Category.ENERGY_CAPACITY,
    Category.PASSIVE_INCOME,
    Category.HOURLY_INCOME,
    Category.CHARISMA,
    Category.SPECIAL,
)


@dataclass(frozen=True)
class UnlockRequirements:
    """Optional gates beyond the player level requirement."""

    prerequisite_upgrade_id: str | None = None
    prerequisite_level: int = 0
    total_owned_levels: int | None = None

    @property
    def empty(self) -> bool:
        return self.prerequisite_upgrade_id is None and self.total_owned_levels is None


@dataclass(frozen=True)
class UpgradeDefinition:
    """Static catalog entry for a repeatedly purchasable upgrade."""

    id: str
    category: Category
    base_cost: float
    cost_multiplier: float = 1.5
    base_effect: float = 0.0
    effect_multiplier: float = 0.0
    max_level: int = 1
    required_level: int = 1
    tap_bonus: float = 0.0
    hourly_bonus: float = 0.0
    unlock: UnlockRequirements = field(default_factory=UnlockRequirements)
    effect_curve: EffectCurve | None = None
    name: str = ""
    description: str = ""
    icon: str = ""
    sort_order: int = 0
    curve_inferred: bool = field(default=False, compare=False)
    cost_scaling: CostScaling = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.name:
            object.__setattr__(self, "name", self.id)
        object.__setattr__(
            self, "cost_scaling", CostScaling.exponential(self.cost_multiplier)
        )
        if self.effect_curve is None:
            object.__setattr__(self, "effect_curve", infer_curve(self))
            object.__setattr__(self, "curve_inferred", True)

    @property
    def flat_bonus(self) -> float:
        """Per-level bonus declared for this upgrade's own category, or 0."""
        if self.category is Category.TAP_INCOME:
            return self.tap_bonus
        if self.category is Category.HOURLY_INCOME:
            return self.hourly_bonus
        return 0.0


def infer_curve(
    definition: UpgradeDefinition,
    exempt_ids: frozenset[str] = DEFAULT_COMPOUND_EXEMPT_IDS,
) -> EffectCurve:
    """Pick an effect curve for a definition that does not declare one.

    A category-matching flat bonus gives a linear curve. Tap-income upgrades
    compound unless their id is exempt. Everything else is additive.
    """
    if definition.flat_bonus:
        return Curve.linear(definition.flat_bonus)
    if definition.category is Category.TAP_INCOME and definition.id not in exempt_ids:
        return Curve.compounding(definition.base_effect, definition.effect_multiplier)
    return Curve.additive(definition.base_effect, definition.effect_multiplier)


@dataclass(frozen=True)
class UpgradeListing:
    """Read-only view of one upgrade for a specific player."""

    definition: UpgradeDefinition
    current_level: int
    next_cost: float
    locked: bool
    affordable: bool

    @property
    def maxed(self) -> bool:
        return self.current_level >= self.definition.max_level
