from __future__ import annotations

import math

from idleeconomy.calculator import cost, cumulative_effect, total_cost
from idleeconomy.catalog import UpgradeCatalog
from idleeconomy.upgrade import UpgradeDefinition


def _fmt(value: float) -> str:
    if math.isinf(value):
        return "max"
    if value == int(value):
        return f"{int(value)}"
    return f"{value:.2f}"


def format_upgrade(definition: UpgradeDefinition, levels: int) -> list[str]:
    """Cost and cumulative effect of one upgrade for levels 0..*levels*."""
    inferred = " (inferred)" if definition.curve_inferred else ""
    lines = [
        f"{definition.id} [{definition.category.value}] "
        f"max={definition.max_level} req_lvl={definition.required_level} "
        f"curve={definition.effect_curve!r}{inferred}"
    ]
    top = min(levels, definition.max_level)
    for level in range(top + 1):
        lines.append(
            f"  L{level:<3d} next cost {_fmt(cost(definition, level)):>12s}"
            f"   effect {_fmt(cumulative_effect(definition, level)):>10s}"
            f"   spent {_fmt(total_cost(definition, 0, level)):>12s}"
        )
    return lines


def format_catalog(catalog: UpgradeCatalog, levels: int = 5) -> str:
    """Format a catalog as a plain-text table for console output."""
    lines: list[str] = []
    lines.append("=" * 30 + " Upgrade Catalog " + "=" * 30)
    summary = catalog.describe()
    lines.append(f"Upgrades: {summary['total']}")
    for entry in summary["categories"]:
        lines.append(f"  {entry['name']:.<24s} {entry['count']}")
    lines.append("")

    for definition in catalog:
        lines.extend(format_upgrade(definition, levels))
        lines.append("")

    return "\n".join(lines)
