from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable, Iterator

from idleeconomy.config import EconomyConfig
from idleeconomy.effect import Curve, CurveKind
from idleeconomy.upgrade import (
    CATEGORY_ORDER,
    DEFAULT_COMPOUND_EXEMPT_IDS,
    Category,
    UnlockRequirements,
    UpgradeDefinition,
    infer_curve,
)

logger = logging.getLogger(__name__)


class UpgradeCatalog:
    """Immutable, ordered collection of upgrade definitions keyed by id."""

    def __init__(
        self,
        definitions: Iterable[UpgradeDefinition],
        exempt_ids: frozenset[str] = DEFAULT_COMPOUND_EXEMPT_IDS,
    ) -> None:
        self._definitions: tuple[UpgradeDefinition, ...] = tuple(
            sorted((_reinfer(d, exempt_ids) for d in definitions), key=_catalog_sort_key)
        )
        self._by_id: dict[str, UpgradeDefinition] = {}
        self._duplicates: list[str] = []
        for d in self._definitions:
            if d.id in self._by_id:
                self._duplicates.append(d.id)
                continue
            self._by_id[d.id] = d

    def __iter__(self) -> Iterator[UpgradeDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, upgrade_id: object) -> bool:
        return upgrade_id in self._by_id

    def get(self, upgrade_id: str) -> UpgradeDefinition | None:
        return self._by_id.get(upgrade_id)

    def by_category(self) -> dict[Category, list[UpgradeDefinition]]:
        grouped: dict[Category, list[UpgradeDefinition]] = {}
        for d in self._definitions:
            grouped.setdefault(d.category, []).append(d)
        return grouped

    def describe(self) -> dict[str, Any]:
        """Summary for debugging and admin tooling."""
        return {
            "total": len(self),
            "categories": [
                {"name": cat.value, "count": len(defs)}
                for cat, defs in self.by_category().items()
            ],
        }

    def validate(self) -> list[str]:
        """Check for common catalog errors. Returns list of error messages."""
        errors: list[str] = []

        for dup in self._duplicates:
            errors.append(f"Duplicate upgrade ID: {dup!r}")

        for d in self._definitions:
            if d.max_level < 0:
                errors.append(f"Upgrade {d.id!r} has negative max_level {d.max_level}")
            if d.base_cost < 0:
                errors.append(f"Upgrade {d.id!r} has negative base_cost {d.base_cost}")
            if d.cost_multiplier < 1:
                errors.append(
                    f"Upgrade {d.id!r} has cost_multiplier {d.cost_multiplier} < 1; "
                    f"costs would decrease with level"
                )
            if d.effect_multiplier < 0:
                errors.append(
                    f"Upgrade {d.id!r} has negative effect_multiplier "
                    f"{d.effect_multiplier}; effects would decrease with level"
                )
            prereq = d.unlock.prerequisite_upgrade_id
            if prereq is not None and prereq not in self._by_id:
                errors.append(
                    f"Upgrade {d.id!r} requires unknown upgrade {prereq!r}"
                )
            if prereq == d.id:
                errors.append(f"Upgrade {d.id!r} requires itself")

        return errors


def _catalog_sort_key(d: UpgradeDefinition) -> tuple[int, int]:
    return (CATEGORY_ORDER.index(d.category), d.sort_order)


def _reinfer(d: UpgradeDefinition, exempt_ids: frozenset[str]) -> UpgradeDefinition:
    """Redo legacy curve inference against the configured exempt ids."""
    if not d.curve_inferred:
        return d
    return replace(d, effect_curve=infer_curve(d, exempt_ids), curve_inferred=True)


# ── Sources ──────────────────────────────────────────────────────────


class CatalogSource(ABC):
    """Where upgrade definitions come from."""

    @abstractmethod
    def load_all(self) -> list[UpgradeDefinition]: ...


class StaticCatalogSource(CatalogSource):
    def __init__(self, definitions: Iterable[UpgradeDefinition]) -> None:
        self._definitions = list(definitions)

    def load_all(self) -> list[UpgradeDefinition]:
        return list(self._definitions)


class JsonDirectoryCatalogSource(CatalogSource):
    """Reads every ``*.json`` file in a directory.

    A file holds either a list of upgrade objects or a single object.
    Unreadable files and malformed entries are skipped with a warning.
    """

    def __init__(self, directory: Path | str, config: EconomyConfig | None = None) -> None:
        self.directory = Path(directory)
        self.config = config or EconomyConfig()

    def load_all(self) -> list[UpgradeDefinition]:
        if not self.directory.is_dir():
            logger.error("Upgrade catalog directory not found: %s", self.directory)
            return []

        files = sorted(self.directory.glob("*.json"))
        definitions: list[UpgradeDefinition] = []
        for path in files:
            definitions.extend(self._load_file(path))
        logger.info(
            "Loaded %d upgrades from %d files in %s",
            len(definitions), len(files), self.directory,
        )
        return definitions

    def _load_file(self, path: Path) -> list[UpgradeDefinition]:
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to read %s: %s", path.name, exc)
            return []
        if not raw.strip():
            logger.warning("Empty upgrade file: %s", path.name)
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Failed to parse %s: %s", path.name, exc)
            return []

        entries = data if isinstance(data, list) else [data]
        result: list[UpgradeDefinition] = []
        for index, entry in enumerate(entries):
            try:
                result.append(parse_definition(entry, self.config))
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping entry %d in %s: %s", index, path.name, exc)
        return result


def parse_definition(data: Any, config: EconomyConfig | None = None) -> UpgradeDefinition:
    """Build an UpgradeDefinition from a catalog JSON object."""
    config = config or EconomyConfig()
    if not isinstance(data, dict):
        raise TypeError(f"expected an object, got {type(data).__name__}")
    if not isinstance(data.get("id"), str):
        raise ValueError("missing string 'id'")
    if not isinstance(data.get("name"), str):
        raise ValueError(f"upgrade {data['id']!r} missing string 'name'")
    base_cost = data.get("baseCost")
    if isinstance(base_cost, bool) or not isinstance(base_cost, (int, float)):
        raise ValueError(f"upgrade {data['id']!r} missing numeric 'baseCost'")

    reqs = data.get("unlockRequirements") or {}
    unlock = UnlockRequirements(
        prerequisite_upgrade_id=reqs.get("upgradeId") or None,
        prerequisite_level=int(reqs.get("level") or 0),
        total_owned_levels=(
            int(reqs["totalUpgradeLevels"]) if reqs.get("totalUpgradeLevels") else None
        ),
    )

    definition = UpgradeDefinition(
        id=data["id"],
        category=Category.parse(data.get("category", "special")),
        base_cost=float(base_cost),
        cost_multiplier=float(data.get("costMultiplier") or config.default_cost_multiplier),
        base_effect=float(data.get("baseEffect", 0)),
        effect_multiplier=float(data.get("effectMultiplier", 0)),
        max_level=int(data.get("maxLevel", 1)),
        required_level=int(data.get("requiredLevel", 1)),
        tap_bonus=float(data.get("tapBonus") or 0),
        hourly_bonus=float(data.get("hourlyBonus") or 0),
        unlock=unlock,
        name=data["name"],
        description=data.get("description", ""),
        icon=data.get("icon", ""),
        sort_order=int(data.get("sortOrder", 0)),
    )

    curve_name = data.get("effectCurve")
    if curve_name is not None:
        curve = Curve.from_kind(
            CurveKind(curve_name),
            definition.base_effect,
            definition.effect_multiplier,
            definition.flat_bonus,
        )
        return replace(definition, effect_curve=curve, curve_inferred=False)

    curve = infer_curve(definition, config.compound_exempt_ids)
    logger.warning(
        "Upgrade %r declares no effectCurve; inferred %r from legacy rules",
        definition.id, curve,
    )
    return replace(definition, effect_curve=curve, curve_inferred=True)


# ── Cache ────────────────────────────────────────────────────────────


class CatalogCache:
    """Loads the catalog once and serves it until explicitly invalidated."""

    def __init__(self, source: CatalogSource, config: EconomyConfig | None = None) -> None:
        self.source = source
        self.config = config or EconomyConfig()
        self._catalog: UpgradeCatalog | None = None

    def get(self) -> UpgradeCatalog:
        if self._catalog is None:
            self._catalog = UpgradeCatalog(
                self.source.load_all(), self.config.compound_exempt_ids
            )
        return self._catalog

    def invalidate(self) -> None:
        self._catalog = None
        logger.info("Upgrade catalog cache cleared")
