from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Mapping

if TYPE_CHECKING:
    from idleeconomy.upgrade import UpgradeDefinition


@dataclass(frozen=True)
class UnlockContext:
    """What the resolver knows about a player: level and owned upgrade levels.

    Upgrades missing from ``levels`` are owned at level 0.
    """

    player_level: int
    levels: Mapping[str, int] = field(default_factory=dict)

    def level_of(self, upgrade_id: str) -> int:
        return self.levels.get(upgrade_id, 0)

    @property
    def total_levels(self) -> int:
        return sum(self.levels.values())


class Requirement(ABC):
    """A minimum-threshold unlock condition evaluated against one player."""

    def __init__(self, threshold: int) -> None:
        self.threshold = threshold

    @abstractmethod
    def current(self, ctx: UnlockContext) -> int: ...

    @abstractmethod
    def describe(self) -> str: ...

    def evaluate(self, ctx: UnlockContext) -> bool:
        return self.current(ctx) >= self.threshold


# ── Private implementations ──────────────────────────────────────────


class _PlayerLevelRequirement(Requirement):
    def current(self, ctx: UnlockContext) -> int:
        return ctx.player_level

    def describe(self) -> str:
        return f"player level >= {self.threshold}"


class _UpgradeLevelRequirement(Requirement):
    def __init__(self, upgrade_id: str, threshold: int) -> None:
        super().__init__(threshold)
        self.upgrade_id = upgrade_id

    def current(self, ctx: UnlockContext) -> int:
        return ctx.level_of(self.upgrade_id)

    def describe(self) -> str:
        return f"{self.upgrade_id} level >= {self.threshold}"


class _TotalLevelsRequirement(Requirement):
    def current(self, ctx: UnlockContext) -> int:
        return ctx.total_levels

    def describe(self) -> str:
        return f"total upgrade levels >= {self.threshold}"


# ── Public factory ───────────────────────────────────────────────────


class Req:
    """Factory for built-in requirement types."""

    @staticmethod
    def player_level(threshold: int) -> Requirement:
        return _PlayerLevelRequirement(threshold)

    @staticmethod
    def upgrade_level(upgrade_id: str, threshold: int) -> Requirement:
        return _UpgradeLevelRequirement(upgrade_id, threshold)

    @staticmethod
    def total_levels(threshold: int) -> Requirement:
        return _TotalLevelsRequirement(threshold)


# ── Unlock resolver ──────────────────────────────────────────────────


def requirements_for(definition: UpgradeDefinition) -> list[Requirement]:
    """Translate a definition's unlock rules into requirement objects."""
    reqs = [Req.player_level(definition.required_level)]
    unlock = definition.unlock
    if unlock.prerequisite_upgrade_id is not None:
        reqs.append(
            Req.upgrade_level(unlock.prerequisite_upgrade_id, unlock.prerequisite_level)
        )
    if unlock.total_owned_levels is not None:
        reqs.append(Req.total_levels(unlock.total_owned_levels))
    return reqs


def unmet_requirements(
    definition: UpgradeDefinition, ctx: UnlockContext
) -> list[Requirement]:
    return [r for r in requirements_for(definition) if not r.evaluate(ctx)]


def is_unlocked(
    definition: UpgradeDefinition,
    player_level: int,
    levels: Mapping[str, int],
) -> bool:
    """True when every unlock rule of *definition* holds for the player."""
    ctx = UnlockContext(player_level=player_level, levels=levels)
    return all(r.evaluate(ctx) for r in requirements_for(definition))
