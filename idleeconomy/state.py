from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class DerivedStats:
    """Stats recomputed from a player's full set of owned upgrade levels."""

    tap_income: int
    hourly_income: int
    energy_capacity: int

    def as_fields(self) -> dict[str, int]:
        return {
            "tap_income": self.tap_income,
            "hourly_income": self.hourly_income,
            "energy_capacity": self.energy_capacity,
        }


@dataclass
class PlayerEconomicState:
    """Per-player balance, derived stats and regenerating energy."""

    player_id: str
    currency: float = 0.0
    player_level: int = 1
    tap_income: int = 0
    hourly_income: int = 0
    energy_capacity: int = 0
    energy: int = 0
    last_accrual_at: datetime | None = None

    def with_updates(self, **changes: Any) -> PlayerEconomicState:
        """Copy with *changes* applied. Unknown field names raise ``KeyError``."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise KeyError(f"Unknown player fields: {sorted(unknown)}")
        return replace(self, **changes)


UPDATABLE_FIELDS: frozenset[str] = frozenset(
    f.name for f in fields(PlayerEconomicState) if f.name != "player_id"
)
