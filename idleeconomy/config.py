from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path

logger = logging.getLogger(__name__)

# JSON settings key -> EconomyConfig field.
_SETTINGS_KEYS: dict[str, str] = {
    "baseTapIncome": "base_tap_income",
    "baseHourlyIncome": "base_hourly_income",
    "baseEnergyCapacity": "base_energy_capacity",
    "minTapIncome": "min_tap_income",
    "minHourlyIncome": "min_hourly_income",
    "regenIntervalSeconds": "regen_interval",
    "regenAmount": "regen_amount",
    "baseOfflineCapMinutes": "base_offline_cap_minutes",
    "offlineCapUpgradeId": "offline_cap_upgrade_id",
    "defaultOfflineMinutes": "default_offline_minutes",
    "compoundExemptIds": "compound_exempt_ids",
    "defaultCostMultiplier": "default_cost_multiplier",
    "storeTimeoutSeconds": "store_timeout",
    "logLevel": "log_level",
}


@dataclass(frozen=True)
class EconomyConfig:
    """Fixed constants of the economy and the services built on it."""

    base_tap_income: int = 2
    base_hourly_income: int = 250
    base_energy_capacity: int = 1000
    min_tap_income: int = 1
    min_hourly_income: int = 10
    regen_interval: float = 5.0
    regen_amount: int = 3
    base_offline_cap_minutes: int = 180
    offline_cap_upgrade_id: str = "offline-cap"
    default_offline_minutes: int = 5
    compound_exempt_ids: frozenset[str] = frozenset({"mega-tap"})
    default_cost_multiplier: float = 1.5
    store_timeout: float = 5.0
    log_level: str = "INFO"

    @classmethod
    def from_settings(cls, settings_path: Path | str | None) -> EconomyConfig:
        """Load overrides from a JSON settings file; fall back to defaults."""
        if settings_path is None:
            return cls()
        path = Path(settings_path)
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError:
            logger.warning("Ignoring unparsable settings file %s", path)
            return cls()
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: expected a JSON object", path)
            return cls()
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> EconomyConfig:
        known = {f.name for f in fields(cls)}
        overrides = {}
        for key, value in data.items():
            name = _SETTINGS_KEYS.get(key, key)
            if name not in known:
                continue
            if name == "compound_exempt_ids":
                value = frozenset(value)
            overrides[name] = value
        return cls(**overrides)
