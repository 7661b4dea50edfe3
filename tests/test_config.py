"""Tests for config module."""
import json

from idleeconomy.config import EconomyConfig


def test_defaults():
    config = EconomyConfig()
    assert config.base_tap_income == 2
    assert config.base_hourly_income == 250
    assert config.base_energy_capacity == 1000
    assert config.regen_interval == 5.0
    assert config.regen_amount == 3
    assert config.base_offline_cap_minutes == 180
    assert config.offline_cap_upgrade_id == "offline-cap"
    assert "mega-tap" in config.compound_exempt_ids


def test_none_or_missing_file_gives_defaults(tmp_path):
    assert EconomyConfig.from_settings(None) == EconomyConfig()
    assert EconomyConfig.from_settings(tmp_path / "missing.json") == EconomyConfig()


def test_overrides_from_json(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "regenIntervalSeconds": 2,
        "regenAmount": 5,
        "compoundExemptIds": ["mega-tap", "giga-tap"],
        "logLevel": "DEBUG",
        "unrelatedKey": True,
    }))
    config = EconomyConfig.from_settings(path)
    assert config.regen_interval == 2
    assert config.regen_amount == 5
    assert config.compound_exempt_ids == frozenset({"mega-tap", "giga-tap"})
    assert config.log_level == "DEBUG"
    assert config.base_tap_income == 2


def test_bad_json_gives_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{oops")
    assert EconomyConfig.from_settings(path) == EconomyConfig()
    path.write_text("[1, 2]")
    assert EconomyConfig.from_settings(path) == EconomyConfig()


def test_from_dict_accepts_field_names():
    assert EconomyConfig.from_dict({"store_timeout": 0.5}).store_timeout == 0.5
