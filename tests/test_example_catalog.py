"""Smoke tests against the shipped example catalog."""
import json
from pathlib import Path

import pytest

from idleeconomy.catalog import CatalogCache, JsonDirectoryCatalogSource
from idleeconomy.cli import main
from idleeconomy.config import EconomyConfig
from idleeconomy.formatting import format_catalog
from idleeconomy.pipeline import StatPipeline
from idleeconomy.upgrade import Category

ROOT = Path(__file__).resolve().parent.parent
UPGRADES = ROOT / "examples" / "game_data" / "upgrades"
SETTINGS = ROOT / "examples" / "settings.json"


def _catalog():
    return CatalogCache(JsonDirectoryCatalogSource(UPGRADES)).get()


def test_example_catalog_is_valid():
    catalog = _catalog()
    assert catalog.validate() == []
    assert len(catalog) == 8
    assert catalog.get("charm-school").curve_inferred
    assert not catalog.get("stronger-taps").curve_inferred
    assert catalog.get("offline-cap").category is Category.SPECIAL


def test_example_catalog_order():
    ids = [d.id for d in _catalog()]
    assert ids[:3] == ["stronger-taps", "golden-finger", "mega-tap"]
    assert ids.index("bigger-battery") < ids.index("side-hustle")
    assert ids.index("side-hustle") < ids.index("investments")
    assert ids[-1] == "offline-cap"


def test_example_stats():
    stats = StatPipeline(EconomyConfig()).compute(
        {"stronger-taps": 3, "side-hustle": 2, "investments": 1, "bigger-battery": 4},
        _catalog(),
    )
    assert stats.tap_income == 5
    assert stats.hourly_income == 250 + 150 + 120
    assert stats.energy_capacity == 1400


def test_example_settings_load():
    config = EconomyConfig.from_settings(str(SETTINGS))
    raw = json.loads(SETTINGS.read_text())
    assert config.regen_amount == raw["regenAmount"]


def test_format_catalog():
    text = format_catalog(_catalog(), levels=3)
    assert "Upgrade Catalog" in text
    assert "Upgrades: 8" in text
    assert "charm-school [charisma]" in text
    assert text.count("(inferred)") == 1
    assert f"next cost {'100':>12s}" in text


def test_cli_catalog(capsys):
    with pytest.raises(SystemExit) as info:
        main(["catalog", str(UPGRADES), "--levels", "2"])
    assert info.value.code == 0
    assert "stronger-taps" in capsys.readouterr().out


def test_cli_catalog_reports_errors(tmp_path, capsys):
    entry = {"id": "dup", "name": "Dup", "baseCost": 10, "effectCurve": "linear"}
    (tmp_path / "a.json").write_text(json.dumps([entry, entry]))
    with pytest.raises(SystemExit) as info:
        main(["catalog", str(tmp_path)])
    assert info.value.code == 1
    out = capsys.readouterr().out
    assert "Catalog errors:" in out
    assert "Duplicate upgrade ID: 'dup'" in out


def test_cli_without_command():
    with pytest.raises(SystemExit) as info:
        main([])
    assert info.value.code == 1
