"""Tests for the stat recomputation pipeline."""
from idleeconomy.catalog import UpgradeCatalog
from idleeconomy.config import EconomyConfig
from idleeconomy.effect import Curve
from idleeconomy.pipeline import StatPipeline
from idleeconomy.state import DerivedStats
from idleeconomy.upgrade import Category, UpgradeDefinition


def _make_catalog() -> UpgradeCatalog:
    return UpgradeCatalog([
        UpgradeDefinition("stronger-taps", Category.TAP_INCOME, 100, max_level=25,
                          effect_curve=Curve.linear(1)),
        UpgradeDefinition("golden-finger", Category.TAP_INCOME, 500, max_level=10,
                          effect_curve=Curve.compounding(2, 0.25)),
        UpgradeDefinition("side-hustle", Category.PASSIVE_INCOME, 300, max_level=30,
                          effect_curve=Curve.additive(50, 50)),
        UpgradeDefinition("investments", Category.HOURLY_INCOME, 1000, max_level=15,
                          effect_curve=Curve.linear(120)),
        UpgradeDefinition("bigger-battery", Category.ENERGY_CAPACITY, 200, max_level=20,
                          effect_curve=Curve.linear(100)),
        UpgradeDefinition("offline-cap", Category.SPECIAL, 800, max_level=6,
                          effect_curve=Curve.linear(30)),
        UpgradeDefinition("charm-school", Category.CHARISMA, 250, max_level=10,
                          effect_curve=Curve.additive(1, 1)),
    ])


def test_base_floors_with_no_upgrades():
    stats = StatPipeline().compute({}, _make_catalog())
    assert stats == DerivedStats(tap_income=2, hourly_income=250, energy_capacity=1000)


def test_categories_feed_their_stats():
    levels = {
        "stronger-taps": 3,
        "side-hustle": 2,
        "investments": 1,
        "bigger-battery": 4,
        "offline-cap": 2,
        "charm-school": 5,
    }
    stats = StatPipeline().compute(levels, _make_catalog())
    assert stats.tap_income == 5
    assert stats.hourly_income == 250 + 150 + 120
    assert stats.energy_capacity == 1400


def test_results_floored():
    stats = StatPipeline().compute({"golden-finger": 2}, _make_catalog())
    # 2 + 2 * 1.25 = 4.5
    assert stats.tap_income == 4


def test_zero_levels_ignored():
    stats = StatPipeline().compute({"stronger-taps": 0, "investments": 0}, _make_catalog())
    assert stats == StatPipeline().compute({}, _make_catalog())


def test_unknown_upgrade_ignored():
    stats = StatPipeline().compute({"retired-upgrade": 7}, _make_catalog())
    assert stats.tap_income == 2


def test_minimums_applied():
    config = EconomyConfig(base_tap_income=0, base_hourly_income=0)
    stats = StatPipeline(config).compute({}, _make_catalog())
    assert stats.tap_income == 1
    assert stats.hourly_income == 10


def test_energy_never_below_base_capacity():
    catalog = UpgradeCatalog([
        UpgradeDefinition("drain", Category.ENERGY_CAPACITY, 10, max_level=5,
                          effect_curve=Curve.additive(-500, 0)),
    ])
    stats = StatPipeline().compute({"drain": 1}, catalog)
    assert stats.energy_capacity == 1000


def test_recompute_is_deterministic():
    pipeline = StatPipeline()
    catalog = _make_catalog()
    levels = {"golden-finger": 7, "side-hustle": 11, "bigger-battery": 3}
    first = pipeline.compute(levels, catalog)
    second = pipeline.compute(dict(reversed(list(levels.items()))), catalog)
    assert first == second


def test_raw_totals_unclamped():
    totals = StatPipeline().raw_totals({"golden-finger": 2}, _make_catalog())
    assert totals["tap_income"] == 4.5
