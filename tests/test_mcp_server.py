"""Tests for MCP tool logic (without the protocol layer)."""
import asyncio

from mcp.server.fastmcp import FastMCP

from idleeconomy.catalog import StaticCatalogSource
from idleeconomy.config import EconomyConfig
from idleeconomy.effect import Curve
from idleeconomy.mcp.server import (
    _tool_claim_offline,
    _tool_get_catalog,
    _tool_get_player,
    _tool_list_available_upgrades,
    _tool_purchase,
    _tool_register_player,
    _tool_regenerate_now,
    _tool_regeneration_status,
    _tool_start_regeneration,
    _tool_stop_regeneration,
    create_server,
)
from idleeconomy.runtime import EconomyRuntime
from idleeconomy.store import InMemoryPlayerStore
from idleeconomy.upgrade import Category, UpgradeDefinition


def _runtime(store=None) -> EconomyRuntime:
    return EconomyRuntime(
        StaticCatalogSource([
            UpgradeDefinition("stronger-taps", Category.TAP_INCOME, base_cost=100,
                              cost_multiplier=1.3, max_level=2, name="Stronger Taps",
                              effect_curve=Curve.linear(1)),
            UpgradeDefinition("charm-school", Category.CHARISMA, base_cost=250,
                              base_effect=1, effect_multiplier=1, max_level=10),
        ]),
        store=store,
        config=EconomyConfig(regen_interval=0.01),
    )


def test_get_catalog():
    result = _tool_get_catalog(_runtime())
    assert result["summary"]["total"] == 2
    ids = [u["id"] for u in result["upgrades"]]
    assert ids == ["stronger-taps", "charm-school"]
    taps = result["upgrades"][0]
    assert taps["name"] == "Stronger Taps"
    assert taps["category"] == "tapIncome"
    assert taps["effect_curve"] == "linear"
    assert result["upgrades"][1]["effect_curve"] == "additive"


def test_register_and_get_player():
    async def _run():
        rt = _runtime()
        registered = await _tool_register_player(rt, "p1", currency=300)
        assert registered["success"] is True
        assert registered["player"]["currency"] == 300

        result = await _tool_get_player(rt, "p1")
        assert result["success"] is True
        assert result["player"]["tap_income"] == 2
        assert result["player"]["last_accrual_at"] is not None
        assert result["levels"] == {}

    asyncio.run(_run())


def test_get_player_unknown():
    async def _run():
        result = await _tool_get_player(_runtime(), "ghost")
        assert result["success"] is False
        assert result["reason"] == "player_not_found"

    asyncio.run(_run())


def test_purchase_success_and_failures():
    async def _run():
        rt = _runtime()
        await _tool_register_player(rt, "p1", currency=150)

        ok = await _tool_purchase(rt, "p1", "stronger-taps")
        assert ok["success"] is True
        assert ok["new_level"] == 1
        assert ok["cost_paid"] == 100
        assert ok["new_currency"] == 50
        assert ok["new_stats"]["tap_income"] == 3

        poor = await _tool_purchase(rt, "p1", "stronger-taps")
        assert poor["success"] is False
        assert poor["reason"] == "insufficient_funds"
        assert poor["cost"] == 130

        unknown = await _tool_purchase(rt, "p1", "nope")
        assert unknown["reason"] == "unknown_upgrade"

    asyncio.run(_run())


def test_listing_serializes_maxed_cost_as_none():
    async def _run():
        rt = _runtime()
        await _tool_register_player(rt, "p1", currency=1000)
        await _tool_purchase(rt, "p1", "stronger-taps")
        await _tool_purchase(rt, "p1", "stronger-taps")
        maxed = await _tool_purchase(rt, "p1", "stronger-taps")
        assert maxed["reason"] == "max_level_reached"

        result = await _tool_list_available_upgrades(rt, "p1")
        by_id = {u["id"]: u for u in result["upgrades"]}
        assert by_id["stronger-taps"]["current_level"] == 2
        assert by_id["stronger-taps"]["next_cost"] is None
        assert by_id["stronger-taps"]["affordable"] is False
        assert by_id["charm-school"]["next_cost"] == 250
        assert by_id["charm-school"]["affordable"] is True

    asyncio.run(_run())


def test_claim_offline():
    async def _run():
        rt = _runtime()
        await _tool_register_player(rt, "p1")
        result = await _tool_claim_offline(rt, "p1")
        assert result["success"] is True
        assert result["earned"] == 0
        assert result["hourly_income"] == 250
        assert result["cap_minutes"] == 180

        missing = await _tool_claim_offline(rt, "ghost")
        assert missing["reason"] == "player_not_found"

    asyncio.run(_run())


def test_regeneration_tools():
    async def _run():
        rt = _runtime()
        missing = await _tool_start_regeneration(rt, "ghost")
        assert missing["success"] is False

        await _tool_register_player(rt, "p1")
        full = await _tool_regenerate_now(rt, "p1")
        assert full == {"success": True, "energy_added": 0,
                        "energy": 1000, "energy_capacity": 1000}

        started = await _tool_start_regeneration(rt, "p1")
        assert started["success"] is True
        assert started["running"] is True
        assert _tool_regeneration_status(rt, "p1")["running"] is True
        assert _tool_stop_regeneration(rt, "p1") == {"success": True, "was_running": True}
        assert _tool_stop_regeneration(rt, "p1")["was_running"] is False
        await rt.shutdown()

    asyncio.run(_run())


def test_create_server():
    server = create_server(_runtime())
    assert isinstance(server, FastMCP)
    assert server.name == "IdleEconomy"


class _DisconnectedStore(InMemoryPlayerStore):
    async def set_level(self, player_id, upgrade_id, level):
        raise ConnectionError("connection reset by peer")


def test_register_negative_currency_is_typed():
    async def _run():
        result = await _tool_register_player(_runtime(), "p1", currency=-10)
        assert result["success"] is False
        assert result["reason"] == "invalid_amount"

    asyncio.run(_run())


def test_raw_store_error_becomes_typed_reason():
    async def _run():
        rt = _runtime(store=_DisconnectedStore())
        await _tool_register_player(rt, "p1", currency=500)
        result = await _tool_purchase(rt, "p1", "stronger-taps")
        assert result["success"] is False
        assert result["reason"] == "store_unavailable"
        assert (await _tool_get_player(rt, "p1"))["player"]["currency"] == 500

    asyncio.run(_run())
