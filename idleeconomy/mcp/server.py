"""MCP server exposing the economy runtime's operations as tools."""

from __future__ import annotations

import math
from typing import Any

from mcp.server.fastmcp import FastMCP

from idleeconomy.errors import EconomyError
from idleeconomy.runtime import EconomyRuntime
from idleeconomy.state import PlayerEconomicState
from idleeconomy.upgrade import UpgradeDefinition, UpgradeListing


def _cost_or_none(value: float) -> float | None:
    return None if math.isinf(value) else value


def _definition_dict(d: UpgradeDefinition) -> dict[str, Any]:
    return {
        "id": d.id,
        "name": d.name,
        "description": d.description,
        "category": d.category.value,
        "icon": d.icon,
        "base_cost": d.base_cost,
        "cost_multiplier": d.cost_multiplier,
        "max_level": d.max_level,
        "required_level": d.required_level,
        "effect_curve": d.effect_curve.kind.value,
    }


def _listing_dict(listing: UpgradeListing) -> dict[str, Any]:
    entry = _definition_dict(listing.definition)
    entry.update(
        current_level=listing.current_level,
        next_cost=_cost_or_none(listing.next_cost),
        locked=listing.locked,
        affordable=listing.affordable,
    )
    return entry


def _player_dict(p: PlayerEconomicState) -> dict[str, Any]:
    return {
        "player_id": p.player_id,
        "currency": p.currency,
        "player_level": p.player_level,
        "tap_income": p.tap_income,
        "hourly_income": p.hourly_income,
        "energy": p.energy,
        "energy_capacity": p.energy_capacity,
        "last_accrual_at": p.last_accrual_at.isoformat() if p.last_accrual_at else None,
    }


# ── Tool logic functions (testable without MCP protocol) ────────────


def _tool_get_catalog(runtime: EconomyRuntime) -> dict[str, Any]:
    catalog = runtime.catalog
    return {
        "summary": catalog.describe(),
        "upgrades": [_definition_dict(d) for d in catalog],
    }


async def _tool_register_player(
    runtime: EconomyRuntime, player_id: str, currency: float = 0.0
) -> dict[str, Any]:
    try:
        player = await runtime.register_player(player_id, currency=currency)
    except EconomyError as exc:
        return exc.as_dict()
    return {"success": True, "player": _player_dict(player)}


async def _tool_get_player(runtime: EconomyRuntime, player_id: str) -> dict[str, Any]:
    try:
        player = await runtime.get_player(player_id)
        levels = await runtime.get_levels(player_id)
    except EconomyError as exc:
        return exc.as_dict()
    return {"success": True, "player": _player_dict(player), "levels": levels}


async def _tool_list_available_upgrades(
    runtime: EconomyRuntime, player_id: str
) -> dict[str, Any]:
    try:
        listings = await runtime.list_available_upgrades(player_id)
    except EconomyError as exc:
        return exc.as_dict()
    return {"success": True, "upgrades": [_listing_dict(entry) for entry in listings]}


async def _tool_purchase(
    runtime: EconomyRuntime, player_id: str, upgrade_id: str
) -> dict[str, Any]:
    try:
        result = await runtime.purchase(player_id, upgrade_id)
    except EconomyError as exc:
        return exc.as_dict()
    return {
        "success": True,
        "upgrade_id": result.upgrade_id,
        "new_level": result.new_level,
        "cost_paid": result.cost_paid,
        "new_currency": result.new_currency,
        "new_stats": result.new_stats.as_fields(),
    }


async def _tool_claim_offline(runtime: EconomyRuntime, player_id: str) -> dict[str, Any]:
    try:
        claim = await runtime.claim_offline(player_id)
    except EconomyError as exc:
        return exc.as_dict()
    return {
        "success": True,
        "earned": claim.earned,
        "minutes_applied": claim.minutes_applied,
        "cap_minutes": claim.cap_minutes,
        "hourly_income": claim.hourly_income,
        "new_currency": claim.new_currency,
    }


async def _tool_start_regeneration(runtime: EconomyRuntime, player_id: str) -> dict[str, Any]:
    try:
        await runtime.get_player(player_id)
    except EconomyError as exc:
        return exc.as_dict()
    runtime.start_regeneration(player_id)
    return {"success": True, **runtime.regeneration_status(player_id)}


def _tool_stop_regeneration(runtime: EconomyRuntime, player_id: str) -> dict[str, Any]:
    was_running = runtime.stop_regeneration(player_id)
    return {"success": True, "was_running": was_running}


def _tool_regeneration_status(runtime: EconomyRuntime, player_id: str) -> dict[str, Any]:
    return runtime.regeneration_status(player_id)


async def _tool_regenerate_now(runtime: EconomyRuntime, player_id: str) -> dict[str, Any]:
    try:
        tick = await runtime.regenerate_now(player_id)
    except EconomyError as exc:
        return exc.as_dict()
    return {
        "success": True,
        "energy_added": tick.energy_added,
        "energy": tick.energy,
        "energy_capacity": tick.energy_capacity,
    }


# ── Server factory ──────────────────────────────────────────────────


def create_server(runtime: EconomyRuntime) -> FastMCP:
    """Create an MCP server wrapping the given EconomyRuntime."""
    mcp = FastMCP(name="IdleEconomy")

    @mcp.tool()
    def get_catalog() -> dict[str, Any]:
        """List every upgrade definition with category counts."""
        return _tool_get_catalog(runtime)

    @mcp.tool()
    async def register_player(player_id: str, currency: float = 0.0) -> dict[str, Any]:
        """Create a player's economic record if it does not exist yet."""
        return await _tool_register_player(runtime, player_id, currency)

    @mcp.tool()
    async def get_player(player_id: str) -> dict[str, Any]:
        """Get a player's balance, stats, energy and owned upgrade levels."""
        return await _tool_get_player(runtime, player_id)

    @mcp.tool()
    async def list_available_upgrades(player_id: str) -> dict[str, Any]:
        """List upgrades with the player's level, next cost, lock and affordability."""
        return await _tool_list_available_upgrades(runtime, player_id)

    @mcp.tool()
    async def purchase(player_id: str, upgrade_id: str) -> dict[str, Any]:
        """Buy the next level of an upgrade. Returns success or a typed reason."""
        return await _tool_purchase(runtime, player_id, upgrade_id)

    @mcp.tool()
    async def claim_offline(player_id: str) -> dict[str, Any]:
        """Credit capped passive income for the time since the last claim."""
        return await _tool_claim_offline(runtime, player_id)

    @mcp.tool()
    async def start_regeneration(player_id: str) -> dict[str, Any]:
        """Start (or restart) periodic energy regeneration for a player."""
        return await _tool_start_regeneration(runtime, player_id)

    @mcp.tool()
    def stop_regeneration(player_id: str) -> dict[str, Any]:
        """Stop periodic energy regeneration for a player."""
        return _tool_stop_regeneration(runtime, player_id)

    @mcp.tool()
    def regeneration_status(player_id: str) -> dict[str, Any]:
        """Whether regeneration is running, with rate and interval."""
        return _tool_regeneration_status(runtime, player_id)

    @mcp.tool()
    async def regenerate_now(player_id: str) -> dict[str, Any]:
        """Apply a single regeneration tick immediately."""
        return await _tool_regenerate_now(runtime, player_id)

    return mcp
