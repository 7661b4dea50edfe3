from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Mapping, TypeVar

from idleeconomy.calculator import cost
from idleeconomy.catalog import CatalogCache, UpgradeCatalog
from idleeconomy.config import EconomyConfig
from idleeconomy.errors import (
    InsufficientFunds,
    Locked,
    MaxLevelReached,
    PlayerNotFound,
    ReconciliationFailure,
    StoreUnavailable,
    UnknownUpgrade,
)
from idleeconomy.pipeline import StatPipeline
from idleeconomy.requirement import UnlockContext, is_unlocked, unmet_requirements
from idleeconomy.state import DerivedStats, PlayerEconomicState
from idleeconomy.store import PlayerLocks, PlayerStore, guarded
from idleeconomy.upgrade import UpgradeListing

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PurchaseResult:
    upgrade_id: str
    new_level: int
    cost_paid: float
    new_currency: float
    new_stats: DerivedStats


def energy_after_recompute(player: PlayerEconomicState, stats: DerivedStats) -> int:
    """Current energy once capacity changes to ``stats.energy_capacity``.

    Clamped only when capacity grew; otherwise left as is.
    """
    if stats.energy_capacity > player.energy_capacity:
        return min(player.energy, stats.energy_capacity)
    return player.energy


class PurchaseEngine:
    """Single writer of upgrade levels, purchase spending and derived stats."""

    def __init__(
        self,
        catalog: CatalogCache,
        store: PlayerStore,
        locks: PlayerLocks,
        pipeline: StatPipeline,
        config: EconomyConfig,
    ) -> None:
        self.catalog = catalog
        self.store = store
        self.locks = locks
        self.pipeline = pipeline
        self.config = config

    async def _call(self, call: Awaitable[T], what: str) -> T:
        return await guarded(call, self.config.store_timeout, what)

    async def _load(self, player_id: str) -> tuple[PlayerEconomicState, dict[str, int]]:
        player = await self._call(self.store.get_player(player_id), "get_player")
        if player is None:
            raise PlayerNotFound(player_id)
        levels = await self._call(self.store.get_levels(player_id), "get_levels")
        return player, levels

    # ── Queries ──────────────────────────────────────────────────────

    async def list_available_upgrades(self, player_id: str) -> list[UpgradeListing]:
        """Every catalog upgrade with the player's level, next cost and lock flag."""
        catalog = self.catalog.get()
        player, levels = await self._load(player_id)
        return build_listings(catalog, player, levels)

    # ── Transactions ─────────────────────────────────────────────────

    async def purchase(self, player_id: str, upgrade_id: str) -> PurchaseResult:
        """Buy the next level of *upgrade_id* for *player_id*.

        Raises a ``ValidationError`` subclass without changing anything when
        the purchase is not allowed.
        """
        async with self.locks.hold(player_id):
            return await self._purchase_locked(player_id, upgrade_id)

    async def _purchase_locked(self, player_id: str, upgrade_id: str) -> PurchaseResult:
        catalog = self.catalog.get()
        definition = catalog.get(upgrade_id)
        if definition is None:
            raise UnknownUpgrade(upgrade_id)

        player, levels = await self._load(player_id)

        ctx = UnlockContext(player_level=player.player_level, levels=levels)
        unmet = unmet_requirements(definition, ctx)
        if unmet:
            logger.info("Purchase of %s by %s refused: locked", upgrade_id, player_id)
            raise Locked(upgrade_id, [r.describe() for r in unmet])

        current_level = levels.get(upgrade_id, 0)
        if current_level >= definition.max_level:
            logger.info("Purchase of %s by %s refused: max level", upgrade_id, player_id)
            raise MaxLevelReached(upgrade_id, definition.max_level)

        price = cost(definition, current_level)
        if player.currency < price:
            logger.info(
                "Purchase of %s by %s refused: cost %s, balance %s",
                upgrade_id, player_id, price, player.currency,
            )
            raise InsufficientFunds(price, player.currency)

        new_currency = player.currency - price
        new_level = current_level + 1
        await self._call(
            self.store.update_player(player_id, currency=new_currency), "deduct currency"
        )

        level_written = False
        try:
            await self._call(
                self.store.set_level(player_id, upgrade_id, new_level), "set level"
            )
            level_written = True
            stats = await self._write_stats(
                player, {**levels, upgrade_id: new_level}, catalog
            )
        except BaseException as exc:
            # Includes CancelledError: a cancelled caller must not keep the charge.
            await self._rollback(player, upgrade_id, current_level, level_written, exc)
            raise

        logger.info(
            "Player %s bought %s level %d for %s",
            player_id, upgrade_id, new_level, price,
        )
        return PurchaseResult(
            upgrade_id=upgrade_id,
            new_level=new_level,
            cost_paid=price,
            new_currency=new_currency,
            new_stats=stats,
        )

    async def recompute_stats(self, player_id: str) -> DerivedStats:
        """Rebuild and persist derived stats from the stored levels."""
        async with self.locks.hold(player_id):
            player, levels = await self._load(player_id)
            return await self._write_stats(player, levels, self.catalog.get())

    async def _write_stats(
        self,
        player: PlayerEconomicState,
        levels: Mapping[str, int],
        catalog: UpgradeCatalog,
    ) -> DerivedStats:
        stats = self.pipeline.compute(levels, catalog)
        fields: dict[str, Any] = stats.as_fields()
        fields["energy"] = energy_after_recompute(player, stats)
        await self._call(self.store.update_player(player.player_id, **fields), "write stats")
        return stats

    async def _rollback(
        self,
        player: PlayerEconomicState,
        upgrade_id: str,
        previous_level: int,
        level_written: bool,
        cause: BaseException,
    ) -> None:
        """Restore pre-transaction currency (and level, if it was written)."""
        player_id = player.player_id
        logger.error(
            "Purchase of %s by %s failed after charging (%r); rolling back",
            upgrade_id, player_id, cause,
        )
        try:
            await self._call(
                self.store.update_player(player_id, currency=player.currency),
                "restore currency",
            )
            if level_written:
                await self._call(
                    self.store.set_level(player_id, upgrade_id, previous_level),
                    "restore level",
                )
        except StoreUnavailable as exc:
            logger.critical(
                "RECONCILIATION REQUIRED: player=%s upgrade=%s currency=%s level=%d",
                player_id, upgrade_id, player.currency, previous_level,
            )
            raise ReconciliationFailure(
                player_id, upgrade_id, player.currency, previous_level, original=cause
            ) from exc
        except asyncio.CancelledError:
            logger.critical(
                "RECONCILIATION REQUIRED: player=%s upgrade=%s currency=%s level=%d "
                "(rollback cancelled)",
                player_id, upgrade_id, player.currency, previous_level,
            )
            raise


def build_listings(
    catalog: UpgradeCatalog,
    player: PlayerEconomicState,
    levels: Mapping[str, int],
) -> list[UpgradeListing]:
    result: list[UpgradeListing] = []
    for definition in catalog:
        current = levels.get(definition.id, 0)
        next_cost = cost(definition, current)
        locked = not is_unlocked(definition, player.player_level, levels)
        result.append(
            UpgradeListing(
                definition=definition,
                current_level=current,
                next_cost=next_cost,
                locked=locked,
                affordable=not locked and player.currency >= next_cost,
            )
        )
    return result
