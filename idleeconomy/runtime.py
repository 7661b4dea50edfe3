from __future__ import annotations

import logging

from idleeconomy.catalog import CatalogCache, CatalogSource, UpgradeCatalog
from idleeconomy.config import EconomyConfig
from idleeconomy.errors import InvalidAmount, PlayerNotFound
from idleeconomy.offline import Clock, OfflineAccrual, OfflineClaim, utcnow
from idleeconomy.pipeline import StatPipeline
from idleeconomy.purchase import PurchaseEngine, PurchaseResult
from idleeconomy.regen import RegenerationScheduler, RegenTick
from idleeconomy.state import DerivedStats, PlayerEconomicState
from idleeconomy.store import InMemoryPlayerStore, PlayerLocks, PlayerStore, guarded
from idleeconomy.upgrade import UpgradeListing

logger = logging.getLogger(__name__)


class EconomyRuntime:
    """Entry point for callers: purchases, offline claims and energy regen."""

    def __init__(
        self,
        source: CatalogSource,
        store: PlayerStore | None = None,
        config: EconomyConfig | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.config = config or EconomyConfig()
        self.catalog_cache = CatalogCache(source, self.config)
        self._check_catalog(self.catalog_cache.get())

        self.store = store if store is not None else InMemoryPlayerStore()
        self.clock = clock
        self.locks = PlayerLocks()
        self.pipeline = StatPipeline(self.config)
        self.purchases = PurchaseEngine(
            self.catalog_cache, self.store, self.locks, self.pipeline, self.config
        )
        self.regen = RegenerationScheduler(self.store, self.locks, self.config)
        self.offline = OfflineAccrual(
            self.catalog_cache, self.store, self.locks, self.config, clock
        )

    @property
    def catalog(self) -> UpgradeCatalog:
        return self.catalog_cache.get()

    # ── Players ──────────────────────────────────────────────────────

    async def register_player(
        self, player_id: str, currency: float = 0.0, player_level: int = 1
    ) -> PlayerEconomicState:
        """Create the player's economic record on first activity (idempotent)."""
        if currency < 0:
            raise InvalidAmount("currency", currency)
        async with self.locks.hold(player_id):
            existing = await self._get(player_id)
            if existing is not None:
                return existing
            stats = self.pipeline.compute({}, self.catalog)
            state = PlayerEconomicState(
                player_id=player_id,
                currency=currency,
                player_level=player_level,
                tap_income=stats.tap_income,
                hourly_income=stats.hourly_income,
                energy_capacity=stats.energy_capacity,
                energy=stats.energy_capacity,
                last_accrual_at=self.clock(),
            )
            await guarded(
                self.store.create_player(state), self.config.store_timeout, "create_player"
            )
            logger.info("Registered player %s", player_id)
            return state

    async def get_player(self, player_id: str) -> PlayerEconomicState:
        player = await self._get(player_id)
        if player is None:
            raise PlayerNotFound(player_id)
        return player

    async def get_levels(self, player_id: str) -> dict[str, int]:
        return await guarded(
            self.store.get_levels(player_id), self.config.store_timeout, "get_levels"
        )

    # ── Upgrades ─────────────────────────────────────────────────────

    async def list_available_upgrades(self, player_id: str) -> list[UpgradeListing]:
        return await self.purchases.list_available_upgrades(player_id)

    async def purchase(self, player_id: str, upgrade_id: str) -> PurchaseResult:
        return await self.purchases.purchase(player_id, upgrade_id)

    async def recompute_stats(self, player_id: str) -> DerivedStats:
        return await self.purchases.recompute_stats(player_id)

    # ── Offline earnings ─────────────────────────────────────────────

    async def claim_offline(self, player_id: str) -> OfflineClaim:
        return await self.offline.claim(player_id)

    # ── Energy ───────────────────────────────────────────────────────

    def start_regeneration(self, player_id: str) -> None:
        self.regen.start(player_id)

    def stop_regeneration(self, player_id: str) -> bool:
        return self.regen.stop(player_id)

    def regeneration_status(self, player_id: str) -> dict:
        return self.regen.status(player_id)

    async def regenerate_now(self, player_id: str) -> RegenTick:
        return await self.regen.tick(player_id)

    # ── Lifecycle ────────────────────────────────────────────────────

    def reload_catalog(self) -> UpgradeCatalog:
        """Drop the cached catalog and read the source again."""
        self.catalog_cache.invalidate()
        catalog = self.catalog_cache.get()
        self._check_catalog(catalog)
        return catalog

    async def shutdown(self) -> None:
        await self.regen.shutdown()

    # ── Private helpers ──────────────────────────────────────────────

    async def _get(self, player_id: str) -> PlayerEconomicState | None:
        return await guarded(
            self.store.get_player(player_id), self.config.store_timeout, "get_player"
        )

    @staticmethod
    def _check_catalog(catalog: UpgradeCatalog) -> None:
        errors = catalog.validate()
        if errors:
            raise ValueError(
                "Invalid upgrade catalog:\n" + "\n".join(f"  - {e}" for e in errors)
            )
