from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Mapping

from idleeconomy.calculator import cumulative_effect
from idleeconomy.catalog import CatalogCache, UpgradeCatalog
from idleeconomy.config import EconomyConfig
from idleeconomy.errors import PlayerNotFound
from idleeconomy.store import PlayerLocks, PlayerStore, guarded

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class OfflineClaim:
    earned: int
    minutes_applied: int
    cap_minutes: int
    hourly_income: int
    new_currency: float


def elapsed_minutes(last: datetime, now: datetime) -> int:
    """Whole minutes between *last* and *now*, never negative."""
    return max(0, math.floor((now - last).total_seconds() / 60))


def offline_cap_minutes(
    catalog: UpgradeCatalog,
    levels: Mapping[str, int],
    config: EconomyConfig,
) -> int:
    """Base cap plus whatever the offline-cap upgrade grants at its owned level."""
    bonus = 0
    level = levels.get(config.offline_cap_upgrade_id, 0)
    definition = catalog.get(config.offline_cap_upgrade_id)
    if level > 0 and definition is not None:
        bonus = math.floor(cumulative_effect(definition, level))
    return config.base_offline_cap_minutes + bonus


def offline_earnings(minutes: int, cap_minutes: int, hourly_income: int) -> tuple[int, int]:
    """Return ``(minutes_applied, earned)`` for an idle window."""
    applied = min(minutes, cap_minutes)
    # floor(applied / 60 * hourly) without float rounding
    return applied, applied * max(0, hourly_income) // 60


class OfflineAccrual:
    """Credits passive income for the time a player was away, up to a cap."""

    def __init__(
        self,
        catalog: CatalogCache,
        store: PlayerStore,
        locks: PlayerLocks,
        config: EconomyConfig | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.catalog = catalog
        self.store = store
        self.locks = locks
        self.config = config or EconomyConfig()
        self.clock = clock

    async def claim(self, player_id: str) -> OfflineClaim:
        async with self.locks.hold(player_id):
            timeout = self.config.store_timeout
            player = await guarded(self.store.get_player(player_id), timeout, "get_player")
            if player is None:
                raise PlayerNotFound(player_id)
            levels = await guarded(self.store.get_levels(player_id), timeout, "get_levels")

            now = self.clock()
            last = player.last_accrual_at
            if last is None:
                last = now - timedelta(minutes=self.config.default_offline_minutes)

            cap = offline_cap_minutes(self.catalog.get(), levels, self.config)
            hourly = max(0, math.floor(player.hourly_income))
            applied, earned = offline_earnings(elapsed_minutes(last, now), cap, hourly)

            # Timestamp only moves forward, even when nothing was earned.
            stamp = max(now, last)
            if earned > 0:
                new_currency = player.currency + earned
                await guarded(
                    self.store.update_player(
                        player_id, currency=new_currency, last_accrual_at=stamp
                    ),
                    timeout,
                    "credit offline earnings",
                )
                logger.info(
                    "Offline claim for %s: +%d (%d/%d min at %d/h)",
                    player_id, earned, applied, cap, hourly,
                )
            else:
                new_currency = player.currency
                await guarded(
                    self.store.update_player(player_id, last_accrual_at=stamp),
                    timeout,
                    "advance accrual timestamp",
                )
                logger.debug("Offline claim for %s: nothing to claim", player_id)

            return OfflineClaim(
                earned=earned,
                minutes_applied=applied,
                cap_minutes=cap,
                hourly_income=hourly,
                new_currency=new_currency,
            )
