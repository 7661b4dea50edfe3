from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any

from idleeconomy.config import EconomyConfig
from idleeconomy.errors import EconomyError, PlayerNotFound
from idleeconomy.store import PlayerLocks, PlayerStore, guarded

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegenTick:
    energy_added: int
    energy: int
    energy_capacity: int


class RegenerationScheduler:
    """Owns one recurring energy-regeneration task per player.

    ``start`` replaces a running task instead of stacking a second one.
    A tick that fails is logged and skipped; the task keeps running.
    """

    def __init__(
        self,
        store: PlayerStore,
        locks: PlayerLocks,
        config: EconomyConfig | None = None,
    ) -> None:
        self.store = store
        self.locks = locks
        self.config = config or EconomyConfig()
        self._tasks: dict[str, asyncio.Task] = {}

    # ── Lifecycle ────────────────────────────────────────────────────

    def start(self, player_id: str) -> None:
        """Start (or restart) regeneration. Must be called from a running loop."""
        existing = self._tasks.pop(player_id, None)
        if existing is not None:
            existing.cancel()
        self._tasks[player_id] = asyncio.get_running_loop().create_task(
            self._run(player_id), name=f"energy-regen:{player_id}"
        )
        logger.info("Energy regeneration started for %s", player_id)

    def stop(self, player_id: str) -> bool:
        """Cancel regeneration. Returns False if it was not running."""
        task = self._tasks.pop(player_id, None)
        if task is None:
            return False
        task.cancel()
        logger.info("Energy regeneration stopped for %s", player_id)
        return True

    def is_running(self, player_id: str) -> bool:
        task = self._tasks.get(player_id)
        return task is not None and not task.done()

    def running(self) -> list[str]:
        return [pid for pid in self._tasks if self.is_running(pid)]

    async def shutdown(self) -> None:
        """Cancel every task and wait for them to finish."""
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Energy regeneration shut down (%d tasks)", len(tasks))

    def status(self, player_id: str) -> dict[str, Any]:
        return {
            "player_id": player_id,
            "running": self.is_running(player_id),
            "regen_amount": self.config.regen_amount,
            "interval_seconds": self.config.regen_interval,
        }

    # ── Ticks ────────────────────────────────────────────────────────

    async def tick(self, player_id: str) -> RegenTick:
        """Add one tick of energy, clamped to the player's current capacity."""
        async with self.locks.hold(player_id):
            player = await guarded(
                self.store.get_player(player_id), self.config.store_timeout, "get_player"
            )
            if player is None:
                raise PlayerNotFound(player_id)

            capacity = player.energy_capacity
            if player.energy >= capacity:
                return RegenTick(0, player.energy, capacity)

            new_energy = min(capacity, player.energy + self.config.regen_amount)
            await guarded(
                self.store.update_player(player_id, energy=new_energy),
                self.config.store_timeout,
                "write energy",
            )
            logger.debug("Regen %s: %d -> %d/%d", player_id, player.energy, new_energy, capacity)
            return RegenTick(new_energy - player.energy, new_energy, capacity)

    async def _run(self, player_id: str) -> None:
        while True:
            await asyncio.sleep(self.config.regen_interval)
            # A tick already writing finishes even if this task is cancelled.
            tick = asyncio.ensure_future(self.tick(player_id))
            try:
                await asyncio.shield(tick)
            except asyncio.CancelledError:
                tick.add_done_callback(partial(self._report_detached, player_id))
                raise
            except EconomyError as exc:
                logger.warning("Regen tick for %s skipped: %s", player_id, exc)
            except Exception:
                logger.exception("Regen tick for %s failed unexpectedly", player_id)

    def _report_detached(self, player_id: str, tick: asyncio.Future) -> None:
        """Collect the outcome of a tick that outlived its cancelled task."""
        if tick.cancelled():
            return
        exc = tick.exception()
        if exc is not None:
            logger.warning("Regen tick for %s failed after stop: %s", player_id, exc)
