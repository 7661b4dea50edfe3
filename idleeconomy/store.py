from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, TypeVar

from idleeconomy.errors import EconomyError, StoreError, StoreUnavailable
from idleeconomy.state import PlayerEconomicState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PlayerStore(ABC):
    """Persistent record store for player state and owned upgrade levels.

    Implementations raise ``StoreError`` on I/O failure. Upgrades with no
    stored level are owned at level 0.
    """

    @abstractmethod
    async def get_player(self, player_id: str) -> PlayerEconomicState | None: ...

    @abstractmethod
    async def create_player(self, state: PlayerEconomicState) -> None: ...

    @abstractmethod
    async def update_player(self, player_id: str, **fields: Any) -> None: ...

    @abstractmethod
    async def get_levels(self, player_id: str) -> dict[str, int]: ...

    @abstractmethod
    async def set_level(self, player_id: str, upgrade_id: str, level: int) -> None: ...


class InMemoryPlayerStore(PlayerStore):
    """Dict-backed store. Returned states are copies, never live records."""

    def __init__(self) -> None:
        self._players: dict[str, PlayerEconomicState] = {}
        self._levels: dict[str, dict[str, int]] = defaultdict(dict)

    async def get_player(self, player_id: str) -> PlayerEconomicState | None:
        state = self._players.get(player_id)
        return state.with_updates() if state is not None else None

    async def create_player(self, state: PlayerEconomicState) -> None:
        if state.player_id in self._players:
            raise StoreError(f"Player {state.player_id!r} already exists")
        self._players[state.player_id] = state.with_updates()

    async def update_player(self, player_id: str, **fields: Any) -> None:
        state = self._players.get(player_id)
        if state is None:
            raise StoreError(f"No record for player {player_id!r}")
        try:
            self._players[player_id] = state.with_updates(**fields)
        except KeyError as exc:
            raise StoreError(str(exc)) from exc

    async def get_levels(self, player_id: str) -> dict[str, int]:
        return dict(self._levels.get(player_id, {}))

    async def set_level(self, player_id: str, upgrade_id: str, level: int) -> None:
        self._levels[player_id][upgrade_id] = level


class PlayerLocks:
    """One ``asyncio.Lock`` per player id; no lock spans players.

    A lock exists only while someone holds or waits on it.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._locks

    @asynccontextmanager
    async def hold(self, player_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(player_id)
        if lock is None:
            lock = self._locks[player_id] = asyncio.Lock()
        self._users[player_id] = self._users.get(player_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[player_id] -= 1
            if not self._users[player_id]:
                del self._users[player_id]
                del self._locks[player_id]


async def guarded(call: Awaitable[T], timeout: float, what: str) -> T:
    """Await a store call, mapping timeouts and any store failure to StoreUnavailable.

    The call is not retried.
    """
    try:
        return await asyncio.wait_for(call, timeout)
    except asyncio.TimeoutError as exc:
        logger.warning("Store call %s timed out after %.1fs", what, timeout)
        raise StoreUnavailable(f"{what} timed out") from exc
    except StoreError as exc:
        logger.warning("Store call %s failed: %s", what, exc)
        raise StoreUnavailable(f"{what} failed") from exc
    except EconomyError:
        raise
    except Exception as exc:
        logger.exception("Store call %s raised %s", what, type(exc).__name__)
        raise StoreUnavailable(f"{what} failed") from exc
