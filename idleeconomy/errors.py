from __future__ import annotations


class EconomyError(Exception):
    """Base class for every failure the economy core reports to callers."""

    code = "economy_error"

    def as_dict(self) -> dict:
        return {"success": False, "reason": self.code, "message": str(self)}


class ValidationError(EconomyError):
    """An expected outcome of checking a request; nothing was changed."""


class UnknownUpgrade(ValidationError):
    code = "unknown_upgrade"

    def __init__(self, upgrade_id: str) -> None:
        super().__init__(f"Unknown upgrade: {upgrade_id!r}")
        self.upgrade_id = upgrade_id


class InvalidAmount(ValidationError):
    code = "invalid_amount"

    def __init__(self, field: str, value: float) -> None:
        super().__init__(f"{field} must not be negative, got {value:g}")
        self.field = field
        self.value = value


class PlayerNotFound(EconomyError):
    code = "player_not_found"

    def __init__(self, player_id: str) -> None:
        super().__init__(f"Player not found: {player_id!r}")
        self.player_id = player_id


class Locked(ValidationError):
    code = "locked"

    def __init__(self, upgrade_id: str, unmet: list[str] | None = None) -> None:
        self.upgrade_id = upgrade_id
        self.unmet = list(unmet or [])
        detail = f" (requires {', '.join(self.unmet)})" if self.unmet else ""
        super().__init__(f"Upgrade {upgrade_id!r} is locked{detail}")

    def as_dict(self) -> dict:
        result = super().as_dict()
        result["requires"] = self.unmet
        return result


class MaxLevelReached(ValidationError):
    code = "max_level_reached"

    def __init__(self, upgrade_id: str, max_level: int) -> None:
        super().__init__(f"Upgrade {upgrade_id!r} is at max level {max_level}")
        self.upgrade_id = upgrade_id
        self.max_level = max_level


class InsufficientFunds(ValidationError):
    code = "insufficient_funds"

    def __init__(self, cost: float, balance: float) -> None:
        super().__init__(f"Insufficient currency: need {cost:g}, have {balance:g}")
        self.cost = cost
        self.balance = balance

    def as_dict(self) -> dict:
        result = super().as_dict()
        result["cost"] = self.cost
        return result


class StoreError(Exception):
    """Raised by player store implementations on I/O failure."""


class StoreUnavailable(EconomyError):
    code = "store_unavailable"


class ReconciliationFailure(EconomyError):
    """A compensating write failed; the record needs manual repair."""

    code = "reconciliation_failure"

    def __init__(
        self,
        player_id: str,
        upgrade_id: str,
        restore_currency: float,
        restore_level: int,
        original: BaseException | None = None,
    ) -> None:
        super().__init__(
            f"Rollback failed for player {player_id!r} buying {upgrade_id!r}: "
            f"restore currency={restore_currency:g} level={restore_level}"
        )
        self.player_id = player_id
        self.upgrade_id = upgrade_id
        self.restore_currency = restore_currency
        self.restore_level = restore_level
        self.original = original
