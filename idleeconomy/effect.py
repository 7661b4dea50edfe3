from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum


class CurveKind(Enum):
    LINEAR = "linear"
    ADDITIVE = "additive"
    COMPOUNDING = "compounding"


class EffectCurve(ABC):
    """Maps an owned level to the cumulative effect magnitude of an upgrade."""

    kind: CurveKind

    @abstractmethod
    def total(self, level: int) -> float: ...

    def __call__(self, level: int) -> float:
        if level <= 0:
            return 0.0
        return self.total(level)


class LinearCurve(EffectCurve):
    """effect = per_level * level"""

    kind = CurveKind.LINEAR

    def __init__(self, per_level: float) -> None:
        self.per_level = per_level

    def total(self, level: int) -> float:
        return self.per_level * level

    def __repr__(self) -> str:
        return f"LinearCurve(per_level={self.per_level!r})"


class AdditiveCurve(EffectCurve):
    """effect = base + multiplier * level"""

    kind = CurveKind.ADDITIVE

    def __init__(self, base: float, multiplier: float) -> None:
        self.base = base
        self.multiplier = multiplier

    def total(self, level: int) -> float:
        return self.base + self.multiplier * level

    def __repr__(self) -> str:
        return f"AdditiveCurve(base={self.base!r}, multiplier={self.multiplier!r})"


class CompoundingCurve(EffectCurve):
    """effect = base * (1 + rate)^(level - 1)"""

    kind = CurveKind.COMPOUNDING

    def __init__(self, base: float, rate: float) -> None:
        self.base = base
        self.rate = rate

    def total(self, level: int) -> float:
        return self.base * (1.0 + self.rate) ** (level - 1)

    def __repr__(self) -> str:
        return f"CompoundingCurve(base={self.base!r}, rate={self.rate!r})"


class Curve:
    """Convenience constructors for effect curves."""

    @staticmethod
    def linear(per_level: float) -> EffectCurve:
        return LinearCurve(per_level)

    @staticmethod
    def additive(base: float, multiplier: float) -> EffectCurve:
        return AdditiveCurve(base, multiplier)

    @staticmethod
    def compounding(base: float, rate: float) -> EffectCurve:
        return CompoundingCurve(base, rate)

    @staticmethod
    def from_kind(
        kind: CurveKind,
        base_effect: float,
        effect_multiplier: float,
        flat_bonus: float = 0.0,
    ) -> EffectCurve:
        """Build a curve of *kind* from catalog parameters.

        A linear curve uses the category's flat bonus when one is set and
        falls back to ``base_effect`` per level otherwise.
        """
        if kind is CurveKind.LINEAR:
            return LinearCurve(flat_bonus or base_effect)
        if kind is CurveKind.COMPOUNDING:
            return CompoundingCurve(base_effect, effect_multiplier)
        return AdditiveCurve(base_effect, effect_multiplier)
