"""Tests for effect curve strategies."""
import pytest

from idleeconomy.effect import (
    AdditiveCurve,
    CompoundingCurve,
    Curve,
    CurveKind,
    LinearCurve,
)


def test_linear():
    curve = Curve.linear(30)
    assert isinstance(curve, LinearCurve)
    assert curve(0) == 0
    assert curve(1) == 30
    assert curve(3) == 90


def test_additive():
    curve = Curve.additive(50, 25)
    assert isinstance(curve, AdditiveCurve)
    assert curve(0) == 0
    assert curve(1) == 75
    assert curve(4) == 150


def test_compounding():
    curve = Curve.compounding(2, 0.5)
    assert isinstance(curve, CompoundingCurve)
    assert curve(0) == 0
    assert curve(1) == pytest.approx(2.0)
    assert curve(2) == pytest.approx(3.0)
    assert curve(3) == pytest.approx(4.5)


def test_negative_level_is_zero():
    assert Curve.additive(10, 10)(-1) == 0


def test_from_kind_linear_prefers_flat_bonus():
    assert Curve.from_kind(CurveKind.LINEAR, 30, 99, flat_bonus=5)(2) == 10
    assert Curve.from_kind(CurveKind.LINEAR, 30, 99)(2) == 60


def test_from_kind_builds_each_kind():
    assert Curve.from_kind(CurveKind.ADDITIVE, 1, 2).kind is CurveKind.ADDITIVE
    assert Curve.from_kind(CurveKind.COMPOUNDING, 1, 2).kind is CurveKind.COMPOUNDING


def test_curves_are_monotonic():
    curves = [Curve.linear(3), Curve.additive(5, 2), Curve.compounding(2, 0.1)]
    for curve in curves:
        values = [curve(n) for n in range(20)]
        assert values == sorted(values)
