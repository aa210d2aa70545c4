"""Tests for decimal helpers."""

from decimal import Decimal

import pytest

from idlecore.core.numeric import (
    INFINITY,
    ONE,
    ZERO,
    D,
    clamp,
    floor,
    floor_int,
    is_finite,
    sign,
    to_decimal,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0.1, Decimal("0.1")),
        (3, Decimal(3)),
        (" 2.5 ", Decimal("2.5")),
        (True, ONE),
        (False, ZERO),
        ("1e3", Decimal(1000)),
    ],
    ids=["float", "int", "str", "true", "false", "exponent"],
)
def test_to_decimal_converts_losslessly(value, expected) -> None:
    assert to_decimal(value) == expected


def test_to_decimal_returns_decimal_unchanged() -> None:
    value = Decimal("1.25")
    assert to_decimal(value) is value
    assert D is to_decimal


def test_to_decimal_rejects_other_types() -> None:
    with pytest.raises(TypeError):
        to_decimal(None)  # type: ignore[arg-type]


def test_float_sums_stay_exact() -> None:
    """CRITICAL: 0.1 + 0.2 must be exactly 0.3 once converted.

    Why: Costs walked over many steps would otherwise drift.
    """
    assert D(0.1) + D(0.2) == D("0.3")


def test_clamp() -> None:
    assert clamp(D(12), ZERO, D(10)) == D(10)
    assert clamp(D(-1), ZERO, D(10)) == ZERO
    assert clamp(D(5), ZERO, INFINITY) == D(5)


@pytest.mark.parametrize(("value", "expected"), [(D(3), ONE), (D(-2), -ONE), (ZERO, ZERO)])
def test_sign(value, expected) -> None:
    assert sign(value) == expected


def test_floor_helpers() -> None:
    assert floor_int(D("2.7")) == 2
    assert floor_int(D("-1.5")) == -2
    assert floor(D("-1.5")) == D(-2)
    assert isinstance(floor(D("3.2")), Decimal)


def test_is_finite() -> None:
    assert is_finite(D(1))
    assert not is_finite(INFINITY)
    assert not is_finite(Decimal("NaN"))
