"""Decimal helpers shared by the economy and the simulation clock.

All resource quantities are ``decimal.Decimal``. Hooks and callers may hand in
ints, floats or strings; everything is funnelled through ``to_decimal`` so that
arithmetic never mixes Decimal with float.

Usage:
    from idlecore.core.numeric import D, clamp

    clamp(D(12), D(0), D(10))  # Decimal('10')
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal
from typing import Union

DecimalSource = Union[Decimal, int, float, str]
"""Anything that can be converted losslessly into a Decimal."""

ZERO = Decimal(0)
ONE = Decimal(1)
INFINITY = Decimal("Infinity")


def to_decimal(value: DecimalSource) -> Decimal:
    """Convert a numeric value to Decimal.

    Floats are converted through their shortest ``repr`` so that ``0.1``
    becomes ``Decimal("0.1")`` rather than its binary expansion.

    Args:
        value: Decimal, int, float or numeric string.

    Returns:
        The equivalent Decimal. Decimal inputs are returned unchanged.

    Raises:
        TypeError: If value is not a supported numeric type.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return ONE if value else ZERO
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value))
    if isinstance(value, str):
        return Decimal(value.strip())
    raise TypeError(f"Cannot convert {type(value).__name__} to Decimal")


# Short alias used in hooks and tests.
D = to_decimal


def clamp(value: Decimal, lower: Decimal, upper: Decimal) -> Decimal:
    """Clamp value into [lower, upper]."""
    return max(lower, min(value, upper))


def sign(value: Decimal) -> Decimal:
    """Return -1, 0 or 1 with the sign of value."""
    if value > 0:
        return ONE
    if value < 0:
        return -ONE
    return ZERO


def is_finite(value: Decimal) -> bool:
    """Check that value is neither infinite nor NaN."""
    return value.is_finite()


def floor_int(value: Decimal) -> int:
    """Floor a finite Decimal to a Python int."""
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


def floor(value: Decimal) -> Decimal:
    """Floor a Decimal, keeping it a Decimal."""
    return value.to_integral_value(rounding=ROUND_FLOOR)
