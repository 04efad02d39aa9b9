"""
Mathematical utilities for pricing and collateral calculations.

Token amounts are converted through Decimal so integer base units stay
exact regardless of float representation.
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import Final


# Epsilon for floating point comparisons
EPSILON: Final[float] = 1e-12


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Safely divide two numbers, returning default on division by zero.

    Args:
        numerator: The dividend.
        denominator: The divisor.
        default: Value to return if denominator is zero.

    Returns:
        Result of division or default value.
    """
    if abs(denominator) < EPSILON:
        return default
    return numerator / denominator


def fractional_change(previous: float, current: float) -> float:
    """
    Relative move from previous to current, as an absolute fraction.

    A zero or negative previous value counts as an infinite move so the
    caller always treats it as material.

    Example:
        >>> fractional_change(100.0, 100.5)
        0.005
    """
    if previous <= 0:
        return float("inf")
    return abs(current - previous) / previous


def to_decimal(value: float | int | str | Decimal) -> Decimal:
    """Convert a number to Decimal via its shortest string form."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_base_units(amount: float | int | str | Decimal, decimals: int) -> int:
    """
    Convert a whole-token amount to integer base units.

    Digits beyond the token's precision are truncated.

    Example:
        >>> to_base_units(1000, 6)
        1000000000
        >>> to_base_units("0.1234567", 6)
        123456
    """
    scaled = to_decimal(amount).scaleb(decimals)
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def from_base_units(units: int, decimals: int) -> Decimal:
    """
    Convert integer base units back to a whole-token Decimal.

    Example:
        >>> from_base_units(342000, 18)
        Decimal('3.42000E-13')
    """
    return Decimal(units).scaleb(-decimals)


def quantize(value: float | int | str | Decimal, places: int) -> Decimal:
    """
    Round a value to a fixed number of decimal places.

    Example:
        >>> quantize(600, 6)
        Decimal('600.000000')
    """
    exponent = Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)
