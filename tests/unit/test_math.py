"""
Unit tests for math utilities.
"""

from decimal import Decimal

import pytest

from chainarb.utils.math import (
    fractional_change,
    from_base_units,
    quantize,
    safe_divide,
    to_base_units,
)


class TestMath:
    """Tests for math helpers."""

    def test_safe_divide(self) -> None:
        """Test division with a zero guard."""
        assert safe_divide(10.0, 4.0) == 2.5
        assert safe_divide(10.0, 0.0) == 0.0
        assert safe_divide(10.0, 0.0, default=-1.0) == -1.0

    def test_fractional_change(self) -> None:
        """Test absolute relative change."""
        assert fractional_change(100.0, 100.5) == pytest.approx(0.005)
        assert fractional_change(100.0, 99.5) == pytest.approx(0.005)
        assert fractional_change(0.0, 1.0) == float("inf")

    def test_to_base_units_from_float(self) -> None:
        """Test floats convert via their shortest repr."""
        assert to_base_units(0.1, 18) == 10**17
        assert to_base_units(1000.5, 6) == 1_000_500_000

    def test_to_base_units_truncates(self) -> None:
        """Test excess precision is truncated."""
        assert to_base_units("0.1234567", 6) == 123_456

    def test_from_base_units(self) -> None:
        """Test base units convert back exactly."""
        assert from_base_units(1_000_500_000, 6) == Decimal("1000.5")

    def test_quantize(self) -> None:
        """Test half-up rounding to fixed places."""
        assert str(quantize(600, 6)) == "600.000000"
        assert quantize("0.0000005", 6) == Decimal("0.000001")
