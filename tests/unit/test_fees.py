"""
Unit tests for fee estimation and execution optimizations.
"""

from decimal import Decimal

import pytest

from chainarb.allocation.fees import derive_optimizations, estimate_fees
from chainarb.core.types import RiskTier, Strategy


class TestEstimateFees:
    """Tests for estimate_fees."""

    def test_two_deposits(self) -> None:
        """Test gas scales with the number of channels."""
        fees = estimate_fees(1000, 2)

        assert fees.gas_units == 342_000
        assert fees.gas_estimate == Decimal("0.000000000000342")
        assert fees.network_fee == Decimal("0.025")
        assert fees.protocol_fee == Decimal("1.000000")

    def test_protocol_fee_precision(self) -> None:
        """Test protocol fee is rounded to six places."""
        assert str(estimate_fees(123.4567, 1).protocol_fee) == "0.123457"

    def test_zero_deposits(self) -> None:
        """Test no channels means no gas."""
        assert estimate_fees(100, 0).gas_units == 0

    def test_rejects_negative_count(self) -> None:
        """Test deposit count cannot be negative."""
        with pytest.raises(ValueError):
            estimate_fees(100, -1)


class TestDeriveOptimizations:
    """Tests for derive_optimizations."""

    def test_arbitrage_fast_lane(self) -> None:
        """Test arbitrage gets the fast lane without batching."""
        opts = derive_optimizations(Strategy.ARBITRAGE, RiskTier.LOW)

        assert opts.enable_fast_lane
        assert opts.priority_fee_boost == 2.5
        assert not opts.batch_transactions
        assert opts.expected_confirmation_time == 30

    def test_high_risk_fast_lane(self) -> None:
        """Test high risk tolerance enables the fast lane with batching."""
        opts = derive_optimizations(Strategy.GRID, RiskTier.HIGH)

        assert opts.enable_fast_lane
        assert opts.batch_transactions

    def test_standard_lane(self) -> None:
        """Test conservative bots use the standard lane."""
        opts = derive_optimizations("dca", "medium")

        assert not opts.enable_fast_lane
        assert opts.priority_fee_boost == 1.2
        assert opts.batch_transactions
        assert opts.expected_confirmation_time == 60
