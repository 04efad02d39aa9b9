"""
Unit tests for collateral partitioning.

Tests exact base-unit sums, thresholds and channel ids.
"""

from decimal import Decimal

import pytest

from chainarb.allocation.partition import (
    channel_id,
    margin_call_threshold,
    partition_collateral,
    split_units,
)
from chainarb.allocation.peers import DEFAULT_PEERS
from chainarb.allocation.tokens import TokenRegistry
from chainarb.config.constants import CHANNEL_LOCK_SECONDS
from chainarb.core.errors import ValidationError
from chainarb.core.types import RiskTier, SupportedToken


NOW_MS = 1_704_110_400_000
USER = "0x1111111111111111111111111111111111111111"


@pytest.fixture
def usdc() -> SupportedToken:
    """USDC on Ethereum (6 decimals)."""
    token = TokenRegistry().get("USDC", "Ethereum")
    assert token is not None
    return token


@pytest.fixture
def weth() -> SupportedToken:
    """WETH on Ethereum (18 decimals)."""
    token = TokenRegistry().get("WETH", "Ethereum")
    assert token is not None
    return token


class TestSplitUnits:
    """Tests for split_units."""

    def test_even_split(self) -> None:
        """Test an evenly divisible amount."""
        assert split_units(1000, 2) == [500, 500]

    def test_remainder_on_last(self) -> None:
        """Test the remainder goes to the last part."""
        assert split_units(1001, 2) == [500, 501]
        assert split_units(10, 3) == [3, 3, 4]

    def test_rejects_zero_parts(self) -> None:
        """Test parts must be positive."""
        with pytest.raises(ValueError):
            split_units(10, 0)


class TestPartitionCollateral:
    """Tests for partition_collateral."""

    @pytest.mark.parametrize("amount", [100, 1000, 50000])
    @pytest.mark.parametrize("peer_count", [1, 2])
    def test_sum_is_exact(self, usdc: SupportedToken, amount: int, peer_count: int) -> None:
        """Test deposits always sum to the requested amount."""
        deposits = partition_collateral(
            amount, usdc, DEFAULT_PEERS[:peer_count], USER, RiskTier.LOW, NOW_MS
        )

        assert len(deposits) == peer_count
        assert sum(d.amount_units for d in deposits) == amount * 10**6
        assert sum((d.amount for d in deposits), Decimal(0)) == Decimal(amount)

    def test_odd_amount_remainder(self, usdc: SupportedToken) -> None:
        """Test an indivisible base-unit amount puts the extra unit last."""
        deposits = partition_collateral(
            Decimal("1000.000001"), usdc, DEFAULT_PEERS[:2], USER, RiskTier.LOW, NOW_MS
        )

        assert [d.amount_units for d in deposits] == [500_000_000, 500_000_001]
        assert sum((d.amount for d in deposits), Decimal(0)) == Decimal("1000.000001")

    def test_eighteen_decimals(self, weth: SupportedToken) -> None:
        """Test large base-unit amounts stay exact."""
        deposits = partition_collateral(
            50000, weth, DEFAULT_PEERS[:2], USER, RiskTier.LOW, NOW_MS
        )

        assert sum(d.amount_units for d in deposits) == 50000 * 10**18

    def test_deposit_fields(self, usdc: SupportedToken) -> None:
        """Test lock expiry, counterparties and channel ids."""
        deposits = partition_collateral(
            1000, usdc, DEFAULT_PEERS[:2], USER, RiskTier.HIGH, NOW_MS
        )

        for deposit, peer in zip(deposits, DEFAULT_PEERS[:2]):
            assert deposit.counterparty_address == peer.address
            assert deposit.user_address == USER
            assert deposit.lock_expiry == NOW_MS // 1000 + CHANNEL_LOCK_SECONDS
            assert deposit.margin_call_threshold == 0.70
            assert deposit.channel_id == channel_id(USER, peer.address, NOW_MS)

        assert deposits[0].channel_id != deposits[1].channel_id

    def test_no_peers(self, usdc: SupportedToken) -> None:
        """Test partitioning requires a counterparty."""
        with pytest.raises(ValidationError):
            partition_collateral(1000, usdc, [], USER, RiskTier.LOW, NOW_MS)

    def test_amount_too_small_to_split(self, usdc: SupportedToken) -> None:
        """Test every peer must receive at least one base unit."""
        with pytest.raises(ValidationError):
            partition_collateral(
                Decimal("0.000001"), usdc, DEFAULT_PEERS[:2], USER, RiskTier.LOW, NOW_MS
            )


class TestChannelId:
    """Tests for channel_id and thresholds."""

    def test_format(self) -> None:
        """Test ids are 0x followed by 40 lowercase hex chars."""
        cid = channel_id(USER, "0xpeer", NOW_MS)

        assert cid.startswith("0x")
        assert len(cid) == 42
        int(cid[2:], 16)

    def test_deterministic(self) -> None:
        """Test identical inputs give identical ids."""
        assert channel_id(USER, "0xpeer", NOW_MS) == channel_id(USER, "0xpeer", NOW_MS)
        assert channel_id(USER, "0xpeer", NOW_MS) != channel_id(USER, "0xpeer", NOW_MS + 1)

    def test_nonce_separates_requests(self) -> None:
        """Test the nonce changes the id for otherwise identical inputs."""
        assert channel_id(USER, "0xpeer", NOW_MS, "bot-a:01") != channel_id(
            USER, "0xpeer", NOW_MS, "bot-a:02"
        )

    def test_partition_uses_nonce(self, usdc: SupportedToken) -> None:
        """Test deposits from two nonces never share a channel id."""
        first = partition_collateral(
            1000, usdc, DEFAULT_PEERS[:2], USER, RiskTier.LOW, NOW_MS, nonce="a"
        )
        second = partition_collateral(
            1000, usdc, DEFAULT_PEERS[:2], USER, RiskTier.LOW, NOW_MS, nonce="b"
        )

        assert first[0].channel_id == channel_id(USER, DEFAULT_PEERS[0].address, NOW_MS, "a")
        assert {d.channel_id for d in first}.isdisjoint(d.channel_id for d in second)

    @pytest.mark.parametrize(
        "risk,expected",
        [(RiskTier.LOW, 0.85), (RiskTier.MEDIUM, 0.80), (RiskTier.HIGH, 0.70), ("medium", 0.80)],
    )
    def test_margin_call_threshold(self, risk: RiskTier, expected: float) -> None:
        """Test threshold per risk tier."""
        assert margin_call_threshold(risk) == expected
