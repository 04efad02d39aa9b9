"""
Unit tests for TokenRegistry and PeerDirectory.

Tests collateral selection fallbacks and peer filtering order.
"""

import pytest

from chainarb.allocation.peers import PeerDirectory
from chainarb.allocation.tokens import TokenRegistry
from chainarb.core.types import Peer


class TestTokenRegistry:
    """Tests for TokenRegistry."""

    @pytest.fixture
    def registry(self) -> TokenRegistry:
        """Default token registry."""
        return TokenRegistry()

    def test_all_tokens(self, registry: TokenRegistry) -> None:
        """Test the default registry ships seven tokens."""
        assert len(registry.supported_tokens()) == 7

    def test_chain_filter(self, registry: TokenRegistry) -> None:
        """Test filtering by chain."""
        polygon = registry.supported_tokens(["Polygon"])

        assert {t.symbol for t in polygon} == {"WETH", "USDC"}
        assert all(t.chain_id == 137 for t in polygon)

    def test_unknown_chain_filter_empty(self, registry: TokenRegistry) -> None:
        """Test a chain without tokens yields nothing."""
        assert registry.supported_tokens(["Solana"]) == []

    def test_select_preferred(self, registry: TokenRegistry) -> None:
        """Test the preferred token wins when available."""
        token = registry.select_collateral("WBTC", ["Ethereum"])

        assert token is not None
        assert token.symbol == "WBTC"
        assert token.decimals == 8

    def test_select_preferred_on_second_chain(self, registry: TokenRegistry) -> None:
        """Test the preferred token is found on any supported chain."""
        token = registry.select_collateral("WETH", ["Arbitrum", "Polygon"])

        assert token is not None
        assert (token.symbol, token.chain) == ("WETH", "Polygon")

    def test_select_fallback(self, registry: TokenRegistry) -> None:
        """Test fallback to the first collateral token on the chains."""
        token = registry.select_collateral("DAI", ["Polygon"])

        assert token is not None
        assert (token.symbol, token.chain) == ("WETH", "Polygon")

    def test_select_none(self, registry: TokenRegistry) -> None:
        """Test no token on unsupported chains."""
        assert registry.select_collateral("USDC", ["Solana"]) is None

    def test_find_stablecoin(self, registry: TokenRegistry) -> None:
        """Test USDC lookup across chains."""
        token = registry.find_stablecoin(["Polygon"])

        assert token is not None
        assert token.address == "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174"


class TestPeerDirectory:
    """Tests for PeerDirectory."""

    @pytest.fixture
    def directory(self) -> PeerDirectory:
        """Default peer directory."""
        return PeerDirectory()

    def test_sorted_by_reputation(self, directory: PeerDirectory) -> None:
        """Test results are ordered by reputation descending."""
        peers = directory.find(["Ethereum", "Polygon"])

        assert [p.reputation for p in peers] == [95, 92, 88]

    def test_pool_filter(self, directory: PeerDirectory) -> None:
        """Test trading pairs require a matching liquidity pool."""
        peers = directory.find(["Ethereum", "Polygon"], ["WETH/USDC"])

        assert [p.reputation for p in peers] == [95, 92]

    def test_empty_pairs_do_not_filter(self, directory: PeerDirectory) -> None:
        """Test an empty pair list applies no pool filter."""
        assert directory.find(["Ethereum"], []) == directory.by_chain(["Ethereum"])
        assert len(directory.find(["Ethereum"], [])) == 2

    def test_unknown_chain(self, directory: PeerDirectory) -> None:
        """Test unknown chains match no peers."""
        assert directory.find(["Solana"]) == []

    def test_no_matching_pool(self, directory: PeerDirectory) -> None:
        """Test pairs no peer provides match nothing."""
        assert directory.find(["Ethereum"], ["DOGE/SHIB"]) == []

    def test_get_case_insensitive(self, directory: PeerDirectory) -> None:
        """Test address lookup ignores case."""
        peer = directory.get("0xa1b2c3d4e5f6789012345678901234567890ABCD")

        assert peer is not None
        assert peer.reputation == 95

    def test_chains(self, directory: PeerDirectory) -> None:
        """Test the union of advertised chains."""
        assert directory.chains == {"Ethereum", "Polygon", "Arbitrum", "BSC", "Optimism"}

    def test_rejects_bad_reputation(self) -> None:
        """Test reputation must be within 0..100."""
        with pytest.raises(ValueError):
            PeerDirectory([Peer("0xbad", 101, frozenset({"Ethereum"}), frozenset())])
