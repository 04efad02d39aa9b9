"""
Supported token registry.

Tokens eligible for trading allocations and state channel collateral,
one record per (symbol, chain).
"""

from collections.abc import Iterable

from chainarb.config.constants import PREFERRED_STABLECOIN
from chainarb.core.types import SupportedToken


DEFAULT_TOKENS: tuple[SupportedToken, ...] = (
    # Ethereum Mainnet
    SupportedToken("WETH", "Wrapped Ethereum", "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
                   18, "Ethereum", 1, True, "ethereum"),
    SupportedToken("WBTC", "Wrapped Bitcoin", "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599",
                   8, "Ethereum", 1, True, "wrapped-bitcoin"),
    SupportedToken("USDC", "USD Coin", "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
                   6, "Ethereum", 1, True, "usd-coin"),
    SupportedToken("USDT", "Tether USD", "0xdAC17F958D2ee523a2206206994597C13D831ec7",
                   6, "Ethereum", 1, True, "tether"),
    SupportedToken("DAI", "Dai Stablecoin", "0x6B175474E89094C44Da98b954EedeAC495271d0F",
                   18, "Ethereum", 1, True, "dai"),
    # Polygon
    SupportedToken("WETH", "Wrapped Ethereum", "0x7ceB23fD6bC0adD59E62ac25578270cFf1b9f619",
                   18, "Polygon", 137, True, "ethereum"),
    SupportedToken("USDC", "USD Coin", "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174",
                   6, "Polygon", 137, True, "usd-coin"),
)


class TokenRegistry:
    """Read-only lookup over supported tokens."""

    def __init__(self, tokens: Iterable[SupportedToken] | None = None) -> None:
        self._tokens = tuple(DEFAULT_TOKENS if tokens is None else tokens)

    def supported_tokens(self, chain_filter: list[str] | None = None) -> list[SupportedToken]:
        """
        List supported tokens, optionally restricted to some chains.

        Args:
            chain_filter: Chains to keep; None returns every token.
        """
        if chain_filter is None:
            return list(self._tokens)
        return [t for t in self._tokens if t.chain in chain_filter]

    def select_collateral(self, preferred_symbol: str, chains: list[str]) -> SupportedToken | None:
        """
        Choose the collateral token for a request.

        The preferred symbol wins if it is collateral-eligible on one of the
        chains; otherwise the first collateral-eligible token on any of the
        chains is used.
        """
        for token in self._tokens:
            if token.symbol == preferred_symbol and token.chain in chains and token.is_collateral:
                return token

        for token in self._tokens:
            if token.chain in chains and token.is_collateral:
                return token

        return None

    def find_stablecoin(
        self,
        chains: list[str],
        symbol: str = PREFERRED_STABLECOIN,
    ) -> SupportedToken | None:
        """First token with the stablecoin symbol on any of the chains."""
        for token in self._tokens:
            if token.symbol == symbol and token.chain in chains:
                return token
        return None

    def get(self, symbol: str, chain: str) -> SupportedToken | None:
        """Look up a token by symbol and chain."""
        for token in self._tokens:
            if token.symbol == symbol and token.chain == chain:
                return token
        return None

    def __len__(self) -> int:
        return len(self._tokens)
