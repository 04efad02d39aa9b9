"""
Simulated price oracle for demo mode and deterministic tests.

Composes a base price per token with a venue multiplier, a chain
multiplier and a small random jitter, reproducing the small
cross-venue spreads live feeds show.
"""

import random

from chainarb.config.constants import (
    BASE_PRICES,
    CHAIN_MULTIPLIERS,
    DEFAULT_BASE_PRICE,
    PRICE_JITTER,
    VENUE_MULTIPLIERS,
)


class SimulatedPriceOracle:
    """
    Deterministic-by-seed price generator.

    Pass ``jitter=0.0`` for fully repeatable prices, or a seeded
    ``random.Random`` for repeatable noisy sequences.
    """

    def __init__(
        self,
        base_prices: dict[str, float] | None = None,
        venue_multipliers: dict[str, float] | None = None,
        chain_multipliers: dict[str, float] | None = None,
        jitter: float = PRICE_JITTER,
        rng: random.Random | None = None,
    ) -> None:
        """
        Initialize simulated oracle.

        Args:
            base_prices: Base USD price per token symbol.
            venue_multipliers: Price skew per venue.
            chain_multipliers: Price skew per chain.
            jitter: Total width of the uniform jitter band (0.002 = +/-0.1%).
            rng: Random source.
        """
        self._base_prices = dict(base_prices or BASE_PRICES)
        self._venue_multipliers = dict(venue_multipliers or VENUE_MULTIPLIERS)
        self._chain_multipliers = dict(chain_multipliers or CHAIN_MULTIPLIERS)
        self._jitter = jitter
        self._rng = rng or random.Random()
        self._calls = 0

    def base_price(self, pair: str) -> float:
        """Base price of the pair's first token."""
        symbol = pair.split("/")[0]
        return self._base_prices.get(symbol, DEFAULT_BASE_PRICE)

    def venue_multiplier(self, venue: str) -> float:
        """Skew applied for a venue (1.0 when unknown)."""
        return self._venue_multipliers.get(venue, 1.0)

    def chain_multiplier(self, chain: str) -> float:
        """Skew applied for a chain (1.0 when unknown)."""
        return self._chain_multipliers.get(chain, 1.0)

    def quote(self, pair: str, venue: str, chain: str) -> float:
        """Synchronous price computation."""
        self._calls += 1
        variation = 1.0 + (self._rng.random() - 0.5) * self._jitter
        return (
            self.base_price(pair)
            * self.venue_multiplier(venue)
            * self.chain_multiplier(chain)
            * variation
        )

    async def price(self, pair: str, venue: str, chain: str) -> float:
        """Return the current unit price for pair on venue and chain."""
        return self.quote(pair, venue, chain)

    def set_base_price(self, symbol: str, price: float) -> None:
        """Override a token's base price (moves every quote for it)."""
        self._base_prices[symbol] = price

    @property
    def calls(self) -> int:
        """Number of prices generated."""
        return self._calls
