"""
Scripted price oracles for testing.

Provide fixed, failing, slow or gated prices per (pair, venue, chain)
without touching the simulated feed's random source.
"""

import asyncio

from chainarb.core.errors import UpstreamUnavailableError


PriceKey = tuple[str, str, str]


class ScriptedPriceOracle:
    """
    Oracle returning configured prices.

    Unknown keys fall back to ``default_price``; keys listed in
    ``failing`` raise, keys listed in ``slow`` sleep before answering.
    """

    def __init__(
        self,
        prices: dict[PriceKey, float] | None = None,
        default_price: float = 100.0,
        failing: set[PriceKey] | None = None,
        slow: dict[PriceKey, float] | None = None,
    ) -> None:
        """
        Initialize scripted oracle.

        Args:
            prices: Price per (pair, venue, chain).
            default_price: Price for keys not in ``prices``.
            failing: Keys that raise UpstreamUnavailableError.
            slow: Delay in seconds per key.
        """
        self._prices = dict(prices or {})
        self._default_price = default_price
        self._failing = set(failing or ())
        self._slow = dict(slow or {})
        self.requests: list[PriceKey] = []

    def set_price(self, pair: str, venue: str, chain: str, price: float) -> None:
        """Set the price for one key."""
        self._prices[(pair, venue, chain)] = price

    async def price(self, pair: str, venue: str, chain: str) -> float:
        """Return the scripted price."""
        key = (pair, venue, chain)
        self.requests.append(key)

        if key in self._slow:
            await asyncio.sleep(self._slow[key])

        if key in self._failing:
            raise UpstreamUnavailableError(f"Scripted failure for {pair}@{venue}/{chain}")

        return self._prices.get(key, self._default_price)


class GatedPriceOracle:
    """
    Oracle that blocks every request until released.

    Used to hold a tick open while a second trigger arrives.
    """

    def __init__(self, price: float = 100.0) -> None:
        self._price = price
        self._gate = asyncio.Event()
        self.calls = 0

    def release(self) -> None:
        """Let all pending and future requests through."""
        self._gate.set()

    async def price(self, pair: str, venue: str, chain: str) -> float:
        """Wait for the gate, then return the fixed price."""
        self.calls += 1
        await self._gate.wait()
        return self._price
