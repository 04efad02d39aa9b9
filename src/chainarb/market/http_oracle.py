"""
Async HTTP price oracle for live price feeds.

Queries a JSON price endpoint with:
- A single pooled aiohttp session
- Fast JSON parsing with orjson
- Classified errors for the valuation engine's skip logic
"""

import math
from typing import Any

import aiohttp
import orjson

from chainarb.core.errors import OperationTimeoutError, UpstreamUnavailableError


PRICE_ENDPOINT = "/price"


class HttpPriceOracle:
    """
    Price oracle backed by an HTTP feed.

    Expects ``GET {base_url}/price?pair=..&venue=..&chain=..`` to answer
    ``{"price": <number>}``.
    """

    def __init__(
        self,
        base_url: str,
        timeout_s: float = 5.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """
        Initialize the oracle.

        Args:
            base_url: Feed base URL without trailing slash.
            timeout_s: Total request timeout.
            session: Optional externally owned session.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout_s)
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=20,
                keepalive_timeout=30,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=self._timeout,
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if this oracle created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def price(self, pair: str, venue: str, chain: str) -> float:
        """
        Fetch the current unit price.

        Raises:
            UpstreamUnavailableError: On network errors, bad status or bad payload.
            OperationTimeoutError: When the request exceeds its timeout.
        """
        session = await self._get_session()
        url = f"{self._base_url}{PRICE_ENDPOINT}"
        params = {"pair": pair, "venue": venue, "chain": chain}

        try:
            async with session.get(url, params=params, timeout=self._timeout) as response:
                text = await response.text()
                if response.status >= 400:
                    raise UpstreamUnavailableError(
                        f"Price feed returned HTTP {response.status} for {pair}@{venue}/{chain}"
                    )
        except TimeoutError as e:
            raise OperationTimeoutError(
                f"Price feed timed out for {pair}@{venue}/{chain}",
                timeout_s=self._timeout.total,
            ) from e
        except aiohttp.ClientError as e:
            raise UpstreamUnavailableError(f"Price feed unreachable: {e}") from e

        return self._parse_price(text, pair)

    @staticmethod
    def _parse_price(text: str, pair: str) -> float:
        """Extract a positive, finite price from a response body."""
        try:
            data: Any = orjson.loads(text)
        except orjson.JSONDecodeError as e:
            raise UpstreamUnavailableError(f"Invalid JSON from price feed: {e}") from e

        if not isinstance(data, dict) or "price" not in data:
            raise UpstreamUnavailableError(f"Price feed response missing 'price' for {pair}")

        try:
            value = float(data["price"])
        except (TypeError, ValueError) as e:
            raise UpstreamUnavailableError(f"Non-numeric price for {pair}: {data['price']!r}") from e

        if not math.isfinite(value) or value <= 0:
            raise UpstreamUnavailableError(f"Invalid price for {pair}: {value}")

        return value

    async def __aenter__(self) -> "HttpPriceOracle":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
