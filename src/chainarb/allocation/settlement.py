"""
Simulated state channel negotiation.

Stands in for the counterparty handshake; the only observable effect is
elapsed time, which makes it a cancellation point for request deadlines.
"""

import asyncio
import logging
from collections.abc import Sequence

from chainarb.config.constants import DEFAULT_SETTLEMENT_DELAY_S
from chainarb.core.types import CollateralDeposit


logger = logging.getLogger(__name__)


class SettlementSimulator:
    """Negotiates state channels by sleeping for a fixed delay."""

    def __init__(self, delay_s: float = DEFAULT_SETTLEMENT_DELAY_S) -> None:
        if delay_s < 0:
            raise ValueError(f"delay_s must be non-negative, got {delay_s}")
        self._delay_s = delay_s
        self._negotiations = 0

    async def negotiate(self, deposits: Sequence[CollateralDeposit]) -> None:
        """Open channels for the deposits."""
        logger.debug(
            f"Negotiating {len(deposits)} state channels "
            f"({', '.join(d.channel_id for d in deposits)})"
        )
        await asyncio.sleep(self._delay_s)
        self._negotiations += 1

    @property
    def delay_s(self) -> float:
        """Simulated handshake duration."""
        return self._delay_s

    @property
    def negotiations(self) -> int:
        """Completed negotiations."""
        return self._negotiations
