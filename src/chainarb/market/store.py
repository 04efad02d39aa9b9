"""
In-memory opportunity store.

Stands in for the managed database the dashboard uses. Reads hand out
copies, so callers never mutate stored records except through the
update methods.
"""

import asyncio
import logging
from dataclasses import replace

from chainarb.core.errors import UpstreamUnavailableError
from chainarb.core.types import ConditionsUpdate, Opportunity, OpportunityUpdate, RiskTier
from chainarb.valuation.calculator import ProfitCalculator


logger = logging.getLogger(__name__)


# token_pair, source_chain, target_chain, source_venue, target_venue,
# source_price, target_price, liquidity, estimated_gas, time_window, risk,
# trending, executable
SAMPLE_OPPORTUNITIES: list[tuple] = [
    ("ETH/USDC", "Ethereum", "Polygon", "Uniswap V3", "QuickSwap",
     2650.50, 2663.25, 150_000.0, 45.30, 180, RiskTier.LOW, True, True),
    ("USDT/USDC", "BSC", "Arbitrum", "PancakeSwap", "SushiSwap",
     1.0025, 1.0041, 89_000.0, 12.75, 120, RiskTier.MEDIUM, False, True),
    ("BTC/USDT", "Ethereum", "Base", "Uniswap V2", "BaseSwap",
     67250.00, 67489.50, 245_000.0, 52.80, 300, RiskTier.LOW, True, True),
    ("MATIC/USDC", "Polygon", "Ethereum", "QuickSwap", "Uniswap V3",
     0.8945, 0.9012, 45_000.0, 38.20, 90, RiskTier.HIGH, False, False),
    ("ARB/USDC", "Arbitrum", "Optimism", "Camelot", "Velodrome",
     1.2456, 1.2523, 78_000.0, 18.90, 150, RiskTier.MEDIUM, False, True),
]


def seed_opportunities(calculator: ProfitCalculator | None = None) -> list[Opportunity]:
    """
    Build the sample opportunity set with profit fields derived from prices.

    Args:
        calculator: Calculator used to derive profit fields.

    Returns:
        Fresh Opportunity records with ids opp-1 .. opp-N.
    """
    calculator = calculator or ProfitCalculator()
    opportunities = []

    for i, row in enumerate(SAMPLE_OPPORTUNITIES, start=1):
        (pair, src_chain, tgt_chain, src_venue, tgt_venue, src_price, tgt_price,
         liquidity, gas, window, risk, trending, executable) = row
        fields = calculator.profit_fields(src_price, tgt_price, liquidity)
        opportunities.append(
            Opportunity(
                id=f"opp-{i}",
                token_pair=pair,
                source_chain=src_chain,
                target_chain=tgt_chain,
                source_venue=src_venue,
                target_venue=tgt_venue,
                source_price=src_price,
                target_price=tgt_price,
                potential_profit=fields.potential_profit,
                profit_percentage=fields.profit_percentage,
                liquidity=liquidity,
                estimated_gas=gas,
                time_window=window,
                risk=risk,
                trending=trending,
                executable=executable,
            )
        )

    return opportunities


class InMemoryOpportunityStore:
    """
    Opportunity store keyed by opportunity id.

    Features:
    - Copy-on-read so snapshots are isolated from later writes
    - Write counters for backpressure assertions
    - Availability switch to exercise upstream failures
    """

    def __init__(self, opportunities: list[Opportunity] | None = None) -> None:
        """
        Initialize store.

        Args:
            opportunities: Initial records.
        """
        self._records: dict[str, Opportunity] = {o.id: o for o in (opportunities or [])}
        self._lock = asyncio.Lock()
        self._price_writes = 0
        self._condition_writes = 0
        self._available = True

    def _ensure_available(self) -> None:
        if not self._available:
            raise UpstreamUnavailableError("Opportunity store is unavailable")

    async def list_executable(self) -> list[Opportunity]:
        """Return copies of all executable opportunities."""
        self._ensure_available()
        async with self._lock:
            return [replace(o) for o in self._records.values() if o.executable]

    async def apply_update(self, update: OpportunityUpdate) -> None:
        """Persist refreshed price and profit fields."""
        self._ensure_available()
        async with self._lock:
            record = self._records.get(update.opportunity_id)
            if record is None:
                raise KeyError(f"Unknown opportunity: {update.opportunity_id}")

            record.source_price = update.source_price
            record.target_price = update.target_price
            record.potential_profit = update.potential_profit
            record.profit_percentage = update.profit_percentage
            record.last_updated = update.last_updated
            self._price_writes += 1

    async def apply_conditions(self, update: ConditionsUpdate) -> None:
        """Persist refreshed market condition fields."""
        self._ensure_available()
        async with self._lock:
            record = self._records.get(update.opportunity_id)
            if record is None:
                raise KeyError(f"Unknown opportunity: {update.opportunity_id}")

            record.liquidity = update.liquidity
            record.potential_profit = update.potential_profit
            record.time_window = update.time_window
            record.trending = update.trending
            record.last_updated = update.last_updated
            self._condition_writes += 1

    def get(self, opportunity_id: str) -> Opportunity | None:
        """Get a copy of one record."""
        record = self._records.get(opportunity_id)
        return replace(record) if record else None

    def all(self) -> list[Opportunity]:
        """Get copies of every record, executable or not."""
        return [replace(o) for o in self._records.values()]

    def set_available(self, available: bool) -> None:
        """Toggle simulated availability."""
        self._available = available
        logger.debug(f"Opportunity store available={available}")

    @property
    def price_writes(self) -> int:
        """Number of price updates persisted."""
        return self._price_writes

    @property
    def condition_writes(self) -> int:
        """Number of market condition updates persisted."""
        return self._condition_writes

    @property
    def size(self) -> int:
        """Number of stored records."""
        return len(self._records)
