"""Market data module: price oracles and the opportunity store."""

from chainarb.market.http_oracle import HttpPriceOracle
from chainarb.market.oracle import SimulatedPriceOracle
from chainarb.market.store import InMemoryOpportunityStore, seed_opportunities


__all__ = [
    "HttpPriceOracle",
    "InMemoryOpportunityStore",
    "SimulatedPriceOracle",
    "seed_opportunities",
]
