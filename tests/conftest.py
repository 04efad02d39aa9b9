"""
Pytest configuration and shared fixtures.

Provides reusable test fixtures for all test modules.
"""

from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from chainarb.allocation import AllocationEngine, SettlementSimulator
from chainarb.core.types import AllocationRequest, Opportunity, RiskTier, Strategy
from chainarb.market import InMemoryOpportunityStore, SimulatedPriceOracle, seed_opportunities
from chainarb.telemetry.metrics import MetricsCollector
from chainarb.valuation import ProfitCalculator


FIXED_NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)
FIXED_NOW_MS = 1_704_110_400_000


# =============================================================================
# Valuation Fixtures
# =============================================================================


@pytest.fixture
def calculator() -> ProfitCalculator:
    """Calculator with default participation factor and threshold."""
    return ProfitCalculator()


@pytest.fixture
def opportunities(calculator: ProfitCalculator) -> list[Opportunity]:
    """Sample opportunity set (four executable, one not)."""
    return seed_opportunities(calculator)


@pytest.fixture
def store(opportunities: list[Opportunity]) -> InMemoryOpportunityStore:
    """In-memory store seeded with the sample opportunities."""
    return InMemoryOpportunityStore(opportunities)


@pytest.fixture
def flat_oracle() -> SimulatedPriceOracle:
    """Simulated oracle without jitter."""
    return SimulatedPriceOracle(jitter=0.0)


@pytest.fixture
def metrics() -> MetricsCollector:
    """Fresh metrics collector."""
    return MetricsCollector()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


# =============================================================================
# Allocation Fixtures
# =============================================================================


@pytest.fixture
def make_request() -> Callable[..., AllocationRequest]:
    """Factory for allocation requests with sensible defaults."""

    def _make(**overrides: object) -> AllocationRequest:
        fields: dict[str, object] = {
            "user_address": "0x1111111111111111111111111111111111111111",
            "bot_name": "test-bot",
            "strategy": Strategy.ARBITRAGE,
            "trading_pairs": ["WETH/USDC"],
            "supported_chains": ["Ethereum", "Polygon"],
            "collateral_amount": 1000.0,
            "preferred_collateral_token": "USDC",
            "risk_tolerance": RiskTier.MEDIUM,
        }
        fields.update(overrides)
        return AllocationRequest(**fields)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def allocation_engine(metrics: MetricsCollector) -> AllocationEngine:
    """Allocation engine with instant settlement and a fixed clock."""
    return AllocationEngine(
        settlement=SettlementSimulator(delay_s=0.0),
        metrics=metrics,
        clock_ms=lambda: FIXED_NOW_MS,
    )
