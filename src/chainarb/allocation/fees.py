"""
Fee estimation and execution priority.

Both functions are pure; the figures are fixed estimates rather than
live gas quotes.
"""

from decimal import Decimal

from chainarb.config.constants import (
    BASE_GAS,
    FAST_LANE_CONFIRMATION_S,
    FAST_LANE_PRIORITY_BOOST,
    NETWORK_FEE_ETH,
    PROTOCOL_FEE_RATE,
    STANDARD_CONFIRMATION_S,
    STANDARD_PRIORITY_BOOST,
    STATE_CHANNEL_GAS,
    WEI_DECIMALS,
)
from chainarb.core.types import ExecutionOptimizations, FeeEstimate, RiskTier, Strategy
from chainarb.utils.math import from_base_units, quantize, to_decimal

# Protocol fee display precision
FEE_DECIMALS = 6


def estimate_fees(collateral_amount: float | Decimal, deposit_count: int) -> FeeEstimate:
    """
    Estimate the cost of opening ``deposit_count`` state channels.

    Example:
        >>> estimate_fees(1000, 2).protocol_fee
        Decimal('1.000000')
    """
    if deposit_count < 0:
        raise ValueError(f"deposit_count must be non-negative, got {deposit_count}")

    gas_units = (BASE_GAS + STATE_CHANNEL_GAS) * deposit_count
    return FeeEstimate(
        gas_units=gas_units,
        gas_estimate=from_base_units(gas_units, WEI_DECIMALS),
        network_fee=Decimal(NETWORK_FEE_ETH),
        protocol_fee=quantize(to_decimal(collateral_amount) * Decimal(PROTOCOL_FEE_RATE), FEE_DECIMALS),
    )


def derive_optimizations(strategy: Strategy, risk_tolerance: RiskTier) -> ExecutionOptimizations:
    """Execution priority settings: arbitrage and high-risk bots get the fast lane."""
    strategy = Strategy(strategy)
    fast_lane = strategy is Strategy.ARBITRAGE or RiskTier(risk_tolerance) is RiskTier.HIGH

    return ExecutionOptimizations(
        enable_fast_lane=fast_lane,
        priority_fee_boost=FAST_LANE_PRIORITY_BOOST if fast_lane else STANDARD_PRIORITY_BOOST,
        batch_transactions=strategy is not Strategy.ARBITRAGE,
        expected_confirmation_time=FAST_LANE_CONFIRMATION_S if fast_lane else STANDARD_CONFIRMATION_S,
    )
