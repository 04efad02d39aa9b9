"""
Reference constants for valuation and collateral allocation.

This module contains all hardcoded values used throughout the engine.
Values are organized by category for easy maintenance and auditing.
"""

from typing import Final


# =============================================================================
# Valuation
# =============================================================================

# Fraction of quoted liquidity an opportunity's profit estimate assumes is used
DEFAULT_PARTICIPATION_FACTOR: Final[float] = 0.1

# Minimum fractional source price move before a write is persisted (0.01%)
DEFAULT_MATERIALITY_THRESHOLD: Final[float] = 0.0001

# Reconciliation cadence (seconds)
DEFAULT_VALUATION_INTERVAL_S: Final[float] = 30.0

# Per-call price fetch timeout (seconds)
DEFAULT_ORACLE_TIMEOUT_S: Final[float] = 5.0

# Market conditions pass runs once every N ticks (~2 minutes at 30s)
DEFAULT_MARKET_CONDITIONS_EVERY: Final[int] = 4

# Market conditions pass parameters
TRENDING_PROBABILITY: Final[float] = 0.3
CONDITIONS_UPDATE_PROBABILITY: Final[float] = 0.2
LIQUIDITY_DRIFT_RANGE: Final[tuple[float, float]] = (0.95, 1.05)
TIME_WINDOW_DRIFT_S: Final[float] = 15.0
MIN_TIME_WINDOW_S: Final[int] = 60


# =============================================================================
# Simulated Price Feed
# =============================================================================

# Jitter amplitude: 1 + (u - 0.5) * 0.002 gives +/-0.1%
PRICE_JITTER: Final[float] = 0.002

# Price used for symbols missing from the base table
DEFAULT_BASE_PRICE: Final[float] = 100.0

BASE_PRICES: Final[dict[str, float]] = {
    "ETH": 2650.0,
    "BTC": 67250.0,
    "USDC": 1.0,
    "USDT": 1.0,
    "MATIC": 0.895,
    "ARB": 1.245,
    "LINK": 18.45,
    "UNI": 8.95,
    "AAVE": 142.30,
    "CRV": 0.68,
    "COMP": 52.80,
}

VENUE_MULTIPLIERS: Final[dict[str, float]] = {
    "Uniswap V3": 1.0,
    "Uniswap V2": 0.9995,
    "QuickSwap": 1.0005,
    "SushiSwap": 0.999,
    "PancakeSwap": 1.001,
    "Camelot": 0.9985,
    "Velodrome": 1.0015,
    "BaseSwap": 0.998,
    "Curve": 1.0002,
}

CHAIN_MULTIPLIERS: Final[dict[str, float]] = {
    "Ethereum": 1.0,
    "Polygon": 0.9995,
    "Arbitrum": 1.0003,
    "Optimism": 0.9998,
    "BSC": 1.0008,
    "Base": 0.9992,
}


# =============================================================================
# Collateral Allocation
# =============================================================================

MIN_COLLATERAL_AMOUNT: Final[float] = 100.0
MAX_COLLATERAL_AMOUNT: Final[float] = 50_000.0

# Peers that receive a collateral deposit / peers reported back
MAX_DEPOSIT_PEERS: Final[int] = 2
MAX_REPORTED_PEERS: Final[int] = 3

# State channel collateral lock (30 days)
CHANNEL_LOCK_SECONDS: Final[int] = 30 * 24 * 60 * 60

# Collateral ratio below which a counterparty may call margin
MARGIN_CALL_THRESHOLDS: Final[dict[str, float]] = {
    "high": 0.70,
    "medium": 0.80,
    "low": 0.85,
}

# Margin call response window (24 hours)
MARGIN_CALL_DEADLINE_SECONDS: Final[int] = 24 * 60 * 60

# Arbitrage splits capital between the collateral token and a stablecoin
ARBITRAGE_PRIMARY_SHARE: Final[str] = "0.6"
ARBITRAGE_STABLE_SHARE: Final[str] = "0.4"
PREFERRED_STABLECOIN: Final[str] = "USDC"

# Display precision for token amounts
ALLOCATION_DECIMALS: Final[int] = 6

# Simulated state channel handshake (seconds)
DEFAULT_SETTLEMENT_DELAY_S: Final[float] = 2.0


# =============================================================================
# Fees & Execution Priority
# =============================================================================

BASE_GAS: Final[int] = 21_000
STATE_CHANNEL_GAS: Final[int] = 150_000
WEI_DECIMALS: Final[int] = 18

# Flat network fee estimate (ETH)
NETWORK_FEE_ETH: Final[str] = "0.025"

# Protocol fee (0.1% of requested collateral)
PROTOCOL_FEE_RATE: Final[str] = "0.001"

FAST_LANE_PRIORITY_BOOST: Final[float] = 2.5
STANDARD_PRIORITY_BOOST: Final[float] = 1.2
FAST_LANE_CONFIRMATION_S: Final[int] = 30
STANDARD_CONFIRMATION_S: Final[int] = 60


# =============================================================================
# Logging & Telemetry
# =============================================================================

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

# Maximum log queue size
MAX_LOG_QUEUE_SIZE: Final[int] = 10_000
