"""
Type definitions for the valuation and allocation engines.

This module contains the dataclasses, enums and Protocol definitions
used throughout the application. Records are declared with slots=True,
and the ones shared across concurrent callers are frozen.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Protocol

import orjson

from chainarb.core.errors import ChainArbError, ErrorKind


# =============================================================================
# Enums
# =============================================================================


class RiskTier(str, Enum):
    """Risk classification for opportunities and allocation requests."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Strategy(str, Enum):
    """Trading bot strategy."""

    ARBITRAGE = "arbitrage"
    DCA = "dca"
    GRID = "grid"


class AllocationStage(str, Enum):
    """Stages a single allocation request passes through."""

    VALIDATING = "validating"
    TOKEN_SELECTION = "token_selection"
    PEER_SELECTION = "peer_selection"
    PARTITIONING = "partitioning"
    FEE_ESTIMATION = "fee_estimation"
    SETTLING = "settling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# =============================================================================
# Opportunity Types
# =============================================================================


@dataclass(slots=True)
class Opportunity:
    """
    Tracked cross-venue price discrepancy for a token pair.

    potential_profit and profit_percentage are derived from the current
    prices and liquidity; only the valuation engine and the market
    conditions pass write them.
    """

    id: str
    token_pair: str
    source_chain: str
    target_chain: str
    source_venue: str
    target_venue: str
    source_price: float
    target_price: float
    potential_profit: float
    profit_percentage: float
    liquidity: float
    estimated_gas: float
    time_window: int
    risk: RiskTier
    trending: bool = False
    executable: bool = True
    last_updated: datetime | None = None


@dataclass(slots=True, frozen=True)
class OpportunityUpdate:
    """Price and profit fields written back for one opportunity."""

    opportunity_id: str
    source_price: float
    target_price: float
    potential_profit: float
    profit_percentage: float
    last_updated: datetime


@dataclass(slots=True, frozen=True)
class ConditionsUpdate:
    """Market condition fields written by the low-frequency pass."""

    opportunity_id: str
    liquidity: float
    potential_profit: float
    time_window: int
    trending: bool
    last_updated: datetime


# =============================================================================
# Registry Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class SupportedToken:
    """Token usable for trading or state channel collateral on one chain."""

    symbol: str
    name: str
    address: str
    decimals: int
    chain: str
    chain_id: int
    is_collateral: bool
    coingecko_id: str | None = None


@dataclass(slots=True, frozen=True)
class Peer:
    """Counterparty node able to open state channels."""

    address: str
    reputation: int
    chains: frozenset[str]
    liquidity_pools: frozenset[str]

    def supports_any_chain(self, chains: list[str] | tuple[str, ...]) -> bool:
        """Check whether the peer advertises at least one of the chains."""
        return any(chain in self.chains for chain in chains)

    def has_any_pool(self, pairs: list[str] | tuple[str, ...]) -> bool:
        """Check whether the peer offers liquidity for at least one pair."""
        return any(pair in self.liquidity_pools for pair in pairs)


# =============================================================================
# Allocation Types
# =============================================================================


@dataclass(slots=True)
class AllocationRequest:
    """Capital request for a trading bot."""

    user_address: str
    bot_name: str
    strategy: Strategy
    trading_pairs: list[str]
    supported_chains: list[str]
    collateral_amount: float
    preferred_collateral_token: str
    risk_tolerance: RiskTier


@dataclass(slots=True, frozen=True)
class CollateralDeposit:
    """
    Collateral locked against one counterparty to back a state channel.

    Amounts are held in integer base units of the token so a batch sums
    exactly to the requested collateral.
    """

    token: SupportedToken
    amount_units: int
    user_address: str
    counterparty_address: str
    channel_id: str
    lock_expiry: int
    margin_call_threshold: float

    @property
    def amount(self) -> Decimal:
        """Deposit amount in whole token units."""
        return Decimal(self.amount_units).scaleb(-self.token.decimals)


@dataclass(slots=True, frozen=True)
class TradingAllocation:
    """Intended on-exchange capital split for one token."""

    token: SupportedToken
    amount: Decimal
    usd_value: float


@dataclass(slots=True, frozen=True)
class FeeEstimate:
    """Gas and protocol fee estimate for opening the channels."""

    gas_units: int
    gas_estimate: Decimal
    network_fee: Decimal
    protocol_fee: Decimal


@dataclass(slots=True, frozen=True)
class ExecutionOptimizations:
    """Execution priority settings derived from strategy and risk."""

    enable_fast_lane: bool
    priority_fee_boost: float
    batch_transactions: bool
    expected_confirmation_time: int


@dataclass(slots=True)
class AllocationResult:
    """Outcome of a single allocation request."""

    success: bool
    channel_id: str | None = None
    deposits: tuple[CollateralDeposit, ...] = ()
    trading_allocation: tuple[TradingAllocation, ...] = ()
    peers: tuple[Peer, ...] = ()
    fees: FeeEstimate | None = None
    optimizations: ExecutionOptimizations | None = None
    error: str = ""
    error_kind: ErrorKind | None = None
    failed_stage: AllocationStage | None = None
    started_at_ms: int = 0
    finished_at_ms: int = 0

    @classmethod
    def failure(
        cls,
        error: ChainArbError,
        stage: AllocationStage,
        started_at_ms: int = 0,
        finished_at_ms: int = 0,
    ) -> "AllocationResult":
        """Build a failed result from a classified error."""
        return cls(
            success=False,
            error=error.message,
            error_kind=error.kind,
            failed_stage=stage,
            started_at_ms=started_at_ms,
            finished_at_ms=finished_at_ms,
        )

    @property
    def total_deposited(self) -> Decimal:
        """Sum of all deposit amounts in whole token units."""
        return sum((d.amount for d in self.deposits), Decimal(0))

    @property
    def latency_ms(self) -> int:
        """Wall time spent producing the result."""
        return self.finished_at_ms - self.started_at_ms

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dict."""
        if not self.success:
            return {
                "success": False,
                "error": self.error,
                "error_kind": self.error_kind.value if self.error_kind else None,
                "failed_stage": self.failed_stage.value if self.failed_stage else None,
            }

        return {
            "success": True,
            "channel_id": self.channel_id,
            "collateral_deposits": [
                {
                    "token_address": d.token.address,
                    "token_symbol": d.token.symbol,
                    "chain": d.token.chain,
                    "amount": str(d.amount),
                    "user_address": d.user_address,
                    "counterparty_address": d.counterparty_address,
                    "channel_id": d.channel_id,
                    "lock_expiry": d.lock_expiry,
                    "margin_call_threshold": d.margin_call_threshold,
                }
                for d in self.deposits
            ],
            "trading_allocation": [
                {
                    "token": a.token.symbol,
                    "chain": a.token.chain,
                    "amount": str(a.amount),
                    "usd_value": a.usd_value,
                }
                for a in self.trading_allocation
            ],
            "network_peers": [
                {
                    "address": p.address,
                    "reputation": p.reputation,
                    "chains": sorted(p.chains),
                    "liquidity_pools": sorted(p.liquidity_pools),
                }
                for p in self.peers
            ],
            "estimated_fees": (
                {
                    "gas_estimate": str(self.fees.gas_estimate),
                    "network_fee": str(self.fees.network_fee),
                    "protocol_fee": str(self.fees.protocol_fee),
                }
                if self.fees
                else None
            ),
            "optimizations": (
                {
                    "enable_fast_lane": self.optimizations.enable_fast_lane,
                    "priority_fee_boost": self.optimizations.priority_fee_boost,
                    "batch_transactions": self.optimizations.batch_transactions,
                    "expected_confirmation_time": self.optimizations.expected_confirmation_time,
                }
                if self.optimizations
                else None
            ),
        }

    def to_json(self) -> bytes:
        """Serialize with orjson."""
        return orjson.dumps(self.to_dict(), option=orjson.OPT_INDENT_2)


# =============================================================================
# Channel Health Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class ChannelHealth:
    """Collateral health snapshot for one state channel."""

    channel_id: str
    collateral_ratio: float
    margin_call_threshold: float
    is_healthy: bool
    checked_at: datetime


@dataclass(slots=True, frozen=True)
class MarginCall:
    """Request for additional collateral on an undercollateralized channel."""

    margin_call_id: str
    channel_id: str
    required_amount: float
    deadline: datetime
    status: str = "pending"


# =============================================================================
# Protocols (Interfaces)
# =============================================================================


class PriceOracle(Protocol):
    """Source of unit prices for a pair on a venue and chain."""

    async def price(self, pair: str, venue: str, chain: str) -> float:
        """Return the current positive unit price."""
        ...


class OpportunityStore(Protocol):
    """Storage collaborator holding tracked opportunities."""

    async def list_executable(self) -> list[Opportunity]:
        """Return all opportunities with executable=True."""
        ...

    async def apply_update(self, update: OpportunityUpdate) -> None:
        """Persist refreshed price and profit fields."""
        ...

    async def apply_conditions(self, update: ConditionsUpdate) -> None:
        """Persist refreshed market condition fields."""
        ...

