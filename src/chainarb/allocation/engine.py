"""
Collateral allocation engine.

Turns a bot's capital request into state channel collateral deposits,
a trading allocation, fee estimates and execution priority settings.
Every request either fully succeeds or returns a structured failure;
partial allocations are never reported.
"""

import asyncio
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, replace
from decimal import Decimal

from chainarb.allocation.fees import derive_optimizations, estimate_fees
from chainarb.allocation.partition import partition_collateral
from chainarb.allocation.peers import PeerDirectory
from chainarb.allocation.settlement import SettlementSimulator
from chainarb.allocation.tokens import TokenRegistry
from chainarb.config.constants import (
    ALLOCATION_DECIMALS,
    ARBITRAGE_PRIMARY_SHARE,
    ARBITRAGE_STABLE_SHARE,
    MAX_COLLATERAL_AMOUNT,
    MAX_DEPOSIT_PEERS,
    MAX_REPORTED_PEERS,
    MIN_COLLATERAL_AMOUNT,
)
from chainarb.config.settings import Settings
from chainarb.core.errors import (
    ChainArbError,
    ErrorKind,
    OperationTimeoutError,
    UnsupportedConfigurationError,
    ValidationError,
)
from chainarb.core.types import (
    AllocationRequest,
    AllocationResult,
    AllocationStage,
    Peer,
    RiskTier,
    Strategy,
    SupportedToken,
    TradingAllocation,
)
from chainarb.telemetry.metrics import MetricsCollector
from chainarb.utils.math import quantize, to_decimal
from chainarb.utils.time import LatencyTimer, get_timestamp_ms


logger = logging.getLogger(__name__)


@dataclass
class _Progress:
    """Stage reached by an in-flight request."""

    stage: AllocationStage = AllocationStage.VALIDATING


class AllocationEngine:
    """
    Allocates bot capital across state channel counterparties.

    The engine holds no per-request state, so any number of
    ``allocate()`` calls may run concurrently.
    """

    def __init__(
        self,
        tokens: TokenRegistry | None = None,
        peers: PeerDirectory | None = None,
        settlement: SettlementSimulator | None = None,
        min_collateral: float = MIN_COLLATERAL_AMOUNT,
        max_collateral: float = MAX_COLLATERAL_AMOUNT,
        default_deadline_s: float | None = None,
        metrics: MetricsCollector | None = None,
        clock_ms: Callable[[], int] = get_timestamp_ms,
    ) -> None:
        """
        Initialize allocation engine.

        Args:
            tokens: Supported token registry.
            peers: Counterparty directory.
            settlement: State channel negotiator.
            min_collateral: Smallest accepted collateral amount.
            max_collateral: Largest accepted collateral amount.
            default_deadline_s: Deadline used when a request supplies none.
            metrics: Optional metrics collector.
            clock_ms: Source of millisecond timestamps.
        """
        if min_collateral > max_collateral:
            raise ValueError("min_collateral must be <= max_collateral")

        self._tokens = tokens if tokens is not None else TokenRegistry()
        self._peers = peers if peers is not None else PeerDirectory()
        self._settlement = settlement if settlement is not None else SettlementSimulator()
        self._min_collateral = min_collateral
        self._max_collateral = max_collateral
        self._default_deadline_s = default_deadline_s
        self._metrics = metrics
        self._clock_ms = clock_ms

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        metrics: MetricsCollector | None = None,
    ) -> "AllocationEngine":
        """Build an engine configured from application settings."""
        return cls(
            settlement=SettlementSimulator(settings.settlement_delay_s),
            min_collateral=settings.min_collateral,
            max_collateral=settings.max_collateral,
            default_deadline_s=settings.settlement_timeout_s,
            metrics=metrics,
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def supported_tokens(self, chain_filter: list[str] | None = None) -> list[SupportedToken]:
        """List tokens usable as collateral, optionally for some chains only."""
        return self._tokens.supported_tokens(chain_filter)

    def available_peers(self, chains: list[str], pairs: list[str] | None = None) -> list[Peer]:
        """List counterparties for the chains (and pairs), best reputation first."""
        return self._peers.find(chains, pairs)

    # =========================================================================
    # Pipeline Stages
    # =========================================================================

    def _validate(self, request: AllocationRequest) -> AllocationRequest:
        """Check request fields; return a copy with normalized enum values."""
        if not request.user_address or not request.bot_name:
            raise ValidationError("User address and bot name are required")

        amount = request.collateral_amount
        if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
            raise ValidationError(f"Collateral amount must be a number, got {amount!r}")
        if not (self._min_collateral <= amount <= self._max_collateral):
            raise ValidationError(
                f"Collateral amount must be between ${self._min_collateral:,.0f} "
                f"and ${self._max_collateral:,.0f}"
            )

        if not request.supported_chains:
            raise ValidationError("At least one supported chain must be specified")

        try:
            strategy = Strategy(request.strategy)
        except ValueError as e:
            raise ValidationError(f"Unknown strategy: {request.strategy}") from e

        try:
            risk_tolerance = RiskTier(request.risk_tolerance)
        except ValueError as e:
            raise ValidationError(f"Unknown risk tolerance: {request.risk_tolerance}") from e

        return replace(request, strategy=strategy, risk_tolerance=risk_tolerance)

    def _select_token(self, request: AllocationRequest) -> SupportedToken:
        token = self._tokens.select_collateral(
            request.preferred_collateral_token, request.supported_chains
        )
        if token is None:
            raise UnsupportedConfigurationError(
                f"Collateral token {request.preferred_collateral_token} "
                f"not supported on specified chains",
                capability="collateral_token",
            )
        return token

    def _select_peers(self, request: AllocationRequest) -> list[Peer]:
        peers = self._peers.find(request.supported_chains, request.trading_pairs)
        if not peers:
            raise UnsupportedConfigurationError(
                f"No network peers available for chains {', '.join(request.supported_chains)}",
                capability="network_peer",
            )
        return peers

    def _trading_allocation(
        self,
        request: AllocationRequest,
        token: SupportedToken,
    ) -> tuple[TradingAllocation, ...]:
        """Split capital: arbitrage pairs the collateral token with a stablecoin."""
        total = to_decimal(request.collateral_amount)

        def allocation(alloc_token: SupportedToken, share: Decimal) -> TradingAllocation:
            amount = quantize(total * share, ALLOCATION_DECIMALS)
            return TradingAllocation(token=alloc_token, amount=amount, usd_value=float(amount))

        if request.strategy is not Strategy.ARBITRAGE:
            return (allocation(token, Decimal(1)),)

        allocations = [allocation(token, Decimal(ARBITRAGE_PRIMARY_SHARE))]
        stablecoin = self._tokens.find_stablecoin(request.supported_chains)
        if stablecoin is not None:
            allocations.append(allocation(stablecoin, Decimal(ARBITRAGE_STABLE_SHARE)))
        else:
            logger.debug(f"No stablecoin on {request.supported_chains}; stable leg omitted")
        return tuple(allocations)

    async def _run(
        self,
        request: AllocationRequest,
        progress: _Progress,
        started_ms: int,
    ) -> AllocationResult:
        """Execute every stage in order, recording progress as it goes."""
        request = self._validate(request)

        progress.stage = AllocationStage.TOKEN_SELECTION
        token = self._select_token(request)

        progress.stage = AllocationStage.PEER_SELECTION
        peers = self._select_peers(request)

        progress.stage = AllocationStage.PARTITIONING
        deposits = partition_collateral(
            amount=to_decimal(request.collateral_amount),
            token=token,
            peers=peers[:MAX_DEPOSIT_PEERS],
            user_address=request.user_address,
            risk_tolerance=request.risk_tolerance,
            now_ms=self._clock_ms(),
            nonce=f"{request.bot_name}:{secrets.token_hex(16)}",
        )
        trading_allocation = self._trading_allocation(request, token)

        progress.stage = AllocationStage.FEE_ESTIMATION
        fees = estimate_fees(request.collateral_amount, len(deposits))
        optimizations = derive_optimizations(request.strategy, request.risk_tolerance)

        progress.stage = AllocationStage.SETTLING
        await self._settlement.negotiate(deposits)

        return AllocationResult(
            success=True,
            channel_id=deposits[0].channel_id,
            deposits=deposits,
            trading_allocation=trading_allocation,
            peers=tuple(peers[:MAX_REPORTED_PEERS]),
            fees=fees,
            optimizations=optimizations,
            started_at_ms=started_ms,
            finished_at_ms=self._clock_ms(),
        )

    # =========================================================================
    # Public API
    # =========================================================================

    async def allocate(
        self,
        request: AllocationRequest,
        deadline_s: float | None = None,
    ) -> AllocationResult:
        """
        Allocate collateral for a trading bot.

        Args:
            request: Capital request.
            deadline_s: Overall deadline; defaults to the engine's configured
                deadline, or none.

        Returns:
            A successful result, or a failure carrying the error kind and
            the stage that failed. Never raises for request-level errors.
        """
        deadline = deadline_s if deadline_s is not None else self._default_deadline_s
        progress = _Progress()
        started_ms = self._clock_ms()

        logger.info(
            f"Allocating {request.collateral_amount} for bot '{request.bot_name}' "
            f"({request.strategy}, risk={request.risk_tolerance})"
        )

        with LatencyTimer() as timer:
            try:
                if deadline is None:
                    result = await self._run(request, progress, started_ms)
                else:
                    result = await asyncio.wait_for(
                        self._run(request, progress, started_ms), timeout=deadline
                    )
            except TimeoutError as e:
                error = (
                    e
                    if isinstance(e, OperationTimeoutError)
                    else OperationTimeoutError(
                        f"Allocation deadline of {deadline}s exceeded during {progress.stage.value}",
                        timeout_s=deadline,
                    )
                )
                result = self._failure(error, progress, started_ms)
            except ChainArbError as e:
                result = self._failure(e, progress, started_ms)
            except Exception as e:
                logger.exception(f"Unexpected allocation error for bot '{request.bot_name}'")
                result = self._failure(
                    ChainArbError(f"Unexpected allocation error: {e}"), progress, started_ms
                )

        if self._metrics:
            self._metrics.record_allocation(
                success=result.success,
                collateral=request.collateral_amount,
                timed_out=result.error_kind is ErrorKind.TIMEOUT,
            )
            self._metrics.record_latency("allocation", timer.latency_ms)

        if result.success:
            logger.info(
                f"Allocated {result.total_deposited} {result.deposits[0].token.symbol} "
                f"across {len(result.deposits)} channels for bot '{request.bot_name}'"
            )
        return result

    def _failure(
        self,
        error: ChainArbError,
        progress: _Progress,
        started_ms: int,
    ) -> AllocationResult:
        logger.warning(
            f"Allocation failed at {progress.stage.value} ({error.kind.value}): {error.message}"
        )
        return AllocationResult.failure(
            error,
            progress.stage,
            started_at_ms=started_ms,
            finished_at_ms=self._clock_ms(),
        )
