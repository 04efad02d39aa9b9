"""
Opportunity valuation engine.

Periodically refreshes prices for every executable opportunity,
recomputes profitability, and persists only material changes.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from chainarb.config.constants import (
    DEFAULT_MARKET_CONDITIONS_EVERY,
    DEFAULT_ORACLE_TIMEOUT_S,
    DEFAULT_VALUATION_INTERVAL_S,
)
from chainarb.config.settings import Settings
from chainarb.core.errors import ChainArbError, OperationTimeoutError, UpstreamUnavailableError
from chainarb.core.types import Opportunity, OpportunityStore, PriceOracle
from chainarb.telemetry.metrics import MetricsCollector
from chainarb.utils.time import LatencyTimer, utc_now
from chainarb.valuation.calculator import ProfitCalculator
from chainarb.valuation.conditions import MarketConditionsUpdater


logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    """Outcome of one reconciliation pass."""

    examined: int = 0
    updated: int = 0
    unchanged: int = 0
    failed: int = 0
    errors: dict[str, str] = field(default_factory=dict)
    conditions_updated: int = 0
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def duration_ms(self) -> float:
        """Wall time of the pass."""
        if self.started_at is None or self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds() * 1000


@dataclass(frozen=True)
class ValuationStatus:
    """Snapshot of the scheduler state."""

    is_running: bool
    tick_in_progress: bool
    ticks_completed: int
    interval_s: float | None
    last_report: ReconcileReport | None


class ValuationEngine:
    """
    Scheduler that keeps opportunity prices and profit fields current.

    Ticks are single-flight: at most one tick runs at a time. A manual
    ``trigger_update()`` issued while a tick is running waits for that
    tick and returns its report instead of starting a second one.
    """

    def __init__(
        self,
        store: OpportunityStore,
        oracle: PriceOracle,
        calculator: ProfitCalculator | None = None,
        oracle_timeout_s: float = DEFAULT_ORACLE_TIMEOUT_S,
        conditions: MarketConditionsUpdater | None = None,
        conditions_every: int = DEFAULT_MARKET_CONDITIONS_EVERY,
        metrics: MetricsCollector | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize valuation engine.

        Args:
            store: Storage collaborator holding opportunities.
            oracle: Price source.
            calculator: Profit calculator (participation factor, materiality).
            oracle_timeout_s: Timeout applied to every price fetch.
            conditions: Optional market conditions pass.
            conditions_every: Run the conditions pass every N ticks.
            metrics: Optional metrics collector.
            clock: Source of update timestamps.
        """
        self._store = store
        self._oracle = oracle
        self._calculator = calculator or ProfitCalculator()
        self._oracle_timeout_s = oracle_timeout_s
        self._conditions = conditions
        self._conditions_every = conditions_every
        self._metrics = metrics
        self._clock = clock

        self._lock = asyncio.Lock()
        self._loop_task: asyncio.Task[None] | None = None
        self._tick_task: asyncio.Task[ReconcileReport] | None = None
        self._interval_s: float | None = None
        self._running = False
        self._ticks_completed = 0
        self._last_report: ReconcileReport | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: OpportunityStore,
        oracle: PriceOracle,
        metrics: MetricsCollector | None = None,
    ) -> "ValuationEngine":
        """Build an engine configured from application settings."""
        calculator = ProfitCalculator(
            participation_factor=settings.participation_factor,
            materiality_threshold=settings.materiality_threshold,
        )
        return cls(
            store=store,
            oracle=oracle,
            calculator=calculator,
            oracle_timeout_s=settings.oracle_timeout_s,
            conditions=MarketConditionsUpdater(calculator),
            conditions_every=settings.market_conditions_every,
            metrics=metrics,
        )

    # =========================================================================
    # Reconciliation
    # =========================================================================

    async def _fetch_price(self, pair: str, venue: str, chain: str) -> float:
        """Fetch one price under the per-call timeout."""
        try:
            return await asyncio.wait_for(
                self._oracle.price(pair, venue, chain),
                timeout=self._oracle_timeout_s,
            )
        except OperationTimeoutError:
            raise
        except TimeoutError as e:
            raise OperationTimeoutError(
                f"Price fetch timed out after {self._oracle_timeout_s}s "
                f"for {pair}@{venue}/{chain}",
                timeout_s=self._oracle_timeout_s,
            ) from e

    async def _reconcile_one(self, opportunity: Opportunity) -> bool:
        """
        Refresh a single opportunity.

        Returns:
            True if an update was written.
        """
        source_price = await self._fetch_price(
            opportunity.token_pair, opportunity.source_venue, opportunity.source_chain
        )
        target_price = await self._fetch_price(
            opportunity.token_pair, opportunity.target_venue, opportunity.target_chain
        )

        update = self._calculator.reprice(opportunity, source_price, target_price, self._clock())
        if update is None:
            return False

        await self._store.apply_update(update)
        logger.debug(
            f"Repriced {opportunity.id} {opportunity.token_pair}: "
            f"source={source_price:.6f} target={target_price:.6f} "
            f"profit={update.profit_percentage:.4f}%"
        )
        return True

    async def reconcile(self) -> ReconcileReport:
        """
        Refresh every executable opportunity once.

        Failures are isolated per opportunity; only a failure to read the
        opportunity list aborts the pass.

        Raises:
            UpstreamUnavailableError: If the store cannot be read.
        """
        async with self._lock:
            report = ReconcileReport(started_at=self._clock())

            try:
                opportunities = await self._store.list_executable()
            except ChainArbError:
                raise
            except Exception as e:
                raise UpstreamUnavailableError(f"Failed to load opportunities: {e}") from e

            for opportunity in opportunities:
                report.examined += 1
                try:
                    if await self._reconcile_one(opportunity):
                        report.updated += 1
                    else:
                        report.unchanged += 1
                except ChainArbError as e:
                    report.failed += 1
                    report.errors[opportunity.id] = e.message
                    logger.warning(f"Skipping {opportunity.id} this tick: {e.message}")
                    if self._metrics:
                        self._metrics.increment_counter(f"reconcile_{e.kind.value}")
                except Exception as e:
                    report.failed += 1
                    report.errors[opportunity.id] = str(e)
                    logger.error(f"Unexpected error reconciling {opportunity.id}: {e}")

            report.finished_at = self._clock()

        if self._metrics:
            self._metrics.record_reconcile(
                examined=report.examined,
                writes=report.updated,
                unchanged=report.unchanged,
                failures=report.failed,
            )

        logger.info(
            f"Reconciled {report.examined} opportunities: "
            f"updated={report.updated} unchanged={report.unchanged} failed={report.failed}"
        )
        return report

    # =========================================================================
    # Scheduling
    # =========================================================================

    async def _tick(self) -> ReconcileReport:
        """Run one scheduled tick: reconciliation plus the periodic conditions pass."""
        with LatencyTimer() as timer:
            report = await self.reconcile()

            if (
                self._conditions is not None
                and self._conditions_every > 0
                and self._ticks_completed % self._conditions_every == 0
            ):
                async with self._lock:
                    report.conditions_updated = await self._conditions.run(self._store)

        self._ticks_completed += 1
        self._last_report = report
        if self._metrics:
            self._metrics.record_latency("reconcile_tick", timer.latency_ms)
        return report

    def _ensure_tick(self) -> asyncio.Task[ReconcileReport]:
        """Return the in-flight tick, starting one if none is running."""
        if self._tick_task is None or self._tick_task.done():
            self._tick_task = asyncio.create_task(self._tick())
        return self._tick_task

    async def _run_loop(self, interval_s: float) -> None:
        """Tick forever at the configured interval."""
        while self._running:
            try:
                await self._ensure_tick()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Reconciliation tick failed, retrying next tick: {e}")

            await asyncio.sleep(interval_s)

    def start(self, interval_s: float = DEFAULT_VALUATION_INTERVAL_S) -> None:
        """
        Start periodic reconciliation as a background task.

        The first tick runs immediately. Must be called from a running loop.
        """
        if interval_s <= 0:
            raise ValueError(f"interval_s must be positive, got {interval_s}")

        if self._running:
            logger.info("Valuation engine is already running")
            return

        self._running = True
        self._interval_s = interval_s
        self._loop_task = asyncio.create_task(self._run_loop(interval_s))
        logger.info(f"Valuation engine started with {interval_s}s interval")

    async def stop(self) -> None:
        """Stop the scheduler, cancelling any tick in progress."""
        if not self._running:
            logger.info("Valuation engine is not running")
            return

        self._running = False

        for task in (self._loop_task, self._tick_task):
            if task is not None and not task.done():
                task.cancel()

        for task in (self._loop_task, self._tick_task):
            if task is None:
                continue
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.debug(f"Tick ended with error during shutdown: {e}")

        self._loop_task = None
        self._tick_task = None
        logger.info("Valuation engine stopped")

    async def trigger_update(self) -> ReconcileReport:
        """
        Run a tick now, or wait for the tick already in progress.

        Returns:
            Report of the tick that ran (or was running).
        """
        if self._tick_task is not None and not self._tick_task.done():
            logger.info("Tick already in progress; waiting for it to finish")
        else:
            logger.info("Triggering manual price update")

        return await asyncio.shield(self._ensure_tick())

    def get_status(self) -> ValuationStatus:
        """Get a snapshot of the scheduler state."""
        return ValuationStatus(
            is_running=self._running,
            tick_in_progress=self._tick_task is not None and not self._tick_task.done(),
            ticks_completed=self._ticks_completed,
            interval_s=self._interval_s,
            last_report=self._last_report,
        )

    @property
    def is_running(self) -> bool:
        """Check if the scheduler is running."""
        return self._running

    @property
    def calculator(self) -> ProfitCalculator:
        """Get the profit calculator."""
        return self._calculator
