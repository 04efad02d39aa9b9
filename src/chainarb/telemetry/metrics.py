"""
Metrics collection for the valuation and allocation engines.

Tracks latencies, counters, and per-engine outcome statistics
with in-memory storage.
"""

import time
from collections import deque
from dataclasses import dataclass
from decimal import Decimal


@dataclass
class LatencyStats:
    """Aggregated latency statistics."""

    min_ms: int = 0
    max_ms: int = 0
    avg_ms: float = 0.0
    p50_ms: int = 0
    p95_ms: int = 0
    p99_ms: int = 0
    count: int = 0


@dataclass
class ValuationStats:
    """Reconciliation outcome counts."""

    ticks: int = 0
    opportunities_examined: int = 0
    writes: int = 0
    unchanged: int = 0
    failures: int = 0

    @property
    def write_ratio(self) -> float:
        """Share of examined opportunities that produced a write."""
        return self.writes / self.opportunities_examined if self.opportunities_examined else 0.0


@dataclass
class AllocationStats:
    """Allocation outcome counts."""

    requests: int = 0
    succeeded: int = 0
    failed: int = 0
    timed_out: int = 0
    total_collateral: float = 0.0

    @property
    def success_rate(self) -> float:
        """Share of requests that produced a successful allocation."""
        return self.succeeded / self.requests if self.requests else 0.0


class MetricsCollector:
    """
    Collects and aggregates engine metrics.

    Features:
    - Rolling window latency tracking
    - Counter-based event tracking
    - Reconciliation and allocation outcome stats
    """

    def __init__(
        self,
        latency_window_size: int = 1000,
    ) -> None:
        """
        Initialize metrics collector.

        Args:
            latency_window_size: Number of samples to keep for latency stats.
        """
        self._window_size = latency_window_size
        self._latencies: dict[str, deque[int]] = {}
        self._counters: dict[str, int] = {}
        self._valuation = ValuationStats()
        self._allocation = AllocationStats()
        self._start_time = time.time()

    def record_latency(self, name: str, latency_ms: int) -> None:
        """
        Record a latency measurement.

        Args:
            name: Metric name (e.g., "reconcile_tick", "allocate").
            latency_ms: Latency in milliseconds.
        """
        if name not in self._latencies:
            self._latencies[name] = deque(maxlen=self._window_size)

        self._latencies[name].append(latency_ms)

    def increment_counter(self, name: str, value: int = 1) -> None:
        """Increment a counter."""
        self._counters[name] = self._counters.get(name, 0) + value

    def get_counter(self, name: str) -> int:
        """Get counter value."""
        return self._counters.get(name, 0)

    def record_reconcile(self, examined: int, writes: int, unchanged: int, failures: int) -> None:
        """Record the outcome of one reconciliation tick."""
        self._valuation.ticks += 1
        self._valuation.opportunities_examined += examined
        self._valuation.writes += writes
        self._valuation.unchanged += unchanged
        self._valuation.failures += failures

    def record_allocation(
        self, success: bool, collateral: float | Decimal, timed_out: bool = False
    ) -> None:
        """
        Record an allocation result.

        Args:
            success: Whether the allocation succeeded.
            collateral: Requested collateral amount.
            timed_out: Whether the failure was a deadline expiry.
        """
        self._allocation.requests += 1
        if success:
            self._allocation.succeeded += 1
            self._allocation.total_collateral += float(collateral)
        else:
            self._allocation.failed += 1
            if timed_out:
                self._allocation.timed_out += 1

    def get_latency_stats(self, name: str) -> LatencyStats:
        """
        Get latency statistics for a metric.

        Args:
            name: Metric name.

        Returns:
            LatencyStats with aggregated values.
        """
        samples = self._latencies.get(name)
        if not samples:
            return LatencyStats()

        sorted_samples = sorted(samples)
        n = len(sorted_samples)

        return LatencyStats(
            min_ms=sorted_samples[0],
            max_ms=sorted_samples[-1],
            avg_ms=sum(sorted_samples) / n,
            p50_ms=sorted_samples[n // 2],
            p95_ms=sorted_samples[int(n * 0.95)],
            p99_ms=sorted_samples[int(n * 0.99)] if n > 1 else sorted_samples[-1],
            count=n,
        )

    @property
    def valuation_stats(self) -> ValuationStats:
        """Get reconciliation statistics."""
        return self._valuation

    @property
    def allocation_stats(self) -> AllocationStats:
        """Get allocation statistics."""
        return self._allocation

    @property
    def uptime_seconds(self) -> float:
        """Get uptime in seconds."""
        return time.time() - self._start_time

    def to_dict(self) -> dict[str, object]:
        """
        Export all metrics as a dict.

        Returns:
            Dict representation of all metrics.
        """
        return {
            "uptime_seconds": self.uptime_seconds,
            "counters": dict(self._counters),
            "latencies": {
                name: {
                    "min": stats.min_ms,
                    "max": stats.max_ms,
                    "avg": stats.avg_ms,
                    "p50": stats.p50_ms,
                    "p99": stats.p99_ms,
                    "count": stats.count,
                }
                for name, stats in ((n, self.get_latency_stats(n)) for n in self._latencies)
            },
            "valuation": {
                "ticks": self._valuation.ticks,
                "examined": self._valuation.opportunities_examined,
                "writes": self._valuation.writes,
                "unchanged": self._valuation.unchanged,
                "failures": self._valuation.failures,
            },
            "allocation": {
                "requests": self._allocation.requests,
                "succeeded": self._allocation.succeeded,
                "failed": self._allocation.failed,
                "timed_out": self._allocation.timed_out,
                "total_collateral": self._allocation.total_collateral,
            },
        }

    def reset(self) -> None:
        """Reset all metrics."""
        self._latencies.clear()
        self._counters.clear()
        self._valuation = ValuationStats()
        self._allocation = AllocationStats()
        self._start_time = time.time()
