"""Telemetry module for logging and metrics."""

from chainarb.telemetry.logger import AsyncLogger, setup_logging
from chainarb.telemetry.metrics import MetricsCollector


__all__ = [
    "AsyncLogger",
    "MetricsCollector",
    "setup_logging",
]
