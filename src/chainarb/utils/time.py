"""
Time utilities.

Provides millisecond timestamps for latency measurement and
timezone-aware datetimes for record stamping.
"""

import time
from datetime import UTC, datetime


def get_timestamp_ms() -> int:
    """
    Get current timestamp in milliseconds.

    Returns:
        Current Unix timestamp in milliseconds.
    """
    return time.time_ns() // 1_000_000


def utc_now() -> datetime:
    """Get the current time as an aware UTC datetime."""
    return datetime.now(tz=UTC)


def format_duration_ms(duration_ms: float) -> str:
    """
    Format a duration in milliseconds for human-readable display.

    Args:
        duration_ms: Duration in milliseconds.

    Returns:
        Formatted duration string.

    Examples:
        >>> format_duration_ms(500)
        '500ms'
        >>> format_duration_ms(1500)
        '1.50s'
    """
    if duration_ms < 1000:
        return f"{duration_ms:.0f}ms"
    return f"{duration_ms / 1000:.2f}s"


class LatencyTimer:
    """
    Context manager for measuring operation latency.

    Example:
        >>> with LatencyTimer() as timer:
        ...     do_something()
        >>> print(f"Latency: {timer.latency_ms}ms")
    """

    __slots__ = ("start_ms", "end_ms", "latency_ms")

    def __init__(self) -> None:
        self.start_ms: int = 0
        self.end_ms: int = 0
        self.latency_ms: int = 0

    def __enter__(self) -> "LatencyTimer":
        self.start_ms = get_timestamp_ms()
        return self

    def __exit__(self, *args: object) -> None:
        self.end_ms = get_timestamp_ms()
        self.latency_ms = self.end_ms - self.start_ms
