"""Utility functions for the valuation and allocation engines."""

from chainarb.utils.math import (
    fractional_change,
    from_base_units,
    quantize,
    safe_divide,
    to_base_units,
    to_decimal,
)
from chainarb.utils.time import (
    LatencyTimer,
    format_duration_ms,
    get_timestamp_ms,
    utc_now,
)


__all__ = [
    "LatencyTimer",
    "format_duration_ms",
    "fractional_change",
    "from_base_units",
    "get_timestamp_ms",
    "quantize",
    "safe_divide",
    "to_base_units",
    "to_decimal",
    "utc_now",
]
