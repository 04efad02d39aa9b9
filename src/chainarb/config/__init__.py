"""Configuration module for the valuation and allocation engines."""

from chainarb.config.constants import (
    DEFAULT_MATERIALITY_THRESHOLD,
    DEFAULT_PARTICIPATION_FACTOR,
    DEFAULT_SETTLEMENT_DELAY_S,
    DEFAULT_VALUATION_INTERVAL_S,
)
from chainarb.config.settings import Settings, get_settings


__all__ = [
    "Settings",
    "get_settings",
    "DEFAULT_MATERIALITY_THRESHOLD",
    "DEFAULT_PARTICIPATION_FACTOR",
    "DEFAULT_SETTLEMENT_DELAY_S",
    "DEFAULT_VALUATION_INTERVAL_S",
]
