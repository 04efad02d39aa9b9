"""
Application settings with environment variable support.

Uses Pydantic Settings for type-safe configuration with automatic
environment variable loading and validation.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chainarb.config.constants import (
    DEFAULT_MARKET_CONDITIONS_EVERY,
    DEFAULT_MATERIALITY_THRESHOLD,
    DEFAULT_ORACLE_TIMEOUT_S,
    DEFAULT_PARTICIPATION_FACTOR,
    DEFAULT_SETTLEMENT_DELAY_S,
    DEFAULT_VALUATION_INTERVAL_S,
    MAX_COLLATERAL_AMOUNT,
    MIN_COLLATERAL_AMOUNT,
)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every field can be overridden with a ``CHAINARB_`` prefixed variable,
    e.g. ``CHAINARB_SETTLEMENT_DELAY_S=0.5``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CHAINARB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Valuation
    # =========================================================================

    valuation_interval_s: float = Field(
        default=DEFAULT_VALUATION_INTERVAL_S,
        gt=0.0,
        le=3600.0,
        description="Seconds between reconciliation ticks",
    )

    materiality_threshold: float = Field(
        default=DEFAULT_MATERIALITY_THRESHOLD,
        ge=0.0,
        le=0.1,
        description="Minimum fractional source price change to persist (0.0001 = 0.01%)",
    )

    participation_factor: float = Field(
        default=DEFAULT_PARTICIPATION_FACTOR,
        gt=0.0,
        le=1.0,
        description="Share of quoted liquidity assumed used by the profit estimate",
    )

    oracle_timeout_s: float = Field(
        default=DEFAULT_ORACLE_TIMEOUT_S,
        gt=0.0,
        le=60.0,
        description="Timeout for a single price fetch",
    )

    market_conditions_every: int = Field(
        default=DEFAULT_MARKET_CONDITIONS_EVERY,
        ge=0,
        description="Run the market conditions pass every N ticks (0 disables it)",
    )

    price_feed_url: str | None = Field(
        default=None,
        description="Live price feed base URL; the simulated feed is used when unset",
    )

    # =========================================================================
    # Allocation
    # =========================================================================

    settlement_delay_s: float = Field(
        default=DEFAULT_SETTLEMENT_DELAY_S,
        ge=0.0,
        le=60.0,
        description="Simulated state channel negotiation delay",
    )

    settlement_timeout_s: float | None = Field(
        default=None,
        gt=0.0,
        description="Default allocation deadline when the caller supplies none",
    )

    min_collateral: float = Field(
        default=MIN_COLLATERAL_AMOUNT,
        gt=0.0,
        description="Smallest collateral amount accepted per request",
    )

    max_collateral: float = Field(
        default=MAX_COLLATERAL_AMOUNT,
        gt=0.0,
        description="Largest collateral amount accepted per request",
    )

    # =========================================================================
    # Operation Mode
    # =========================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    use_uvloop: bool = Field(
        default=True,
        description="Use uvloop for improved async performance",
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("max_collateral", mode="after")
    @classmethod
    def validate_collateral_bounds(cls, v: float, info: ValidationInfo) -> float:
        """Ensure the collateral range is not inverted."""
        lower = info.data.get("min_collateral")
        if lower is not None and v < lower:
            raise ValueError("max_collateral must be >= min_collateral")
        return v

    @field_validator("price_feed_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        """Normalize the feed URL so paths can be appended."""
        if v is None:
            return v
        v = v.strip().rstrip("/")
        return v or None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are loaded only once.
    Clear cache with `get_settings.cache_clear()` if needed.
    """
    return Settings()
