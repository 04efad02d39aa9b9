"""
Unit tests for Settings.

Tests defaults, environment overrides and validation.
"""

import pydantic
import pytest

from chainarb.config.settings import Settings, get_settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self) -> None:
        """Test default values match the reference constants."""
        settings = Settings(_env_file=None)

        assert settings.valuation_interval_s == 30.0
        assert settings.materiality_threshold == 0.0001
        assert settings.participation_factor == 0.1
        assert settings.oracle_timeout_s == 5.0
        assert settings.settlement_delay_s == 2.0
        assert settings.settlement_timeout_s is None
        assert settings.min_collateral == 100.0
        assert settings.max_collateral == 50_000.0
        assert settings.price_feed_url is None

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test CHAINARB_ prefixed variables override defaults."""
        monkeypatch.setenv("CHAINARB_SETTLEMENT_DELAY_S", "0.5")
        monkeypatch.setenv("CHAINARB_LOG_LEVEL", "DEBUG")

        settings = Settings(_env_file=None)

        assert settings.settlement_delay_s == 0.5
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("factor", [0.0, 1.5])
    def test_participation_factor_bounds(self, factor: float) -> None:
        """Test participation factor must lie in (0, 1]."""
        with pytest.raises(pydantic.ValidationError):
            Settings(_env_file=None, participation_factor=factor)

    def test_inverted_collateral_bounds(self) -> None:
        """Test max_collateral below min_collateral is rejected."""
        with pytest.raises(pydantic.ValidationError):
            Settings(_env_file=None, min_collateral=1000.0, max_collateral=500.0)

    def test_feed_url_normalized(self) -> None:
        """Test trailing slashes are stripped from the feed URL."""
        settings = Settings(_env_file=None, price_feed_url=" http://feed.local/ ")

        assert settings.price_feed_url == "http://feed.local"

    def test_get_settings_cached(self) -> None:
        """Test get_settings returns a cached instance."""
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
