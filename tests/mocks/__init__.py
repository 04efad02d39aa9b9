"""Mock implementations for testing."""

from tests.mocks.oracle import GatedPriceOracle, ScriptedPriceOracle


__all__ = [
    "GatedPriceOracle",
    "ScriptedPriceOracle",
]
