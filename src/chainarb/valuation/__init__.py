"""Opportunity valuation: profit math, conditions pass and the scheduler."""

from chainarb.valuation.calculator import (
    ProfitCalculator,
    ProfitFields,
    potential_profit,
    profit_percentage,
)
from chainarb.valuation.conditions import MarketConditionsUpdater
from chainarb.valuation.engine import ReconcileReport, ValuationEngine, ValuationStatus


__all__ = [
    "MarketConditionsUpdater",
    "ProfitCalculator",
    "ProfitFields",
    "ReconcileReport",
    "ValuationEngine",
    "ValuationStatus",
    "potential_profit",
    "profit_percentage",
]
