"""
Low-frequency market conditions pass.

Re-rolls trending flags and drifts liquidity and time windows so the
demo feed shows changing market conditions. Profit fields are
re-derived whenever liquidity moves.
"""

import logging
import random

from chainarb.config.constants import (
    CONDITIONS_UPDATE_PROBABILITY,
    LIQUIDITY_DRIFT_RANGE,
    MIN_TIME_WINDOW_S,
    TIME_WINDOW_DRIFT_S,
    TRENDING_PROBABILITY,
)
from chainarb.core.types import ConditionsUpdate, Opportunity, OpportunityStore
from chainarb.utils.time import utc_now
from chainarb.valuation.calculator import ProfitCalculator


logger = logging.getLogger(__name__)


class MarketConditionsUpdater:
    """Applies random market condition drift to executable opportunities."""

    def __init__(
        self,
        calculator: ProfitCalculator,
        rng: random.Random | None = None,
        trending_probability: float = TRENDING_PROBABILITY,
        update_probability: float = CONDITIONS_UPDATE_PROBABILITY,
    ) -> None:
        self._calculator = calculator
        self._rng = rng or random.Random()
        self._trending_probability = trending_probability
        self._update_probability = update_probability

    def drift(self, opportunity: Opportunity) -> ConditionsUpdate:
        """Compute new market conditions for one opportunity."""
        trending = self._rng.random() < self._trending_probability
        liquidity = opportunity.liquidity
        time_window = opportunity.time_window

        if self._rng.random() < self._update_probability:
            liquidity *= self._rng.uniform(*LIQUIDITY_DRIFT_RANGE)
            shift = (self._rng.random() - 0.5) * 2 * TIME_WINDOW_DRIFT_S
            time_window = max(MIN_TIME_WINDOW_S, int(time_window + shift))

        fields = self._calculator.profit_fields(
            opportunity.source_price, opportunity.target_price, liquidity
        )

        return ConditionsUpdate(
            opportunity_id=opportunity.id,
            liquidity=liquidity,
            potential_profit=fields.potential_profit,
            time_window=time_window,
            trending=trending,
            last_updated=utc_now(),
        )

    async def run(self, store: OpportunityStore) -> int:
        """
        Apply one conditions pass to every executable opportunity.

        Returns:
            Number of opportunities updated.
        """
        updated = 0
        for opportunity in await store.list_executable():
            try:
                await store.apply_conditions(self.drift(opportunity))
                updated += 1
            except Exception as e:
                logger.warning(f"Market conditions update failed for {opportunity.id}: {e}")

        logger.debug(f"Market conditions refreshed for {updated} opportunities")
        return updated
