"""
Profitability calculations for tracked opportunities.

No I/O happens here: every derived field of an Opportunity is computed
from its prices and liquidity, so the two can never drift apart.
"""

import math
from dataclasses import dataclass
from datetime import datetime

from chainarb.config.constants import (
    DEFAULT_MATERIALITY_THRESHOLD,
    DEFAULT_PARTICIPATION_FACTOR,
)
from chainarb.core.errors import UpstreamUnavailableError, ValidationError
from chainarb.core.types import Opportunity, OpportunityUpdate
from chainarb.utils.math import fractional_change, safe_divide


@dataclass(slots=True, frozen=True)
class ProfitFields:
    """Derived profitability of a price pair."""

    potential_profit: float
    profit_percentage: float


def potential_profit(
    source_price: float,
    target_price: float,
    liquidity: float,
    participation_factor: float = DEFAULT_PARTICIPATION_FACTOR,
) -> float:
    """
    Absolute profit for trading a share of the quoted liquidity.

    Formula: (target - source) * (liquidity / source * participation_factor)

    Example:
        >>> potential_profit(100.0, 101.0, 10_000.0)
        10.0
    """
    units = safe_divide(liquidity, source_price) * participation_factor
    return (target_price - source_price) * units


def profit_percentage(source_price: float, target_price: float) -> float:
    """
    Spread as a percentage of the source price.

    Example:
        >>> profit_percentage(100.0, 101.0)
        1.0
    """
    return safe_divide(target_price - source_price, source_price) * 100.0


class ProfitCalculator:
    """
    Recomputes opportunity profitability from fresh prices.

    The participation factor is bounded to (0, 1], so the trade size the
    estimate implies never exceeds the opportunity's quoted liquidity.
    """

    def __init__(
        self,
        participation_factor: float = DEFAULT_PARTICIPATION_FACTOR,
        materiality_threshold: float = DEFAULT_MATERIALITY_THRESHOLD,
    ) -> None:
        """
        Initialize calculator.

        Args:
            participation_factor: Share of liquidity the estimate assumes is used.
            materiality_threshold: Minimum fractional source price move to persist.
        """
        if not 0.0 < participation_factor <= 1.0:
            raise ValidationError(
                f"participation_factor must be in (0, 1], got {participation_factor}"
            )
        if materiality_threshold < 0.0:
            raise ValidationError(
                f"materiality_threshold must be >= 0, got {materiality_threshold}"
            )

        self._participation_factor = participation_factor
        self._materiality_threshold = materiality_threshold

    @property
    def participation_factor(self) -> float:
        """Share of liquidity assumed used."""
        return self._participation_factor

    @property
    def materiality_threshold(self) -> float:
        """Minimum fractional price move to persist."""
        return self._materiality_threshold

    def profit_fields(
        self,
        source_price: float,
        target_price: float,
        liquidity: float,
    ) -> ProfitFields:
        """Derive both profit fields for a price pair."""
        return ProfitFields(
            potential_profit=potential_profit(
                source_price, target_price, liquidity, self._participation_factor
            ),
            profit_percentage=profit_percentage(source_price, target_price),
        )

    def is_material(self, previous_source: float, current_source: float) -> bool:
        """Check whether a source price move crosses the materiality threshold."""
        return fractional_change(previous_source, current_source) > self._materiality_threshold

    def reprice(
        self,
        opportunity: Opportunity,
        source_price: float,
        target_price: float,
        now: datetime,
    ) -> OpportunityUpdate | None:
        """
        Build the write-back for fresh prices, or None if the move is immaterial.

        Args:
            opportunity: Currently stored opportunity.
            source_price: Fresh source side price.
            target_price: Fresh target side price.
            now: Timestamp to stamp on the update.

        Returns:
            OpportunityUpdate to persist, or None.
        """
        if not all(math.isfinite(p) and p > 0 for p in (source_price, target_price)):
            raise UpstreamUnavailableError(
                f"Invalid price for {opportunity.id}: "
                f"source={source_price} target={target_price}"
            )

        if not self.is_material(opportunity.source_price, source_price):
            return None

        fields = self.profit_fields(source_price, target_price, opportunity.liquidity)
        return OpportunityUpdate(
            opportunity_id=opportunity.id,
            source_price=source_price,
            target_price=target_price,
            potential_profit=fields.potential_profit,
            profit_percentage=fields.profit_percentage,
            last_updated=now,
        )
