"""
Channel health checks and margin calls.

A channel is healthy while its collateral ratio (collateral value over
exposure) stays at or above the deposit's margin call threshold.
"""

from collections.abc import Callable
from datetime import datetime, timedelta

from chainarb.config.constants import MARGIN_CALL_DEADLINE_SECONDS
from chainarb.core.errors import ValidationError
from chainarb.core.types import ChannelHealth, CollateralDeposit, MarginCall
from chainarb.utils.time import utc_now


def check_channel_health(
    deposit: CollateralDeposit,
    collateral_ratio: float,
    clock: Callable[[], datetime] = utc_now,
) -> ChannelHealth:
    """Evaluate a channel's collateral ratio against its threshold."""
    if collateral_ratio < 0:
        raise ValidationError(f"Collateral ratio cannot be negative: {collateral_ratio}")

    return ChannelHealth(
        channel_id=deposit.channel_id,
        collateral_ratio=collateral_ratio,
        margin_call_threshold=deposit.margin_call_threshold,
        is_healthy=collateral_ratio >= deposit.margin_call_threshold,
        checked_at=clock(),
    )


def initiate_margin_call(
    deposit: CollateralDeposit,
    collateral_value: float,
    exposure: float,
    clock: Callable[[], datetime] = utc_now,
) -> MarginCall | None:
    """
    Issue a margin call if the channel is undercollateralized.

    Args:
        deposit: Channel deposit being checked.
        collateral_value: Current value of the posted collateral.
        exposure: Current value at risk in the channel.
        clock: Source of the call timestamp.

    Returns:
        A pending margin call for the collateral needed to restore the
        threshold ratio, or None if the channel is healthy.
    """
    if exposure <= 0:
        raise ValidationError(f"Exposure must be positive, got {exposure}")
    if collateral_value < 0:
        raise ValidationError(f"Collateral value cannot be negative: {collateral_value}")

    required = deposit.margin_call_threshold * exposure - collateral_value
    if required <= 0:
        return None

    now = clock()
    return MarginCall(
        margin_call_id=f"mc_{deposit.channel_id}_{int(now.timestamp() * 1000)}",
        channel_id=deposit.channel_id,
        required_amount=required,
        deadline=now + timedelta(seconds=MARGIN_CALL_DEADLINE_SECONDS),
    )
