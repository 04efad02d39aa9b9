"""
Collateral partitioning across state channel counterparties.

Amounts are split in the token's integer base units: every deposit gets
the floor share and the last one also takes the remainder, so the batch
always sums to exactly the requested amount.
"""

import hashlib
from collections.abc import Sequence
from decimal import Decimal

from chainarb.config.constants import CHANNEL_LOCK_SECONDS, MARGIN_CALL_THRESHOLDS
from chainarb.core.errors import ValidationError
from chainarb.core.types import CollateralDeposit, Peer, RiskTier, SupportedToken
from chainarb.utils.math import to_base_units


def margin_call_threshold(risk_tolerance: RiskTier) -> float:
    """Collateral ratio below which a counterparty may call margin."""
    return MARGIN_CALL_THRESHOLDS[RiskTier(risk_tolerance).value]


def channel_id(
    user_address: str,
    counterparty_address: str,
    timestamp_ms: int,
    nonce: str = "",
) -> str:
    """
    Derive a state channel id.

    The nonce separates requests that share a user, counterparty and
    millisecond.

    Example:
        >>> len(channel_id("0xuser", "0xpeer", 1700000000000))
        42
    """
    digest = hashlib.sha256(
        f"{user_address}|{counterparty_address}|{timestamp_ms}|{nonce}".encode()
    ).hexdigest()
    return "0x" + digest[:40]


def split_units(total_units: int, parts: int) -> list[int]:
    """
    Split an integer amount evenly, remainder on the last part.

    Example:
        >>> split_units(10, 3)
        [3, 3, 4]
    """
    if parts <= 0:
        raise ValueError(f"parts must be positive, got {parts}")
    share, remainder = divmod(total_units, parts)
    shares = [share] * parts
    shares[-1] += remainder
    return shares


def partition_collateral(
    amount: float | Decimal,
    token: SupportedToken,
    peers: Sequence[Peer],
    user_address: str,
    risk_tolerance: RiskTier,
    now_ms: int,
    nonce: str = "",
) -> tuple[CollateralDeposit, ...]:
    """
    Build one collateral deposit per peer.

    Args:
        amount: Requested collateral in whole token units.
        token: Collateral token.
        peers: Counterparties receiving a deposit, in order.
        user_address: Depositing user.
        risk_tolerance: Selects the margin call threshold.
        now_ms: Current time, used for lock expiry and channel ids.
        nonce: Per-request value mixed into channel ids.

    Returns:
        Deposits whose base-unit amounts sum to ``amount``.

    Raises:
        ValidationError: If there are no peers or the amount is too small
            to give every peer a non-zero deposit.
    """
    if not peers:
        raise ValidationError("At least one counterparty is required to partition collateral")

    total_units = to_base_units(amount, token.decimals)
    if total_units < len(peers):
        raise ValidationError(
            f"Collateral {amount} {token.symbol} is too small to split across {len(peers)} peers"
        )

    threshold = margin_call_threshold(risk_tolerance)
    lock_expiry = now_ms // 1000 + CHANNEL_LOCK_SECONDS

    return tuple(
        CollateralDeposit(
            token=token,
            amount_units=units,
            user_address=user_address,
            counterparty_address=peer.address,
            channel_id=channel_id(user_address, peer.address, now_ms, nonce),
            lock_expiry=lock_expiry,
            margin_call_threshold=threshold,
        )
        for peer, units in zip(peers, split_units(total_units, len(peers)))
    )
