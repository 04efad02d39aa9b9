"""Collateral allocation: registries, partitioning, fees and settlement."""

from chainarb.allocation.engine import AllocationEngine
from chainarb.allocation.fees import derive_optimizations, estimate_fees
from chainarb.allocation.margin import check_channel_health, initiate_margin_call
from chainarb.allocation.partition import channel_id, margin_call_threshold, partition_collateral
from chainarb.allocation.peers import DEFAULT_PEERS, PeerDirectory
from chainarb.allocation.settlement import SettlementSimulator
from chainarb.allocation.tokens import DEFAULT_TOKENS, TokenRegistry


__all__ = [
    "DEFAULT_PEERS",
    "DEFAULT_TOKENS",
    "AllocationEngine",
    "PeerDirectory",
    "SettlementSimulator",
    "TokenRegistry",
    "channel_id",
    "check_channel_health",
    "derive_optimizations",
    "estimate_fees",
    "initiate_margin_call",
    "margin_call_threshold",
    "partition_collateral",
]
