"""Core module containing domain types, protocols and the error taxonomy."""

from chainarb.core.errors import (
    ChainArbError,
    ErrorKind,
    OperationTimeoutError,
    UnsupportedConfigurationError,
    UpstreamUnavailableError,
    ValidationError,
)
from chainarb.core.types import (
    AllocationRequest,
    AllocationResult,
    AllocationStage,
    CollateralDeposit,
    Opportunity,
    OpportunityStore,
    OpportunityUpdate,
    Peer,
    PriceOracle,
    RiskTier,
    Strategy,
    SupportedToken,
)


__all__ = [
    "AllocationRequest",
    "AllocationResult",
    "AllocationStage",
    "ChainArbError",
    "CollateralDeposit",
    "ErrorKind",
    "OperationTimeoutError",
    "Opportunity",
    "OpportunityStore",
    "OpportunityUpdate",
    "Peer",
    "PriceOracle",
    "RiskTier",
    "Strategy",
    "SupportedToken",
    "UnsupportedConfigurationError",
    "UpstreamUnavailableError",
    "ValidationError",
]
