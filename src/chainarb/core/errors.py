"""
Error taxonomy shared by the valuation and allocation engines.

Every error carries an ``ErrorKind`` so failures can be reported as
structured results instead of raw exceptions.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Classification attached to every failure."""

    VALIDATION = "validation"
    UNSUPPORTED_CONFIGURATION = "unsupported_configuration"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


class ChainArbError(Exception):
    """Base exception for engine errors."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ChainArbError):
    """Malformed or out-of-range request. Never retried automatically."""

    kind = ErrorKind.VALIDATION


class UnsupportedConfigurationError(ChainArbError):
    """No token or peer satisfies the requested constraints."""

    kind = ErrorKind.UNSUPPORTED_CONFIGURATION

    def __init__(self, message: str, capability: str = "") -> None:
        super().__init__(message)
        self.capability = capability


class UpstreamUnavailableError(ChainArbError):
    """Price source or registry could not be reached."""

    kind = ErrorKind.UPSTREAM_UNAVAILABLE


class OperationTimeoutError(ChainArbError, TimeoutError):
    """Settlement or price fetch exceeded its deadline."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, message: str, timeout_s: float | None = None) -> None:
        super().__init__(message)
        self.timeout_s = timeout_s
