"""
Custom exceptions for the Repository Location Analyzer.

Provides a hierarchy of exceptions for the analysis stages. Every
exception carries an ErrorKind so callers can branch on the failure
without inspecting message text.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Distinguishable failure kinds reported per location."""
    PARSE = "parse"
    NOT_FOUND = "not_found"
    AUTH = "auth"
    RATE_LIMITED = "rate_limited"
    NETWORK = "network"
    PROTOCOL = "protocol"
    CANCELLED = "cancelled"
    CONFIGURATION = "configuration"


class LocationAnalysisError(Exception):
    """Base exception for all location analysis errors."""

    kind: ErrorKind = ErrorKind.PROTOCOL
    retryable: bool = False

    def __init__(self, message: str, stage: str = None, details: dict = None):
        super().__init__(message)
        self.stage = stage
        self.details = details or {}

    def __str__(self):
        base_msg = super().__str__()
        if self.stage:
            return f"[{self.stage}] {base_msg}"
        return base_msg


class ParseError(LocationAnalysisError):
    """Raised when a location target cannot be decomposed into owner and name."""

    kind = ErrorKind.PARSE

    def __init__(self, target: str, reason: str):
        super().__init__(
            f"Cannot parse location '{target}': {reason}",
            stage="Parse",
            details={"target": target, "reason": reason},
        )


class ConfigurationError(LocationAnalysisError):
    """Raised when provider or analyzer configuration is invalid."""

    kind = ErrorKind.CONFIGURATION

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Configuration", details=details)


class MetadataError(LocationAnalysisError):
    """Raised when fetching repository metadata fails."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Metadata", details=details)


class NotFoundError(MetadataError):
    """Raised when the remote reports no such repository."""

    kind = ErrorKind.NOT_FOUND


class AuthError(MetadataError):
    """Raised when the provider rejects the configured credentials."""

    kind = ErrorKind.AUTH


class RateLimitedError(MetadataError):
    """Raised when the provider signals throttling."""

    kind = ErrorKind.RATE_LIMITED
    retryable = True

    def __init__(self, message: str, retry_after: Optional[float] = None, details: dict = None):
        super().__init__(message, details=details)
        self.retry_after = retry_after


class NetworkError(MetadataError):
    """Raised on transport failures (timeout, DNS, connection reset, 5xx)."""

    kind = ErrorKind.NETWORK
    retryable = True


class ProtocolError(MetadataError):
    """Raised when the provider answers with something we cannot interpret."""

    kind = ErrorKind.PROTOCOL


class AnalysisCancelledError(MetadataError):
    """Raised when the caller cancels or the deadline passes before completion."""

    kind = ErrorKind.CANCELLED

    def __init__(self, reason: str = "cancelled"):
        super().__init__(f"Analysis {reason}", details={"reason": reason})
        self.reason = reason
