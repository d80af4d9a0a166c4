"""
Core module containing configuration and the error taxonomy.
"""

from location_analyzer.core.config import (
    AnalyzerConfig,
    ClientConfig,
    Config,
    ProviderConfig,
)
from location_analyzer.core.exceptions import (
    AnalysisCancelledError,
    AuthError,
    ConfigurationError,
    ErrorKind,
    LocationAnalysisError,
    NetworkError,
    NotFoundError,
    ParseError,
    ProtocolError,
    RateLimitedError,
)

__all__ = [
    "AnalyzerConfig",
    "ClientConfig",
    "Config",
    "ProviderConfig",
    "AnalysisCancelledError",
    "AuthError",
    "ConfigurationError",
    "ErrorKind",
    "LocationAnalysisError",
    "NetworkError",
    "NotFoundError",
    "ParseError",
    "ProtocolError",
    "RateLimitedError",
]
