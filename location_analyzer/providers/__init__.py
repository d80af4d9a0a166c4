"""
Hosting providers: registry lookup and repository metadata clients.
"""

from location_analyzer.providers.registry import ProviderRegistry
from location_analyzer.providers.client import (
    AuthenticatedClient,
    DefaultClient,
    MetadataClient,
    RepositoryMetadata,
    create_client,
    graphql_endpoint,
)
from location_analyzer.providers.throttle import ProviderThrottle, RetryPolicy, ThrottleBook

__all__ = [
    "ProviderRegistry",
    "AuthenticatedClient",
    "DefaultClient",
    "MetadataClient",
    "RepositoryMetadata",
    "create_client",
    "graphql_endpoint",
    "ProviderThrottle",
    "RetryPolicy",
    "ThrottleBook",
]
