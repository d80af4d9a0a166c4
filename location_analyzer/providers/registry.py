"""
Provider registry for configured hosting platforms.

Holds the read-only list of providers built once from configuration
and resolves a repository host to its provider.
"""

import logging
from typing import Iterable, Iterator, Optional, Tuple

from location_analyzer.core.config import AnalyzerConfig, ProviderConfig

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Immutable registry of configured hosting providers.

    Resolution is an exact string match on host_match: no wildcard,
    subdomain or case normalization. A host on a self-hosted instance
    that does not match exactly falls back to the unauthenticated
    default client.
    """

    def __init__(self, providers: Iterable[ProviderConfig] = ()):
        self._providers: Tuple[ProviderConfig, ...] = tuple(providers)

        seen = set()
        for provider in self._providers:
            if provider.host_match in seen:
                logger.warning(
                    f"Multiple providers configured for {provider.host_match}; "
                    f"the first one wins"
                )
            seen.add(provider.host_match)

        logger.debug(f"Provider registry built with {len(self._providers)} provider(s)")

    @classmethod
    def from_config(cls, config: AnalyzerConfig) -> "ProviderRegistry":
        """Build the registry from the analyzer configuration."""
        return cls(config.providers)

    @property
    def providers(self) -> Tuple[ProviderConfig, ...]:
        return self._providers

    def resolve(self, host_source: str) -> Optional[ProviderConfig]:
        """
        Get the provider configured for a host.

        Args:
            host_source: Host derived from the location target.

        Returns:
            The matching ProviderConfig, or None when no provider matches.
        """
        for provider in self._providers:
            if provider.host_match == host_source:
                return provider
        return None

    def has_provider(self, host_source: str) -> bool:
        """Check if a provider exists for a host."""
        return self.resolve(host_source) is not None

    def __len__(self) -> int:
        return len(self._providers)

    def __iter__(self) -> Iterator[ProviderConfig]:
        return iter(self._providers)
