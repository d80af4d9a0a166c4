"""
Location analyzer for the Repository Location Analyzer.

Provides the high-level interface that turns a repository location into
a catalog entity: parse, provider lookup, metadata fetch, entity build.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from location_analyzer.catalog.builder import EntityBuilder
from location_analyzer.catalog.entity import AnalyzeLocationResponse
from location_analyzer.core.config import AnalyzerConfig, ClientConfig, Config, ProviderConfig
from location_analyzer.core.exceptions import ErrorKind, LocationAnalysisError
from location_analyzer.location.models import AnalyzeLocationRequest
from location_analyzer.location.parser import LocationParser
from location_analyzer.providers.client import MetadataClient, create_client
from location_analyzer.providers.registry import ProviderRegistry
from location_analyzer.providers.throttle import ThrottleBook

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Optional[ProviderConfig], ClientConfig, ThrottleBook], MetadataClient]


@dataclass
class AnalysisOutcome:
    """Per-location result of a batch analysis."""

    target: str
    response: Optional[AnalyzeLocationResponse] = None
    error: Optional[LocationAnalysisError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: Dict[str, Any] = {"target": self.target, "ok": self.ok}
        if self.response is not None:
            data["response"] = self.response.to_dict()
        if self.error is not None:
            data["error"] = {
                "kind": self.error.kind.value,
                "stage": self.error.stage,
                "retryable": self.error.retryable,
                "message": str(self.error),
            }
        return data


class LocationAnalyzer:
    """
    Analyzes repository locations into catalog entities.

    The provider registry is passed in at construction and never
    mutated; analyze() keeps no other state across calls apart from
    the per-provider throttle book, so calls may run concurrently.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        config: AnalyzerConfig = None,
        client_factory: ClientFactory = None,
        parser: LocationParser = None,
        builder: EntityBuilder = None,
    ):
        self.config = config or Config.get()
        self.registry = registry
        self.client_factory = client_factory or create_client
        self.parser = parser or LocationParser()
        self.builder = builder or EntityBuilder()
        self.throttles = ThrottleBook()

    @classmethod
    def from_config(cls, config: AnalyzerConfig = None, **kwargs) -> "LocationAnalyzer":
        """Create an analyzer whose registry is built from configuration."""
        config = config or Config.get()
        return cls(ProviderRegistry.from_config(config), config=config, **kwargs)

    def analyze(
        self,
        request: AnalyzeLocationRequest,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> AnalyzeLocationResponse:
        """
        Analyze a single location.

        Args:
            request: Location to analyze.
            cancel: Optional event; setting it aborts the metadata fetch.
            timeout: Optional overall deadline for this call, in seconds.

        Returns:
            AnalyzeLocationResponse with one generated entity.

        Raises:
            LocationAnalysisError: The first failure of any stage, unchanged.
        """
        deadline = time.monotonic() + timeout if timeout is not None else None
        target = request.location.target

        identity = self.parser.parse_location(request.location)

        provider = self.registry.resolve(identity.host_source)
        if provider is None:
            logger.debug(f"No provider configured for {identity.host_source}, using default endpoint")

        client = self.client_factory(provider, self.config.client, self.throttles)
        metadata = client.fetch(identity, cancel=cancel, deadline=deadline)

        entity = self.builder.build(identity, metadata)
        logger.debug(f"entity created for {target}")

        return AnalyzeLocationResponse.for_entity(entity)

    def analyze_url(self, target: str, **kwargs) -> AnalyzeLocationResponse:
        """Analyze a URL location."""
        return self.analyze(AnalyzeLocationRequest.for_url(target), **kwargs)

    def analyze_batch(
        self,
        batch: Iterable[AnalyzeLocationRequest],
        max_workers: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> List[AnalysisOutcome]:
        """
        Analyze many locations concurrently.

        A failing location is recorded in its own outcome and never
        affects the others.

        Args:
            batch: Requests to analyze.
            max_workers: Thread pool size (defaults to config.max_workers).
            cancel: Optional event shared by all calls.
            timeout: Optional per-location deadline in seconds.

        Returns:
            One AnalysisOutcome per request, in input order.
        """
        batch = list(batch)
        if not batch:
            return []

        workers = max(1, min(max_workers or self.config.max_workers, len(batch)))
        logger.info(f"Analyzing {len(batch)} location(s) with {workers} worker(s)")

        outcomes: List[Optional[AnalysisOutcome]] = [None] * len(batch)
        with ThreadPoolExecutor(max_workers=workers) as ex:
            futures = {
                ex.submit(self._analyze_outcome, request, cancel, timeout): index
                for index, request in enumerate(batch)
            }
            for future in as_completed(futures):
                outcomes[futures[future]] = future.result()

        failed = sum(1 for o in outcomes if not o.ok)
        logger.info(f"Batch complete: {len(outcomes) - failed} succeeded, {failed} failed")
        return outcomes

    def _analyze_outcome(
        self,
        request: AnalyzeLocationRequest,
        cancel: Optional[threading.Event],
        timeout: Optional[float],
    ) -> AnalysisOutcome:
        target = request.location.target
        try:
            response = self.analyze(request, cancel=cancel, timeout=timeout)
        except LocationAnalysisError as e:
            logger.warning(f"Analysis of {target} failed ({e.kind.value}): {e}")
            return AnalysisOutcome(target=target, error=e)
        return AnalysisOutcome(target=target, response=response)
