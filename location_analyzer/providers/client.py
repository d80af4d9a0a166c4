"""
Repository metadata client.

Queries a GitHub-compatible GraphQL endpoint for the description and
primary language of a repository. Two variants exist: DefaultClient
talks to the public endpoint without credentials, AuthenticatedClient
talks to a configured provider with its token. create_client picks one
from the registry lookup result.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from location_analyzer.core.config import ClientConfig, ProviderConfig
from location_analyzer.core.exceptions import (
    AuthError,
    NetworkError,
    NotFoundError,
    ProtocolError,
    RateLimitedError,
)
from location_analyzer.location.models import RepositoryIdentity
from location_analyzer.providers.throttle import (
    ProviderThrottle,
    RetryPolicy,
    ThrottleBook,
    check_cancelled,
)

logger = logging.getLogger(__name__)

REPOSITORY_QUERY = """
query repository($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) {
    description
    primaryLanguage {
      name
    }
  }
}
"""

USER_AGENT = "location-analyzer"


def graphql_endpoint(api_base_url: str) -> str:
    """
    Derive the GraphQL endpoint from a provider's API base URL.

    GitHub Enterprise exposes REST under /api/v3 and GraphQL under
    /api/graphql; every other base URL gets /graphql appended.
    """
    base = api_base_url.rstrip("/")
    if base.endswith("/api/v3"):
        return base[: -len("/v3")] + "/graphql"
    return base + "/graphql"


@dataclass(frozen=True)
class RepositoryMetadata:
    """Descriptive fields fetched from the provider's API."""

    description: Optional[str] = None
    primary_language_name: Optional[str] = None

    @classmethod
    def from_graphql(cls, node: Dict[str, Any]) -> "RepositoryMetadata":
        """
        Create metadata from a GraphQL repository node, tolerating missing fields.

        Raises:
            ValueError: If the node or one of its fields has the wrong type.
        """
        if not isinstance(node, dict):
            raise ValueError(f"repository is {type(node).__name__}, expected object")

        language = node.get("primaryLanguage")
        if language is None:
            language = {}
        elif not isinstance(language, dict):
            raise ValueError(f"primaryLanguage is {type(language).__name__}, expected object")

        description = node.get("description")
        name = language.get("name")
        for field_name, value in (("description", description), ("primaryLanguage.name", name)):
            if value is not None and not isinstance(value, str):
                raise ValueError(f"{field_name} is {type(value).__name__}, expected string")

        return cls(
            description=description or None,
            primary_language_name=name or None,
        )

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "description": self.description,
            "primary_language_name": self.primary_language_name,
        }


class MetadataClient(ABC):
    """
    Abstract base class for repository metadata clients.

    Handles the transport, response classification and retries; the
    variants only decide the endpoint and the request headers.
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = 10.0,
        retry_policy: Optional[RetryPolicy] = None,
        throttle: Optional[ProviderThrottle] = None,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self.throttle = throttle
        self.session = session

    @property
    @abstractmethod
    def authenticated(self) -> bool:
        """Whether requests carry credentials."""
        pass

    def headers(self) -> Dict[str, str]:
        """Request headers sent with every query."""
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }

    def fetch(
        self,
        identity: RepositoryIdentity,
        cancel: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> RepositoryMetadata:
        """
        Fetch repository metadata.

        Args:
            identity: Repository to look up.
            cancel: Optional event; setting it aborts the call.
            deadline: Optional absolute time.monotonic() deadline.

        Returns:
            RepositoryMetadata for the repository.

        Raises:
            NotFoundError, AuthError, RateLimitedError, NetworkError,
            ProtocolError, AnalysisCancelledError.
        """
        logger.debug(
            f"Fetching {identity.slug} from {self.endpoint} "
            f"({'authenticated' if self.authenticated else 'anonymous'})"
        )
        return self.retry_policy.execute(
            lambda: self._fetch_once(identity, cancel, deadline),
            cancel=cancel,
            deadline=deadline,
        )

    def _fetch_once(
        self,
        identity: RepositoryIdentity,
        cancel: Optional[threading.Event],
        deadline: Optional[float],
    ) -> RepositoryMetadata:
        if self.throttle is not None:
            self.throttle.wait(cancel, deadline)
        check_cancelled(cancel, deadline)

        timeout = self.timeout
        if deadline is not None:
            timeout = min(timeout, max(0.001, deadline - time.monotonic()))

        payload = {
            "query": REPOSITORY_QUERY,
            "variables": {"owner": identity.owner, "name": identity.name},
        }
        details = {"endpoint": self.endpoint, "repository": identity.slug}

        try:
            response = self._post(payload, timeout)
        except requests.exceptions.Timeout:
            raise NetworkError(
                f"Request to {self.endpoint} timed out after {timeout:.1f}s",
                details=details,
            )
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Network error talking to {self.endpoint}: {e}", details=details)

        try:
            return self._parse_response(identity, response, details)
        except RateLimitedError as e:
            if self.throttle is not None:
                self.throttle.penalize(
                    e.retry_after if e.retry_after is not None else self.retry_policy.initial_backoff
                )
            raise

    def _post(self, payload: Dict[str, Any], timeout: float) -> requests.Response:
        transport = self.session if self.session is not None else requests
        return transport.post(
            self.endpoint,
            json=payload,
            headers=self.headers(),
            timeout=timeout,
        )

    def _parse_response(
        self,
        identity: RepositoryIdentity,
        response: requests.Response,
        details: Dict[str, Any],
    ) -> RepositoryMetadata:
        status = response.status_code
        details = dict(details, status=status)

        if status == 401:
            raise AuthError(f"Credentials rejected by {self.endpoint}", details=details)

        if status in (403, 429):
            retry_after = self._retry_after(response)
            if status == 429 or retry_after is not None or self._mentions_rate_limit(response):
                raise RateLimitedError(
                    f"Rate limited by {self.endpoint}",
                    retry_after=retry_after,
                    details=details,
                )
            raise AuthError(f"Access to {identity.slug} forbidden by {self.endpoint}", details=details)

        if status >= 500:
            raise NetworkError(f"{self.endpoint} answered HTTP {status}", details=details)

        if status >= 400:
            raise ProtocolError(f"Unexpected HTTP {status} from {self.endpoint}", details=details)

        try:
            body = response.json()
        except ValueError:
            raise ProtocolError(f"Invalid JSON from {self.endpoint}", details=details)

        if not isinstance(body, dict):
            raise ProtocolError(f"Unexpected response shape from {self.endpoint}", details=details)

        errors = body.get("errors") or []
        if not isinstance(errors, list):
            raise ProtocolError(f"Unexpected errors shape from {self.endpoint}", details=details)
        for error in errors:
            error_type = error.get("type") if isinstance(error, dict) else None
            if error_type == "NOT_FOUND":
                raise NotFoundError(f"Repository {identity.slug} not found", details=details)
            if error_type == "RATE_LIMITED":
                raise RateLimitedError(
                    f"Rate limited by {self.endpoint}",
                    retry_after=self._retry_after(response),
                    details=details,
                )
            if error_type == "FORBIDDEN":
                raise AuthError(f"Access to {identity.slug} forbidden", details=details)

        data = body.get("data")
        if data is not None and not isinstance(data, dict):
            raise ProtocolError(f"Unexpected data shape from {self.endpoint}", details=details)

        repository = (data or {}).get("repository")
        if repository is None:
            if errors:
                messages = "; ".join(
                    str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors
                )
                raise ProtocolError(f"GraphQL error: {messages}", details=details)
            raise NotFoundError(f"Repository {identity.slug} not found", details=details)

        try:
            return RepositoryMetadata.from_graphql(repository)
        except ValueError as e:
            raise ProtocolError(f"Malformed repository from {self.endpoint}: {e}", details=details)

    @staticmethod
    def _retry_after(response: requests.Response) -> Optional[float]:
        """Seconds to wait according to Retry-After or X-RateLimit-* headers."""
        headers = response.headers or {}
        retry_after = headers.get("Retry-After")
        if retry_after is not None:
            try:
                return max(0.0, float(retry_after))
            except ValueError:
                logger.debug(f"Ignoring non-numeric Retry-After: {retry_after!r}")

        if headers.get("X-RateLimit-Remaining") == "0":
            reset = headers.get("X-RateLimit-Reset")
            if reset is not None:
                try:
                    return max(0.0, float(reset) - time.time())
                except ValueError:
                    logger.debug(f"Ignoring non-numeric X-RateLimit-Reset: {reset!r}")
            return 0.0

        return None

    @staticmethod
    def _mentions_rate_limit(response: requests.Response) -> bool:
        text = getattr(response, "text", "") or ""
        return "rate limit" in text.lower()


class DefaultClient(MetadataClient):
    """Unauthenticated client against the public default endpoint."""

    @property
    def authenticated(self) -> bool:
        return False


class AuthenticatedClient(MetadataClient):
    """Client for a configured provider, sending its token as a bearer header."""

    def __init__(self, provider: ProviderConfig, **kwargs):
        if not provider.token:
            raise ValueError(f"Provider {provider.host_match} has no token")
        super().__init__(graphql_endpoint(provider.api_base_url), **kwargs)
        self.provider = provider

    @property
    def authenticated(self) -> bool:
        return True

    def headers(self) -> Dict[str, str]:
        headers = super().headers()
        headers["Authorization"] = f"bearer {self.provider.token}"
        return headers


def create_client(
    provider: Optional[ProviderConfig],
    client_config: Optional[ClientConfig] = None,
    throttles: Optional[ThrottleBook] = None,
    session: Optional[requests.Session] = None,
) -> MetadataClient:
    """
    Select the client variant for a registry lookup result.

    A missing provider, or one without a token, gets the unauthenticated
    DefaultClient on the public endpoint.
    """
    client_config = client_config or ClientConfig()
    retry_policy = RetryPolicy(
        max_attempts=client_config.max_attempts,
        initial_backoff=client_config.initial_backoff,
        max_backoff=client_config.max_backoff,
    )

    if provider is not None and provider.is_authenticated:
        endpoint = graphql_endpoint(provider.api_base_url)
        throttle = throttles.get(f"{provider.host_match}@{endpoint}") if throttles else None
        return AuthenticatedClient(
            provider,
            timeout=client_config.timeout,
            retry_policy=retry_policy,
            throttle=throttle,
            session=session,
        )

    endpoint = graphql_endpoint(client_config.default_api_base_url)
    return DefaultClient(
        endpoint,
        timeout=client_config.timeout,
        retry_policy=retry_policy,
        throttle=throttles.get(endpoint) if throttles else None,
        session=session,
    )
