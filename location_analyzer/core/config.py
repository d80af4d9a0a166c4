"""
Configuration management for the Repository Location Analyzer.

Provides the hosting provider list and client settings with sensible
defaults, loaded from a JSON file and/or environment variables.
"""

import os
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from location_analyzer.core.exceptions import ConfigurationError

DEFAULT_HOST = "github.com"
DEFAULT_API_BASE_URL = "https://api.github.com"


@dataclass(frozen=True)
class ProviderConfig:
    """A configured hosting platform endpoint plus optional credentials."""

    host_match: str
    api_base_url: str
    token: Optional[str] = field(default=None, repr=False)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def to_dict(self, include_token: bool = False) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = {
            "hostMatch": self.host_match,
            "apiBaseUrl": self.api_base_url,
            "authenticated": self.is_authenticated,
        }
        if include_token and self.token:
            data["token"] = self.token
        return data


@dataclass
class ClientConfig:
    """Configuration for the repository metadata client."""

    # Per-call timeout (seconds)
    timeout: float = 10.0

    # Total attempts for retryable failures (rate limit, network)
    max_attempts: int = 3

    # Backoff schedule: initial_backoff * 2^attempt, capped at max_backoff
    initial_backoff: float = 1.0
    max_backoff: float = 30.0

    # Endpoint used when no authenticated provider matches
    default_api_base_url: str = DEFAULT_API_BASE_URL


@dataclass
class AnalyzerConfig:
    """Master configuration for the analyzer."""

    providers: List[ProviderConfig] = field(default_factory=list)
    client: ClientConfig = field(default_factory=ClientConfig)

    # Thread pool size for batch analysis
    max_workers: int = 8

    # Enable verbose logging
    verbose: bool = False


def _resolve_token(value: Any, index: int) -> Optional[str]:
    """Resolve a literal token or an {"$env": NAME} reference."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and "$env" in value:
        return os.getenv(value["$env"]) or None
    raise ConfigurationError(
        f"Invalid token for provider #{index}",
        details={"index": index},
    )


def read_provider_configs(entries: List[Dict[str, Any]]) -> List[ProviderConfig]:
    """
    Build ProviderConfig objects from raw configuration entries.

    hostMatch defaults to github.com; apiBaseUrl defaults to the public
    GitHub API for github.com and is required for any other host.

    Args:
        entries: List of {"hostMatch", "apiBaseUrl", "token"} dictionaries.

    Returns:
        Provider configurations in declaration order.

    Raises:
        ConfigurationError: If an entry is malformed.
    """
    providers = []
    for index, entry in enumerate(entries or []):
        if not isinstance(entry, dict):
            raise ConfigurationError(
                f"Provider #{index} must be an object",
                details={"index": index},
            )

        host = entry.get("hostMatch") or entry.get("host") or DEFAULT_HOST
        api_base_url = entry.get("apiBaseUrl")
        if not api_base_url:
            if host != DEFAULT_HOST:
                raise ConfigurationError(
                    f"Provider '{host}' requires an apiBaseUrl",
                    details={"index": index, "host": host},
                )
            api_base_url = DEFAULT_API_BASE_URL

        providers.append(ProviderConfig(
            host_match=host,
            api_base_url=api_base_url.rstrip("/"),
            token=_resolve_token(entry.get("token"), index),
        ))
    return providers


class Config:
    """
    Central configuration manager providing access to all settings.

    Supports loading from environment variables and configuration files.
    """

    _instance: Optional["Config"] = None
    _config: AnalyzerConfig = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._config = AnalyzerConfig()
        return cls._instance

    @classmethod
    def get(cls) -> AnalyzerConfig:
        """Get the current analyzer configuration."""
        if cls._instance is None:
            cls()
        return cls._instance._config

    @classmethod
    def reset(cls) -> AnalyzerConfig:
        """Restore defaults (mainly for testing)."""
        instance = cls()
        instance._config = AnalyzerConfig()
        return instance._config

    @classmethod
    def load_from_file(cls, config_path: str) -> AnalyzerConfig:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file.

        Returns:
            Loaded AnalyzerConfig instance.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(
                    f"Invalid JSON in {config_path}: {e}",
                    details={"path": str(config_path)},
                )

        instance = cls()
        instance._config = cls._dict_to_config(data)
        return instance._config

    @classmethod
    def load_from_env(cls, skip_file: bool = False) -> AnalyzerConfig:
        """
        Load configuration from environment variables.

        Environment variables are prefixed with LOCANALYZER_. GITHUB_TOKEN
        sets the token of the github.com provider, adding one if needed.

        Args:
            skip_file: Ignore LOCANALYZER_CONFIG, e.g. when a file was
                already loaded explicitly.

        Returns:
            AnalyzerConfig with environment overrides applied.
        """
        if os.getenv("LOCANALYZER_CONFIG") and not skip_file:
            cls.load_from_file(os.getenv("LOCANALYZER_CONFIG"))

        config = cls.get()

        try:
            if os.getenv("LOCANALYZER_TIMEOUT"):
                config.client.timeout = float(os.getenv("LOCANALYZER_TIMEOUT"))

            if os.getenv("LOCANALYZER_MAX_ATTEMPTS"):
                config.client.max_attempts = int(os.getenv("LOCANALYZER_MAX_ATTEMPTS"))

            if os.getenv("LOCANALYZER_MAX_WORKERS"):
                config.max_workers = int(os.getenv("LOCANALYZER_MAX_WORKERS"))
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric environment setting: {e}")

        if os.getenv("LOCANALYZER_VERBOSE"):
            config.verbose = os.getenv("LOCANALYZER_VERBOSE").lower() in ("true", "1", "yes")

        token = os.getenv("GITHUB_TOKEN")
        if token:
            config.providers = cls._with_github_token(config.providers, token)

        return config

    @staticmethod
    def _with_github_token(providers: List[ProviderConfig], token: str) -> List[ProviderConfig]:
        """Return providers with the github.com entry carrying the given token."""
        updated = []
        found = False
        for provider in providers:
            if provider.host_match == DEFAULT_HOST and not found:
                found = True
                if not provider.token:
                    provider = ProviderConfig(provider.host_match, provider.api_base_url, token)
            updated.append(provider)
        if not found:
            updated.append(ProviderConfig(DEFAULT_HOST, DEFAULT_API_BASE_URL, token))
        return updated

    @staticmethod
    def _dict_to_config(data: dict) -> AnalyzerConfig:
        """Convert a dictionary to AnalyzerConfig."""
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a JSON object")

        config = AnalyzerConfig()

        if "providers" in data:
            config.providers = read_provider_configs(data["providers"])

        if "client" in data:
            config.client = Config._client_config(data["client"])

        if "max_workers" in data:
            try:
                config.max_workers = int(data["max_workers"])
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid max_workers: {e}")

        if "verbose" in data:
            config.verbose = data["verbose"]

        return config

    @staticmethod
    def _client_config(data: dict) -> ClientConfig:
        """Build ClientConfig from its JSON section, coercing numeric fields."""
        if not isinstance(data, dict):
            raise ConfigurationError("client must be a JSON object")
        try:
            data = dict(data)
            for key in ("timeout", "initial_backoff", "max_backoff"):
                if key in data:
                    data[key] = float(data[key])
            if "max_attempts" in data:
                data["max_attempts"] = int(data["max_attempts"])
            return ClientConfig(**data)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid client configuration: {e}")
