"""
Location data structures.

Provides the request shape accepted by the analyzer and the structured
repository identity derived from a location target.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Location:
    """An external pointer (URL) to a hosted repository."""

    type: str
    target: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "target": self.target}


@dataclass(frozen=True)
class AnalyzeLocationRequest:
    """Request to analyze a single location."""

    location: Location

    @classmethod
    def for_url(cls, target: str) -> "AnalyzeLocationRequest":
        """Create a request for a URL location."""
        return cls(location=Location(type="url", target=target))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalyzeLocationRequest":
        """Create a request from its wire shape."""
        location = data.get("location") or {}
        return cls(location=Location(
            type=location.get("type", "url"),
            target=location.get("target", ""),
        ))

    def to_dict(self) -> Dict[str, Any]:
        return {"location": self.location.to_dict()}


@dataclass(frozen=True)
class RepositoryIdentity:
    """Structured identity of a hosted repository."""

    host_source: str
    owner: str
    name: str

    @property
    def slug(self) -> str:
        """The "<owner>/<name>" form used by provider APIs."""
        return f"{self.owner}/{self.name}"

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary for serialization."""
        return {
            "host_source": self.host_source,
            "owner": self.owner,
            "name": self.name,
        }
