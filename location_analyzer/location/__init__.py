"""
Location parsing: request shapes and repository identities.
"""

from location_analyzer.location.models import (
    AnalyzeLocationRequest,
    Location,
    RepositoryIdentity,
)
from location_analyzer.location.parser import LocationParser, parse_location

__all__ = [
    "AnalyzeLocationRequest",
    "Location",
    "RepositoryIdentity",
    "LocationParser",
    "parse_location",
]
