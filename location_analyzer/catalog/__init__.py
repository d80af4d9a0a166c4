"""
Catalog entity records and the builder that produces them.
"""

from location_analyzer.catalog.entity import (
    AnalyzeLocationResponse,
    ComponentSpec,
    Entity,
    EntityMetadata,
    GeneratedEntity,
)
from location_analyzer.catalog.builder import EntityBuilder, build_entity

__all__ = [
    "AnalyzeLocationResponse",
    "ComponentSpec",
    "Entity",
    "EntityMetadata",
    "GeneratedEntity",
    "EntityBuilder",
    "build_entity",
]
