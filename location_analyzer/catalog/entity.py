"""
Catalog entity records.

Provides the canonical Component entity produced for a repository and
the analyze-location response that wraps it.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

API_VERSION = "catalog/v1alpha1"
COMPONENT_KIND = "Component"
DEFAULT_COMPONENT_TYPE = "other"
DEFAULT_LIFECYCLE = "unknown"


@dataclass(frozen=True)
class EntityMetadata:
    """Metadata block of an entity. Annotations are copied into a read-only mapping."""

    name: str
    annotations: Mapping[str, str] = field(default_factory=dict)
    description: Optional[str] = None
    tags: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        object.__setattr__(self, "annotations", MappingProxyType(dict(self.annotations)))
        if self.tags is not None:
            object.__setattr__(self, "tags", tuple(self.tags))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, omitting absent optional fields."""
        data: Dict[str, Any] = {"name": self.name}
        if self.description is not None:
            data["description"] = self.description
        data["annotations"] = dict(self.annotations)
        if self.tags is not None:
            data["tags"] = list(self.tags)
        return data


@dataclass(frozen=True)
class ComponentSpec:
    """Spec block of a Component entity."""

    type: str = DEFAULT_COMPONENT_TYPE
    lifecycle: str = DEFAULT_LIFECYCLE

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "lifecycle": self.lifecycle}


@dataclass(frozen=True)
class Entity:
    """
    Canonical catalog record for a repository.

    Constructed fresh per request and never mutated afterwards.
    """

    metadata: EntityMetadata
    spec: ComponentSpec = field(default_factory=ComponentSpec)
    api_version: str = API_VERSION
    kind: str = COMPONENT_KIND

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the ingestion wire shape."""
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self.metadata.to_dict(),
            "spec": self.spec.to_dict(),
        }


@dataclass(frozen=True)
class GeneratedEntity:
    """An entity proposed for a location, with the fields a user may edit."""

    entity: Entity
    fields: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"entity": self.entity.to_dict(), "fields": list(self.fields)}


@dataclass(frozen=True)
class AnalyzeLocationResponse:
    """Result of analyzing one location."""

    generate_entities: Tuple[GeneratedEntity, ...] = ()
    existing_entity_files: Tuple[Any, ...] = ()

    @classmethod
    def for_entity(cls, entity: Entity) -> "AnalyzeLocationResponse":
        return cls(generate_entities=(GeneratedEntity(entity=entity),))

    @property
    def entities(self) -> List[Entity]:
        return [generated.entity for generated in self.generate_entities]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the ingestion wire shape."""
        return {
            "existingEntityFiles": list(self.existing_entity_files),
            "generateEntities": [g.to_dict() for g in self.generate_entities],
        }
