"""
Entity builder.

Maps a repository identity and its fetched metadata into the canonical
Component entity. No component type or lifecycle inference happens here.
"""

from location_analyzer.catalog.entity import ComponentSpec, Entity, EntityMetadata
from location_analyzer.location.models import RepositoryIdentity
from location_analyzer.providers.client import RepositoryMetadata

PROJECT_SLUG_SUFFIX = "project-slug"


def project_slug_annotation(identity: RepositoryIdentity) -> str:
    """Annotation key for the repository slug, e.g. "github.com/project-slug"."""
    return f"{identity.host_source}/{PROJECT_SLUG_SUFFIX}"


class EntityBuilder:
    """Builds Component entities from repository identity and metadata."""

    def build(self, identity: RepositoryIdentity, metadata: RepositoryMetadata) -> Entity:
        tags = None
        if metadata.primary_language_name:
            tags = (metadata.primary_language_name.lower(),)

        return Entity(
            metadata=EntityMetadata(
                name=identity.name,
                description=metadata.description,
                # Self-hosted providers on custom domains keep their literal host here
                annotations={project_slug_annotation(identity): identity.slug},
                tags=tags,
            ),
            spec=ComponentSpec(),
        )


_default_builder = EntityBuilder()


def build_entity(identity: RepositoryIdentity, metadata: RepositoryMetadata) -> Entity:
    """Build an entity with the shared builder."""
    return _default_builder.build(identity, metadata)
