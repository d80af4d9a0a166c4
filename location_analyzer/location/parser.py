"""
Location identity parser.

Splits git remote URLs into host, owner and repository name using the
usual git-remote conventions: scheme and credentials are stripped, a
trailing ".git" is dropped, and the path is split into owner and
repository segments.
"""

import logging
import re
from typing import List, Tuple

from location_analyzer.core.exceptions import ParseError
from location_analyzer.location.models import Location, RepositoryIdentity

logger = logging.getLogger(__name__)

# Path markers that start a browser view inside a repository,
# e.g. /owner/repo/tree/main/docs, /owner/repo/pull/12 or
# /group/repo/-/merge_requests. A nested group with one of these names
# right below the top-level owner cannot be addressed.
VIEW_MARKERS = (
    "tree", "blob", "raw", "blame",
    "commit", "commits", "compare",
    "pull", "pulls", "issues",
    "releases", "wiki", "actions",
    "-",
)


class LocationParser:
    """
    Parses location targets into repository identities.

    Supports scheme URLs (https, http, git, ssh, git+ssh), scp-like
    remotes (git@host:owner/repo.git) and bare host/owner/repo strings.
    The host is kept exactly as written; self-hosted domains are not
    mapped onto a known provider family.
    """

    URL_PATTERN = re.compile(
        r"^(?P<scheme>[A-Za-z][A-Za-z0-9+.\-]*)://(?P<authority>[^/?#]*)(?P<path>[^?#]*)"
    )
    SCP_PATTERN = re.compile(
        r"^(?:(?P<user>[^@/:]+)@)?(?P<host>[^@/:]+):(?P<path>[^/\d][^?#]*)$"
    )

    def parse(self, target: str) -> RepositoryIdentity:
        """
        Parse a location target.

        Args:
            target: URL-like string identifying a git repository.

        Returns:
            RepositoryIdentity with host_source, owner and name.

        Raises:
            ParseError: If the target cannot be decomposed into owner and name.
        """
        if target is None or not target.strip():
            raise ParseError(str(target), "empty target")

        cleaned = target.strip()
        host, path = self._split_host_and_path(cleaned)

        if not host:
            raise ParseError(target, "missing host")

        owner, name = self._split_owner_and_name(target, path)
        identity = RepositoryIdentity(host_source=host, owner=owner, name=name)
        logger.debug(f"Parsed {target} as {identity.host_source}:{identity.slug}")
        return identity

    def parse_location(self, location: Location) -> RepositoryIdentity:
        """Parse a Location, rejecting kinds other than "url"."""
        if location.type != "url":
            raise ParseError(
                location.target,
                f"unsupported location type '{location.type}'",
            )
        return self.parse(location.target)

    def _split_host_and_path(self, target: str) -> Tuple[str, str]:
        """Return (host, path) with credentials and port removed."""
        url_match = self.URL_PATTERN.match(target)
        if url_match:
            return self._host_from_authority(url_match.group("authority")), url_match.group("path")

        scp_match = self.SCP_PATTERN.match(target)
        if scp_match:
            return scp_match.group("host"), scp_match.group("path")

        # host/owner/repo without a scheme
        bare = target.split("?", 1)[0].split("#", 1)[0]
        host, _, path = bare.partition("/")
        return self._host_from_authority(host), path

    @staticmethod
    def _host_from_authority(authority: str) -> str:
        """Strip userinfo and port from a URL authority."""
        host = authority.rpartition("@")[2]
        if host.startswith("["):
            return host.split("]", 1)[0] + "]" if "]" in host else host
        return host.split(":", 1)[0]

    @staticmethod
    def _path_segments(path: str) -> List[str]:
        segments = [s for s in path.split("/") if s]
        for index, segment in enumerate(segments):
            if index >= 2 and segment in VIEW_MARKERS:
                return segments[:index]
        return segments

    def _split_owner_and_name(self, target: str, path: str) -> Tuple[str, str]:
        segments = self._path_segments(path)
        if len(segments) < 2:
            raise ParseError(target, "expected at least owner and repository path segments")

        name = segments[-1]
        if name.endswith(".git"):
            name = name[:-4]
        owner = "/".join(segments[:-1])

        if not owner or not name:
            raise ParseError(target, "empty owner or repository name")

        return owner, name


_default_parser = LocationParser()


def parse_location(target: str) -> RepositoryIdentity:
    """Parse a location target with the shared parser."""
    return _default_parser.parse(target)
