"""Downloads stubs from an artifact repository and unpacks them locally."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from archive.extractor import ArchiveExtractor, ExtractedBundle
from registry.maven.locator import ArtifactLocator
from resolution.invalidator import FreshnessInvalidator
from resolution.resolvers import build_resolver
from versioning.models import DependencyCoordinates, RepositorySpec, VersionSelector

logger = logging.getLogger(__name__)


class StubRetrievalFacade:
    """Resolves a stub artifact and hands back its unpacked contents.

    Resolution problems never escape: an unresolvable artifact yields None.
    A resolved archive that cannot be unpacked raises ``CorruptArchiveError``.
    """

    def __init__(
        self,
        locator: Optional[ArtifactLocator] = None,
        invalidator: Optional[FreshnessInvalidator] = None,
        extractor: Optional[ArchiveExtractor] = None,
        local_repository: Union[str, Path, None] = None,
        repository_id: Optional[str] = None,
        offline: bool = False,
    ):
        self.locator = locator
        self.invalidator = invalidator
        self.extractor = extractor or ArchiveExtractor()
        self.local_repository = local_repository
        self.repository_id = repository_id
        self.offline = offline

    def retrieve(
        self, skip_local_cache: bool, repository_root: str, group: str, module: str
    ) -> Optional[ExtractedBundle]:
        """Downloads the latest stubs of ``group:module`` and unpacks them.

        Depending on ``skip_local_cache`` the local cache is consulted first or
        bypassed in favour of the remote repository.

        Returns:
            The bundle holding the unpacked stubs, or None when none were found.
        """
        coordinates = DependencyCoordinates(
            group=group, module=module, version_selector=VersionSelector.LATEST
        )
        return self.retrieve_coordinates(RepositorySpec(repository_root, skip_local_cache), coordinates)

    def retrieve_coordinates(
        self, spec: RepositorySpec, coordinates: DependencyCoordinates
    ) -> Optional[ExtractedBundle]:
        """Same as ``retrieve`` for arbitrary coordinates (exact version, classifier)."""
        resolver = build_resolver(
            spec.skip_local_cache,
            offline=self.offline,
            locator=self.locator,
            local_repository=self.local_repository,
            invalidator=self.invalidator,
            repository_id=self.repository_id,
        )
        location = resolver.resolve(spec.root, coordinates)
        if location is None:
            logger.warning(
                "Failed to download stubs for group [%s] and module [%s] from repository [%s]",
                coordinates.group,
                coordinates.module,
                spec.root,
            )
            return None
        return self.extractor.extract(location.uri)
