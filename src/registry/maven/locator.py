"""Artifact location against a Maven-layout local cache and remote repositories."""
from __future__ import annotations

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Tuple, Union

from common.logging_utils import extra_context, is_debug_enabled, Timer
from registry.maven import layout
from registry.maven.client import MavenRepositoryClient
from registry.maven.metadata import MavenMetadata, MetadataParseError, parse_metadata
from versioning.models import (
    DependencyCoordinates,
    FailureKind,
    LocateFailure,
    LocateResult,
    LookupSources,
    RemoteRepository,
    ResolvedLocation,
    VersionSelector,
)
from versioning.resolvers import MavenVersionResolver

logger = logging.getLogger(__name__)


class ArtifactLocator(ABC):
    """Resolves coordinates to an artifact location.

    ``locate`` never raises for an unresolvable artifact; it answers with a
    ``LocateFailure`` so callers can decide whether to fall back.
    """

    @abstractmethod
    def locate(self, sources: LookupSources, coordinates: DependencyCoordinates) -> LocateResult:
        """Return the location of the artifact or a failure describing why not."""

    def register_repository(
        self, sources: LookupSources, root: str, repository_id: Optional[str] = None
    ) -> LookupSources:
        """Return ``sources`` extended with the repository at ``root``."""
        if repository_id:
            return sources.with_repository(RemoteRepository(root=root, id=repository_id))
        return sources.with_repository(RemoteRepository(root=root))


class MavenArtifactLocator(ArtifactLocator):
    """Locator over the Maven repository layout.

    Latest versions are chosen from cached repository metadata when it exists
    and from freshly fetched metadata otherwise; downloaded metadata and
    artifacts are written to the local cache.
    """

    def __init__(
        self,
        client: Optional[MavenRepositoryClient] = None,
        version_resolver: Optional[MavenVersionResolver] = None,
    ):
        self.client = client or MavenRepositoryClient()
        self.version_resolver = version_resolver or MavenVersionResolver()

    def locate(self, sources: LookupSources, coordinates: DependencyCoordinates) -> LocateResult:
        problem = coordinates.validate()
        if problem:
            return LocateFailure(f"malformed coordinates {coordinates}: {problem}",
                                 FailureKind.INVALID_COORDINATES)

        with Timer() as timer:
            if coordinates.version_selector == VersionSelector.EXACT:
                version: Union[str, LocateFailure] = coordinates.version  # type: ignore[assignment]
            else:
                version = self._resolve_latest(sources, coordinates)
            if isinstance(version, LocateFailure):
                result: LocateResult = version
            else:
                result = self._fetch_artifact(sources, coordinates, version)

        if is_debug_enabled(logger):
            logger.debug(
                "Locate finished",
                extra=extra_context(
                    event="function_exit",
                    component="locator",
                    action="locate",
                    outcome="found" if isinstance(result, ResolvedLocation) else "not_found",
                    duration_ms=timer.duration_ms(),
                    package_manager="maven"
                )
            )
        return result

    def _resolve_latest(
        self, sources: LookupSources, coordinates: DependencyCoordinates
    ) -> Union[str, LocateFailure]:
        if sources.is_local_only:
            candidates = layout.cached_versions(sources.local_repository, coordinates)
            where = f"local repository {sources.local_repository}"
        else:
            candidates, failure = self._remote_candidates(sources, coordinates)
            if failure is not None and not candidates:
                return failure
            where = ", ".join(repo.root for repo in sources.repositories)

        picked, count, error = self.version_resolver.pick_latest(candidates)
        if picked is None:
            return LocateFailure(f"no version of {coordinates} found in {where}: {error}")
        logger.debug("Picked version %s of %s out of %d candidates", picked, coordinates, count)
        return picked

    def _remote_candidates(
        self, sources: LookupSources, coordinates: DependencyCoordinates
    ) -> Tuple[List[str], Optional[LocateFailure]]:
        candidates: List[str] = []
        failure: Optional[LocateFailure] = None
        for repository in sources.repositories:
            cached = layout.cached_metadata_path(sources.local_repository, coordinates, repository)
            metadata = self._read_cached_metadata(cached)
            if metadata is None:
                status, text = self.client.fetch_metadata(repository, coordinates)
                if status != 200:
                    kind = FailureKind.CONNECTIVITY if status == 0 else FailureKind.NOT_FOUND
                    failure = LocateFailure(
                        f"metadata for {coordinates} unavailable in {repository.root}: {text}", kind
                    )
                    continue
                try:
                    metadata = parse_metadata(text)
                except MetadataParseError as exc:
                    failure = LocateFailure(f"{repository.root}: {exc}")
                    continue
                self._write_cached_metadata(cached, text)
            candidates.extend(metadata.candidates())
        return candidates, failure

    @staticmethod
    def _read_cached_metadata(cached: Path) -> Optional[MavenMetadata]:
        """Return the cached metadata, or None when absent or unusable.

        An unreadable or malformed copy is deleted so it is fetched again.
        """
        if not cached.is_file():
            return None
        logger.debug("Using cached metadata %s", cached)
        try:
            return parse_metadata(cached.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, MetadataParseError) as exc:
            logger.warning("Discarding unusable cached metadata %s: %s", cached, exc)
        try:
            cached.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Unable to delete %s: %s", cached, exc)
        return None

    @staticmethod
    def _write_cached_metadata(cached: Path, text: str) -> None:
        """Store fetched metadata; readers only ever see a complete file."""
        try:
            cached.parent.mkdir(parents=True, exist_ok=True)
            fd, partial = tempfile.mkstemp(prefix=f".{cached.name}.", suffix=".part", dir=str(cached.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(text)
                os.replace(partial, cached)
            except OSError:
                if os.path.exists(partial):
                    os.remove(partial)
                raise
        except OSError as exc:
            logger.warning("Unable to cache metadata at %s: %s", cached, exc)

    def _fetch_artifact(
        self, sources: LookupSources, coordinates: DependencyCoordinates, version: str
    ) -> LocateResult:
        target = layout.artifact_path(sources.local_repository, coordinates, version)
        if target.is_file():
            return ResolvedLocation.from_path(target)

        if sources.is_local_only:
            return LocateFailure(
                f"{coordinates.module}-{version} is not in local repository {sources.local_repository}"
            )

        failure = LocateFailure(f"{coordinates.module}-{version} not found")
        for repository in sources.repositories:
            status, error = self.client.download_artifact(repository, coordinates, version, Path(target))
            if status == 200:
                return ResolvedLocation.from_path(target)
            kind = FailureKind.CONNECTIVITY if status == 0 else FailureKind.NOT_FOUND
            failure = LocateFailure(
                f"{coordinates.module}-{version} unavailable in {repository.root}: {error}", kind
            )
        return failure
