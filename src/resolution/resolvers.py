"""Dependency resolvers: the order in which lookup sources are tried.

* ``LocalOnlyResolver`` only looks in the local cache.
* ``RemoteResolver`` registers the remote repository, resolves, drops the
  cached "latest" metadata and resolves once more; the second answer is the
  one returned, since the first may have come from a stale pointer.
* ``LocalFirstThenRemoteResolver`` tries the local cache and falls back to
  the remote path.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from common.logging_utils import extra_context, is_debug_enabled
from registry.maven.locator import ArtifactLocator, MavenArtifactLocator
from resolution.invalidator import FreshnessInvalidator
from versioning.models import (
    DependencyCoordinates,
    FailureKind,
    LocateFailure,
    LookupSources,
    ResolvedLocation,
)

logger = logging.getLogger(__name__)


class DependencyResolver(ABC):
    """Base class of resolvers providing the location of a dependency."""

    def __init__(
        self,
        locator: Optional[ArtifactLocator] = None,
        local_repository: Union[str, Path, None] = None,
    ):
        self.locator = locator or MavenArtifactLocator()
        self.local_repository = local_repository

    def _local_sources(self) -> LookupSources:
        return LookupSources.local_only(self.local_repository)

    @abstractmethod
    def resolve(self, repository_root: str, coordinates: DependencyCoordinates) -> Optional[ResolvedLocation]:
        """Returns the location of a dependency, or None when it cannot be resolved.

        Args:
            repository_root: root of the remote repository where the dependency may be found
            coordinates: the dependency to search for
        """


class LocalOnlyResolver(DependencyResolver):
    """Resolver restricted to the local artifact cache."""

    def resolve(self, repository_root: str, coordinates: DependencyCoordinates) -> Optional[ResolvedLocation]:
        logger.info("Resolving dependency %s location in local repository...", coordinates)
        try:
            result = self.locator.locate(self._local_sources(), coordinates)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.warning("Unable to find dependency %s in local repository: %s", coordinates, exc)
            return None
        if isinstance(result, LocateFailure):
            logger.warning("Unable to find dependency %s in local repository", coordinates)
            logger.debug("Local lookup of %s failed: %s", coordinates, result.reason)
            return None
        return result


class RemoteResolver(DependencyResolver):
    """Resolver fetching from the remote repository, bypassing cached "latest" pointers."""

    def __init__(
        self,
        locator: Optional[ArtifactLocator] = None,
        local_repository: Union[str, Path, None] = None,
        invalidator: Optional[FreshnessInvalidator] = None,
        repository_id: Optional[str] = None,
    ):
        super().__init__(locator, local_repository)
        self.invalidator = invalidator or FreshnessInvalidator()
        self.repository_id = repository_id

    def resolve(self, repository_root: str, coordinates: DependencyCoordinates) -> Optional[ResolvedLocation]:
        try:
            return self._resolve_remote(repository_root, coordinates)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            self._failure_handler(repository_root, f"connection error -> {exc}", exc)
            return None

    def _resolve_remote(self, repository_root: str, coordinates: DependencyCoordinates) -> Optional[ResolvedLocation]:
        sources = self.locator.register_repository(
            self._local_sources(), repository_root, self.repository_id
        )
        logger.info("Resolving dependency %s location in remote repository...", coordinates)
        first = self.locator.locate(sources, coordinates)
        if isinstance(first, LocateFailure):
            self._report(repository_root, first)
            return None

        self.invalidator.invalidate(first)

        second = self.locator.locate(sources, coordinates)
        if isinstance(second, LocateFailure):
            self._report(repository_root, second)
            return None
        if is_debug_enabled(logger):
            logger.debug(
                "Remote resolution finished",
                extra=extra_context(
                    event="function_exit",
                    component="resolver",
                    action="resolve_remote",
                    outcome="found",
                    changed=first.uri != second.uri
                )
            )
        return second

    def _report(self, repository_root: str, failure: LocateFailure) -> None:
        if failure.kind == FailureKind.CONNECTIVITY:
            self._failure_handler(repository_root, failure.reason)
        else:
            logger.warning(
                "Unable to resolve dependency in stub repository [%s]. Reason: [%s]",
                repository_root,
                failure.reason,
            )

    @staticmethod
    def _failure_handler(repository_root: str, reason: str, cause: Optional[Exception] = None) -> None:
        logger.error(
            "Unable to resolve dependency in stub repository [%s]. Reason: [%s]",
            repository_root,
            reason,
            exc_info=cause,
        )


class LocalFirstThenRemoteResolver(DependencyResolver):
    """Resolver checking the local cache first and the remote repository second."""

    def __init__(
        self,
        locator: Optional[ArtifactLocator] = None,
        local_repository: Union[str, Path, None] = None,
        invalidator: Optional[FreshnessInvalidator] = None,
        repository_id: Optional[str] = None,
    ):
        super().__init__(locator, local_repository)
        self.local = LocalOnlyResolver(self.locator, local_repository)
        self.remote = RemoteResolver(self.locator, local_repository, invalidator, repository_id)

    def resolve(self, repository_root: str, coordinates: DependencyCoordinates) -> Optional[ResolvedLocation]:
        found = self.local.resolve(repository_root, coordinates)
        if found is not None:
            return found
        logger.warning(
            "Unable to find dependency %s in local repository, trying %s", coordinates, repository_root
        )
        return self.remote.resolve(repository_root, coordinates)


def build_resolver(
    skip_local_cache: bool,
    *,
    offline: bool = False,
    locator: Optional[ArtifactLocator] = None,
    local_repository: Union[str, Path, None] = None,
    invalidator: Optional[FreshnessInvalidator] = None,
    repository_id: Optional[str] = None,
) -> DependencyResolver:
    """Pick the resolver matching the requested lookup policy.

    ``offline`` wins over ``skip_local_cache``.
    """
    if offline:
        return LocalOnlyResolver(locator, local_repository)
    if skip_local_cache:
        return RemoteResolver(locator, local_repository, invalidator, repository_id)
    return LocalFirstThenRemoteResolver(locator, local_repository, invalidator, repository_id)
