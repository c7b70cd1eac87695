"""Data models for artifact coordinates and resolution outcomes."""

from __future__ import annotations

import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

from constants import Constants


class VersionSelector(Enum):
    """How the version of an artifact is chosen."""
    EXACT = "exact"
    LATEST = "latest"


class FailureKind(Enum):
    """Why a locate attempt produced no artifact."""
    NOT_FOUND = "not_found"
    CONNECTIVITY = "connectivity"
    INVALID_COORDINATES = "invalid_coordinates"


_FORBIDDEN_PARTS = ("/", "\\", "..")


@dataclass(frozen=True)
class DependencyCoordinates:
    """Identifies exactly one logical artifact family."""
    group: str
    module: str
    version_selector: VersionSelector = VersionSelector.LATEST
    version: Optional[str] = None
    extension: str = Constants.DEFAULT_EXTENSION
    classifier: Optional[str] = None

    def validate(self) -> Optional[str]:
        """Return a reason string when the coordinates are malformed, else None."""
        for name in ("group", "module", "extension"):
            value = getattr(self, name)
            if not value or not value.strip():
                return f"empty {name}"
            if any(part in value for part in _FORBIDDEN_PARTS):
                return f"illegal characters in {name} '{value}'"
        if self.classifier is not None and (
            not self.classifier.strip() or any(p in self.classifier for p in _FORBIDDEN_PARTS)
        ):
            return f"illegal classifier '{self.classifier}'"
        if self.version_selector == VersionSelector.EXACT:
            if not self.version or any(p in self.version for p in _FORBIDDEN_PARTS):
                return "exact version selector requires a valid version"
        return None

    def with_version(self, version: str) -> "DependencyCoordinates":
        """Return EXACT coordinates pinned to ``version``."""
        return DependencyCoordinates(
            group=self.group,
            module=self.module,
            version_selector=VersionSelector.EXACT,
            version=version,
            extension=self.extension,
            classifier=self.classifier,
        )

    def __str__(self) -> str:
        version = self.version if self.version_selector == VersionSelector.EXACT else "+"
        text = f"{self.group}:{self.module}:{version}"
        if self.classifier:
            text += f":{self.classifier}"
        return text


@dataclass(frozen=True)
class RepositorySpec:
    """Where and how to look for an artifact."""
    root: str
    skip_local_cache: bool = False


@dataclass(frozen=True)
class RemoteRepository:
    """A remote lookup source; ``id`` names its cached metadata file."""
    root: str
    id: str = Constants.REPOSITORY_NAME

    @property
    def base(self) -> str:
        return self.root.rstrip("/")


@dataclass(frozen=True)
class LookupSources:
    """Per-call resolution configuration: the local cache plus remote repositories.

    Instances are immutable; registering a repository yields a new object so no
    state leaks between resolution calls.
    """
    local_repository: Path
    repositories: Tuple[RemoteRepository, ...] = field(default_factory=tuple)

    @classmethod
    def local_only(cls, local_repository: Union[str, Path, None] = None) -> "LookupSources":
        return cls(local_repository=Path(local_repository or Constants.LOCAL_REPOSITORY))

    def with_repository(self, repository: RemoteRepository) -> "LookupSources":
        if repository in self.repositories:
            return self
        return LookupSources(
            local_repository=self.local_repository,
            repositories=self.repositories + (repository,),
        )

    @property
    def is_local_only(self) -> bool:
        return not self.repositories


@dataclass(frozen=True)
class ResolvedLocation:
    """Location of a resolved artifact."""
    uri: str

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ResolvedLocation":
        return cls(uri=Path(path).resolve().as_uri())

    @property
    def path(self) -> Optional[Path]:
        """Filesystem path for ``file:`` URIs, None for anything else."""
        return uri_to_path(self.uri)


@dataclass(frozen=True)
class LocateFailure:
    """A located-nothing outcome; never raised, always returned."""
    reason: str
    kind: FailureKind = FailureKind.NOT_FOUND


LocateResult = Union[ResolvedLocation, LocateFailure]


def uri_to_path(uri: str) -> Optional[Path]:
    """Convert a ``file:`` URI (or a bare path) to a Path; None for other schemes."""
    parsed = urllib.parse.urlparse(uri)
    if parsed.scheme == "file":
        return Path(urllib.request.url2pathname(parsed.path))
    if parsed.scheme == "" or (len(parsed.scheme) == 1 and uri[1:3] in (":\\", ":/")):
        return Path(uri)
    return None
