"""Maven repository layout: where artifacts and metadata live on disk and remotely."""
from __future__ import annotations

from pathlib import Path
from typing import List

from constants import Constants
from versioning.models import DependencyCoordinates, RemoteRepository


def group_path(group: str) -> str:
    return group.replace(".", "/")


def artifact_file_name(coordinates: DependencyCoordinates, version: str) -> str:
    """``<module>-<version>[-<classifier>].<extension>``"""
    name = f"{coordinates.module}-{version}"
    if coordinates.classifier:
        name += f"-{coordinates.classifier}"
    return f"{name}.{coordinates.extension}"


def module_dir(local_repository: Path, coordinates: DependencyCoordinates) -> Path:
    """Cache directory owning every version of a module."""
    return Path(local_repository).joinpath(*coordinates.group.split("."), coordinates.module)


def artifact_path(local_repository: Path, coordinates: DependencyCoordinates, version: str) -> Path:
    return module_dir(local_repository, coordinates) / version / artifact_file_name(coordinates, version)


def cached_metadata_path(
    local_repository: Path, coordinates: DependencyCoordinates, repository: RemoteRepository
) -> Path:
    """Local copy of a remote repository's metadata, named after the repository id."""
    return module_dir(local_repository, coordinates) / f"maven-metadata-{repository.id}.xml"


def remote_metadata_url(repository: RemoteRepository, coordinates: DependencyCoordinates) -> str:
    return (
        f"{repository.base}/{group_path(coordinates.group)}/{coordinates.module}/"
        f"{Constants.METADATA_FILE}"
    )


def remote_artifact_url(
    repository: RemoteRepository, coordinates: DependencyCoordinates, version: str
) -> str:
    return (
        f"{repository.base}/{group_path(coordinates.group)}/{coordinates.module}/"
        f"{version}/{artifact_file_name(coordinates, version)}"
    )


def cached_versions(local_repository: Path, coordinates: DependencyCoordinates) -> List[str]:
    """Versions whose artifact file is present in the local cache."""
    root = module_dir(local_repository, coordinates)
    if not root.is_dir():
        return []
    return [
        child.name
        for child in root.iterdir()
        if child.is_dir() and (child / artifact_file_name(coordinates, child.name)).is_file()
    ]
