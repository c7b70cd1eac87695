"""Shared fixtures: a throwaway local cache and a file-backed remote repository."""
from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Dict, Iterable, Optional

import pytest

from constants import Constants


def make_jar(path: Path, files: Dict[str, bytes]) -> Path:
    """Write a zip archive holding ``files`` (relative name -> content)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return path


def metadata_xml(group: str, module: str, versions: Iterable[str], latest: Optional[str] = None) -> str:
    versions = list(versions)
    latest = latest or (versions[-1] if versions else "")
    body = "".join(f"<version>{v}</version>" for v in versions)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f"<metadata><groupId>{group}</groupId><artifactId>{module}</artifactId>"
        f"<versioning><latest>{latest}</latest><release>{latest}</release>"
        f"<versions>{body}</versions></versioning></metadata>"
    )


class FileRepository:
    """A Maven-layout directory used as a remote repository via ``file://``."""

    def __init__(self, root: Path):
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    @property
    def uri(self) -> str:
        return self.root.resolve().as_uri()

    def module_dir(self, group: str, module: str) -> Path:
        return self.root.joinpath(*group.split("."), module)

    def publish(self, group: str, module: str, version: str, files: Dict[str, bytes],
                classifier: Optional[str] = None, update_metadata: bool = True) -> Path:
        suffix = f"-{classifier}" if classifier else ""
        jar = make_jar(
            self.module_dir(group, module) / version / f"{module}-{version}{suffix}.jar", files
        )
        if update_metadata:
            versions = sorted(
                p.name for p in self.module_dir(group, module).iterdir() if p.is_dir()
            )
            (self.module_dir(group, module) / "maven-metadata.xml").write_text(
                metadata_xml(group, module, versions, latest=version), encoding="utf-8"
            )
        return jar


@pytest.fixture
def local_repo(tmp_path) -> Path:
    path = tmp_path / "m2" / "repository"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def remote_repo(tmp_path) -> FileRepository:
    return FileRepository(tmp_path / "remote")


@pytest.fixture
def cache_module(local_repo):
    """Factory placing an artifact (and optionally cached metadata) in the local cache."""
    def _place(group: str, module: str, version: str, files: Dict[str, bytes],
               cached_metadata_versions: Optional[Iterable[str]] = None) -> Path:
        module_dir = local_repo.joinpath(*group.split("."), module)
        jar = make_jar(module_dir / version / f"{module}-{version}.jar", files)
        if cached_metadata_versions is not None:
            (module_dir / f"maven-metadata-{Constants.REPOSITORY_NAME}.xml").write_text(
                metadata_xml(group, module, cached_metadata_versions), encoding="utf-8"
            )
        return jar
    return _place


@pytest.fixture(autouse=True)
def no_http_backoff(monkeypatch):
    """Keep retry loops fast."""
    monkeypatch.setattr(Constants, "HTTP_RETRY_BASE_DELAY_SEC", 0)
    monkeypatch.setattr(Constants, "HTTP_RETRY_MAX", 3)
    monkeypatch.setattr(Constants, "REQUEST_TIMEOUT", 30)
