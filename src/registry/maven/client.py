"""Remote Maven repository client.

Reads ``maven-metadata.xml`` documents and downloads artifacts from a remote
repository. ``http``/``https`` roots go through the shared HTTP helpers;
``file`` roots are read straight from disk so a directory can serve as a
repository.

Every call answers with an HTTP-like status: 200 on success, 404 when the
resource does not exist and 0 when the repository could not be reached.
"""
from __future__ import annotations

import logging
import os
import shutil
import urllib.parse
from pathlib import Path
from typing import Optional, Tuple

from common import http_client
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from registry.maven import layout
from versioning.models import DependencyCoordinates, RemoteRepository, uri_to_path

logger = logging.getLogger(__name__)

_HTTP_SCHEMES = ("http", "https")


def _scheme(repository: RemoteRepository) -> str:
    return urllib.parse.urlparse(repository.root).scheme.lower()


def _file_root(repository: RemoteRepository) -> Optional[Path]:
    if _scheme(repository) != "file":
        return None
    return uri_to_path(repository.root)


def _relative(url: str, repository: RemoteRepository) -> str:
    return url[len(repository.base):].lstrip("/")


class MavenRepositoryClient:
    """Talks to one kind of remote repository root (http(s) or file)."""

    def fetch_metadata(
        self, repository: RemoteRepository, coordinates: DependencyCoordinates
    ) -> Tuple[int, str]:
        """Fetch the metadata document of a module.

        Returns:
            Tuple of (status, body). On failure body carries the reason.
        """
        url = layout.remote_metadata_url(repository, coordinates)
        if is_debug_enabled(logger):
            logger.debug(
                "Fetching Maven metadata",
                extra=extra_context(
                    event="function_entry",
                    component="client",
                    action="fetch_metadata",
                    target=safe_url(url),
                    package_manager="maven"
                )
            )

        scheme = _scheme(repository)
        if scheme in _HTTP_SCHEMES:
            status, _, text = http_client.robust_get(url, headers={"Accept": "application/xml"})
            if status == 200:
                return 200, text
            if status == 0:
                return 0, text
            return status, f"HTTP {status} for {safe_url(url)}"

        if scheme == "file":
            root = _file_root(repository)
            if root is None or not root.is_dir():
                return 0, f"repository root {repository.root} is not reachable"
            path = root / _relative(url, repository)
            if not path.is_file():
                return 404, f"{path} does not exist"
            try:
                return 200, path.read_text(encoding="utf-8")
            except OSError as exc:
                return 0, f"unable to read {path}: {exc}"

        return 0, f"unsupported repository scheme '{scheme}' in {safe_url(repository.root)}"

    def download_artifact(
        self,
        repository: RemoteRepository,
        coordinates: DependencyCoordinates,
        version: str,
        destination: Path,
    ) -> Tuple[int, Optional[str]]:
        """Copy an artifact from the repository into ``destination``.

        Returns:
            Tuple of (status, error_message).
        """
        url = layout.remote_artifact_url(repository, coordinates, version)
        logger.info("Downloading %s", safe_url(url))
        destination.parent.mkdir(parents=True, exist_ok=True)

        scheme = _scheme(repository)
        if scheme in _HTTP_SCHEMES:
            return http_client.robust_download(url, str(destination))

        if scheme == "file":
            root = _file_root(repository)
            if root is None or not root.is_dir():
                return 0, f"repository root {repository.root} is not reachable"
            source = root / _relative(url, repository)
            if not source.is_file():
                return 404, f"{source} does not exist"
            partial = f"{destination}.part"
            try:
                shutil.copyfile(source, partial)
                os.replace(partial, destination)
            except OSError as exc:
                return 0, f"unable to copy {source}: {exc}"
            return 200, None

        return 0, f"unsupported repository scheme '{scheme}' in {safe_url(repository.root)}"
