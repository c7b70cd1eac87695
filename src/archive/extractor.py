"""Unpacking of resolved archives into disposable temporary directories."""
from __future__ import annotations

import atexit
import logging
import shutil
import tempfile
import threading
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Set

from constants import Constants, StubRunnerError
from versioning.models import uri_to_path

logger = logging.getLogger(__name__)

# Directories still owned by some bundle; removed at interpreter exit.
_pending_cleanup: Set[Path] = set()
_pending_lock = threading.Lock()


class CorruptArchiveError(StubRunnerError):
    """A located archive could not be read or unpacked."""


def _cleanup_pending() -> None:
    with _pending_lock:
        pending = list(_pending_cleanup)
        _pending_cleanup.clear()
    for directory in pending:
        shutil.rmtree(directory, ignore_errors=True)


atexit.register(_cleanup_pending)


@dataclass
class ExtractedBundle:
    """Unpacked archive contents, owned by whoever received it.

    ``dispose()`` removes the directory; otherwise it is removed at process
    exit when ``cleanup_on_process_exit`` is set.
    """
    directory: Path
    cleanup_on_process_exit: bool = True

    def dispose(self) -> None:
        """Remove the directory now."""
        with _pending_lock:
            _pending_cleanup.discard(self.directory)
        shutil.rmtree(self.directory, ignore_errors=True)

    def keep(self) -> None:
        """Opt out of the process-exit cleanup."""
        with _pending_lock:
            _pending_cleanup.discard(self.directory)
        self.cleanup_on_process_exit = False

    def __enter__(self) -> "ExtractedBundle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()


class ArchiveExtractor:
    """Extracts a zip-compatible archive into a fresh temporary directory."""

    def __init__(self, prefix: str = Constants.TEMP_DIR_PREFIX, base_dir: Optional[str] = None,
                 cleanup_on_process_exit: bool = True):
        self.prefix = prefix
        self.base_dir = base_dir
        self.cleanup_on_process_exit = cleanup_on_process_exit

    def extract(self, uri: str) -> ExtractedBundle:
        """Unpack the archive at ``uri``.

        Raises:
            CorruptArchiveError: if the archive is missing, unreadable or corrupt,
                or holds an entry pointing outside the target directory.
        """
        archive = uri_to_path(uri)
        if archive is None:
            raise CorruptArchiveError(f"Cannot extract non-file location {uri}")

        directory = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.base_dir))
        bundle = ExtractedBundle(directory=directory, cleanup_on_process_exit=self.cleanup_on_process_exit)
        if self.cleanup_on_process_exit:
            with _pending_lock:
                _pending_cleanup.add(directory)

        logger.debug("Unpacking stub from archive [URI: %s]", uri)
        try:
            with zipfile.ZipFile(archive) as zf:
                self._unzip(zf, directory)
        except CorruptArchiveError:
            bundle.dispose()
            raise
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, EOFError) as exc:
            bundle.dispose()
            raise CorruptArchiveError(f"Unable to unpack {archive}: {exc}") from exc
        return bundle

    @staticmethod
    def _unzip(zf: zipfile.ZipFile, directory: Path) -> None:
        root = directory.resolve()
        for info in zf.infolist():
            target = (root / info.filename).resolve()
            if target != root and root not in target.parents:
                raise CorruptArchiveError(f"Archive entry {info.filename!r} escapes the target directory")
            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            with zf.open(info) as src, open(target, "wb") as dst:
                shutil.copyfileobj(src, dst)
