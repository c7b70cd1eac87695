"""Removal of cached version metadata after a remote resolution."""
from __future__ import annotations

import logging
import os
from typing import Tuple

from constants import Constants
from versioning.models import ResolvedLocation

logger = logging.getLogger(__name__)


class FreshnessInvalidator:
    """Deletes cached metadata files of the module owning a resolved artifact.

    A cached ``maven-metadata-*.xml`` pins what "latest" means for a module;
    removing it forces the next lookup to consult the remote repository again.
    Deletion is best-effort: failures are logged and never raised.
    """

    def __init__(self, extensions: Tuple[str, ...] = Constants.METADATA_EXTENSIONS):
        self.extensions = tuple(extensions)

    def invalidate(self, location: ResolvedLocation) -> int:
        """Remove metadata files under the module directory of ``location``.

        Returns:
            Number of files removed.
        """
        artifact = location.path
        if artifact is None:
            logger.warning("Cannot invalidate metadata for non-file location %s", location.uri)
            return 0

        # <module>/<version>/<artifact file>
        module_root = artifact.parent.parent
        if not module_root.is_dir():
            logger.warning("Module directory %s does not exist, nothing to invalidate", module_root)
            return 0

        removed = 0
        for dirpath, _, filenames in os.walk(module_root):
            for name in filenames:
                if not name.endswith(self.extensions):
                    continue
                path = os.path.join(dirpath, name)
                try:
                    os.remove(path)
                    removed += 1
                    logger.info("Removing %s", path)
                except OSError as exc:
                    logger.error("Unable to remove cached metadata %s: %s", path, exc)
        return removed
