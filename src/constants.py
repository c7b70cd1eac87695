"""Constants used in the project."""

import os
from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    USAGE_ERROR = 2
    NOT_FOUND = 4


ENV_LOCAL_REPOSITORY = "STUBRUNNER_LOCAL_REPOSITORY"


class StubRunnerError(Exception):
    """Base class for errors raised by stubrunner."""


def _default_local_repository() -> str:
    """Return the local artifact cache, honoring the environment override."""
    override = os.environ.get(ENV_LOCAL_REPOSITORY)
    if override and override.strip():
        return os.path.expanduser(override.strip())
    return os.path.join(os.path.expanduser("~"), ".m2", "repository")


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "STUBRUNNER_LOG_LEVEL"

    LOCAL_REPOSITORY = _default_local_repository()
    REPOSITORY_NAME = "dependency-repository"
    TEMP_DIR_PREFIX = "stub-runner"
    DEFAULT_EXTENSION = "jar"
    METADATA_FILE = "maven-metadata.xml"
    METADATA_EXTENSIONS = (".xml",)
    SNAPSHOT_SUFFIX = "-SNAPSHOT"

    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    DOWNLOAD_CHUNK_SIZE = 64 * 1024
    USER_AGENT = "stubrunner/1.0"
