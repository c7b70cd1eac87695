"""Configuration file loading and CLI overrides for runtime tunables.

Precedence, lowest to highest: built-in defaults (``Constants``, which already
honor STUBRUNNER_LOCAL_REPOSITORY), the config file, then CLI flags.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

import yaml

from constants import Constants

logger = logging.getLogger(__name__)

KNOWN_KEYS = (
    "local_repository",
    "repository_root",
    "repository_id",
    "request_timeout",
    "http_retry_max",
)


def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    """Load configuration from a YAML or JSON file.

    Args:
        config_path: Path to the config file.

    Returns:
        Configuration dict; empty when no path was given, the file is missing,
        or it cannot be parsed.
    """
    if not config_path:
        return {}

    if not os.path.isfile(config_path):
        logger.warning("Config file not found: %s", config_path)
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Failed to load config: %s", e)
        return {}

    if not isinstance(data, dict):
        return {}
    data = data.get("stubrunner", data)
    unknown = sorted(set(data) - set(KNOWN_KEYS))
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
    return {k: v for k, v in data.items() if k in KNOWN_KEYS}


def apply_config_overrides(args, config: Dict[str, Any]) -> None:
    """Merge config values into ``args`` and push tunables into ``Constants``.

    CLI values that were explicitly given win over config file values.
    """
    if not getattr(args, "LOCAL_REPOSITORY", None) and config.get("local_repository"):
        args.LOCAL_REPOSITORY = os.path.expanduser(str(config["local_repository"]))
    if not getattr(args, "REPOSITORY_ROOT", None) and config.get("repository_root"):
        args.REPOSITORY_ROOT = str(config["repository_root"])
    if not getattr(args, "REPOSITORY_ID", None) and config.get("repository_id"):
        args.REPOSITORY_ID = str(config["repository_id"])

    timeout = getattr(args, "REQUEST_TIMEOUT", None)
    if timeout is None:
        timeout = config.get("request_timeout")
    if timeout is not None:
        try:
            Constants.REQUEST_TIMEOUT = int(timeout)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric request_timeout: %r", timeout)

    retries = config.get("http_retry_max")
    if retries is not None:
        try:
            Constants.HTTP_RETRY_MAX = max(1, int(retries))
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric http_retry_max: %r", retries)
