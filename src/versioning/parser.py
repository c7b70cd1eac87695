"""Token parsing utilities for artifact coordinates."""

from typing import Optional

from .models import DependencyCoordinates, VersionSelector

_LATEST_MARKERS = ("", "+", "*", "latest", "latest.release")


def _is_latest(spec: Optional[str]) -> bool:
    return spec is None or spec.strip().lower() in _LATEST_MARKERS


def parse_coordinates(token: str) -> DependencyCoordinates:
    """Parse ``group:module[:version[:classifier]]`` into coordinates.

    A missing version, ``+``, ``*`` or ``latest`` selects the latest version.

    Raises:
        ValueError: if the token does not carry at least group and module.
    """
    parts = [p.strip() for p in token.strip().split(':')]
    if len(parts) < 2 or len(parts) > 4 or not parts[0] or not parts[1]:
        raise ValueError(
            f"Invalid coordinates '{token}', expected group:module[:version[:classifier]]"
        )

    group, module = parts[0], parts[1]
    version = parts[2] if len(parts) > 2 else None
    classifier = parts[3] if len(parts) > 3 and parts[3] else None

    if _is_latest(version):
        return DependencyCoordinates(
            group=group,
            module=module,
            version_selector=VersionSelector.LATEST,
            classifier=classifier,
        )
    return DependencyCoordinates(
        group=group,
        module=module,
        version_selector=VersionSelector.EXACT,
        version=version,
        classifier=classifier,
    )
