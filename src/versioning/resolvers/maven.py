"""Maven version selection over a candidate list.

Stable releases win over ``-SNAPSHOT`` builds; a SNAPSHOT is only picked when
nothing else is available. When every candidate is a PEP 440 compatible
version ordering follows ``packaging.version``; otherwise all candidates are
ordered the way Maven compares versions, so ``1.0.0.RELEASE`` or ``2.0.0.M1``
style strings still take part.
"""

import functools
import logging
import re
from typing import List, Optional, Tuple, Union

from packaging import version

from constants import Constants

logger = logging.getLogger(__name__)

# Well-known qualifiers, lowest first. "" is a plain release.
_QUALIFIERS = ("alpha", "beta", "milestone", "rc", "snapshot", "", "sp")
_QUALIFIER_ALIASES = {
    "a": "alpha",
    "b": "beta",
    "m": "milestone",
    "cr": "rc",
    "ga": "",
    "final": "",
    "release": "",
}

Item = Union[int, str]


def _split_snapshot(candidate: str) -> Tuple[str, bool]:
    """Return (base version, is_release)."""
    if candidate.endswith(Constants.SNAPSHOT_SUFFIX):
        return candidate[: -len(Constants.SNAPSHOT_SUFFIX)], False
    return candidate, True


def _maven_items(base: str) -> List[Item]:
    items: List[Item] = []
    for token in re.findall(r"\d+|[a-zA-Z]+", base):
        if token.isdigit():
            items.append(int(token))
        else:
            token = token.lower()
            items.append(_QUALIFIER_ALIASES.get(token, token))
    return items


def _qualifier_rank(qualifier: str) -> Tuple[int, int, str]:
    if qualifier in _QUALIFIERS:
        return 0, _QUALIFIERS.index(qualifier), ""
    # unknown qualifiers sort after the known ones, lexically
    return 1, 0, qualifier


def _sign(left, right) -> int:
    return (left > right) - (left < right)


def _compare_item(left: Optional[Item], right: Optional[Item]) -> int:
    """Compare two version items; ``None`` pads the shorter version."""
    if left is None and right is None:
        return 0
    if left is None:
        return -_compare_item(right, left)
    if right is None:
        if isinstance(left, int):
            return _sign(left, 0)
        return _sign(_qualifier_rank(left), _qualifier_rank(""))
    if isinstance(left, int) and isinstance(right, int):
        return _sign(left, right)
    if isinstance(left, int):
        return 1
    if isinstance(right, int):
        return -1
    return _sign(_qualifier_rank(left), _qualifier_rank(right))


def compare_maven_versions(left: str, right: str) -> int:
    """Compare two version strings the way Maven orders them.

    Numeric parts compare as integers and rank above qualifiers. Missing
    trailing parts count as ``0`` or a plain release, so ``1.0``,
    ``1.0.0`` and ``1.0.RELEASE`` are equal.
    """
    left_items, right_items = _maven_items(left), _maven_items(right)
    for index in range(max(len(left_items), len(right_items))):
        result = _compare_item(
            left_items[index] if index < len(left_items) else None,
            right_items[index] if index < len(right_items) else None,
        )
        if result:
            return result
    return 0


def _pep440(base: str) -> Optional[version.Version]:
    try:
        return version.Version(base)
    except version.InvalidVersion:
        return None


class MavenVersionResolver:
    """Picks versions out of Maven metadata or a local cache listing."""

    def pick_latest(self, candidates: List[str]) -> Tuple[Optional[str], int, Optional[str]]:
        """Pick the highest stable (non-SNAPSHOT) version from candidates.

        Returns:
            Tuple of (resolved_version, candidate_count, error_message)
        """
        if not candidates:
            return None, 0, "No versions available"

        usable = sorted({c.strip() for c in candidates if c and c.strip()})
        if not usable:
            return None, len(candidates), "No valid Maven versions found"

        split = {candidate: _split_snapshot(candidate) for candidate in usable}
        parsed = {candidate: _pep440(base) for candidate, (base, _) in split.items()}

        if all(v is not None for v in parsed.values()):
            # releases first, then highest version
            best = max(usable, key=lambda c: (split[c][1], parsed[c]))
        else:
            logger.debug("Ordering %d candidates with Maven version rules", len(usable))

            def _compare(left: str, right: str) -> int:
                (left_base, left_release), (right_base, right_release) = split[left], split[right]
                if left_release != right_release:
                    return 1 if left_release else -1
                return compare_maven_versions(left_base, right_base)

            best = max(usable, key=functools.cmp_to_key(_compare))
        return best, len(candidates), None
