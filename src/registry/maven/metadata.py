"""Parsing of ``maven-metadata.xml`` documents."""
from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import List, Optional


class MetadataParseError(ValueError):
    """Raised when a metadata document cannot be parsed."""


@dataclass
class MavenMetadata:
    """Version information advertised by a repository for one module."""
    group: Optional[str] = None
    module: Optional[str] = None
    latest: Optional[str] = None
    release: Optional[str] = None
    versions: List[str] = field(default_factory=list)

    def candidates(self) -> List[str]:
        """All advertised versions, including latest/release pointers."""
        seen = list(self.versions)
        for pointer in (self.latest, self.release):
            if pointer and pointer not in seen:
                seen.append(pointer)
        return seen


def _text(node: Optional[ET.Element], tag: str) -> Optional[str]:
    if node is None:
        return None
    child = node.find(tag)
    if child is None or child.text is None:
        return None
    value = child.text.strip()
    return value or None


def parse_metadata(text: str) -> MavenMetadata:
    """Parse the XML body of a ``maven-metadata.xml`` file.

    Raises:
        MetadataParseError: if the document is not well-formed XML.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise MetadataParseError(f"malformed maven-metadata.xml: {exc}") from exc

    versioning = root.find("versioning")
    versions: List[str] = []
    if versioning is not None:
        versions_elem = versioning.find("versions")
        if versions_elem is not None:
            for version_elem in versions_elem.findall("version"):
                if version_elem.text and version_elem.text.strip():
                    versions.append(version_elem.text.strip())

    return MavenMetadata(
        group=_text(root, "groupId"),
        module=_text(root, "artifactId"),
        latest=_text(versioning, "latest"),
        release=_text(versioning, "release"),
        versions=versions,
    )
