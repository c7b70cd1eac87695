"""Maven repository access: layout, metadata, remote client and artifact locator."""

from .locator import ArtifactLocator, MavenArtifactLocator

__all__ = ["ArtifactLocator", "MavenArtifactLocator"]
