"""Archive extraction."""

from .extractor import ArchiveExtractor, CorruptArchiveError, ExtractedBundle

__all__ = ["ArchiveExtractor", "CorruptArchiveError", "ExtractedBundle"]
