"""Pipeline orchestration for score metadata extraction."""

from .orchestrator import MetadataExtractor, extract_metadata
from .batch import extract_many

__all__ = [
    "MetadataExtractor",
    "extract_metadata",
    "extract_many",
]
