"""Prompts for generative metadata extraction."""

from .metadata_extraction import (
    METADATA_EXTRACTION_SYSTEM,
    METADATA_OUTPUT_SCHEMA,
    METADATA_USER_TEMPLATE,
)

__all__ = [
    "METADATA_EXTRACTION_SYSTEM",
    "METADATA_OUTPUT_SCHEMA",
    "METADATA_USER_TEMPLATE",
]
