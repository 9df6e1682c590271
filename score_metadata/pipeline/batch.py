"""Concurrent extraction for multi-file imports.

Concurrency is the caller's policy: the pipeline itself never fans out.
Results come back in input order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from ..contracts import ExtractedMetadata
from .orchestrator import MetadataExtractor

logger = logging.getLogger(__name__)


def extract_many(
    pdf_blobs: Sequence[bytes],
    extractor: Optional[MetadataExtractor] = None,
    max_workers: int = 4,
) -> List[ExtractedMetadata]:
    """
    Extract metadata for several PDFs in parallel.

    Args:
        pdf_blobs: Raw PDF contents, one per imported file
        extractor: Shared extractor (a default one is built if None)
        max_workers: Upper bound on concurrent extractions

    Returns:
        One ExtractedMetadata per input, same order
    """
    if not pdf_blobs:
        return []

    extractor = extractor or MetadataExtractor()
    workers = max(1, min(max_workers, len(pdf_blobs)))
    logger.info("Extracting metadata for %d file(s) with %d worker(s)", len(pdf_blobs), workers)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(extractor.extract, pdf_blobs))
