"""Score metadata extraction pipeline.

Ties the stages together for one PDF:
1. Rasterize page 1 and read PDF document attributes
2. OCR the raster into page-relative regions
3. Generative refinement (only when a model is available)
4. Geometric/lexical heuristics
5. Fuse and normalize into ExtractedMetadata

The pipeline only proposes values; it never persists anything. Every
stage degrades to "no evidence" on failure and extract() never raises.

Usage:
    from score_metadata.pipeline import MetadataExtractor

    extractor = MetadataExtractor()
    with open("score.pdf", "rb") as f:
        metadata = extractor.extract(f.read())

    print(metadata.title, metadata.composer)
"""

import asyncio
import logging
import time
from typing import List, Optional, Sequence

from ..config import Config, default_config
from ..contracts import ExtractedMetadata, HeuristicResult, OCRRegion, PageRaster
from ..extractors.evidence_merger import merge_evidence
from ..extractors.heuristics import extract_heuristic
from ..extractors.llm_extractor import (
    GenerativeMetadataModel,
    OpenAIMetadataModel,
    refine_with_llm,
    refine_with_llm_async,
)
from ..extractors.names import NameTagger, SpacyNameTagger
from ..extractors.ocr_adapter import OCRAdapter, TextRecognizer
from ..utils.pdf_render import rasterize_pdf

logger = logging.getLogger(__name__)


class MetadataExtractor:
    """
    Extracts title, composer, instruments, key and time signature from PDFs.

    Holds engine handles only (OCR reader, NER pipeline, model client);
    each extract() call is otherwise independent, so one instance can
    serve concurrent calls for different files.

    Attributes:
        config: Pipeline configuration
        ocr: Text recognizer (EasyOCR by default)
        name_tagger: Personal-name tagger (spaCy by default)
        llm: Generative backend, or None to always use heuristics
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        ocr: Optional[TextRecognizer] = None,
        name_tagger: Optional[NameTagger] = None,
        llm: Optional[GenerativeMetadataModel] = None,
    ):
        self.config = config or default_config
        self.ocr = ocr if ocr is not None else OCRAdapter(self.config)
        self.name_tagger = name_tagger if name_tagger is not None else SpacyNameTagger(config=self.config)
        if llm is None and self.config.use_llm:
            llm = OpenAIMetadataModel(self.config)
        self.llm = llm

    def _recognize(self, raster: Optional[PageRaster]) -> List[OCRRegion]:
        if raster is None:
            return []
        try:
            regions = self.ocr.recognize(raster)
        except Exception as e:
            logger.warning("OCR failed: %s", e)
            return []
        if not regions:
            logger.debug("No OCR regions recognized")
            return []
        return list(regions)

    def _heuristics(self, regions: Sequence[OCRRegion]) -> HeuristicResult:
        try:
            return extract_heuristic(regions, self.name_tagger, self.config)
        except Exception as e:
            logger.warning("Heuristic extraction failed: %s", e)
            return HeuristicResult()

    def extract(self, pdf_bytes: bytes) -> ExtractedMetadata:
        """
        Propose metadata for one PDF.

        Args:
            pdf_bytes: Raw PDF file contents

        Returns:
            ExtractedMetadata; all fields absent if nothing could be read
        """
        start = time.time()
        try:
            attributes, raster = rasterize_pdf(pdf_bytes, self.config)
            regions = self._recognize(raster)
            generative = refine_with_llm(regions, attributes, self.llm, self.config)
            heuristic = self._heuristics(regions)
            metadata = merge_evidence(attributes, heuristic, generative)
        except Exception:
            logger.exception("Metadata extraction failed; returning empty metadata")
            return ExtractedMetadata()

        logger.debug(
            "Extracted metadata in %.2fs (%d regions, generative=%s)",
            time.time() - start, len(regions), generative is not None,
        )
        return metadata

    async def extract_async(self, pdf_bytes: bytes) -> ExtractedMetadata:
        """
        Async extract(): CPU-bound stages run in worker threads.

        Cancelling the awaiting task cancels the extraction; the
        cancellation is re-raised rather than turned into empty metadata.
        """
        try:
            attributes, raster = await asyncio.to_thread(rasterize_pdf, pdf_bytes, self.config)
            regions = await asyncio.to_thread(self._recognize, raster)
            generative = await refine_with_llm_async(regions, attributes, self.llm, self.config)
            heuristic = await asyncio.to_thread(self._heuristics, regions)
            return merge_evidence(attributes, heuristic, generative)
        except Exception:
            logger.exception("Metadata extraction failed; returning empty metadata")
            return ExtractedMetadata()


def extract_metadata(pdf_bytes: bytes, config: Optional[Config] = None) -> ExtractedMetadata:
    """
    One-shot convenience wrapper.

    Builds a fresh MetadataExtractor (and its engines) per call; reuse a
    MetadataExtractor when processing many files.
    """
    return MetadataExtractor(config=config).extract(pdf_bytes)
