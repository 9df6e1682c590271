"""Metadata extraction stages: OCR, heuristics, name filter, generative refinement, fusion."""

from .ocr_adapter import OCRAdapter, MockOCRAdapter, TextRecognizer, poly_to_unit_bbox
from .patterns import find_key, find_time_signature, match_key, match_time_signature
from .names import NameTagger, SpacyNameTagger, is_plausible_name, strip_attribution
from .heuristics import extract_heuristic, find_title, find_composer
from .llm_extractor import (
    GenerativeMetadataModel,
    OpenAIMetadataModel,
    build_prompt,
    refine_with_llm,
    refine_with_llm_async,
)
from .evidence_merger import merge_evidence

__all__ = [
    "OCRAdapter",
    "MockOCRAdapter",
    "TextRecognizer",
    "poly_to_unit_bbox",
    "find_key",
    "find_time_signature",
    "match_key",
    "match_time_signature",
    "NameTagger",
    "SpacyNameTagger",
    "is_plausible_name",
    "strip_attribution",
    "extract_heuristic",
    "find_title",
    "find_composer",
    "GenerativeMetadataModel",
    "OpenAIMetadataModel",
    "build_prompt",
    "refine_with_llm",
    "refine_with_llm_async",
    "merge_evidence",
]
