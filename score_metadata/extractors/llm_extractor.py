"""Generative refinement of score metadata from OCR regions.

An optional pass: when a language model is reachable it re-derives
title, composer and instruments from a tagged rendering of the OCR
regions. Any failure (unavailable, timeout, malformed output, model
error) yields None so the caller falls back to the heuristics.

The default backend talks to any OpenAI-compatible chat endpoint, so a
local server (Ollama, llama.cpp, vLLM) works by setting llm_base_url.

Usage:
    from score_metadata.extractors.llm_extractor import OpenAIMetadataModel, refine_with_llm

    model = OpenAIMetadataModel()
    result = refine_with_llm(regions, attributes, model)
"""

import asyncio
import json
import logging
import re
import statistics
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, List, Optional, Protocol, Sequence

from ..config import Config, default_config
from ..contracts import DocumentAttributes, GenerativeResult, OCRRegion
from .prompts import (
    METADATA_EXTRACTION_SYSTEM,
    METADATA_OUTPUT_SCHEMA,
    METADATA_USER_TEMPLATE,
)

logger = logging.getLogger(__name__)


class GenerativeMetadataModel(Protocol):
    """Anything that can answer a metadata prompt with a structured result."""

    def is_available(self) -> bool:
        ...

    def generate(self, prompt: str) -> Optional[GenerativeResult]:
        ...


# ──────────────────────────────────────────────────────────────
# Prompt construction
# ──────────────────────────────────────────────────────────────

def vertical_band(mid_y: float, config: Optional[Config] = None) -> str:
    cfg = config or default_config
    if mid_y > cfg.band_top:
        return "Top"
    if mid_y > cfg.band_middle:
        return "Middle"
    return "Bottom"


def horizontal_band(mid_x: float, config: Optional[Config] = None) -> str:
    cfg = config or default_config
    if mid_x < cfg.band_left:
        return "Left"
    if mid_x < cfg.band_center:
        return "Center"
    return "Right"


def size_band(height: float, median_height: float, config: Optional[Config] = None) -> str:
    """Size relative to the median line height of the page."""
    cfg = config or default_config
    if median_height <= 0:
        return "Medium"
    ratio = height / median_height
    if ratio > cfg.size_large_ratio:
        return "Large"
    if ratio < cfg.size_small_ratio:
        return "Small"
    return "Medium"


def format_regions_for_prompt(regions: Sequence[OCRRegion], config: Optional[Config] = None) -> str:
    """
    Render regions top-to-bottom as tagged lines.

    Example line: [Top, Center, Large] "Moonlight Sonata"

    The median (not mean) height is the size reference so a few
    misread staff lines cannot skew every band.
    """
    cfg = config or default_config
    if not regions:
        return ""

    median_height = statistics.median(r.bbox.height for r in regions)
    ordered = sorted(regions, key=lambda r: r.bbox.mid_y, reverse=True)

    lines = []
    for region in ordered[: cfg.llm_max_regions]:
        tags = ", ".join([
            vertical_band(region.bbox.mid_y, cfg),
            horizontal_band(region.bbox.mid_x, cfg),
            size_band(region.bbox.height, median_height, cfg),
        ])
        lines.append(f'[{tags}] "{region.text}"')
    return "\n".join(lines)


def format_pdf_metadata(attributes: Optional[DocumentAttributes]) -> str:
    attributes = attributes or DocumentAttributes()
    lines = [
        f"Title: {attributes.title or 'not available'}",
        f"Author: {attributes.author or 'not available'}",
    ]
    if attributes.subject:
        lines.append(f"Subject: {attributes.subject}")
    if attributes.creator:
        lines.append(f"Creator App: {attributes.creator}")
    return "\n".join(lines)


def build_prompt(
    regions: Sequence[OCRRegion],
    attributes: Optional[DocumentAttributes] = None,
    config: Optional[Config] = None,
) -> str:
    return METADATA_USER_TEMPLATE.format(
        pdf_metadata=format_pdf_metadata(attributes),
        ocr_text=format_regions_for_prompt(regions, config),
    )


# ──────────────────────────────────────────────────────────────
# Response parsing
# ──────────────────────────────────────────────────────────────

def _optional_str(value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Expected string for {field_name!r}, got {type(value).__name__}")
    return value


def parse_response(text: str) -> GenerativeResult:
    """
    Parse the model's JSON answer into a GenerativeResult.

    Raises:
        ValueError: If the text is not a JSON object of the expected shape
    """
    cleaned = (text or "").strip()
    if cleaned.startswith("```"):
        cleaned = re.sub(r"^```(?:json)?\s*", "", cleaned)
        cleaned = re.sub(r"\s*```$", "", cleaned)

    parsed = json.loads(cleaned)
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected JSON object, got {type(parsed).__name__}")

    instruments = parsed.get("instruments") or []
    if not isinstance(instruments, list) or not all(isinstance(i, str) for i in instruments):
        raise ValueError("Expected 'instruments' to be a list of strings")

    return GenerativeResult(
        title=_optional_str(parsed.get("title"), "title"),
        composer=_optional_str(parsed.get("composer"), "composer"),
        instruments=list(instruments),
    )


# ──────────────────────────────────────────────────────────────
# OpenAI-compatible backend
# ──────────────────────────────────────────────────────────────

class OpenAIMetadataModel:
    """
    Chat-completions backend constrained to the metadata JSON schema.

    The client is built with max_retries=0: a failed call degrades to
    the heuristics immediately.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        api_key: Optional[str] = None,
        client: Any = None,
    ):
        self.config = config or default_config
        self.api_key = api_key or self.config.llm_api_key  # None = uses OPENAI_API_KEY env var
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            from openai import OpenAI

            self._client = OpenAI(
                api_key=self.api_key,
                base_url=self.config.llm_base_url,
                timeout=self.config.llm_timeout_seconds,
                max_retries=0,
            )
        return self._client

    def is_available(self) -> bool:
        """True when enabled and the server lists the configured model."""
        if not self.config.use_llm:
            return False
        try:
            served = {m.id for m in self._get_client().models.list()}
        except Exception as e:
            logger.debug("Language model %s unavailable: %s", self.config.llm_model, e)
            return False
        if self.config.llm_model not in served:
            logger.debug("Language model %s not served (have: %s)", self.config.llm_model, sorted(served))
            return False
        return True

    def generate(self, prompt: str) -> Optional[GenerativeResult]:
        cfg = self.config
        response = self._get_client().chat.completions.create(
            model=cfg.llm_model,
            messages=[
                {"role": "system", "content": METADATA_EXTRACTION_SYSTEM},
                {"role": "user", "content": prompt},
            ],
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": "score_metadata",
                    "strict": True,
                    "schema": METADATA_OUTPUT_SCHEMA,
                },
            },
            max_tokens=cfg.llm_max_tokens,
            temperature=cfg.llm_temperature,
        )

        raw_text = response.choices[0].message.content
        if not raw_text:
            raise ValueError("Empty response from language model")
        return parse_response(raw_text)


# ──────────────────────────────────────────────────────────────
# Refinement entry points
# ──────────────────────────────────────────────────────────────

def _eligible(regions: Optional[Sequence[OCRRegion]], model: Optional[GenerativeMetadataModel]) -> bool:
    if not regions or model is None:
        return False
    try:
        return bool(model.is_available())
    except Exception as e:
        logger.debug("Availability check failed: %s", e)
        return False


def refine_with_llm(
    regions: Optional[Sequence[OCRRegion]],
    attributes: Optional[DocumentAttributes],
    model: Optional[GenerativeMetadataModel],
    config: Optional[Config] = None,
) -> Optional[GenerativeResult]:
    """
    Run the generative pass with a bounded wait.

    Args:
        regions: OCR regions (the pass is skipped when empty)
        attributes: PDF document attributes for prompt context
        model: Generative backend, None to skip
        config: Config override

    Returns:
        GenerativeResult, or None if skipped or failed
    """
    cfg = config or default_config
    if not _eligible(regions, model):
        return None

    prompt = build_prompt(regions, attributes, cfg)
    executor = ThreadPoolExecutor(max_workers=1)
    try:
        future = executor.submit(model.generate, prompt)
        return future.result(timeout=cfg.llm_timeout_seconds)
    except FutureTimeoutError:
        logger.info("Language model timed out after %.1fs; using heuristics", cfg.llm_timeout_seconds)
        return None
    except Exception as e:
        logger.info("Language model refinement failed; using heuristics: %s", e)
        return None
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


async def refine_with_llm_async(
    regions: Optional[Sequence[OCRRegion]],
    attributes: Optional[DocumentAttributes],
    model: Optional[GenerativeMetadataModel],
    config: Optional[Config] = None,
) -> Optional[GenerativeResult]:
    """Async variant of refine_with_llm. Cancellation propagates to the caller."""
    cfg = config or default_config
    eligible = await asyncio.to_thread(_eligible, regions, model)
    if not eligible:
        return None

    prompt = build_prompt(regions, attributes, cfg)
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(model.generate, prompt),
            timeout=cfg.llm_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.info("Language model timed out after %.1fs; using heuristics", cfg.llm_timeout_seconds)
        return None
    except Exception as e:
        logger.info("Language model refinement failed; using heuristics: %s", e)
        return None
