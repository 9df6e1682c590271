"""Shared fixtures: region builders, engine stubs and in-memory PDFs."""

import time
from typing import Iterable, Optional

import fitz
import pytest

from score_metadata.config import Config
from score_metadata.contracts import BoundingBox, GenerativeResult, OCRRegion


def region_at(text, mid_x, mid_y, width=0.3, height=0.05, confidence=0.9) -> OCRRegion:
    """Build a region from its center point."""
    return OCRRegion(
        text=text,
        bbox=BoundingBox(x=mid_x - width / 2, y=mid_y - height / 2, width=width, height=height),
        confidence=confidence,
    )


class StubTagger:
    """Name tagger that recognizes an explicit set of names."""

    def __init__(self, names: Iterable[str] = ()):
        self.names = set(names)
        self.seen = []

    def is_personal_name(self, text: str) -> bool:
        self.seen.append(text)
        return text in self.names


class FakeLLM:
    """Generative model stub with configurable availability and behavior."""

    def __init__(
        self,
        result: Optional[GenerativeResult] = None,
        available: bool = True,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.result = result
        self.available = available
        self.error = error
        self.delay = delay
        self.prompts = []

    def is_available(self) -> bool:
        return self.available

    def generate(self, prompt: str) -> Optional[GenerativeResult]:
        self.prompts.append(prompt)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def make_region():
    return region_at


@pytest.fixture
def no_llm_config() -> Config:
    return Config(use_llm=False)


@pytest.fixture
def make_pdf():
    """Build PDF bytes in memory with optional metadata and text."""

    def _make(width=612, height=792, title=None, author=None, subject=None, text=None):
        doc = fitz.open()
        page = doc.new_page(width=width, height=height)
        if text:
            page.insert_text((72, 72), text, fontsize=18)
        metadata = {}
        if title is not None:
            metadata["title"] = title
        if author is not None:
            metadata["author"] = author
        if subject is not None:
            metadata["subject"] = subject
        if metadata:
            doc.set_metadata(metadata)
        data = doc.tobytes()
        doc.close()
        return data

    return _make


@pytest.fixture
def score_regions():
    """A typical first page: title, composer, tempo/key line, page number."""
    return [
        region_at("Moonlight  Sonata", 0.5, 0.85, width=0.4, height=0.06, confidence=0.95),
        region_at("Ludwig van Beethoven", 0.8, 0.78, width=0.25, height=0.03, confidence=0.9),
        region_at("Sonata in C# minor, Op. 27 No. 2", 0.3, 0.72, width=0.35, height=0.02, confidence=0.8),
        region_at("Adagio sostenuto 4/4", 0.2, 0.68, width=0.2, height=0.02, confidence=0.7),
        region_at("1", 0.5, 0.03, width=0.02, height=0.02, confidence=0.99),
    ]
