"""OCR adapter producing page-relative text regions.

Provides a consistent interface for the extraction pipeline:
    adapter.recognize(raster) -> [OCRRegion(text, bbox, confidence), ...] or None

The default engine is EasyOCR. Pixel boxes are converted to unit
coordinates with a bottom-left origin so downstream heuristics are
independent of render resolution.
"""

import logging
import threading
from typing import Any, List, Optional, Protocol, Sequence

import numpy as np

from ..config import Config, default_config
from ..contracts import BoundingBox, OCRRegion, PageRaster

logger = logging.getLogger(__name__)


class TextRecognizer(Protocol):
    """Anything that turns a page raster into OCR regions."""

    def recognize(self, raster: PageRaster) -> Optional[List[OCRRegion]]:
        ...


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def poly_to_unit_bbox(poly: Sequence[Sequence[float]], width: int, height: int) -> BoundingBox:
    """
    Convert a pixel polygon (top-left origin) to a unit bounding box.

    Args:
        poly: Corner points [[x, y], ...] in pixels
        width: Image width in pixels
        height: Image height in pixels

    Returns:
        BoundingBox in [0,1]x[0,1] with origin bottom-left
    """
    xs = [float(p[0]) for p in poly]
    ys = [float(p[1]) for p in poly]
    x0 = _clamp(min(xs) / width)
    x1 = _clamp(max(xs) / width)
    # Flip the y axis: pixel rows grow downwards
    y0 = _clamp(1.0 - max(ys) / height)
    y1 = _clamp(1.0 - min(ys) / height)
    return BoundingBox(x=x0, y=y0, width=x1 - x0, height=y1 - y0)


class OCRAdapter:
    """
    EasyOCR-backed text recognizer.

    High-accuracy recognition uses beam search decoding; language
    correction switches to dictionary-constrained word beam search.
    Engine failures are logged and reported as None, never raised.

    Usage:
        adapter = OCRAdapter()
        regions = adapter.recognize(raster)
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or default_config
        self._reader = None
        self._lock = threading.Lock()

    def load(self) -> None:
        """Create the EasyOCR reader for the configured languages."""
        import easyocr

        self._reader = easyocr.Reader(
            list(self.config.ocr_languages),
            gpu=self.config.ocr_use_gpu,
            verbose=False,
        )
        logger.info("EasyOCR reader loaded for languages: %s", ", ".join(self.config.ocr_languages))

    def unload(self) -> None:
        self._reader = None

    @property
    def is_loaded(self) -> bool:
        return self._reader is not None

    def _decoder(self) -> str:
        if self.config.ocr_recognition_level != "accurate":
            return "greedy"
        if self.config.ocr_language_correction:
            return "wordbeamsearch"
        return "beamsearch"

    def _readtext(self, image: Any) -> List[Any]:
        with self._lock:
            if not self.is_loaded:
                self.load()
            return self._reader.readtext(
                image,
                decoder=self._decoder(),
                beamWidth=self.config.ocr_beam_width,
                paragraph=False,
                detail=1,
            )

    def recognize(self, raster: PageRaster) -> Optional[List[OCRRegion]]:
        """
        Recognize text lines on a page raster.

        Args:
            raster: Rendered page

        Returns:
            List of OCRRegion (one top candidate per line), or None if the
            engine failed
        """
        try:
            results = self._readtext(np.array(raster.image.convert("RGB")))
        except Exception as e:
            logger.warning("OCR engine failed: %s", e)
            return None

        regions = []
        for poly, text, confidence in results:
            if not text or not text.strip():
                continue
            regions.append(OCRRegion(
                text=text,
                bbox=poly_to_unit_bbox(poly, raster.width, raster.height),
                confidence=_clamp(float(confidence)),
            ))
        return regions


class MockOCRAdapter:
    """
    Mock recognizer for testing without OCR weights.

    Returns a fixed list of regions, or None to simulate engine failure.
    """

    def __init__(self, regions: Optional[List[OCRRegion]] = None):
        self.regions = regions
        self.calls = 0

    def recognize(self, raster: PageRaster) -> Optional[List[OCRRegion]]:
        self.calls += 1
        if self.regions is None:
            return None
        return list(self.regions)
