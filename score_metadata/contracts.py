"""Value types passed between extraction stages.

All types are immutable or freshly constructed per call, so concurrent
extractions never share mutable state.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from PIL import Image


@dataclass(frozen=True)
class BoundingBox:
    """Page-relative rectangle in unit coordinates, origin bottom-left."""
    x: float
    y: float
    width: float
    height: float

    @property
    def mid_x(self) -> float:
        return self.x + self.width / 2

    @property
    def mid_y(self) -> float:
        return self.y + self.height / 2

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True)
class OCRRegion:
    """One recognized line of text."""
    text: str
    bbox: BoundingBox
    confidence: float


@dataclass(frozen=True)
class DocumentAttributes:
    """Document-level attributes read from the PDF info dictionary."""
    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    creator: Optional[str] = None


@dataclass
class PageRaster:
    """First page rendered to an opaque RGB bitmap."""
    image: Image.Image
    scale: float
    page_width: float  # PDF page units
    page_height: float

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


@dataclass(frozen=True)
class HeuristicResult:
    """Output of the geometric/lexical extractor."""
    title: Optional[str] = None
    composer: Optional[str] = None
    key: Optional[str] = None
    time_signature: Optional[str] = None


@dataclass(frozen=True)
class GenerativeResult:
    """Structured answer from the generative model."""
    title: Optional[str] = None
    composer: Optional[str] = None
    instruments: List[str] = field(default_factory=list)


@dataclass
class ExtractedMetadata:
    """
    Proposed metadata for one imported score.

    Every field is independently optional. String fields are either None
    or a trimmed, single-spaced, non-empty string.

    Attributes:
        title: Piece title
        composer: Composer name as printed
        instruments: Instrument names (English), possibly empty
        key: Key, e.g. "E♭ major" or "C장조"
        time_signature: Time signature, e.g. "3/4"
    """

    title: Optional[str] = None
    composer: Optional[str] = None
    instruments: List[str] = field(default_factory=list)
    key: Optional[str] = None
    time_signature: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "title": self.title,
            "composer": self.composer,
            "instruments": list(self.instruments),
            "key": self.key,
            "time_signature": self.time_signature,
        }
