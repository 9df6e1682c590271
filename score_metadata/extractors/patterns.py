"""Regex patterns for key, time signature and composer attribution text.

Usage:
    from score_metadata.extractors.patterns import match_time_signature

    match_time_signature("3 / 4")   # "3/4"
    match_time_signature("13/4")    # None
"""

import re
from typing import Iterable, List, Optional

from ..contracts import OCRRegion
from ..utils.text import normalized


# Accidentals: ASCII and Unicode sharp/flat
_ACCIDENTAL = r"[#b♯♭]"

# --- Key patterns ---
# Examples: "C major", "F# minor", "E♭ Major", "B♭장조", "A 단조"
KEY_PATTERNS = [
    re.compile(
        r'(?<![A-Za-z])'             # not the tail of a word
        r'[A-G]' + _ACCIDENTAL + r'?'
        r' (?:Major|major|Minor|minor)\b'
    ),
    re.compile(
        r'(?<![A-Za-z])'
        r'[A-G]' + _ACCIDENTAL + r'?'
        r'\s?(?:장조|단조)'            # spacing is optional in Korean titles
    ),
]

# --- Time signature pattern ---
# Closed numerator/denominator sets keep out page fractions and opus numbers.
# Examples: "3/4", "6 / 8", "12/8"; rejects "13/4", "4/5"
TIME_SIGNATURE_PATTERN = re.compile(
    r'(?<!\d)'
    r'(12|2|3|4|5|6|7|9)'            # numerator (12 first so it wins over 2)
    r'\s*/\s*'
    r'(16|2|4|8)'                    # denominator
    r'(?!\d)'
)

# --- Composer attribution pattern ---
# Examples: "composed by Franz Schubert", "Composer: J. S. Bach", "작곡: 김철수"
ATTRIBUTION_PATTERN = re.compile(
    r'(composer|composed\s*by|작곡|편곡)'
    r'\s*[:：-]?\s*'               # optional separator (ASCII or full-width colon, dash)
    r"((?:[^\W\d_]|[ .'-]){2,})",      # name-shaped run: letters, spaces, dots, apostrophes, dashes
    re.IGNORECASE,
)


def match_key(text: str) -> Optional[str]:
    """Return the first key name in text, as printed."""
    for pattern in KEY_PATTERNS:
        match = pattern.search(text)
        if match:
            return normalized(match.group(0))
    return None


def match_time_signature(text: str) -> Optional[str]:
    """Return the first time signature in text with inner whitespace removed."""
    match = TIME_SIGNATURE_PATTERN.search(text)
    if match:
        return f"{match.group(1)}/{match.group(2)}"
    return None


def match_attribution(text: str) -> Optional[str]:
    """Return the full attribution phrase (keyword + name run) if present."""
    match = ATTRIBUTION_PATTERN.search(text)
    if match:
        return match.group(0)
    return None


def by_confidence(regions: Iterable[OCRRegion]) -> List[OCRRegion]:
    """Highest confidence first; stable for equal confidences."""
    return sorted(regions, key=lambda r: r.confidence, reverse=True)


def find_key(regions: Iterable[OCRRegion]) -> Optional[str]:
    """Scan regions (highest confidence first) for a key. Position is ignored."""
    for region in by_confidence(regions):
        key = match_key(region.text)
        if key:
            return key
    return None


def find_time_signature(regions: Iterable[OCRRegion]) -> Optional[str]:
    """Scan regions (highest confidence first) for a time signature."""
    for region in by_confidence(regions):
        time_signature = match_time_signature(region.text)
        if time_signature:
            return time_signature
    return None
