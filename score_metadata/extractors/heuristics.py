"""Geometric and lexical metadata heuristics over OCR regions.

This is the always-available path: it needs nothing but OCR output.

- Title: the largest, tallest, most confident line in the top-center band.
- Composer: a plausible personal name in the top-right quadrant, else an
  explicit attribution ("composed by", "작곡") there.
- Key and time signature: regex scans over every region.
"""

from typing import List, Optional, Sequence

from ..config import Config, default_config
from ..contracts import HeuristicResult, OCRRegion
from ..utils.text import normalized
from .names import NameTagger, is_plausible_name, name_candidate
from .patterns import find_key, find_time_signature, match_attribution


def title_score(region: OCRRegion, config: Optional[Config] = None) -> float:
    """Prefer large, tall (big font), confident text."""
    cfg = config or default_config
    box = region.bbox
    return (
        box.area
        + box.height * cfg.title_height_weight
        + region.confidence * cfg.title_confidence_weight
    )


def composer_score(region: OCRRegion, config: Optional[Config] = None) -> float:
    """Bias toward the extreme top-right corner."""
    cfg = config or default_config
    box = region.bbox
    return (
        box.mid_x * cfg.composer_mid_x_weight
        + box.mid_y * cfg.composer_mid_y_weight
        + region.confidence * cfg.composer_confidence_weight
    )


def title_candidates(regions: Sequence[OCRRegion], config: Optional[Config] = None) -> List[OCRRegion]:
    cfg = config or default_config
    low, high = cfg.title_mid_x_range
    return [
        r for r in regions
        if r.bbox.mid_y > cfg.title_min_mid_y
        and low <= r.bbox.mid_x <= high
        and r.confidence > cfg.title_min_confidence
        # Running headers like "Op. 12/No. 3" are not titles
        and "/" not in r.text
    ]


def composer_candidates(regions: Sequence[OCRRegion], config: Optional[Config] = None) -> List[OCRRegion]:
    cfg = config or default_config
    return [
        r for r in regions
        if r.bbox.mid_x > cfg.composer_min_mid_x
        and r.bbox.mid_y > cfg.composer_min_mid_y
        and r.confidence > cfg.composer_min_confidence
    ]


def find_title(regions: Sequence[OCRRegion], config: Optional[Config] = None) -> Optional[str]:
    """
    Pick the best title line.

    Ties keep the first region encountered.
    """
    candidates = title_candidates(regions, config)
    if not candidates:
        return None
    best = max(candidates, key=lambda r: title_score(r, config))
    return normalized(best.text)


def find_composer(
    regions: Sequence[OCRRegion],
    tagger: Optional[NameTagger] = None,
    config: Optional[Config] = None,
) -> Optional[str]:
    """
    Pick a composer credit from the top-right quadrant.

    Tier 1: plausible personal names, best composer score wins.
    Tier 2: attribution keyword matches, scanned best score first.

    Args:
        regions: OCR regions for the page
        tagger: Named-entity tagger for the plausibility check
        config: Config override

    Returns:
        Composer name with attribution keywords removed, or None
    """
    candidates = composer_candidates(regions, config)
    if not candidates:
        return None

    names = [r for r in candidates if is_plausible_name(r.text, tagger)]
    if names:
        best = max(names, key=lambda r: composer_score(r, config))
        return name_candidate(best.text)

    ranked = sorted(candidates, key=lambda r: composer_score(r, config), reverse=True)
    for region in ranked:
        match = match_attribution(region.text)
        name = name_candidate(match) if match else None
        if name:
            return name

    return None


def extract_heuristic(
    regions: Optional[Sequence[OCRRegion]],
    tagger: Optional[NameTagger] = None,
    config: Optional[Config] = None,
) -> HeuristicResult:
    """Run every heuristic over the page's OCR regions."""
    if not regions:
        return HeuristicResult()

    return HeuristicResult(
        title=find_title(regions, config),
        composer=find_composer(regions, tagger, config),
        key=find_key(regions),
        time_signature=find_time_signature(regions),
    )
