"""
Configuration for score metadata extraction.

All settings centralized here. Override by creating a Config instance
with custom values.

Usage:
    from score_metadata.config import Config, default_config

    # Use defaults
    print(default_config.llm_timeout_seconds)  # 20.0

    # Override for a run
    my_config = Config(use_llm=False, ocr_use_gpu=True)
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass
class Config:
    """
    Central configuration for the extraction pipeline.

    The page-region thresholds encode Western engraving conventions
    (title top-center, composer top-right). They are kept as tunable
    constants rather than derived values.
    """

    # === PDF Rendering ===
    large_page_area: float = 1_000_000  # page-unit^2, above this render smaller
    large_page_scale: float = 1.5
    small_page_scale: float = 2.0

    # === OCR ===
    ocr_languages: Tuple[str, ...] = ("ko", "en")
    ocr_recognition_level: str = "accurate"  # "accurate" or "fast"
    ocr_language_correction: bool = True
    ocr_beam_width: int = 10
    ocr_use_gpu: bool = False

    # === Title heuristic ===
    title_min_confidence: float = 0.25
    title_min_mid_y: float = 0.66
    title_mid_x_range: Tuple[float, float] = (0.2, 0.8)
    title_height_weight: float = 0.5
    title_confidence_weight: float = 0.2

    # === Composer heuristic ===
    composer_min_confidence: float = 0.2
    composer_min_mid_x: float = 0.5
    composer_min_mid_y: float = 0.5
    composer_mid_x_weight: float = 0.6
    composer_mid_y_weight: float = 0.3
    composer_confidence_weight: float = 0.1

    # === Name tagging ===
    spacy_model: str = "en_core_web_sm"

    # === Generative refinement ===
    use_llm: bool = True
    llm_model: str = "gpt-4o-mini"
    llm_base_url: Optional[str] = None  # e.g. http://localhost:11434/v1 for a local server
    llm_api_key: Optional[str] = None   # None = OPENAI_API_KEY env var
    llm_timeout_seconds: float = 20.0
    llm_temperature: float = 0.0
    llm_max_tokens: int = 512
    llm_max_regions: int = 50

    # === Prompt banding ===
    band_top: float = 0.66
    band_middle: float = 0.33
    band_left: float = 0.33
    band_center: float = 0.66
    size_large_ratio: float = 1.4
    size_small_ratio: float = 0.7


# Default configuration instance
default_config = Config()
