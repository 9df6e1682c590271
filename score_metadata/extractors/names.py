"""Personal-name plausibility checks for composer candidates.

Two rules, either is enough:
1. A named-entity tagger marks some token as a person (Latin script).
2. The whole string is a bare Hangul name of 2-4 syllables, which
   statistical taggers routinely miss.
"""

import logging
import re
import threading
from typing import Optional, Protocol

from ..config import Config, default_config
from ..utils.text import normalized

logger = logging.getLogger(__name__)


# Attribution keywords removed before name checks
_ATTRIBUTION_KEYWORDS = re.compile(r"작곡|편곡|composer|composed\s*by", re.IGNORECASE)

# Name separators in priority order: ASCII colon, full-width colon, dash
SEPARATORS = (":", "：", "-")

KOREAN_NAME_PATTERN = re.compile(r"^[가-힣]{2,4}$")


class NameTagger(Protocol):
    """Anything that can tell whether text contains a personal name."""

    def is_personal_name(self, text: str) -> bool:
        ...


class SpacyNameTagger:
    """
    spaCy NER wrapper flagging PERSON entities.

    The pipeline is loaded lazily on first use. If the model is not
    installed the tagger logs once and answers False from then on, so
    only the Hangul shape rule remains.

    Usage:
        tagger = SpacyNameTagger()
        tagger.is_personal_name("Franz Schubert")  # True with en_core_web_sm
    """

    def __init__(self, model: Optional[str] = None, config: Optional[Config] = None):
        cfg = config or default_config
        self.model = model or cfg.spacy_model
        self._nlp = None
        self._load_failed = False
        self._lock = threading.Lock()

    def load(self) -> None:
        import spacy

        self._nlp = spacy.load(self.model)
        logger.info("spaCy model loaded: %s", self.model)

    @property
    def is_loaded(self) -> bool:
        return self._nlp is not None

    def _ensure_loaded(self) -> bool:
        with self._lock:
            if self.is_loaded:
                return True
            if self._load_failed:
                return False
            try:
                self.load()
                return True
            except Exception as e:
                self._load_failed = True
                logger.warning("spaCy model %r unavailable, name tagging disabled: %s", self.model, e)
                return False

    def is_personal_name(self, text: str) -> bool:
        if not text or not self._ensure_loaded():
            return False
        doc = self._nlp(text)
        return any(ent.label_ == "PERSON" for ent in doc.ents)


def strip_attribution(text: str) -> str:
    """
    Remove attribution keywords and keep what follows the first separator.

    Separators are tried in priority order, so a colon wins over an
    earlier dash: "작곡 - 편곡: 홍길동" -> " 홍길동".

    "Composer: J. S. Bach" -> " J. S. Bach"
    "작곡 김철수"            -> " 김철수"
    """
    stripped = _ATTRIBUTION_KEYWORDS.sub("", text)
    for separator in SEPARATORS:
        if separator in stripped:
            return stripped.split(separator, 1)[1]
    return stripped


def name_candidate(text: str) -> Optional[str]:
    """Stripped and normalized name candidate, or None if nothing remains."""
    return normalized(strip_attribution(text))


def is_plausible_name(text: str, tagger: Optional[NameTagger] = None) -> bool:
    """
    Decide whether text (possibly with an attribution prefix) names a person.

    Args:
        text: Raw OCR line
        tagger: Named-entity tagger; None skips the tagging rule

    Returns:
        True if the tagger finds a person or the remainder is a bare
        2-4 syllable Hangul name
    """
    candidate = name_candidate(text)
    if not candidate:
        return False

    if tagger is not None:
        try:
            if tagger.is_personal_name(candidate):
                return True
        except Exception as e:
            logger.warning("Name tagger failed on %r: %s", candidate, e)

    return KOREAN_NAME_PATTERN.match(candidate) is not None
