"""Merge PDF attributes, heuristic and generative evidence into ExtractedMetadata.

Precedence per field, highest first:
1. Generative result (when it ran and gave a non-empty value)
2. PDF document attribute (title and author only)
3. Heuristic result

Every string goes through the shared normalizer, so blank always
means absent.
"""

from typing import Iterable, List, Optional

from ..contracts import DocumentAttributes, ExtractedMetadata, GenerativeResult, HeuristicResult
from ..utils.text import normalized


def first_present(*values: Optional[str]) -> Optional[str]:
    """First value that survives normalization."""
    for value in values:
        cleaned = normalized(value)
        if cleaned:
            return cleaned
    return None


def normalize_instruments(instruments: Optional[Iterable[str]]) -> List[str]:
    """Normalize names, drop blanks and case-insensitive duplicates, keep order."""
    seen = set()
    unique = []
    for name in instruments or []:
        cleaned = normalized(name)
        if not cleaned or cleaned.casefold() in seen:
            continue
        seen.add(cleaned.casefold())
        unique.append(cleaned)
    return unique


def merge_evidence(
    attributes: Optional[DocumentAttributes],
    heuristic: Optional[HeuristicResult],
    generative: Optional[GenerativeResult] = None,
) -> ExtractedMetadata:
    """
    Apply the fusion policy.

    A failed generative pass must arrive here as None so nothing of it
    is partially applied.

    Args:
        attributes: PDF document attributes (may be all None)
        heuristic: Heuristic extractor output
        generative: Generative refinement output, None if skipped or failed

    Returns:
        ExtractedMetadata with normalized fields
    """
    attributes = attributes or DocumentAttributes()
    heuristic = heuristic or HeuristicResult()
    if not isinstance(generative, GenerativeResult):
        generative = GenerativeResult()

    return ExtractedMetadata(
        title=first_present(generative.title, attributes.title, heuristic.title),
        composer=first_present(generative.composer, attributes.author, heuristic.composer),
        instruments=normalize_instruments(generative.instruments),
        key=first_present(heuristic.key),
        time_signature=first_present(heuristic.time_signature),
    )
