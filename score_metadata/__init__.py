"""
Score Metadata Extractor v1.0

Proposes title, composer, instruments, key and time signature for an
imported sheet-music PDF, leaving fields blank rather than guessing.

Sources, fused under a fixed precedence:
- Generative model over tagged OCR lines (optional, capability-gated)
- PDF document attributes (title, author)
- Geometric/lexical heuristics over OCR regions (always available)
"""

__version__ = "1.0.0"


def __getattr__(name):
    """Lazy imports so that importing a submodule like contracts stays
    free of fitz and the pipeline's other dependencies."""

    _pipeline_names = {"MetadataExtractor", "extract_metadata", "extract_many"}
    _contract_names = {"ExtractedMetadata", "OCRRegion", "BoundingBox", "DocumentAttributes"}

    if name in _pipeline_names:
        from . import pipeline
        return getattr(pipeline, name)
    elif name in _contract_names:
        from . import contracts
        return getattr(contracts, name)

    raise AttributeError(f"module 'score_metadata' has no attribute {name!r}")
