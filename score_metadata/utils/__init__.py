"""Utility modules (PDF render, text normalization)."""

from .pdf_render import (
    rasterize_pdf,
    read_document_attributes,
    render_first_page,
    select_render_scale,
)
from .text import normalized

__all__ = [
    "rasterize_pdf",
    "read_document_attributes",
    "render_first_page",
    "select_render_scale",
    "normalized",
]
