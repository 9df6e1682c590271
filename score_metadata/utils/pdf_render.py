"""
PDF Rendering Utilities

Reads document attributes and renders the first page of a PDF to an
opaque RGB bitmap for OCR. Uses PyMuPDF (fitz).
"""

import logging
from typing import Optional, Tuple

import fitz  # PyMuPDF
from PIL import Image

from ..config import Config, default_config
from ..contracts import DocumentAttributes, PageRaster
from .text import normalized

logger = logging.getLogger(__name__)


def select_render_scale(page_width: float, page_height: float, config: Optional[Config] = None) -> float:
    """Large pages render at a smaller scale to bound memory and OCR cost."""
    cfg = config or default_config
    if page_width * page_height > cfg.large_page_area:
        return cfg.large_page_scale
    return cfg.small_page_scale


def read_document_attributes(doc: "fitz.Document") -> DocumentAttributes:
    """Read title/author/subject/creator from the PDF info dictionary."""
    meta = doc.metadata or {}
    return DocumentAttributes(
        title=normalized(meta.get("title")),
        author=normalized(meta.get("author")),
        subject=normalized(meta.get("subject")),
        creator=normalized(meta.get("creator")),
    )


def render_first_page(doc: "fitz.Document", config: Optional[Config] = None) -> Optional[PageRaster]:
    """
    Render page 1 onto a white background.

    Returns None when the document has no pages or the page has no area.
    """
    if doc.page_count < 1:
        return None

    page = doc.load_page(0)
    rect = page.rect
    if rect.width <= 0 or rect.height <= 0:
        return None

    scale = select_render_scale(rect.width, rect.height, config)
    pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=True)
    if pix.width <= 0 or pix.height <= 0:
        return None

    # MuPDF pixmaps carry premultiplied alpha
    rgba = Image.frombytes("RGBa", (pix.width, pix.height), pix.samples).convert("RGBA")
    # OCR degrades on transparent backgrounds
    image = Image.new("RGB", rgba.size, (255, 255, 255))
    image.paste(rgba, mask=rgba.getchannel("A"))

    return PageRaster(
        image=image,
        scale=scale,
        page_width=rect.width,
        page_height=rect.height,
    )


def rasterize_pdf(pdf_bytes: bytes, config: Optional[Config] = None) -> Tuple[DocumentAttributes, Optional[PageRaster]]:
    """
    Open a PDF from memory, read its attributes and render its first page.

    An unparseable or empty document is not an error: it yields empty
    attributes and no raster.

    Args:
        pdf_bytes: Raw PDF file contents
        config: Config override (uses default_config if None)

    Returns:
        Tuple of (DocumentAttributes, PageRaster or None)
    """
    if not pdf_bytes:
        return DocumentAttributes(), None

    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as e:
        logger.warning("Could not open PDF (%d bytes): %s", len(pdf_bytes), e)
        return DocumentAttributes(), None

    try:
        try:
            attributes = read_document_attributes(doc)
        except Exception as e:
            logger.warning("Could not read PDF attributes: %s", e)
            attributes = DocumentAttributes()

        try:
            raster = render_first_page(doc, config)
        except Exception as e:
            logger.warning("Could not render first page: %s", e)
            raster = None
    finally:
        doc.close()

    if raster is None:
        logger.debug("No page raster; continuing with document attributes only")
    return attributes, raster
