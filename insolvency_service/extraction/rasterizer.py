"""Render PDF pages to black-and-white JPEG images for OCR input."""

from __future__ import annotations

import io
import logging

import numpy as np
from PIL import Image

from insolvency_service.extraction.document import PageSource
from insolvency_service.extraction.errors import RasterizationError
from insolvency_service.extraction.types import PageImage

logger = logging.getLogger(__name__)


def effective_scale(page_width: float, *, scale: float, max_width: int) -> float:
    """Uniform scale that keeps the rendered width within max_width pixels."""
    if page_width <= 0:
        return scale
    if page_width * scale > max_width:
        return max_width / page_width
    return scale


def binarize(image: Image.Image, *, threshold: int = 128) -> Image.Image:
    """Grayscale by channel average, then every pixel to pure black or white."""
    rgb = np.asarray(image.convert("RGB"), dtype=np.uint16)
    gray = rgb.sum(axis=2) // 3
    bw = np.where(gray >= threshold, 255, 0).astype(np.uint8)
    return Image.fromarray(bw)


def encode_jpeg(image: Image.Image, *, quality: int = 95) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


def rasterize_page(
    document: PageSource,
    page_number: int,
    *,
    scale: float = 2.0,
    max_width: int = 2000,
    threshold: int = 128,
    quality: int = 95,
) -> PageImage:
    """
    Render one page for OCR.

    Raises:
        RasterizationError: tagged with the page number, for any render/encode failure.
    """
    try:
        width, _height = document.page_size(page_number)
        s = effective_scale(width, scale=scale, max_width=max_width)
        rendered = document.render(page_number, s)
        bw = binarize(rendered, threshold=threshold)
        content = encode_jpeg(bw, quality=quality)
    except RasterizationError:
        raise
    except Exception as e:
        raise RasterizationError(page_number, f"rendering failed: {e}") from e

    logger.debug(
        "Rasterized page %d at scale %.3f -> %dx%d (%d bytes)",
        page_number,
        s,
        bw.width,
        bw.height,
        len(content),
    )
    return PageImage(
        page_number=page_number,
        content=content,
        mime_type="image/jpeg",
        width=bw.width,
        height=bw.height,
        scale=s,
    )
