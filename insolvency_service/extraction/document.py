from __future__ import annotations

import io
import logging
import re
from typing import Protocol

import pymupdf
from PIL import Image
from pypdf import PdfReader

from insolvency_service.extraction.errors import InvalidInputError, PdfLoadError

logger = logging.getLogger(__name__)

_WS_RE = re.compile(r"\s+")


class PageSource(Protocol):
    """What the pipeline needs from an opened PDF. Page numbers are 1-indexed."""

    @property
    def page_count(self) -> int: ...

    def page_text(self, page_number: int) -> str: ...

    def page_size(self, page_number: int) -> tuple[float, float]: ...

    def render(self, page_number: int, scale: float) -> Image.Image: ...

    def close(self) -> None: ...


class PdfDocument:
    """
    PDF container opened from bytes.

    - Native text comes from pypdf, with whitespace runs collapsed.
    - Rendering goes through PyMuPDF, opened lazily on first render so
      text-only documents never pay for it.
    """

    def __init__(self, data: bytes, reader: PdfReader) -> None:
        self._data = data
        self._reader = reader
        self._page_count = len(reader.pages)
        self._mupdf_doc: pymupdf.Document | None = None

    @classmethod
    def open(cls, data: bytes) -> PdfDocument:
        if not data:
            raise InvalidInputError("Invalid PDF data received: empty input")
        try:
            reader = PdfReader(io.BytesIO(data))
            doc = cls(data, reader)
        except Exception as e:
            raise PdfLoadError(f"Could not parse PDF: {e}") from e
        logger.debug("Opened PDF with %d pages (%d bytes)", doc.page_count, len(data))
        return doc

    @property
    def page_count(self) -> int:
        return self._page_count

    def _check(self, page_number: int) -> None:
        if not 1 <= page_number <= self._page_count:
            raise IndexError(f"page {page_number} out of range 1..{self._page_count}")

    def page_text(self, page_number: int) -> str:
        self._check(page_number)
        raw = self._reader.pages[page_number - 1].extract_text() or ""
        return _WS_RE.sub(" ", raw).strip()

    def _mupdf(self) -> pymupdf.Document:
        if self._mupdf_doc is None:
            self._mupdf_doc = pymupdf.open(stream=self._data, filetype="pdf")
        return self._mupdf_doc

    def page_size(self, page_number: int) -> tuple[float, float]:
        self._check(page_number)
        rect = self._mupdf().load_page(page_number - 1).rect
        return rect.width, rect.height

    def render(self, page_number: int, scale: float) -> Image.Image:
        """Render onto an opaque white background (alpha=False) as an RGB image."""
        self._check(page_number)
        page = self._mupdf().load_page(page_number - 1)
        pix = page.get_pixmap(matrix=pymupdf.Matrix(scale, scale), alpha=False)
        return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)

    def close(self) -> None:
        if self._mupdf_doc is not None:
            self._mupdf_doc.close()
            self._mupdf_doc = None

    def __enter__(self) -> PdfDocument:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
