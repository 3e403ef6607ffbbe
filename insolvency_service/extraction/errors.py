"""Exception types raised by the extraction pipeline.

Only document-level conditions escape ``PdfTextExtractor.extract``:
``InvalidInputError``, ``PdfLoadError`` and ``NoMeaningfulTextError``.
Page-level errors are caught inside the page loop and recorded as
``PageError`` entries on the result.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from insolvency_service.extraction.types import ExtractionResult


class ExtractionError(RuntimeError):
    """Base class for extraction failures."""


class InvalidInputError(ExtractionError, ValueError):
    """Empty or zero-length input bytes."""


class PdfLoadError(ExtractionError):
    """The PDF container could not be parsed."""


class PageExtractionError(ExtractionError):
    def __init__(self, page_number: int, message: str) -> None:
        super().__init__(f"page {page_number}: {message}")
        self.page_number = page_number


class RasterizationError(PageExtractionError):
    """Rendering a page to an image failed."""


class OcrError(ExtractionError):
    def __init__(self, page_number: int, message: str) -> None:
        super().__init__(f"page {page_number}: {message}")
        self.page_number = page_number


class NoMeaningfulTextError(ExtractionError):
    """Aggregate text across all pages is below the minimum-content threshold."""

    def __init__(self, message: str, *, result: ExtractionResult) -> None:
        super().__init__(message)
        self.result = result
