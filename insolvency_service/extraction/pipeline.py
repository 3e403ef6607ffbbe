"""Per-page PDF text extraction with OCR fallback.

Pages are processed strictly in order 1..N, one at a time. Each page either
keeps its native text, is recovered through rasterize + OCR, or is recorded
as failed with a placeholder line. Only invalid input, an unparsable
container, or an aggregate result with no meaningful text raise.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from insolvency_service.extraction.classifier import ScanPolicy, policy_from_config
from insolvency_service.extraction.config import ExtractionConfig
from insolvency_service.extraction.document import PageSource, PdfDocument
from insolvency_service.extraction.errors import (
    InvalidInputError,
    NoMeaningfulTextError,
    PageExtractionError,
    RasterizationError,
)
from insolvency_service.extraction.ocr.adapter import build_engine, perform_ocr
from insolvency_service.extraction.ocr.base import OcrEngine, OcrProgress
from insolvency_service.extraction.rasterizer import rasterize_page
from insolvency_service.extraction.types import (
    ExtractionResult,
    PageError,
    PageErrorKind,
    PageOutcome,
    PageResult,
)
from insolvency_service.forms.recognition import identify_form_type

logger = logging.getLogger(__name__)

DocumentOpener = Callable[[bytes], PageSource]


def page_placeholder(page_number: int) -> str:
    return f"[Error processing page {page_number}]"


def _log_progress(event: OcrProgress) -> None:
    logger.debug("OCR page %d: %s (%.0f%%)", event.page_number, event.status, event.progress * 100)


class PdfTextExtractor:
    def __init__(
        self,
        *,
        cfg: ExtractionConfig,
        engine: OcrEngine | None,
        policy: ScanPolicy | None = None,
        opener: DocumentOpener = PdfDocument.open,
    ) -> None:
        self._cfg = cfg
        self._engine = engine
        self._policy = policy or policy_from_config(cfg)
        self._open = opener

    @classmethod
    def from_config(cls, cfg: ExtractionConfig) -> PdfTextExtractor:
        return cls(cfg=cfg, engine=build_engine(cfg))

    async def extract(self, data: bytes) -> ExtractionResult:
        if not data:
            raise InvalidInputError("Invalid PDF data received: empty input")

        # Load failures (PdfLoadError) are fatal for the whole document
        document = await asyncio.to_thread(self._open, data)
        try:
            total = document.page_count
            logger.info("PDF loaded. Processing %d pages", total)

            pages: list[PageResult] = []
            errors: list[PageError] = []
            for page_number in range(1, total + 1):
                page = await self._process_page(document, page_number, errors)
                pages.append(page)
        finally:
            document.close()

        result = ExtractionResult.from_pages(pages, errors, total_pages=total)

        if len(result.meaningful_text) < self._cfg.min_text_chars:
            raise NoMeaningfulTextError(
                "No meaningful text could be extracted from the PDF",
                result=result,
            )

        logger.info(
            "PDF processing completed. Successfully processed %d of %d pages (%d errors)",
            result.successful_pages,
            result.total_pages,
            len(result.errors),
        )
        return result

    async def _process_page(self, document: PageSource, page_number: int, errors: list[PageError]) -> PageResult:
        try:
            try:
                native = await asyncio.to_thread(document.page_text, page_number)
            except Exception as e:
                raise PageExtractionError(page_number, f"native text extraction failed: {e}") from e

            if not self._policy.is_scanned(native):
                page = PageResult(page_number=page_number, outcome=PageOutcome.NATIVE_TEXT, text=native)
            else:
                page = await self._recover_with_ocr(document, page_number, native, errors)
        except Exception as e:
            logger.warning("Error processing page %d: %s", page_number, e)
            errors.append(PageError(page_number=page_number, kind=PageErrorKind.PAGE_EXTRACTION, error=str(e)))
            return PageResult(
                page_number=page_number,
                outcome=PageOutcome.FAILED,
                text=page_placeholder(page_number),
                error=str(e),
            )

        logger.debug("Page %d identified as %s form type", page_number, identify_form_type(page.text).value)
        return page

    async def _recover_with_ocr(
        self,
        document: PageSource,
        page_number: int,
        native: str,
        errors: list[PageError],
    ) -> PageResult:
        if self._engine is None:
            logger.info("Page %d has little native text but OCR is disabled; keeping %d chars", page_number, len(native))
            return PageResult(page_number=page_number, outcome=PageOutcome.NATIVE_TEXT, text=native)

        logger.info("OCR required for page %d (%d native chars)", page_number, len(native))
        cfg = self._cfg
        try:
            image = await asyncio.to_thread(
                rasterize_page,
                document,
                page_number,
                scale=cfg.render_scale,
                max_width=cfg.render_max_width,
                threshold=cfg.binarize_threshold,
                quality=cfg.jpeg_quality,
            )
            text = await perform_ocr(
                image,
                engine=self._engine,
                progress=_log_progress,
                timeout_s=cfg.ocr_timeout,
            )
        except Exception as e:
            kind = PageErrorKind.RASTERIZATION if isinstance(e, RasterizationError) else PageErrorKind.OCR
            message = str(e) or type(e).__name__
            logger.warning("OCR recovery failed for page %d (%s): %s; keeping native text", page_number, kind.value, message)
            errors.append(PageError(page_number=page_number, kind=kind, error=message))
            return PageResult(page_number=page_number, outcome=PageOutcome.NATIVE_TEXT, text=native, error=message)

        logger.info("OCR completed for page %d, extracted %d chars", page_number, len(text))
        if not text:
            return PageResult(page_number=page_number, outcome=PageOutcome.NATIVE_TEXT, text=native)
        return PageResult(page_number=page_number, outcome=PageOutcome.OCR_RECOVERED, text=text)


async def extract_text_from_pdf(data: bytes, *, cfg: ExtractionConfig | None = None) -> ExtractionResult:
    """Convenience wrapper: build an extractor from config (env by default) and run it."""
    cfg = cfg or ExtractionConfig.from_env()
    cfg.validate()
    return await PdfTextExtractor.from_config(cfg).extract(data)
