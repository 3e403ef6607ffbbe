from __future__ import annotations

import asyncio
import logging

from insolvency_service.extraction.config import ExtractionConfig
from insolvency_service.extraction.normalizer import clean
from insolvency_service.extraction.ocr.base import OcrEngine, OcrProgress, ProgressCallback
from insolvency_service.extraction.types import PageImage

logger = logging.getLogger(__name__)

# Extra wait past the engine deadline before the adapter stops waiting itself
_BACKSTOP_GRACE_S = 5.0


def build_engine(cfg: ExtractionConfig) -> OcrEngine | None:
    """Engine selected by INSOLVENCY_OCR_ENGINE, or None when OCR is disabled."""
    if cfg.ocr_engine == "none":
        return None
    if cfg.ocr_engine == "documentai":
        from insolvency_service.extraction.ocr.document_ai import DocAIConfig, DocumentAIClient, DocumentAIEngine

        client = DocumentAIClient(
            cfg=DocAIConfig(
                project=cfg.docai_project or "",
                location=cfg.docai_location or "",
                processor_id=cfg.docai_processor_id or "",
            ),
        )
        return DocumentAIEngine(client)

    from insolvency_service.extraction.ocr.tesseract import TesseractEngine

    return TesseractEngine(lang=cfg.ocr_lang, config=cfg.tesseract_config, tesseract_cmd=cfg.tesseract_cmd)


def _report(progress: ProgressCallback | None, event: OcrProgress) -> None:
    if progress is None:
        return
    try:
        progress(event)
    except Exception:
        logger.exception("OCR progress callback failed")


async def perform_ocr(
    image: PageImage,
    *,
    engine: OcrEngine,
    progress: ProgressCallback | None = None,
    timeout_s: float | None = None,
) -> str:
    """Run the engine on one page image and return normalized text.

    Engine errors propagate unchanged. timeout_s is handed to the engine, which
    aborts its own call (killing the tesseract subprocess or setting the RPC
    deadline) and raises OcrError. Should an engine overrun that deadline by
    more than _BACKSTOP_GRACE_S, TimeoutError is raised and its thread is left
    to finish on its own.
    """
    _report(progress, OcrProgress(page_number=image.page_number, status="recognizing text", progress=0.0))

    call = asyncio.to_thread(engine.recognize, image, timeout_s=timeout_s)
    if timeout_s is not None:
        raw = await asyncio.wait_for(call, timeout=timeout_s + _BACKSTOP_GRACE_S)
    else:
        raw = await call

    _report(progress, OcrProgress(page_number=image.page_number, status="recognizing text", progress=1.0))
    return clean(raw)
