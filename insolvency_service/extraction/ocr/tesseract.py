from __future__ import annotations

import io

import pytesseract
from PIL import Image

from insolvency_service.extraction.errors import OcrError
from insolvency_service.extraction.types import PageImage


class TesseractEngine:
    """
    Local Tesseract OCR.

    Prerequisites:
      apt-get install -y tesseract-ocr tesseract-ocr-eng
    """

    name = "tesseract"

    def __init__(self, *, lang: str = "eng", config: str = "--psm 6", tesseract_cmd: str | None = None) -> None:
        self._lang = lang
        self._config = config
        if tesseract_cmd:
            # Useful when tesseract is not on PATH
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def recognize(self, image: PageImage, *, timeout_s: float | None = None) -> str:
        try:
            with Image.open(io.BytesIO(image.content)) as img:
                # pytesseract kills the subprocess on timeout; 0 means no limit
                text = pytesseract.image_to_string(img, lang=self._lang, config=self._config, timeout=timeout_s or 0)
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
            raise OcrError(image.page_number, f"tesseract failed: {e}") from e
        except RuntimeError as e:
            raise OcrError(image.page_number, f"tesseract timed out after {timeout_s}s") from e
        return text or ""
