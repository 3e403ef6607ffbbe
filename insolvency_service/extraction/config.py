from __future__ import annotations

import os
from dataclasses import dataclass

SCAN_POLICIES = ("length", "heuristic")
OCR_ENGINES = ("tesseract", "documentai", "none")


def _get_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None:
        return default
    return int(v)


def _get_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None:
        return default
    return float(v)


@dataclass(frozen=True)
class ExtractionConfig:
    # Scanned-page decision
    scan_policy: str = "length"
    ocr_min_chars: int = 100
    scan_min_chars: int = 50
    scan_min_words: int = 10
    scan_max_digit_pct: float = 80.0
    scan_min_letter_pct: float = 20.0

    # Rasterization
    render_scale: float = 2.0
    render_max_width: int = 2000
    binarize_threshold: int = 128
    jpeg_quality: int = 95

    # OCR
    ocr_engine: str = "tesseract"
    ocr_lang: str = "eng"
    ocr_timeout_s: float = 120.0  # 0 = wait forever
    tesseract_cmd: str | None = None
    tesseract_config: str = "--psm 6"
    docai_project: str | None = None
    docai_location: str | None = None
    docai_processor_id: str | None = None

    # Finalize
    min_text_chars: int = 10

    @classmethod
    def from_env(cls) -> ExtractionConfig:
        return cls(
            scan_policy=os.getenv("INSOLVENCY_SCAN_POLICY", "length").strip().lower(),
            ocr_min_chars=_get_int("INSOLVENCY_OCR_MIN_CHARS", 100),
            scan_min_chars=_get_int("INSOLVENCY_SCAN_MIN_CHARS", 50),
            scan_min_words=_get_int("INSOLVENCY_SCAN_MIN_WORDS", 10),
            scan_max_digit_pct=_get_float("INSOLVENCY_SCAN_MAX_DIGIT_PCT", 80.0),
            scan_min_letter_pct=_get_float("INSOLVENCY_SCAN_MIN_LETTER_PCT", 20.0),
            render_scale=_get_float("INSOLVENCY_RENDER_SCALE", 2.0),
            render_max_width=_get_int("INSOLVENCY_RENDER_MAX_WIDTH", 2000),
            binarize_threshold=_get_int("INSOLVENCY_BINARIZE_THRESHOLD", 128),
            jpeg_quality=_get_int("INSOLVENCY_JPEG_QUALITY", 95),
            ocr_engine=os.getenv("INSOLVENCY_OCR_ENGINE", "tesseract").strip().lower(),
            ocr_lang=os.getenv("INSOLVENCY_OCR_LANG", "eng"),
            ocr_timeout_s=_get_float("INSOLVENCY_OCR_TIMEOUT_S", 120.0),
            tesseract_cmd=os.getenv("TESSERACT_CMD"),
            tesseract_config=os.getenv("INSOLVENCY_TESSERACT_CONFIG", "--psm 6"),
            docai_project=os.getenv("INSOLVENCY_DOC_AI_PROJECT"),
            docai_location=os.getenv("INSOLVENCY_DOC_AI_LOCATION"),
            docai_processor_id=os.getenv("INSOLVENCY_DOC_AI_PROCESSOR_ID"),
            min_text_chars=_get_int("INSOLVENCY_MIN_TEXT_CHARS", 10),
        )

    def validate(self) -> None:
        if self.scan_policy not in SCAN_POLICIES:
            raise ValueError(f"INSOLVENCY_SCAN_POLICY must be one of {', '.join(SCAN_POLICIES)}")
        if self.ocr_engine not in OCR_ENGINES:
            raise ValueError(f"INSOLVENCY_OCR_ENGINE must be one of {', '.join(OCR_ENGINES)}")

        if self.render_scale <= 0:
            raise ValueError("INSOLVENCY_RENDER_SCALE must be > 0")
        if self.render_max_width < 1:
            raise ValueError("INSOLVENCY_RENDER_MAX_WIDTH must be >= 1")
        if not 1 <= self.binarize_threshold <= 254:
            raise ValueError("INSOLVENCY_BINARIZE_THRESHOLD must be between 1 and 254")
        if not 1 <= self.jpeg_quality <= 100:
            raise ValueError("INSOLVENCY_JPEG_QUALITY must be between 1 and 100")
        if self.ocr_timeout_s < 0:
            raise ValueError("INSOLVENCY_OCR_TIMEOUT_S must be >= 0")
        if self.min_text_chars < 0:
            raise ValueError("INSOLVENCY_MIN_TEXT_CHARS must be >= 0")

        if self.ocr_engine == "documentai":
            missing = [
                k
                for k, v in {
                    "INSOLVENCY_DOC_AI_PROJECT": self.docai_project,
                    "INSOLVENCY_DOC_AI_LOCATION": self.docai_location,
                    "INSOLVENCY_DOC_AI_PROCESSOR_ID": self.docai_processor_id,
                }.items()
                if not v
            ]
            if missing:
                raise ValueError(f"Document AI OCR selected but missing config: {', '.join(missing)}")

    @property
    def ocr_enabled(self) -> bool:
        return self.ocr_engine != "none"

    @property
    def ocr_timeout(self) -> float | None:
        return self.ocr_timeout_s if self.ocr_timeout_s > 0 else None
