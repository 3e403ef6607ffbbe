"""Unit tests for environment-driven extraction configuration."""

from __future__ import annotations

import pytest

from insolvency_service.extraction.config import ExtractionConfig


class TestFromEnv:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch):
        for name in ("INSOLVENCY_SCAN_POLICY", "INSOLVENCY_OCR_ENGINE", "INSOLVENCY_OCR_TIMEOUT_S"):
            monkeypatch.delenv(name, raising=False)
        cfg = ExtractionConfig.from_env()
        assert cfg.scan_policy == "length"
        assert cfg.ocr_engine == "tesseract"
        assert cfg.ocr_timeout == 120.0
        cfg.validate()

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("INSOLVENCY_SCAN_POLICY", " Heuristic ")
        monkeypatch.setenv("INSOLVENCY_OCR_ENGINE", "none")
        monkeypatch.setenv("INSOLVENCY_OCR_TIMEOUT_S", "0")
        monkeypatch.setenv("INSOLVENCY_MIN_TEXT_CHARS", "25")
        cfg = ExtractionConfig.from_env()
        assert cfg.scan_policy == "heuristic"
        assert not cfg.ocr_enabled
        assert cfg.ocr_timeout is None
        assert cfg.min_text_chars == 25


class TestValidate:
    @pytest.mark.parametrize(
        ("kwargs", "match"),
        [
            ({"scan_policy": "magic"}, "INSOLVENCY_SCAN_POLICY"),
            ({"ocr_engine": "easyocr"}, "INSOLVENCY_OCR_ENGINE"),
            ({"render_scale": 0}, "INSOLVENCY_RENDER_SCALE"),
            ({"binarize_threshold": 255}, "INSOLVENCY_BINARIZE_THRESHOLD"),
            ({"jpeg_quality": 0}, "INSOLVENCY_JPEG_QUALITY"),
            ({"ocr_timeout_s": -1}, "INSOLVENCY_OCR_TIMEOUT_S"),
        ],
    )
    def test_rejects(self, kwargs, match):
        with pytest.raises(ValueError, match=match):
            ExtractionConfig(**kwargs).validate()

    def test_documentai_requires_processor(self):
        with pytest.raises(ValueError, match="INSOLVENCY_DOC_AI_PROCESSOR_ID"):
            ExtractionConfig(ocr_engine="documentai", docai_project="p", docai_location="us").validate()
