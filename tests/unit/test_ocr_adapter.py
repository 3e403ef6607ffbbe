"""Unit tests for the OCR adapter and engines (engines are mocked)."""

from __future__ import annotations

import asyncio
import time
from unittest.mock import MagicMock, patch

import pytest
import pytesseract

from insolvency_service.extraction.config import ExtractionConfig
from insolvency_service.extraction.errors import OcrError
from insolvency_service.extraction.ocr.adapter import build_engine, perform_ocr
from insolvency_service.extraction.ocr.tesseract import TesseractEngine
from insolvency_service.extraction.rasterizer import encode_jpeg
from insolvency_service.extraction.types import PageImage


def _image(page_number: int = 1) -> PageImage:
    from PIL import Image

    content = encode_jpeg(Image.new("L", (20, 20), 255))
    return PageImage(page_number=page_number, content=content, mime_type="image/jpeg", width=20, height=20, scale=1.0)


class TestPerformOcr:
    async def test_returns_normalized_text(self, fake_engine):
        engine = fake_engine(default="  Credltor:\n\nNorthern   Supply ")
        text = await perform_ocr(_image(), engine=engine)
        assert text == "Creditor Northern Supply"

    async def test_empty_recognition(self, fake_engine):
        assert await perform_ocr(_image(), engine=fake_engine(default="")) == ""

    async def test_engine_error_propagates(self, fake_engine):
        engine = fake_engine({1: OcrError(1, "engine crashed")})
        with pytest.raises(OcrError, match="engine crashed"):
            await perform_ocr(_image(), engine=engine)

    async def test_progress_reported_start_and_end(self, fake_engine):
        events = []
        await perform_ocr(_image(3), engine=fake_engine(default="x"), progress=events.append)
        assert [(e.page_number, e.progress) for e in events] == [(3, 0.0), (3, 1.0)]

    async def test_failing_progress_callback_is_ignored(self, fake_engine):
        def _boom(event):
            raise RuntimeError("ui gone")

        assert await perform_ocr(_image(), engine=fake_engine(default="ok"), progress=_boom) == "ok"

    async def test_timeout_is_handed_to_engine(self, fake_engine):
        engine = fake_engine(default="ok")
        await perform_ocr(_image(), engine=engine, timeout_s=30.0)
        assert engine.timeouts == [30.0]

    async def test_engine_deadline_releases_caller_promptly(self):
        class DeadlineEngine:
            name = "deadline"

            def recognize(self, image, *, timeout_s=None):
                time.sleep(min(timeout_s or 3.0, 3.0))
                raise OcrError(image.page_number, f"timed out after {timeout_s}s")

        started = time.monotonic()
        with pytest.raises(OcrError, match="timed out"):
            await perform_ocr(_image(), engine=DeadlineEngine(), timeout_s=0.1)
        assert time.monotonic() - started < 1.0

    async def test_backstop_when_engine_ignores_deadline(self, monkeypatch):
        class SlowEngine:
            name = "slow"

            def recognize(self, image, *, timeout_s=None):
                time.sleep(0.5)
                return "late"

        monkeypatch.setattr("insolvency_service.extraction.ocr.adapter._BACKSTOP_GRACE_S", 0.0)
        with pytest.raises(asyncio.TimeoutError):
            await perform_ocr(_image(), engine=SlowEngine(), timeout_s=0.05)


class TestTesseractEngine:
    @patch("insolvency_service.extraction.ocr.tesseract.pytesseract.image_to_string", return_value="hello")
    def test_passes_language_and_config(self, mock_ocr: MagicMock):
        engine = TesseractEngine(lang="eng", config="--psm 6")
        assert engine.recognize(_image()) == "hello"
        _, kwargs = mock_ocr.call_args
        assert kwargs == {"lang": "eng", "config": "--psm 6", "timeout": 0}

    @patch("insolvency_service.extraction.ocr.tesseract.pytesseract.image_to_string", return_value="hello")
    def test_timeout_bounds_tesseract_process(self, mock_ocr: MagicMock):
        TesseractEngine().recognize(_image(), timeout_s=12.5)
        _, kwargs = mock_ocr.call_args
        assert kwargs["timeout"] == 12.5

    @patch(
        "insolvency_service.extraction.ocr.tesseract.pytesseract.image_to_string",
        side_effect=RuntimeError("Tesseract process timeout"),
    )
    def test_process_timeout_raises_ocr_error(self, _mock_ocr: MagicMock):
        with pytest.raises(OcrError, match="timed out") as exc_info:
            TesseractEngine().recognize(_image(2), timeout_s=1.0)
        assert exc_info.value.page_number == 2

    @patch(
        "insolvency_service.extraction.ocr.tesseract.pytesseract.image_to_string",
        side_effect=pytesseract.TesseractNotFoundError(),
    )
    def test_missing_binary_raises_ocr_error(self, _mock_ocr: MagicMock):
        with pytest.raises(OcrError) as exc_info:
            TesseractEngine().recognize(_image(4))
        assert exc_info.value.page_number == 4


class TestDocumentAIEngine:
    def test_returns_document_text(self):
        from insolvency_service.extraction.ocr.document_ai import DocumentAIEngine

        client = MagicMock()
        client.ocr_online.return_value = ("recognized", {"provider": "documentai"})
        engine = DocumentAIEngine(client)
        assert engine.recognize(_image()) == "recognized"
        _, kwargs = client.ocr_online.call_args
        assert kwargs["mime_type"] == "image/jpeg"

    def test_passes_deadline_to_client(self):
        from insolvency_service.extraction.ocr.document_ai import DocumentAIEngine

        client = MagicMock()
        client.ocr_online.return_value = ("recognized", {})
        DocumentAIEngine(client).recognize(_image(), timeout_s=20.0)
        _, kwargs = client.ocr_online.call_args
        assert kwargs["timeout_s"] == 20.0

    @patch("insolvency_service.extraction.ocr.document_ai.documentai.DocumentProcessorServiceClient")
    def test_deadline_reaches_process_document(self, mock_client_cls: MagicMock):
        from insolvency_service.extraction.ocr.document_ai import DocAIConfig, DocumentAIClient

        mock_client_cls.return_value.process_document.return_value.document.text = "scanned"
        client = DocumentAIClient(cfg=DocAIConfig(project="p", location="us", processor_id="abc"))
        text, _meta = client.ocr_online(content=b"jpeg", mime_type="image/jpeg", timeout_s=15.0)
        assert text == "scanned"
        _, kwargs = mock_client_cls.return_value.process_document.call_args
        assert kwargs["timeout"] == 15.0

    def test_api_error_raises_ocr_error(self):
        from google.api_core import exceptions as gexc

        from insolvency_service.extraction.ocr.document_ai import DocumentAIEngine

        client = MagicMock()
        client.ocr_online.side_effect = gexc.ServiceUnavailable("down")
        with pytest.raises(OcrError, match="Document AI"):
            DocumentAIEngine(client).recognize(_image())


class TestBuildEngine:
    def test_none_disables_ocr(self):
        assert build_engine(ExtractionConfig(ocr_engine="none")) is None

    def test_default_is_tesseract(self):
        assert build_engine(ExtractionConfig()).name == "tesseract"

    @patch("insolvency_service.extraction.ocr.document_ai.documentai.DocumentProcessorServiceClient")
    def test_documentai(self, _mock_client: MagicMock):
        cfg = ExtractionConfig(ocr_engine="documentai", docai_project="p", docai_location="us", docai_processor_id="abc")
        assert build_engine(cfg).name == "documentai"
