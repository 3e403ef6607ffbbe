from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from google.api_core import exceptions as gexc
from google.cloud import documentai_v1 as documentai

from insolvency_service.extraction.errors import OcrError
from insolvency_service.extraction.types import PageImage


@dataclass(frozen=True)
class DocAIConfig:
    project: str
    location: str
    processor_id: str

    @property
    def processor_name(self) -> str:
        return f"projects/{self.project}/locations/{self.location}/processors/{self.processor_id}"


class DocumentAIClient:
    """
    Minimal Document AI helper for online OCR of single rendered pages.
    """

    def __init__(self, *, cfg: DocAIConfig, language_hints: list[str] | None = None) -> None:
        self._cfg = cfg
        self._language_hints = language_hints or ["en"]
        self._doc_client = documentai.DocumentProcessorServiceClient()

    def ocr_online(
        self, *, content: bytes, mime_type: str, timeout_s: float | None = None
    ) -> tuple[str, dict[str, Any]]:
        req = documentai.ProcessRequest(
            name=self._cfg.processor_name,
            raw_document=documentai.RawDocument(content=content, mime_type=mime_type),
            process_options=documentai.ProcessOptions(
                ocr_config=documentai.OcrConfig(
                    hints=documentai.OcrConfig.Hints(language_hints=self._language_hints),
                ),
            ),
        )
        # Without timeout_s the client library default deadline applies
        kwargs: dict[str, Any] = {"timeout": timeout_s} if timeout_s else {}
        resp = self._doc_client.process_document(request=req, **kwargs)
        text = resp.document.text or ""
        meta = {
            "provider": "documentai",
            "mode": "online",
            "mime_type": mime_type,
            "pages": len(resp.document.pages) if resp.document.pages else None,
        }
        return text, meta


class DocumentAIEngine:
    name = "documentai"

    def __init__(self, client: DocumentAIClient) -> None:
        self._client = client

    def recognize(self, image: PageImage, *, timeout_s: float | None = None) -> str:
        try:
            text, _meta = self._client.ocr_online(
                content=image.content, mime_type=image.mime_type, timeout_s=timeout_s
            )
        except gexc.GoogleAPICallError as e:
            raise OcrError(image.page_number, f"Document AI request failed: {e}") from e
        return text
