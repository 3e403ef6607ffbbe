"""Client for the hosted "analyze-document" function.

The queue treats the function as a black box: any non-2xx response or
transport failure after retries surfaces as AnalysisTriggerError.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from insolvency_service.config import (
    INSOLVENCY_ANALYSIS_MAX_RETRIES,
    INSOLVENCY_ANALYSIS_TIMEOUT_S,
    INSOLVENCY_ANALYSIS_TOKEN,
    INSOLVENCY_ANALYSIS_URL,
)
from insolvency_service.processing.types import ProcessingTask

logger = logging.getLogger(__name__)

_RETRY_BACKOFF_BASE = 0.5
_RETRYABLE_STATUS = {502, 503, 504}


class AnalysisTriggerError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def build_request_body(task: ProcessingTask) -> dict[str, Any]:
    return {
        "documentId": task.document_id,
        "storagePath": task.storage_path,
        "documentType": task.type,
        "includeRegulatory": True,
        "includeClientExtraction": True,
        "extractionMode": "comprehensive",
    }


class HttpAnalysisTrigger:
    def __init__(
        self,
        *,
        base_url: str = INSOLVENCY_ANALYSIS_URL,
        token: str | None = INSOLVENCY_ANALYSIS_TOKEN,
        timeout_s: float = INSOLVENCY_ANALYSIS_TIMEOUT_S,
        max_retries: int = INSOLVENCY_ANALYSIS_MAX_RETRIES,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = f"{base_url.rstrip('/')}/analyze-document"
        self._token = token
        self._timeout_s = timeout_s
        self._max_retries = max_retries
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _post_with_retry(self, body: dict[str, Any]) -> httpx.Response:
        """POST with retry on transient failures."""
        for attempt in range(self._max_retries + 1):
            try:
                async with httpx.AsyncClient(timeout=self._timeout_s, transport=self._transport) as client:
                    resp = await client.post(self._url, headers=self._headers(), json=body)
                if resp.status_code not in _RETRYABLE_STATUS or attempt >= self._max_retries:
                    return resp
                logger.warning(
                    "Analysis request returned %d (attempt %d/%d)",
                    resp.status_code,
                    attempt + 1,
                    self._max_retries + 1,
                )
            except (httpx.ConnectError, httpx.ReadTimeout) as e:
                if attempt >= self._max_retries:
                    raise
                logger.warning(
                    "Analysis request failed (attempt %d/%d): %s",
                    attempt + 1,
                    self._max_retries + 1,
                    e,
                )
            await asyncio.sleep(_RETRY_BACKOFF_BASE * (2**attempt))
        raise RuntimeError("Unreachable retry path")

    async def analyze(self, task: ProcessingTask) -> None:
        try:
            resp = await self._post_with_retry(build_request_body(task))
        except (httpx.ConnectError, httpx.ReadTimeout) as e:
            raise AnalysisTriggerError(f"Analysis service unreachable: {e}") from e

        if resp.status_code >= 300:
            raise AnalysisTriggerError(
                f"Analysis failed for document {task.document_id} with status {resp.status_code}",
                status_code=resp.status_code,
            )
        logger.info("Analysis triggered for document %s", task.document_id)
