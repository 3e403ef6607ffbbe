from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class DocumentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    PROCESSING_FINANCIAL = "processing_financial"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass(frozen=True)
class ProcessingTask:
    document_id: str
    storage_path: str
    type: str
    priority: int = 0  # lower runs first


class StatusSink(Protocol):
    async def update_status(self, document_id: str, status: DocumentStatus, *, error: str | None = None) -> None: ...

    async def upsert_extracted_fields(
        self,
        document_id: str,
        fields: dict[str, Any],
        *,
        text: str | None = None,
    ) -> None: ...


class AnalysisTrigger(Protocol):
    async def analyze(self, task: ProcessingTask) -> None: ...
