from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from insolvency_service.extraction.types import PageImage


@dataclass(frozen=True)
class OcrProgress:
    page_number: int
    status: str  # e.g. "recognizing text"
    progress: float  # 0.0 .. 1.0


ProgressCallback = Callable[[OcrProgress], None]


class OcrEngine(Protocol):
    """Blocking OCR call; the adapter runs it off the event loop.

    Engines must give up after timeout_s seconds (None means no limit) and
    raise OcrError, so the worker thread is released.
    """

    name: str

    def recognize(self, image: PageImage, *, timeout_s: float | None = None) -> str: ...
