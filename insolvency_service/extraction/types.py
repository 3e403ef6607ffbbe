from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PageOutcome(str, Enum):
    NATIVE_TEXT = "native_text"
    OCR_RECOVERED = "ocr_recovered"
    FAILED = "failed"


class PageErrorKind(str, Enum):
    PAGE_EXTRACTION = "page_extraction"
    RASTERIZATION = "rasterization"
    OCR = "ocr"


@dataclass(frozen=True)
class PageMetrics:
    text_length: int
    word_count: int
    digit_percentage: float
    letter_percentage: float


@dataclass(frozen=True)
class PageImage:
    page_number: int
    content: bytes  # encoded image
    mime_type: str
    width: int
    height: int
    scale: float

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{base64.b64encode(self.content).decode('ascii')}"


@dataclass(frozen=True)
class PageError:
    page_number: int
    kind: PageErrorKind
    error: str


@dataclass(frozen=True)
class PageResult:
    page_number: int  # 1-indexed
    outcome: PageOutcome
    text: str
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is not PageOutcome.FAILED


@dataclass(frozen=True)
class ExtractionResult:
    text: str
    total_pages: int
    pages: tuple[PageResult, ...]
    errors: tuple[PageError, ...] = field(default_factory=tuple)

    @classmethod
    def from_pages(
        cls,
        pages: list[PageResult],
        errors: list[PageError],
        *,
        total_pages: int,
    ) -> ExtractionResult:
        ordered = sorted(pages, key=lambda p: p.page_number)
        text = "".join(f"{p.text}\n" for p in ordered)
        return cls(
            text=text,
            total_pages=total_pages,
            pages=tuple(ordered),
            errors=tuple(sorted(errors, key=lambda e: e.page_number)),
        )

    @property
    def successful_pages(self) -> int:
        return sum(1 for p in self.pages if p.succeeded)

    @property
    def used_ocr(self) -> bool:
        return any(p.outcome is PageOutcome.OCR_RECOVERED for p in self.pages)

    @property
    def meaningful_text(self) -> str:
        """Text from pages that did not fail, without error placeholders."""
        return "\n".join(p.text for p in self.pages if p.succeeded).strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "successful_pages": self.successful_pages,
            "total_pages": self.total_pages,
            "used_ocr": self.used_ocr,
            "pages": [
                {"page_number": p.page_number, "outcome": p.outcome.value, "chars": len(p.text)}
                for p in self.pages
            ],
            "errors": [
                {"page_number": e.page_number, "kind": e.kind.value, "error": e.error}
                for e in self.errors
            ],
        }
