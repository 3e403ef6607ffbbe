"""Pydantic request/response schemas for the insolvency document API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from insolvency_service.extraction.types import PageErrorKind, PageOutcome
from insolvency_service.forms.types import FormType
from insolvency_service.processing.types import DocumentStatus

# -- Extraction ---------------------------------------------------------------


class PageSummary(BaseModel):
    page_number: int
    outcome: PageOutcome
    chars: int


class PageErrorDetail(BaseModel):
    page_number: int
    kind: PageErrorKind
    error: str


class FormValidationResult(BaseModel):
    valid: bool
    missing: list[str]


class ExtractResponse(BaseModel):
    document_id: str | None = None
    text: str
    successful_pages: int
    total_pages: int
    used_ocr: bool
    pages: list[PageSummary]
    errors: list[PageErrorDetail]
    form_type: FormType
    fields: dict[str, str]
    validation: FormValidationResult
    financial_terms: list[str] = Field(default_factory=list)


class ExtractFailure(BaseModel):
    """Body of a 422 when no page yielded meaningful text."""

    detail: str
    successful_pages: int
    total_pages: int
    pages: list[PageSummary]
    errors: list[PageErrorDetail]


# -- Analysis queue -----------------------------------------------------------


class AnalyzeRequest(BaseModel):
    storage_path: str = Field(..., min_length=1, max_length=1024, description="Object path of the stored PDF")
    document_type: str = Field("unknown", max_length=64)
    priority: int = Field(0, ge=-100, le=100, description="Lower values run first")


class AnalyzeResponse(BaseModel):
    document_id: str
    status: DocumentStatus
    queued: int


# -- Health -------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str  # "ok" or "degraded"
    error: str | None = None
