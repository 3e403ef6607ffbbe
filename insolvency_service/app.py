"""FastAPI entry point for the insolvency document service.

Endpoints:
- POST /v1/extract                  PDF text extraction + form recognition
- POST /v1/documents/{id}/analyze   Queue a document for analysis
- GET  /liveness                    Health check
- GET  /readiness                   DB connectivity check
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from insolvency_service.config import (
    INSOLVENCY_ANALYZE_RATE_LIMIT,
    INSOLVENCY_CORS_ALLOW_CREDENTIALS,
    INSOLVENCY_CORS_ALLOW_HEADERS,
    INSOLVENCY_CORS_ALLOW_METHODS,
    INSOLVENCY_CORS_ALLOW_ORIGINS,
    INSOLVENCY_DEFAULT_RATE_LIMIT,
    INSOLVENCY_EXTRACT_RATE_LIMIT,
    INSOLVENCY_MAX_UPLOAD_BYTES,
)
from insolvency_service.db import check_db_connection, close_pool, get_pool
from insolvency_service.extraction.config import ExtractionConfig
from insolvency_service.extraction.errors import InvalidInputError, NoMeaningfulTextError, PdfLoadError
from insolvency_service.extraction.pipeline import PdfTextExtractor
from insolvency_service.extraction.types import ExtractionResult
from insolvency_service.forms.financial import find_financial_terms
from insolvency_service.forms.recognition import extract_form_fields, identify_form_type, validate_form_fields
from insolvency_service.forms.types import ExtractedFormFields, FormType, FormValidation
from insolvency_service.logging_config import generate_request_id, log_context, setup_logging
from insolvency_service.models import (
    AnalyzeRequest,
    AnalyzeResponse,
    ExtractFailure,
    ExtractResponse,
    FormValidationResult,
    HealthResponse,
    PageErrorDetail,
    PageSummary,
)
from insolvency_service.processing.analysis import HttpAnalysisTrigger
from insolvency_service.processing.queue import ProcessingQueue
from insolvency_service.processing.types import DocumentStatus, ProcessingTask
from insolvency_service.stores.document_store import PostgresDocumentStore

logger = logging.getLogger(__name__)

_PDF_CONTENT_TYPES = ("application/pdf", "application/octet-stream")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: build extractor, store and queue; close pool on shutdown."""
    setup_logging()
    cfg = ExtractionConfig.from_env()
    cfg.validate()
    await get_pool()

    store = PostgresDocumentStore()
    app.state.extractor = PdfTextExtractor.from_config(cfg)
    app.state.document_store = store
    app.state.processing_queue = ProcessingQueue(sink=store, trigger=HttpAnalysisTrigger())
    logger.info("Insolvency document service started (ocr_engine=%s, scan_policy=%s)", cfg.ocr_engine, cfg.scan_policy)
    yield
    await app.state.processing_queue.close()
    await close_pool()
    logger.info("Insolvency document service stopped")


app = FastAPI(
    title="Insolvency Document API",
    version="0.1.0",
    lifespan=lifespan,
)

# -- Rate limiting ------------------------------------------------------------

limiter = Limiter(key_func=get_remote_address, default_limits=[INSOLVENCY_DEFAULT_RATE_LIMIT])
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(status_code=429, content={"detail": "Rate limit exceeded"})


if INSOLVENCY_CORS_ALLOW_CREDENTIALS and "*" in INSOLVENCY_CORS_ALLOW_ORIGINS:
    raise RuntimeError("Invalid CORS config: wildcard origin cannot be combined with credentials=true")

app.add_middleware(
    CORSMiddleware,
    allow_origins=INSOLVENCY_CORS_ALLOW_ORIGINS,
    allow_credentials=INSOLVENCY_CORS_ALLOW_CREDENTIALS,
    allow_methods=INSOLVENCY_CORS_ALLOW_METHODS,
    allow_headers=INSOLVENCY_CORS_ALLOW_HEADERS,
)


# -- Extraction errors --------------------------------------------------------


def _page_report(result: ExtractionResult) -> tuple[list[PageSummary], list[PageErrorDetail]]:
    pages = [PageSummary(page_number=p.page_number, outcome=p.outcome, chars=len(p.text)) for p in result.pages]
    errors = [PageErrorDetail(page_number=e.page_number, kind=e.kind, error=e.error) for e in result.errors]
    return pages, errors


@app.exception_handler(InvalidInputError)
async def _invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(PdfLoadError)
async def _pdf_load_handler(request: Request, exc: PdfLoadError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(NoMeaningfulTextError)
async def _no_text_handler(request: Request, exc: NoMeaningfulTextError) -> JSONResponse:
    pages, errors = _page_report(exc.result)
    body = ExtractFailure(
        detail=str(exc),
        successful_pages=exc.result.successful_pages,
        total_pages=exc.result.total_pages,
        pages=pages,
        errors=errors,
    )
    return JSONResponse(status_code=422, content=body.model_dump(mode="json"))


# -- Body size limit ----------------------------------------------------------


@app.middleware("http")
async def body_size_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with bodies exceeding the upload limit."""
    content_length = request.headers.get("content-length")
    if content_length is not None and int(content_length) > INSOLVENCY_MAX_UPLOAD_BYTES:
        return JSONResponse(status_code=413, content={"detail": "Request body too large"})
    return await call_next(request)


# -- Request ID middleware ----------------------------------------------------


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Attach a unique request ID for trace correlation."""
    request_id = request.headers.get("x-request-id") or generate_request_id()
    request.state.request_id = request_id
    with log_context(request_id=request_id):
        response = await call_next(request)
    response.headers["x-request-id"] = request_id
    return response


# -- Health -------------------------------------------------------------------


@app.get("/liveness", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    return HealthResponse(status="ok")


@app.get("/readiness", response_model=HealthResponse)
async def readiness() -> HealthResponse:
    db_ok = await check_db_connection()
    if not db_ok:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return HealthResponse(status="ok")


# -- Extraction ---------------------------------------------------------------


async def _extract_and_record(
    data: bytes,
    extractor: PdfTextExtractor,
    store: PostgresDocumentStore,
    document_id: str | None,
) -> tuple[ExtractionResult, FormType, ExtractedFormFields, FormValidation]:
    """Run extraction and, for a stored document, settle its status as complete or failed."""
    if document_id:
        await store.update_status(document_id, DocumentStatus.PROCESSING)
    try:
        result = await extractor.extract(data)
        form_type = identify_form_type(result.text)
        fields = extract_form_fields(result.text)
        validation = validate_form_fields(fields)
        if document_id:
            await store.upsert_extracted_fields(document_id, fields, text=result.text)
            await store.update_status(document_id, DocumentStatus.COMPLETE)
    except Exception as e:
        if document_id:
            await store.update_status(document_id, DocumentStatus.FAILED, error=str(e) or type(e).__name__)
        raise
    return result, form_type, fields, validation


@app.post("/v1/extract", response_model=ExtractResponse)
@limiter.limit(INSOLVENCY_EXTRACT_RATE_LIMIT)
async def extract(request: Request, document_id: str | None = None) -> ExtractResponse:
    """Raw PDF body -> per-page text (OCR where needed) -> form type and fields."""
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type and content_type not in _PDF_CONTENT_TYPES:
        raise HTTPException(status_code=415, detail="Expected an application/pdf body")

    data = await request.body()
    if len(data) > INSOLVENCY_MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Request body too large")

    extractor: PdfTextExtractor = request.app.state.extractor
    store: PostgresDocumentStore = request.app.state.document_store

    with log_context(document_id=document_id):
        result, form_type, fields, validation = await _extract_and_record(data, extractor, store, document_id)

    pages, errors = _page_report(result)
    return ExtractResponse(
        document_id=document_id,
        text=result.text,
        successful_pages=result.successful_pages,
        total_pages=result.total_pages,
        used_ocr=result.used_ocr,
        pages=pages,
        errors=errors,
        form_type=form_type,
        fields=fields,
        validation=FormValidationResult(valid=validation.valid, missing=validation.missing),
        financial_terms=find_financial_terms(result.text),
    )


# -- Analysis queue -----------------------------------------------------------


@app.post("/v1/documents/{document_id}/analyze", response_model=AnalyzeResponse, status_code=202)
@limiter.limit(INSOLVENCY_ANALYZE_RATE_LIMIT)
async def analyze_document(request: Request, document_id: str, body: AnalyzeRequest) -> AnalyzeResponse:
    """Queue a stored document for analysis; processing happens one document at a time."""
    queue: ProcessingQueue = request.app.state.processing_queue
    queue.add_task(
        ProcessingTask(
            document_id=document_id,
            storage_path=body.storage_path,
            type=body.document_type,
            priority=body.priority,
        )
    )
    return AnalyzeResponse(document_id=document_id, status=DocumentStatus.PENDING, queued=queue.pending)
