"""Logging setup for the extraction service and CLI.

On Cloud Run (K_SERVICE set) records are emitted as JSON with a GCP
``severity`` field; locally a plain text format is used. Every record is
stamped with the request id and document id bound by ``log_context``, so
the page-level progress of one upload can be followed across the pipeline,
the status writes and the analysis queue.
"""

from __future__ import annotations

import contextvars
import logging
import os
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

from pythonjsonlogger.json import JsonFormatter

# Chatty third-party loggers that drown out page-level progress
_QUIET_LOGGERS = ("pypdf", "httpx", "httpcore", "PIL")

_CORRELATION_FIELDS = ("request_id", "document_id")

_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)
_document_id: contextvars.ContextVar[str | None] = contextvars.ContextVar("document_id", default=None)


@contextmanager
def log_context(*, request_id: str | None = None, document_id: str | None = None) -> Iterator[None]:
    """Bind correlation ids for records logged inside the block; None leaves a field as is."""
    tokens: list[tuple[contextvars.ContextVar[str | None], contextvars.Token[str | None]]] = []
    if request_id is not None:
        tokens.append((_request_id, _request_id.set(request_id)))
    if document_id is not None:
        tokens.append((_document_id, _document_id.set(document_id)))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


class CorrelationFilter(logging.Filter):
    """Copies the bound ids onto each record; ``correlation`` is the text-format prefix."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()
        record.document_id = _document_id.get()
        parts = [f"{key}={getattr(record, key)}" for key in _CORRELATION_FIELDS if getattr(record, key)]
        record.correlation = f"[{' '.join(parts)}] " if parts else ""
        return True


class GCPJsonFormatter(JsonFormatter):
    """Cloud Logging severity plus the correlation ids that are set."""

    def add_fields(
        self,
        log_record: dict[str, object],
        record: logging.LogRecord,
        message_dict: dict[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["severity"] = record.levelname
        log_record.pop("levelname", None)
        log_record.pop("correlation", None)
        for key in _CORRELATION_FIELDS:
            value = getattr(record, key, None)
            if value:
                log_record[key] = value
            else:
                log_record.pop(key, None)


def setup_logging(*, level: str = "INFO") -> None:
    """Install a single root handler; JSON on Cloud Run, plain text locally."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.addFilter(CorrelationFilter())
    if os.getenv("K_SERVICE"):
        handler.setFormatter(GCPJsonFormatter(
            fmt="%(message)s %(name)s %(funcName)s %(lineno)d",
            rename_fields={"name": "logger"},
        ))
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s:%(lineno)d  %(correlation)s%(message)s",
            datefmt="%H:%M:%S",
        ))
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def generate_request_id() -> str:
    """Short random id echoed in the x-request-id header and bound to the request's logs."""
    return uuid.uuid4().hex[:16]
