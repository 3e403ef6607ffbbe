"""Status and extracted-field writes against the ``documents`` table.

The table is owned by the application database; only ``ai_processing_status``
and keys under the ``metadata`` jsonb column are written here.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

import asyncpg

from insolvency_service import db
from insolvency_service.processing.types import DocumentStatus

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[], AbstractAsyncContextManager[asyncpg.Connection]]


class PostgresDocumentStore:
    """Status sink backed by the shared asyncpg pool."""

    def __init__(self, connect: ConnectionFactory | None = None) -> None:
        self._connect = connect or db.transaction

    async def update_status(
        self,
        document_id: str,
        status: DocumentStatus,
        *,
        error: str | None = None,
    ) -> bool:
        """Set ai_processing_status; a previous processing_error is cleared unless a new one is given."""
        patch = {"processing_error": error} if error else {}
        async with self._connect() as conn:
            tag = await conn.execute(
                """
                UPDATE documents
                SET ai_processing_status = $2,
                    metadata = (COALESCE(metadata, '{}'::jsonb) - 'processing_error') || $3::jsonb,
                    updated_at = NOW()
                WHERE id = $1
                """,
                document_id,
                status.value,
                json.dumps(patch),
            )
        if tag != "UPDATE 1":
            logger.warning("Status update for unknown document %s (%s)", document_id, status.value)
            return False
        logger.info("Document %s status -> %s", document_id, status.value)
        return True

    async def upsert_extracted_fields(
        self,
        document_id: str,
        fields: dict[str, Any],
        *,
        text: str | None = None,
    ) -> bool:
        """Merge fields into metadata.extracted_fields; store the full text when given."""
        extra = {"extracted_text": text} if text is not None else {}
        async with self._connect() as conn:
            tag = await conn.execute(
                """
                UPDATE documents
                SET metadata = COALESCE(metadata, '{}'::jsonb)
                        || jsonb_build_object(
                               'extracted_fields',
                               COALESCE(metadata -> 'extracted_fields', '{}'::jsonb) || $2::jsonb
                           )
                        || $3::jsonb,
                    updated_at = NOW()
                WHERE id = $1
                """,
                document_id,
                json.dumps(fields),
                json.dumps(extra),
            )
        if tag != "UPDATE 1":
            logger.warning("Extracted fields for unknown document %s were not stored", document_id)
            return False
        return True
