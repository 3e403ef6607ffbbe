"""Single-worker queue that serializes document analysis requests.

At most one task is in flight. Tasks are ordered by (priority, enqueue
sequence), so with the default priority the queue is plain FIFO. A failing
task is recorded as a ``failed`` status and the worker moves on.
"""

from __future__ import annotations

import asyncio
import contextvars
import heapq
import itertools
import logging

from insolvency_service.logging_config import log_context
from insolvency_service.processing.types import (
    AnalysisTrigger,
    DocumentStatus,
    ProcessingTask,
    StatusSink,
)

logger = logging.getLogger(__name__)


class ProcessingQueue:
    def __init__(self, *, sink: StatusSink, trigger: AnalysisTrigger) -> None:
        self._sink = sink
        self._trigger = trigger
        self._heap: list[tuple[int, int, ProcessingTask]] = []
        self._seq = itertools.count()
        self._processing = False
        self._idle = asyncio.Event()
        self._idle.set()
        self._worker: asyncio.Task[None] | None = None

    @property
    def is_processing(self) -> bool:
        return self._processing

    @property
    def pending(self) -> int:
        return len(self._heap)

    def add_task(self, task: ProcessingTask) -> None:
        """Enqueue a task; must be called from within a running event loop."""
        loop = asyncio.get_running_loop()
        heapq.heappush(self._heap, (task.priority, next(self._seq), task))
        logger.info("Queued document %s (priority=%d, pending=%d)", task.document_id, task.priority, len(self._heap))

        if not self._processing:
            self._processing = True
            self._idle.clear()
            # Fresh context: the worker outlives the request that started it
            self._worker = loop.create_task(self._run(), context=contextvars.Context())

    async def join(self) -> None:
        """Wait until every queued task has been processed."""
        await self._idle.wait()

    async def close(self) -> None:
        """Cancel the worker; tasks still queued are dropped."""
        worker = self._worker
        if worker is not None and not worker.done():
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass
        if self._heap:
            logger.warning("Processing queue closed with %d unprocessed task(s)", len(self._heap))
            self._heap.clear()

    async def _run(self) -> None:
        try:
            while self._heap:
                _, _, task = heapq.heappop(self._heap)
                with log_context(document_id=task.document_id):
                    await self._process(task)
        finally:
            self._processing = False
            self._idle.set()

    async def _process(self, task: ProcessingTask) -> None:
        logger.info("Processing document %s (%s)", task.document_id, task.type)
        await self._record(task.document_id, DocumentStatus.PROCESSING)
        try:
            await self._trigger.analyze(task)
        except Exception as e:
            logger.exception("Processing failed for document %s", task.document_id)
            await self._record(task.document_id, DocumentStatus.FAILED, error=str(e) or type(e).__name__)
            return
        await self._record(task.document_id, DocumentStatus.COMPLETE)

    async def _record(self, document_id: str, status: DocumentStatus, *, error: str | None = None) -> None:
        try:
            await self._sink.update_status(document_id, status, error=error)
        except Exception:
            logger.exception("Failed to record status %s for document %s", status.value, document_id)
