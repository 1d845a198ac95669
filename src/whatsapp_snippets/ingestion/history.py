"""
History replay from the local message store.

``fetch_history`` walks the cached tail of one conversation (not the live
network) and feeds peer messages back through the ingestion pipeline in
fixed-size batches, sleeping between batches to stay under the storage and
media rate limits.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List

from whatsapp_snippets.config import history as history_cfg
from whatsapp_snippets.memory.store import MessageStore
from whatsapp_snippets.memory.store.model import Message

from .pipeline import IngestionPipeline

logger = logging.getLogger(__name__)


@dataclass
class HistoryReport:
    """Raw replayed slice plus aggregate counters."""

    messages: List[Message] = field(default_factory=list)
    processed: int = 0
    failed: int = 0
    batches: int = 0

    @property
    def count(self) -> int:
        return len(self.messages)


class HistoryReplayer:
    def __init__(
        self,
        store: MessageStore,
        pipeline: IngestionPipeline,
        *,
        batch_size: int | None = None,
        batch_delay: float | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._store = store
        self._pipeline = pipeline
        self._batch_size = batch_size if batch_size is not None else history_cfg.BATCH_SIZE
        self._batch_delay = batch_delay if batch_delay is not None else history_cfg.BATCH_DELAY
        self._sleep = sleep
        if self._batch_size < 1:
            raise ValueError("batch_size must be >= 1")

    async def fetch_history(self, jid: str, limit: int | None = None) -> HistoryReport:
        """Replay up to ``limit`` of the newest cached messages for ``jid``."""

        limit = limit if limit is not None else history_cfg.DEFAULT_LIMIT
        messages = self._store.tail(jid, limit)
        logger.info("Found %d messages in chat history for %s", len(messages), jid)

        replayable = [m for m in messages if not m.from_me]
        batches = [
            replayable[i : i + self._batch_size]
            for i in range(0, len(replayable), self._batch_size)
        ]

        report = HistoryReport(messages=messages, batches=len(batches))
        for idx, batch in enumerate(batches, start=1):
            results = await asyncio.gather(
                *(self._pipeline.ingest(m) for m in batch), return_exceptions=True
            )
            for result in results:
                if isinstance(result, BaseException) or not result.ok:
                    report.failed += 1
                else:
                    report.processed += 1

            logger.info(
                "Replayed batch %d/%d for %s (%d processed, %d failed so far)",
                idx,
                len(batches),
                jid,
                report.processed,
                report.failed,
            )
            if idx < len(batches):
                await self._sleep(self._batch_delay)

        return report
