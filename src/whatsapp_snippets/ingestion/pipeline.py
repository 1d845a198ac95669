"""
Inbound message ingestion.

:class:`IngestionPipeline` turns one :class:`Message` into at most one
:class:`Snippet` and hands it to the storage backend. Every call returns an
:class:`IngestResult`; nothing raised inside the pipeline escapes, so callers
feeding many messages (live traffic or history replay) never abort halfway.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Optional

from whatsapp_snippets.clients.storage import StorageClient
from whatsapp_snippets.config import storage as storage_cfg
from whatsapp_snippets.errors import PersistenceFailed
from whatsapp_snippets.memory.store.model import Message

from .classifier import classify
from .media import store_media
from .snippet import Snippet
from .utils import _snippet_preview

if TYPE_CHECKING:  # pragma: no cover - type-checking only
    from whatsapp_snippets.session.manager import SessionManager

logger = logging.getLogger(__name__)

Outcome = Literal["stored", "skipped", "failed"]


@dataclass(frozen=True)
class IngestResult:
    """Outcome of ingesting one message."""

    message_id: str
    outcome: Outcome
    snippet: Optional[Snippet] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome != "failed"


class IngestionPipeline:
    """Classify, resolve media and persist inbound messages."""

    def __init__(
        self,
        session: "SessionManager",
        storage: StorageClient,
        *,
        bucket: str | None = None,
        sentinel: str | None = None,
    ) -> None:
        self._session = session
        self._storage = storage
        self._bucket = bucket or storage_cfg.MEDIA_BUCKET
        self._sentinel = sentinel or storage_cfg.MEDIA_FAILED_SENTINEL

    @property
    def sentinel(self) -> str:
        return self._sentinel

    async def ingest(self, message: Message) -> IngestResult:
        try:
            return await self._ingest(message)
        except Exception as exc:
            logger.exception("Error handling incoming message %s", message.id)
            return IngestResult(message.id, "failed", reason=str(exc))

    async def _ingest(self, message: Message) -> IngestResult:
        if not message.has_content() or not message.chat_id:
            logger.info("Skipping message %s without content or sender JID.", message.id)
            return IngestResult(message.id, "skipped", reason="empty")
        if message.from_me:
            return IngestResult(message.id, "skipped", reason="from_me")

        group_name = None
        if message.is_group:
            group_name = await self._session.group_name(message.chat_id)
            if group_name:
                logger.info("Message from group: %s", group_name)

        classified = classify(message)
        if classified.kind == "unknown":
            logger.info("Skipping unsupported message type from %s", message.chat_id)
            return IngestResult(message.id, "skipped", reason="unsupported")

        caption = None
        if classified.media is not None:
            content = await store_media(
                self._session,
                self._storage,
                message,
                classified.media,
                bucket=self._bucket,
                sentinel=self._sentinel,
            )
            caption = classified.media.caption or None
        else:
            content = classified.text or ""

        if not content:
            logger.info("Skipping empty %s message from %s", classified.kind, message.chat_id)
            return IngestResult(message.id, "skipped", reason="empty")

        snippet = Snippet(
            sender_jid=message.chat_id,
            timestamp=message.timestamp,
            message_type=classified.kind,
            content=content,
            is_group=message.is_group,
            sender_name=message.push_name or None,
            caption=caption,
            group_name=group_name,
        )
        return await self._persist(message, snippet)

    async def _persist(self, message: Message, snippet: Snippet) -> IngestResult:
        try:
            await self._storage.insert_snippet(snippet.to_record())
        except Exception as exc:
            error = PersistenceFailed(f"snippet insert failed for {message.id}: {exc}")
            logger.error("Error saving snippet to storage: %s", error, exc_info=exc)
            return IngestResult(message.id, "failed", snippet=snippet, reason=str(error))

        logger.info(
            "Snippet saved for %s | %s", snippet.sender_jid, _snippet_preview(snippet)
        )
        return IngestResult(message.id, "stored", snippet=snippet)
