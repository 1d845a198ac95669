"""Message store coordinating conversation entries and snapshot persistence."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Dict, List

from whatsapp_snippets.config import cache

from . import snapshot
from .conversation import ConversationEntry
from .model import Message

logger = logging.getLogger(__name__)

Subscribe = Callable[[str, Callable], None]


class MessageStore:
    """In-memory index of conversations, appended to by a single writer."""

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path if path is not None else cache.STORE_FILE)
        self._entries: Dict[str, ConversationEntry] = {}
        self._flush_lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------ #
    # WRITE helpers
    # ------------------------------------------------------------------ #

    def bind(self, subscribe: Subscribe) -> None:
        """Register :meth:`record_upsert` through the session's ``subscribe``."""

        # Deferred: clients.protocol imports this package's model module.
        from whatsapp_snippets.clients.protocol import MESSAGES_UPSERT

        subscribe(MESSAGES_UPSERT, self.record_upsert)

    async def record_upsert(self, upsert) -> None:
        for message in upsert.messages:
            self.append(message)

    def append(self, message: Message) -> None:
        """Append ``message`` to its conversation, creating the entry if new."""

        entry = self._entries.get(message.chat_id)
        if entry is None:
            entry = ConversationEntry.for_jid(message.chat_id)
            self._entries[message.chat_id] = entry
        entry.append(message)
        logger.debug(
            "Stored msg %s in %s (%d cached)", message.id, message.chat_id, len(entry)
        )

    # ------------------------------------------------------------------ #
    # READ helpers
    # ------------------------------------------------------------------ #

    def conversation_ids(self) -> List[str]:
        return list(self._entries.keys())

    def get(self, jid: str) -> ConversationEntry | None:
        return self._entries.get(jid)

    def tail(self, jid: str, limit: int | None = None) -> List[Message]:
        """Return the newest ``limit`` messages of ``jid`` (oldest first)."""

        entry = self._entries.get(jid)
        if entry is None:
            return []
        return entry.tail(limit)

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------ #
    # PERSISTENCE
    # ------------------------------------------------------------------ #

    def load(self) -> int:
        """Replace in-memory state with the on-disk snapshot, if any."""

        if not snapshot.exists(self._path):
            logger.info("No message store at %s; starting cold.", self._path)
            return 0
        try:
            self._entries = snapshot.load(self._path)
        except (OSError, ValueError, KeyError, TypeError):
            logger.exception("Failed to read message store %s; starting cold.", self._path)
            self._entries = {}
            return 0
        logger.info(
            "Loaded message store with %d conversation(s) from %s",
            len(self._entries),
            self._path,
        )
        return len(self._entries)

    def snapshot(self) -> snapshot.Snapshot:
        """Return a detached copy of the store.

        Runs without suspending, so no append can interleave with it.
        """

        return {jid: entry.to_dict() for jid, entry in self._entries.items()}

    async def flush(self) -> None:
        """Write a snapshot to disk; the file I/O happens off the event loop."""

        data = self.snapshot()
        async with self._flush_lock:
            await asyncio.to_thread(snapshot.save, self._path, data)
        logger.debug("Flushed %d conversation(s) to %s", len(data), self._path)
