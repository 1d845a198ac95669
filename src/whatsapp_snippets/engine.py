"""
Engine: the single owner of a WhatsApp ingestion session.

One :class:`WhatsAppEngine` per process, created explicitly and passed to
whatever serves the HTTP routes. It wires the credential store, message store,
session manager, ingestion pipeline and history replayer together and exposes
the operations callers use::

    engine = WhatsAppEngine(protocol_client, SupabaseStorage.from_config())
    await engine.connect()
    ...
    await engine.close()
"""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Any, Dict, List

from whatsapp_snippets.clients.protocol import ConnectionHandle, ProtocolClient
from whatsapp_snippets.clients.storage import StorageClient
from whatsapp_snippets.event_hooks import message_hook
from whatsapp_snippets.ingestion import HistoryReplayer, HistoryReport, IngestionPipeline
from whatsapp_snippets.ingestion.chats import list_chats
from whatsapp_snippets.memory.store import MessageStore
from whatsapp_snippets.memory.store.model import ChatSummary
from whatsapp_snippets.session import CredentialStore, MediaSend, SessionManager

logger = logging.getLogger(__name__)


class WhatsAppEngine:
    """Compose the session and ingestion components behind one object."""

    def __init__(
        self,
        client: ProtocolClient,
        storage: StorageClient,
        *,
        session_dir: str | Path | None = None,
        store_file: str | Path | None = None,
        session_options: Dict[str, Any] | None = None,
        history_options: Dict[str, Any] | None = None,
    ) -> None:
        self.storage = storage
        self.credentials = CredentialStore(session_dir)
        self.store = MessageStore(store_file)
        self.session = SessionManager(
            client, self.credentials, self.store, **(session_options or {})
        )
        self.pipeline = IngestionPipeline(self.session, storage)
        self.history = HistoryReplayer(self.store, self.pipeline, **(history_options or {}))
        self.session.set_message_handler(functools.partial(message_hook.handle, self.pipeline))
        self._loaded = False

    async def connect(self) -> ConnectionHandle:
        """Load the message store once, then start (or restart) the session."""

        if not self._loaded:
            self.store.load()
            self._loaded = True
        return await self.session.connect()

    async def close(self) -> None:
        await self.session.close()
        close_storage = getattr(self.storage, "close", None)
        if close_storage is not None:
            await close_storage()

    # ------------------------------------------------------------------ #
    # Session passthroughs
    # ------------------------------------------------------------------ #

    async def send_text(self, to: str, text: str) -> Any:
        return await self.session.send_text(to, text)

    async def send_media(self, to: str, media: MediaSend) -> Any:
        return await self.session.send_media(to, media)

    def is_connected(self) -> bool:
        return self.session.is_connected()

    def current_pairing_token(self) -> str | None:
        return self.session.current_pairing_token()

    # ------------------------------------------------------------------ #
    # Store-backed reads
    # ------------------------------------------------------------------ #

    async def list_chats(self) -> List[ChatSummary]:
        return await list_chats(self.store, self.session)

    async def fetch_history(self, jid: str, limit: int | None = None) -> HistoryReport:
        logger.info("Fetching chat history for %s", jid)
        return await self.history.fetch_history(jid, limit)

    async def health(self) -> Dict[str, str]:
        status = {
            "status": "ok",
            "whatsapp": "connected" if self.is_connected() else "disconnected",
        }
        check = getattr(self.storage, "check", None)
        if check is not None:
            probes = await check()
            status["storage"] = (
                "connected" if all(v == "connected" for v in probes.values()) else "error"
            )
        return status
