"""Interval flush of the message store, gated on connection state."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from whatsapp_snippets import maintenance
from whatsapp_snippets.config import cache

from .manager import MessageStore

logger = logging.getLogger(__name__)


class StoreSync:
    """Flush ``store`` every ``interval`` seconds while ``is_connected()``."""

    def __init__(
        self,
        store: MessageStore,
        is_connected: Callable[[], bool],
        interval: float | None = None,
    ) -> None:
        self._store = store
        self._is_connected = is_connected
        self._interval = interval if interval is not None else cache.FLUSH_INTERVAL
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """(Re)start the flush timer; an existing timer is replaced."""

        await self.stop()
        self._task = await maintenance.startup(
            self.flush_if_connected, self._interval, name="message store flush"
        )
        logger.info("Message store flush scheduled every %ss", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        await maintenance.shutdown(self._task)
        self._task = None
        logger.info("Message store flush stopped")

    async def flush_if_connected(self) -> bool:
        """Flush once; skipped while disconnected to avoid torn state."""

        if not self._is_connected():
            logger.debug("Skipping message store flush while disconnected")
            return False
        await self._store.flush()
        return True
