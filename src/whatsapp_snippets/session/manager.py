"""
Session manager: one logical WhatsApp session per process.

The manager owns the current connection handle and the lifecycle state
machine (see :mod:`whatsapp_snippets.session.state`). ``connect()`` builds a
handle from stored credentials, wires its events to the message store, the
message hook and the credential store, and starts the store flush timer.
Every subscription is guarded so events from a superseded handle are dropped.
Building a handle and tearing one down are serialized on one lock, so at most
one handle is ever live.

Transient disconnects are retried with capped exponential backoff; a logout
(or running out of attempts) parks the machine in ``Terminal`` until someone
calls ``connect()`` again.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict

from whatsapp_snippets.clients.protocol import (
    CONNECTION_UPDATE,
    CREDS_UPDATE,
    MESSAGES_UPSERT,
    ConnectionHandle,
    ConnectionUpdate,
    Credentials,
    CredentialsUpdate,
    DisconnectCause,
    Listener,
    MessagesUpsert,
    ProtocolClient,
)
from whatsapp_snippets.config import session as session_cfg
from whatsapp_snippets.errors import NotConnected, TerminalDisconnect
from whatsapp_snippets.memory.store import MessageStore, StoreSync
from whatsapp_snippets.memory.store.model import Message

from .credentials import CredentialStore
from .outbound import MediaSend
from .state import Closed, Connecting, LifecycleState, Open, Pairing, Terminal

logger = logging.getLogger(__name__)

MessagesHandler = Callable[[MessagesUpsert], Awaitable[None]]


def _merge_credentials(current: Credentials | None, update: Credentials) -> Credentials:
    merged: Credentials = dict(current or {})
    keys = dict(merged.get("keys") or {})
    for name, value in update.items():
        if name == "keys":
            keys.update(value or {})
        else:
            merged[name] = value
    if keys:
        merged["keys"] = keys
    return merged


class SessionManager:
    """Drive the protocol client through pairing, open, close and reconnect."""

    def __init__(
        self,
        client: ProtocolClient,
        credential_store: CredentialStore,
        message_store: MessageStore,
        *,
        on_messages: MessagesHandler | None = None,
        flush_interval: float | None = None,
        reconnect_base_delay: float | None = None,
        reconnect_max_delay: float | None = None,
        reconnect_max_attempts: int | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._credential_store = credential_store
        self._store = message_store
        self._on_messages_handler = on_messages
        self._sync = StoreSync(message_store, self.is_connected, flush_interval)
        self._base_delay = (
            reconnect_base_delay
            if reconnect_base_delay is not None
            else session_cfg.RECONNECT_BASE_DELAY
        )
        self._max_delay = (
            reconnect_max_delay if reconnect_max_delay is not None else session_cfg.RECONNECT_MAX_DELAY
        )
        self._max_attempts = (
            reconnect_max_attempts
            if reconnect_max_attempts is not None
            else session_cfg.RECONNECT_MAX_ATTEMPTS
        )
        self._sleep = sleep

        self._state: LifecycleState = Closed()
        self._handle: ConnectionHandle | None = None
        self._credentials: Credentials | None = None
        self._reconnect_task: asyncio.Task | None = None
        self._attempts = 0
        # Bumped by connect() and close(); a reconnect from an older generation is void.
        self._generation = 0
        self._lifecycle_lock = asyncio.Lock()

    # ------------------------------------------------------------------ #
    # Public surface
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def store_sync(self) -> StoreSync:
        return self._sync

    @property
    def reconnect_attempts(self) -> int:
        return self._attempts

    def set_message_handler(self, handler: MessagesHandler | None) -> None:
        self._on_messages_handler = handler

    async def connect(self) -> ConnectionHandle:
        """
        Build a fresh connection handle and subscribe to its events.

        Returns as soon as the handle exists; whether it opens is reported
        later through ``connection.update``. Calling this from ``Terminal``
        is the explicit trigger that restarts the session. Waits for any
        connect or close already in flight and replaces its handle.
        """

        await self._cancel_reconnect()
        async with self._lifecycle_lock:
            self._generation += 1
            self._attempts = 0
            return await self._open_session()

    def is_connected(self) -> bool:
        return isinstance(self._state, Open)

    def current_pairing_token(self) -> str | None:
        if isinstance(self._state, Pairing):
            return self._state.token
        return None

    async def send_text(self, to: str, text: str) -> Any:
        handle = self._require_open()
        return await handle.send(to, {"text": text})

    async def send_media(self, to: str, media: MediaSend) -> Any:
        handle = self._require_open()
        return await handle.send(to, media.to_payload())

    async def group_name(self, jid: str) -> str | None:
        """Resolve a group's subject; any failure yields ``None``."""

        try:
            handle = self._require_open()
            metadata = await handle.fetch_group_metadata(jid)
        except NotConnected:
            logger.warning("Cannot fetch group info for %s while disconnected", jid)
            return None
        except Exception:
            logger.exception("Error fetching group info for %s", jid)
            return None
        return metadata.subject

    async def download_media(self, message: Message) -> bytes:
        handle = self._require_open()
        return await handle.retrieve_media(message)

    async def close(self) -> None:
        """Tear the session down: no reconnect, no timer, final flush if open."""

        self._generation += 1
        await self._cancel_reconnect()
        async with self._lifecycle_lock:
            await self._sync.stop()
            if self.is_connected():
                try:
                    await self._store.flush()
                except Exception:
                    logger.exception("Final message store flush failed")
            handle, self._handle = self._handle, None
            self._state = Closed()
            if handle is not None:
                await self._close_handle(handle)
        logger.info("WhatsApp session closed")

    # ------------------------------------------------------------------ #
    # Connection setup
    # ------------------------------------------------------------------ #

    async def _open_session(self) -> ConnectionHandle:
        """Replace the current handle; caller holds ``_lifecycle_lock``."""

        previous, self._handle = self._handle, None
        if previous is not None:
            await self._close_handle(previous)

        self._credentials = self._credential_store.load()
        self._state = Pairing() if self._credentials is None else Connecting()

        handle = await self._client.connect(self._credentials)
        try:
            await self._sync.start()
        except asyncio.CancelledError:
            await self._close_handle(handle)
            raise

        # No suspension from here on: the handle is current once subscribed.
        self._handle = handle
        subscribe = self._subscriber(handle)
        self._store.bind(subscribe)
        subscribe(MESSAGES_UPSERT, self._on_messages)
        subscribe(CONNECTION_UPDATE, lambda update: self._on_connection_update(handle, update))
        subscribe(CREDS_UPDATE, self._on_credentials_update)

        logger.info("WhatsApp client initialized (state=%s)", self._state.name)
        return handle

    def _subscriber(self, handle: ConnectionHandle) -> Callable[[str, Listener], None]:
        """Return a ``subscribe`` that ignores events once ``handle`` is stale."""

        def subscribe(event: str, listener: Listener) -> None:
            async def guarded(payload: Any) -> None:
                if handle is not self._handle:
                    logger.debug("Ignoring %s from superseded connection", event)
                    return
                await listener(payload)

            handle.on(event, guarded)

        return subscribe

    async def _close_handle(self, handle: ConnectionHandle) -> None:
        try:
            await handle.close()
        except Exception:
            logger.exception("Failed to close previous connection handle")

    def _require_open(self) -> ConnectionHandle:
        if isinstance(self._state, Open):
            return self._state.handle
        raise NotConnected(f"WhatsApp client not connected (state={self._state.name})")

    # ------------------------------------------------------------------ #
    # Event handlers
    # ------------------------------------------------------------------ #

    async def _on_messages(self, upsert: MessagesUpsert) -> None:
        if self._on_messages_handler is None:
            return
        await self._on_messages_handler(upsert)

    async def _on_connection_update(
        self, handle: ConnectionHandle, update: ConnectionUpdate
    ) -> None:
        if update.pairing_token and not self.is_connected():
            self._state = Pairing(update.pairing_token)
            logger.info("Pairing token issued; waiting for the device to link.")

        if update.connection == "connecting":
            if not isinstance(self._state, Pairing):
                self._state = Connecting()
        elif update.connection == "open":
            if isinstance(self._state, Pairing) and self._state.token:
                logger.info("Connection open, clearing pairing token.")
            self._state = Open(handle)
            self._attempts = 0
            logger.info("WhatsApp connection established")
        elif update.connection == "close":
            await self._on_close(update.disconnect_cause)

    async def _on_close(self, cause: DisconnectCause | None) -> None:
        cause = cause or DisconnectCause()
        if self.current_pairing_token() is not None:
            logger.info("Connection closed, clearing pairing token.")

        terminal = isinstance(cause.to_error(), TerminalDisconnect)
        handle, self._handle = self._handle, None
        self._state = Terminal(cause) if terminal else Closed(cause)
        if handle is not None:
            await self._close_handle(handle)

        if terminal:
            await self._sync.stop()
            try:
                self._credential_store.clear()
            except OSError:
                logger.exception("Failed to clear credentials after logout")
            logger.warning(
                "WhatsApp logged out (%s); automatic reconnect disabled", cause.describe()
            )
            return

        logger.warning("WhatsApp connection closed (%s); reconnecting", cause.describe())
        self._schedule_reconnect(cause)

    async def _on_credentials_update(self, update: CredentialsUpdate) -> None:
        self._credentials = _merge_credentials(self._credentials, update.credentials)
        # Only the keys carried by this update need rewriting on disk.
        payload: Dict[str, Any] = {k: v for k, v in self._credentials.items() if k != "keys"}
        changed_keys = update.credentials.get("keys")
        if changed_keys:
            payload["keys"] = changed_keys
        try:
            self._credential_store.save(payload)
        except Exception:
            logger.critical(
                "Failed to persist credentials to %s; the session may not survive a restart",
                self._credential_store.directory,
                exc_info=True,
            )

    # ------------------------------------------------------------------ #
    # Reconnect
    # ------------------------------------------------------------------ #

    def _backoff(self, attempt: int) -> float:
        if self._base_delay <= 0:
            return 0.0
        return min(self._max_delay, self._base_delay * 2 ** (attempt - 1))

    def _schedule_reconnect(self, cause: DisconnectCause) -> None:
        if self._reconnect_task is not None and not self._reconnect_task.done():
            return
        self._reconnect_task = asyncio.create_task(self._reconnect(cause, self._generation))

    async def _reconnect(self, cause: DisconnectCause, generation: int) -> None:
        self._attempts += 1
        if self._max_attempts and self._attempts > self._max_attempts:
            self._state = Terminal(cause)
            await self._sync.stop()
            logger.error(
                "Giving up after %d reconnect attempt(s); call connect() to retry",
                self._max_attempts,
            )
            return

        delay = self._backoff(self._attempts)
        if delay:
            logger.info("Reconnecting in %.1fs (attempt %d)", delay, self._attempts)
            await self._sleep(delay)

        # The task stays registered until the handle is live so connect() and
        # close() can cancel it mid-connect.
        async with self._lifecycle_lock:
            if generation != self._generation:
                logger.debug("Dropping reconnect from a superseded session")
                return
            try:
                await self._open_session()
            except Exception:
                logger.exception("Reconnect attempt %d failed", self._attempts)
                self._state = Closed(cause)
                self._reconnect_task = None
                self._schedule_reconnect(cause)

    async def _cancel_reconnect(self) -> None:
        task, self._reconnect_task = self._reconnect_task, None
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
