"""
Contract for the WhatsApp protocol client this package drives.

The transport (noise handshake, signal sessions, binary framing) belongs to an
external client library. The session manager only needs the narrow surface
below: build a handle from stored credentials, subscribe to its events, and
call a handful of request methods on it. Anything satisfying these protocols
can be plugged into :class:`~whatsapp_snippets.session.manager.SessionManager`,
including the in-memory fakes used by the test-suite.

Events
======

``connection.update``  -> :class:`ConnectionUpdate`
``messages.upsert``    -> :class:`MessagesUpsert`
``creds.update``       -> :class:`CredentialsUpdate`
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Awaitable, Callable, Dict, List, Literal, Optional, Protocol

from whatsapp_snippets.errors import DisconnectError, TerminalDisconnect, TransientDisconnect
from whatsapp_snippets.memory.store.model import Message

CONNECTION_UPDATE = "connection.update"
MESSAGES_UPSERT = "messages.upsert"
CREDS_UPDATE = "creds.update"

Credentials = Dict[str, Any]
Listener = Callable[[Any], Awaitable[None]]
ConnectionPhase = Literal["connecting", "open", "close"]


class DisconnectReason(IntEnum):
    """Status codes the network attaches to a closed connection."""

    CONNECTION_CLOSED = 428
    CONNECTION_LOST = 408
    CONNECTION_REPLACED = 440
    TIMED_OUT = 408
    LOGGED_OUT = 401
    BAD_SESSION = 500
    RESTART_REQUIRED = 515
    MULTIDEVICE_MISMATCH = 411
    FORBIDDEN = 403
    UNAVAILABLE_SERVICE = 503


@dataclass(frozen=True)
class DisconnectCause:
    """Why a connection closed. Only an explicit logout is terminal."""

    status_code: Optional[int] = None
    message: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status_code == DisconnectReason.LOGGED_OUT

    def to_error(self) -> DisconnectError:
        text = self.message or f"connection closed (status={self.status_code})"
        if self.is_terminal:
            return TerminalDisconnect(text, status_code=self.status_code)
        return TransientDisconnect(text, status_code=self.status_code)

    def describe(self) -> str:
        if self.status_code is None:
            return self.message or "unknown"
        try:
            name = DisconnectReason(self.status_code).name.lower()
        except ValueError:
            name = "unrecognized"
        return f"{name} ({self.status_code})"


@dataclass(frozen=True)
class ConnectionUpdate:
    connection: Optional[ConnectionPhase] = None
    pairing_token: Optional[str] = None
    disconnect_cause: Optional[DisconnectCause] = None


@dataclass(frozen=True)
class MessagesUpsert:
    messages: List[Message] = field(default_factory=list)
    # "notify" for live traffic, "append" for history the client syncs in.
    type: str = "notify"


@dataclass(frozen=True)
class CredentialsUpdate:
    credentials: Credentials = field(default_factory=dict)


@dataclass(frozen=True)
class GroupMetadata:
    jid: str
    subject: Optional[str] = None


class ConnectionHandle(Protocol):
    """One live socket. Discarded and rebuilt on every reconnect."""

    def on(self, event: str, listener: Listener) -> None: ...

    async def send(self, to: str, payload: Dict[str, Any]) -> Any: ...

    async def fetch_group_metadata(self, jid: str) -> GroupMetadata: ...

    async def retrieve_media(self, message: Message) -> bytes: ...

    async def close(self) -> None: ...


class ProtocolClient(Protocol):
    """Factory for connection handles."""

    async def connect(self, credentials: Credentials | None) -> ConnectionHandle: ...


__all__ = [
    "CONNECTION_UPDATE",
    "MESSAGES_UPSERT",
    "CREDS_UPDATE",
    "Credentials",
    "Listener",
    "DisconnectReason",
    "DisconnectCause",
    "ConnectionUpdate",
    "MessagesUpsert",
    "CredentialsUpdate",
    "GroupMetadata",
    "ConnectionHandle",
    "ProtocolClient",
]
