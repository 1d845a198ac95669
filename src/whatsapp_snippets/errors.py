"""
Error taxonomy shared by the session, ingestion and storage layers.

Only :class:`NotConnected` and :class:`StorageError` cross public API
boundaries as raised exceptions. The remaining classes describe per-message
or per-disconnect outcomes; the ingestion pipeline catches them and records
them on its result objects instead of letting them escape a batch.
"""

from __future__ import annotations


class SnippetsError(Exception):
    """Base class for every error raised by this package."""


class NotConnected(SnippetsError):
    """No usable connection handle exists for the requested operation."""


class MediaRetrievalFailed(SnippetsError):
    """Media bytes could not be downloaded or uploaded."""


class PersistenceFailed(SnippetsError):
    """A snippet could not be inserted into the storage backend."""


class StorageError(SnippetsError):
    """The storage backend rejected a request."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class DisconnectError(SnippetsError):
    """Base for disconnect classifications."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TerminalDisconnect(DisconnectError):
    """Credentials were invalidated; a fresh pairing flow is required."""


class TransientDisconnect(DisconnectError):
    """The connection dropped and may be re-established automatically."""


__all__ = [
    "SnippetsError",
    "NotConnected",
    "MediaRetrievalFailed",
    "PersistenceFailed",
    "StorageError",
    "DisconnectError",
    "TerminalDisconnect",
    "TransientDisconnect",
]
