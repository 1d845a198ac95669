"""
Media offload: download from the network, upload to object storage.

:func:`store_media` never raises. Any failure along the way is logged and the
configured sentinel is returned instead of a URL, so the snippet still lands
in storage and the gap is visible downstream.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from whatsapp_snippets.clients.storage import StorageClient
from whatsapp_snippets.errors import MediaRetrievalFailed, NotConnected
from whatsapp_snippets.memory.store.model import MediaContent, Message

if TYPE_CHECKING:  # pragma: no cover - type-checking only
    from whatsapp_snippets.session.manager import SessionManager

logger = logging.getLogger(__name__)


def media_filename(media: MediaContent) -> str:
    """Return a fresh ``<uuid4>.<ext>`` name; no extension when unknown."""

    ext = media.extension
    return f"{uuid.uuid4()}{'.' + ext if ext else ''}"


async def retrieve(session: "SessionManager", message: Message) -> bytes:
    try:
        data = await session.download_media(message)
    except NotConnected:
        raise
    except Exception as exc:
        raise MediaRetrievalFailed(f"Failed to download media for {message.id}") from exc
    if not isinstance(data, (bytes, bytearray)) or not data:
        raise MediaRetrievalFailed("Failed to download media or buffer is empty")
    return bytes(data)


async def store_media(
    session: "SessionManager",
    storage: StorageClient,
    message: Message,
    media: MediaContent,
    *,
    bucket: str,
    sentinel: str,
) -> str:
    """Return the public URL for ``message``'s media, or ``sentinel``."""

    try:
        data = await retrieve(session, message)
        filename = media_filename(media)
        path = await storage.upload_object(bucket, filename, data, media.mimetype)
        url = storage.get_public_url(bucket, path)
        if not url:
            raise MediaRetrievalFailed("Could not get public URL for uploaded media")
    except NotConnected as exc:
        logger.warning("Media for %s not retrieved: %s", message.id, exc)
        return sentinel
    except Exception:
        logger.exception("Error downloading or uploading media for %s", message.id)
        return sentinel

    logger.info("Media uploaded: %s", url)
    return url
