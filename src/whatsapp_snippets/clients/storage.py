"""Contract for the snippet/media storage backend."""

from __future__ import annotations

from typing import Any, Dict, Protocol


class StorageClient(Protocol):
    async def insert_snippet(self, record: Dict[str, Any]) -> None:
        """Insert one snippet row; raise on rejection."""

    async def upload_object(
        self, bucket: str, filename: str, data: bytes, content_type: str | None
    ) -> str:
        """Upload ``data`` and return its path inside ``bucket``."""

    def get_public_url(self, bucket: str, path: str) -> str:
        """Return the public URL for an uploaded object."""


__all__ = ["StorageClient"]
