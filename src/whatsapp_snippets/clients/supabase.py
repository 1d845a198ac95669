"""
Supabase REST storage backend.

Snippet rows go through PostgREST (``/rest/v1/<table>``) and media through
Supabase Storage (``/storage/v1/object/<bucket>/<path>``). Only the handful of
endpoints the ingestion pipeline needs are wrapped; every non-2xx response is
raised as :class:`~whatsapp_snippets.errors.StorageError`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict
from urllib.parse import quote

import aiohttp

from whatsapp_snippets.config import storage as storage_cfg
from whatsapp_snippets.errors import StorageError

logger = logging.getLogger(__name__)


async def _raise_for_status(resp: aiohttp.ClientResponse, action: str) -> None:
    if resp.status < 400:
        return
    body = await resp.text()
    raise StorageError(
        f"Supabase {action} error ({resp.status}): {body[:200]}", status=resp.status
    )


class SupabaseStorage:
    """Insert snippets and upload media against one Supabase project."""

    def __init__(
        self,
        url: str,
        key: str,
        *,
        table: str | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._base = url.rstrip("/")
        self._key = key
        self._table = table or storage_cfg.SNIPPETS_TABLE
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_config(cls) -> "SupabaseStorage":
        url, key = storage_cfg.require_credentials()
        return cls(url, key)

    @property
    def table(self) -> str:
        return self._table

    def _headers(self, **extra: str) -> Dict[str, str]:
        headers = {"apikey": self._key, "Authorization": f"Bearer {self._key}"}
        headers.update(extra)
        return headers

    def _client(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def insert_snippet(self, record: Dict[str, Any]) -> None:
        url = f"{self._base}/rest/v1/{self._table}"
        headers = self._headers(Prefer="return=minimal")
        async with self._client().post(url, json=[record], headers=headers) as resp:
            await _raise_for_status(resp, "DB insert")

    async def upload_object(
        self, bucket: str, filename: str, data: bytes, content_type: str | None
    ) -> str:
        url = f"{self._base}/storage/v1/object/{bucket}/{quote(filename)}"
        headers = self._headers(**{"x-upsert": "false"})
        if content_type:
            headers["Content-Type"] = content_type
        async with self._client().post(url, data=data, headers=headers) as resp:
            await _raise_for_status(resp, "Storage upload")
            payload = await resp.json(content_type=None)

        # Storage answers with {"Key": "<bucket>/<path>"}.
        key = (payload or {}).get("Key") or ""
        prefix = f"{bucket}/"
        return key[len(prefix):] if key.startswith(prefix) else (key or filename)

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self._base}/storage/v1/object/public/{bucket}/{quote(path)}"

    async def check(self, bucket: str | None = None) -> Dict[str, str]:
        """Probe the snippets table and media bucket; never raises."""

        bucket = bucket or storage_cfg.MEDIA_BUCKET
        result: Dict[str, str] = {}

        try:
            url = f"{self._base}/rest/v1/{self._table}?select=id&limit=1"
            async with self._client().get(url, headers=self._headers()) as resp:
                await _raise_for_status(resp, "DB select")
            result["database"] = "connected"
        except (StorageError, aiohttp.ClientError) as exc:
            logger.warning("Database connection test failed: %s", exc)
            result["database"] = "error"

        try:
            url = f"{self._base}/storage/v1/object/list/{bucket}"
            body = {"prefix": "", "limit": 1}
            async with self._client().post(url, json=body, headers=self._headers()) as resp:
                await _raise_for_status(resp, "Storage list")
            result["storage"] = "connected"
        except (StorageError, aiohttp.ClientError) as exc:
            logger.warning("Storage connection test failed: %s", exc)
            result["storage"] = "error"

        return result

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None
