import aiohttp
import pytest

from whatsapp_snippets.clients.supabase import SupabaseStorage
from whatsapp_snippets.config import storage as storage_cfg
from whatsapp_snippets.errors import StorageError

BASE = "https://project.supabase.test"


class _Response:
    def __init__(self, status=200, payload=None, body=""):
        self.status = status
        self._payload = payload
        self._body = body

    async def text(self):
        return self._body

    async def json(self, content_type=None):
        return self._payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class _Session:
    """Records requests and answers from a queue of canned responses."""

    closed = False

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def _request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url, **kwargs):
        return self._request("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._request("GET", url, **kwargs)


def _storage(*responses):
    session = _Session(*responses)
    return SupabaseStorage(BASE + "/", "service-key", table="whatsapp_snippets", session=session), session


@pytest.mark.asyncio
async def test_insert_posts_row_with_auth_headers():
    storage, session = _storage(_Response(201))

    await storage.insert_snippet({"sender_jid": "a", "content": "hi"})

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", f"{BASE}/rest/v1/whatsapp_snippets")
    assert kwargs["json"] == [{"sender_jid": "a", "content": "hi"}]
    assert kwargs["headers"]["apikey"] == "service-key"
    assert kwargs["headers"]["Authorization"] == "Bearer service-key"
    assert kwargs["headers"]["Prefer"] == "return=minimal"


@pytest.mark.asyncio
async def test_insert_error_raises_storage_error():
    storage, _ = _storage(_Response(409, body='{"message":"duplicate key"}'))

    with pytest.raises(StorageError) as info:
        await storage.insert_snippet({})

    assert info.value.status == 409
    assert "duplicate key" in str(info.value)


@pytest.mark.asyncio
async def test_upload_returns_path_inside_bucket():
    storage, session = _storage(_Response(200, payload={"Key": "whatsapp-media/abc.jpeg"}))

    path = await storage.upload_object("whatsapp-media", "abc.jpeg", b"data", "image/jpeg")

    method, url, kwargs = session.calls[0]
    assert url == f"{BASE}/storage/v1/object/whatsapp-media/abc.jpeg"
    assert kwargs["data"] == b"data"
    assert kwargs["headers"]["Content-Type"] == "image/jpeg"
    assert kwargs["headers"]["x-upsert"] == "false"
    assert path == "abc.jpeg"
    assert storage.get_public_url("whatsapp-media", path) == (
        f"{BASE}/storage/v1/object/public/whatsapp-media/abc.jpeg"
    )


@pytest.mark.asyncio
async def test_upload_falls_back_to_filename_without_key():
    storage, _ = _storage(_Response(200, payload={}))

    assert await storage.upload_object("b", "x.pdf", b"1", None) == "x.pdf"


@pytest.mark.asyncio
async def test_upload_error_raises():
    storage, _ = _storage(_Response(413, body="Payload too large"))

    with pytest.raises(StorageError):
        await storage.upload_object("b", "x.mp4", b"1", "video/mp4")


@pytest.mark.asyncio
async def test_check_reports_each_backend():
    storage, session = _storage(_Response(200), _Response(200, payload=[]))
    assert await storage.check("whatsapp-media") == {
        "database": "connected",
        "storage": "connected",
    }
    assert session.calls[1][1] == f"{BASE}/storage/v1/object/list/whatsapp-media"

    storage, _ = _storage(_Response(500, body="down"), aiohttp.ClientConnectionError("refused"))
    assert await storage.check("whatsapp-media") == {"database": "error", "storage": "error"}


def test_from_config_requires_credentials(monkeypatch):
    monkeypatch.setattr(storage_cfg, "SUPABASE_URL", "")
    with pytest.raises(ValueError, match="Missing environment variables"):
        SupabaseStorage.from_config()
