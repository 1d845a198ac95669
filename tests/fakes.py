"""In-memory stand-ins for the protocol client and the storage backend."""

from __future__ import annotations

import asyncio
import datetime
from collections import defaultdict

from whatsapp_snippets.clients.protocol import (
    CONNECTION_UPDATE,
    CREDS_UPDATE,
    MESSAGES_UPSERT,
    ConnectionUpdate,
    CredentialsUpdate,
    DisconnectCause,
    GroupMetadata,
    MessagesUpsert,
)
from whatsapp_snippets.errors import StorageError
from whatsapp_snippets.memory.store.model import (
    ExtendedText,
    MediaContent,
    Message,
    MessageContent,
)

PEER = "491700000001@s.whatsapp.net"
GROUP = "120363000000000001@g.us"
BASE_TS = datetime.datetime(2024, 4, 25, 16, 0, tzinfo=datetime.timezone.utc)


def make_message(
    mid,
    *,
    chat=PEER,
    text="hello",
    from_me=False,
    content=None,
    push_name=None,
    offset=0,
) -> Message:
    if content is None and text is not None:
        content = MessageContent(conversation=text)
    return Message(
        id=str(mid),
        chat_id=chat,
        sender_id=chat,
        timestamp=BASE_TS + datetime.timedelta(seconds=offset),
        from_me=from_me,
        content=content,
        push_name=push_name,
    )


def image_message(mid, *, caption=None, mimetype="image/jpeg", chat=PEER) -> Message:
    media = MediaContent(mimetype=mimetype, caption=caption, media_ref={"url": f"enc://{mid}"})
    return make_message(mid, chat=chat, text=None, content=MessageContent(image=media))


def extended_message(mid, text) -> Message:
    return make_message(mid, text=None, content=MessageContent(extended_text=ExtendedText(text=text)))


async def settle(rounds: int = 20) -> None:
    """Let scheduled tasks (reconnects, timers) run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeHandle:
    def __init__(self, credentials, *, groups=None, media=None):
        self.credentials = credentials
        self.listeners = defaultdict(list)
        self.sent = []
        self.closed = False
        self.groups = groups if groups is not None else {}
        self.media = media if media is not None else {}

    def on(self, event, listener):
        self.listeners[event].append(listener)

    async def emit(self, event, payload):
        for listener in list(self.listeners[event]):
            await listener(payload)

    async def open(self):
        await self.emit(CONNECTION_UPDATE, ConnectionUpdate(connection="open"))

    async def issue_token(self, token):
        await self.emit(CONNECTION_UPDATE, ConnectionUpdate(pairing_token=token))

    async def drop(self, status_code=428):
        cause = DisconnectCause(status_code=status_code, message="Connection Closed")
        await self.emit(CONNECTION_UPDATE, ConnectionUpdate(connection="close", disconnect_cause=cause))

    async def deliver(self, *messages, type="notify"):
        await self.emit(MESSAGES_UPSERT, MessagesUpsert(messages=list(messages), type=type))

    async def update_creds(self, credentials):
        await self.emit(CREDS_UPDATE, CredentialsUpdate(credentials=credentials))

    async def send(self, to, payload):
        self.sent.append((to, payload))
        return {"key": {"remoteJid": to, "fromMe": True, "id": f"ACK{len(self.sent)}"}, "status": 1}

    async def fetch_group_metadata(self, jid):
        if jid not in self.groups:
            raise RuntimeError("item-not-found")
        return GroupMetadata(jid=jid, subject=self.groups[jid])

    async def retrieve_media(self, message):
        data = self.media.get(message.id)
        if isinstance(data, Exception):
            raise data
        if data is None:
            raise RuntimeError("media not found")
        return data

    async def close(self):
        self.closed = True


class FakeProtocolClient:
    def __init__(self, *, groups=None, media=None, delay=0):
        self.handles = []
        self.connect_calls = []
        self.failures = 0
        # Seconds each connect() suspends before the handle exists.
        self.delay = delay
        self.groups = groups if groups is not None else {}
        self.media = media if media is not None else {}

    @property
    def handle(self) -> FakeHandle:
        return self.handles[-1]

    async def connect(self, credentials):
        self.connect_calls.append(credentials)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.failures:
            self.failures -= 1
            raise ConnectionError("stream errored")
        handle = FakeHandle(credentials, groups=self.groups, media=self.media)
        self.handles.append(handle)
        return handle


class FakeStorage:
    def __init__(self):
        self.inserted = []
        self.uploads = []
        self.fail_insert = False
        self.fail_upload = False

    async def insert_snippet(self, record):
        if self.fail_insert:
            raise StorageError("Supabase DB insert error (500): boom", status=500)
        self.inserted.append(record)

    async def upload_object(self, bucket, filename, data, content_type):
        if self.fail_upload:
            raise StorageError("Supabase Storage upload error (413): too large", status=413)
        self.uploads.append((bucket, filename, data, content_type))
        return filename

    def get_public_url(self, bucket, path):
        return f"https://project.supabase.test/storage/v1/object/public/{bucket}/{path}"
