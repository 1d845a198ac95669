from __future__ import annotations

"""Dataclass models for cached WhatsApp messages.

Message schema (output of :meth:`Message.to_dict`):

```
{"id": "3EB0...", "chat_id": "4915...@s.whatsapp.net",
 "sender_id": "4915...@s.whatsapp.net", "timestamp": 1714060800.0,
 "from_me": false, "push_name": "Ana",
 "content": {"conversation": "hi"}}

{"content": {"image": {"mimetype": "image/jpeg", "caption": "look",
                       "media_ref": {"url": "...", "mediaKey": "..."}}}}
```

``media_ref`` is opaque to this package: it is whatever the protocol client
needs to download the binary later, and must stay JSON-serializable so the
message store can snapshot it. Objects keep only non-``None`` attributes when
serialized.
"""

import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

GROUP_SUFFIX = "@g.us"


def _drop_nones(d: Dict[str, Any]) -> Dict[str, Any]:
    """Return a shallow copy of ``d`` without keys mapped to ``None``."""
    return {k: v for k, v in d.items() if v is not None}


def is_group_jid(jid: str) -> bool:
    """Return ``True`` when ``jid`` addresses a group conversation."""
    return jid.endswith(GROUP_SUFFIX)


@dataclass(frozen=True, slots=True)
class MediaContent:
    """Attachment metadata; the bytes stay on the network until requested."""

    mimetype: Optional[str] = None
    caption: Optional[str] = None
    file_name: Optional[str] = None
    media_ref: Dict[str, Any] = field(default_factory=dict)

    @property
    def extension(self) -> str:
        """File extension taken from the mimetype subtype, e.g. ``jpeg``."""
        if not self.mimetype or "/" not in self.mimetype:
            return ""
        subtype = self.mimetype.split("/", 1)[1]
        return subtype.split(";", 1)[0].strip()

    def to_dict(self) -> Dict[str, Any]:
        base = _drop_nones(
            {"mimetype": self.mimetype, "caption": self.caption, "file_name": self.file_name}
        )
        base["media_ref"] = dict(self.media_ref)
        return base

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MediaContent":
        return cls(
            mimetype=d.get("mimetype"),
            caption=d.get("caption"),
            file_name=d.get("file_name"),
            media_ref=dict(d.get("media_ref") or {}),
        )


@dataclass(frozen=True, slots=True)
class ExtendedText:
    """Text sent with link previews, replies or mentions."""

    text: Optional[str] = None
    quoted_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_nones({"text": self.text, "quoted_id": self.quoted_id})

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ExtendedText":
        return cls(text=d.get("text"), quoted_id=d.get("quoted_id"))


@dataclass(frozen=True, slots=True)
class MessageContent:
    """
    Payload slots of one message.

    Several slots may be populated at once (the network nests content freely);
    :func:`whatsapp_snippets.ingestion.classifier.classify` decides which one
    wins. ``other`` records the names of payload types this package does not
    understand (stickers, reactions, polls...).
    """

    conversation: Optional[str] = None
    extended_text: Optional[ExtendedText] = None
    image: Optional[MediaContent] = None
    video: Optional[MediaContent] = None
    document: Optional[MediaContent] = None
    other: Tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return (
            self.conversation is None
            and self.extended_text is None
            and self.image is None
            and self.video is None
            and self.document is None
            and not self.other
        )

    def to_dict(self) -> Dict[str, Any]:
        base = _drop_nones(
            {
                "conversation": self.conversation,
                "extended_text": self.extended_text.to_dict() if self.extended_text else None,
                "image": self.image.to_dict() if self.image else None,
                "video": self.video.to_dict() if self.video else None,
                "document": self.document.to_dict() if self.document else None,
            }
        )
        if self.other:
            base["other"] = list(self.other)
        return base

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MessageContent":
        def _media(key: str) -> Optional[MediaContent]:
            raw = d.get(key)
            return MediaContent.from_dict(raw) if raw is not None else None

        ext = d.get("extended_text")
        return cls(
            conversation=d.get("conversation"),
            extended_text=ExtendedText.from_dict(ext) if ext is not None else None,
            image=_media("image"),
            video=_media("video"),
            document=_media("document"),
            other=tuple(d.get("other") or ()),
        )


@dataclass(frozen=True, slots=True)
class Message:
    """One received (or echoed outbound) message. Never mutated once built."""

    id: str
    chat_id: str
    sender_id: str
    timestamp: datetime.datetime
    from_me: bool = False
    content: Optional[MessageContent] = None
    push_name: Optional[str] = None

    @property
    def is_group(self) -> bool:
        return is_group_jid(self.chat_id)

    def has_content(self) -> bool:
        return self.content is not None and not self.content.is_empty()

    def to_dict(self) -> Dict[str, Any]:
        return _drop_nones(
            {
                "id": self.id,
                "chat_id": self.chat_id,
                "sender_id": self.sender_id,
                "timestamp": self.timestamp.timestamp(),
                "from_me": self.from_me,
                "push_name": self.push_name,
                "content": self.content.to_dict() if self.content is not None else None,
            }
        )


def message_from_dict(d: Dict[str, Any]) -> Message:
    """Rebuild a :class:`Message` from :meth:`Message.to_dict` output."""

    content = d.get("content")
    ts = datetime.datetime.fromtimestamp(float(d["timestamp"]), tz=datetime.timezone.utc)
    return Message(
        id=str(d["id"]),
        chat_id=str(d["chat_id"]),
        sender_id=str(d.get("sender_id") or d["chat_id"]),
        timestamp=ts,
        from_me=bool(d.get("from_me", False)),
        content=MessageContent.from_dict(content) if content is not None else None,
        push_name=d.get("push_name"),
    )


@dataclass(frozen=True, slots=True)
class ChatSummary:
    """Caller-facing view of one cached conversation."""

    jid: str
    is_group: bool
    name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"jid": self.jid, "name": self.name, "isGroup": self.is_group}
