from __future__ import annotations

"""Storage-bound snippet record.

Row schema (output of :meth:`Snippet.to_record`), one per ingested message::

    {"sender_jid": "4915...@s.whatsapp.net", "timestamp": "2024-04-25T16:00:00+00:00",
     "message_type": "image", "content": "https://.../whatsapp-media/<uuid>.jpeg",
     "sender_name": "Ana", "caption": "look", "group_name": "Family",
     "is_group": true}

``content`` is the message text for text kinds and the public media URL (or
the upload-failure sentinel) for media kinds. Optional columns are omitted
when unset.
"""

import datetime
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

SnippetKind = Literal["text", "image", "video", "document"]


@dataclass(frozen=True, slots=True)
class Snippet:
    sender_jid: str
    timestamp: datetime.datetime
    message_type: SnippetKind
    content: str
    is_group: bool = False
    sender_name: Optional[str] = None
    caption: Optional[str] = None
    group_name: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        record = {
            "sender_jid": self.sender_jid,
            "timestamp": self.timestamp.isoformat(),
            "message_type": self.message_type,
            "content": self.content,
            "sender_name": self.sender_name,
            "caption": self.caption,
            "group_name": self.group_name,
            "is_group": self.is_group,
        }
        return {k: v for k, v in record.items() if v is not None}
