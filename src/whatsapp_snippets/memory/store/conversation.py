"""
Conversation-local cache state.

The :class:`ConversationEntry` dataclass wraps the ordered message list for a
single JID plus the lightweight metadata the store learns along the way
(display name, group flag). The store manager appends through these helpers
and reads tail slices for history replay. Entries only ever grow at the end.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .model import Message, is_group_jid, message_from_dict


@dataclass
class ConversationEntry:
    """In-memory state for one cached conversation."""

    jid: str
    name: str | None = None
    is_group: bool = False
    _messages: List[Message] = field(default_factory=list, repr=False)

    @classmethod
    def for_jid(cls, jid: str) -> "ConversationEntry":
        return cls(jid=jid, is_group=is_group_jid(jid))

    def append(self, message: Message) -> None:
        """Append ``message`` at the tail; arrival order is preserved."""

        self._messages.append(message)
        # Direct chats are named after the peer's push name when one shows up.
        if not self.is_group and not message.from_me and message.push_name:
            self.name = message.push_name

    def tail(self, limit: int | None = None) -> List[Message]:
        """Return up to ``limit`` messages ordered oldest -> newest."""

        if limit is None:
            return list(self._messages)
        if limit < 0:
            raise ValueError("limit must be >= 0 or None")
        if limit == 0:
            return []
        return self._messages[-limit:]

    def __len__(self) -> int:
        return len(self._messages)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "is_group": self.is_group,
            "messages": [m.to_dict() for m in self._messages],
        }

    @classmethod
    def from_dict(cls, jid: str, d: Dict[str, Any]) -> "ConversationEntry":
        entry = cls(
            jid=jid,
            name=d.get("name"),
            is_group=bool(d.get("is_group", is_group_jid(jid))),
        )
        for raw in d.get("messages", []):
            entry._messages.append(message_from_dict(raw))
        return entry
