"""Chat listing over the local message store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

from whatsapp_snippets.memory.store import MessageStore
from whatsapp_snippets.memory.store.model import ChatSummary

if TYPE_CHECKING:  # pragma: no cover - type-checking only
    from whatsapp_snippets.session.manager import SessionManager

logger = logging.getLogger(__name__)


async def list_chats(store: MessageStore, session: "SessionManager") -> List[ChatSummary]:
    """Summarize every cached conversation in store iteration order.

    Group subjects are looked up live and left unset when the lookup fails;
    direct chats use the push name the store has seen, if any.
    """

    chats: List[ChatSummary] = []
    for jid in store.conversation_ids():
        entry = store.get(jid)
        if entry is None:
            continue
        if entry.is_group:
            name = await session.group_name(jid)
        else:
            name = entry.name
        chats.append(ChatSummary(jid=jid, is_group=entry.is_group, name=name))

    logger.debug("Listed %d chat(s)", len(chats))
    return chats
