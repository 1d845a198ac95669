"""
Local message store package.

Modules
=======

``model``
    Immutable :class:`~whatsapp_snippets.memory.store.model.Message` records
    and the :class:`ChatSummary` view returned by chat listing.
``conversation``
    :class:`ConversationEntry`, the append-only per-JID message list plus
    display name and group flag.
``manager``
    :class:`MessageStore`, the index of conversation entries fed by the
    session's ``messages.upsert`` events.
``snapshot``
    gzip JSON helpers that read and atomically write whole-store snapshots.
``sync``
    :class:`StoreSync`, the interval flush that only writes while the session
    is connected.
"""

from .manager import MessageStore
from .sync import StoreSync

__all__ = ["MessageStore", "StoreSync"]
