"""
Inbound message ingestion package.

Modules
=======

``classifier``
    Picks the single kind (text, image, video, document, unknown) a message is
    ingested as.
``media``
    Downloads media through the session and uploads it to object storage,
    returning a public URL or the failure sentinel.
``snippet``
    The storage-bound :class:`Snippet` row.
``pipeline``
    :class:`IngestionPipeline`, classify -> resolve -> persist for one message.
``history``
    :class:`HistoryReplayer`, batched replay of cached conversation history.
``chats``
    :func:`list_chats`, summaries of every cached conversation.
"""

from .history import HistoryReplayer, HistoryReport
from .pipeline import IngestionPipeline, IngestResult
from .snippet import Snippet

__all__ = ["IngestionPipeline", "IngestResult", "HistoryReplayer", "HistoryReport", "Snippet"]
