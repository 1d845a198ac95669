import logging

from whatsapp_snippets.clients.protocol import MessagesUpsert
from whatsapp_snippets.ingestion import IngestionPipeline

logger = logging.getLogger(__name__)


async def handle(pipeline: IngestionPipeline, upsert: MessagesUpsert) -> None:
    """Handle a ``messages.upsert`` batch from the live connection."""

    for message in upsert.messages:
        # Status updates and receipts arrive without content; self echoes are
        # already in the store and are not ingested.
        if not message.has_content() or message.from_me:
            continue

        logger.info(
            "New %s message %s received in %s",
            upsert.type,
            message.id,
            message.chat_id,
        )
        result = await pipeline.ingest(message)
        if not result.ok:
            logger.warning("Ingestion failed for message %s: %s", message.id, result.reason)
