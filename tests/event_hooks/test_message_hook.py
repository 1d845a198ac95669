import asyncio
from types import SimpleNamespace

from fakes import make_message
from whatsapp_snippets.clients.protocol import MessagesUpsert
from whatsapp_snippets.event_hooks import message_hook
from whatsapp_snippets.ingestion import IngestResult


def _pipeline(ingested, failing=()):
    async def ingest(message):
        ingested.append(message.id)
        outcome = "failed" if message.id in failing else "stored"
        return IngestResult(message.id, outcome, reason="boom" if failing else None)

    return SimpleNamespace(ingest=ingest)


def test_every_peer_message_in_batch_is_ingested():
    ingested = []
    upsert = MessagesUpsert(
        messages=[
            make_message("a"),
            make_message("mine", from_me=True),
            make_message("receipt", text=None),
            make_message("b"),
        ]
    )

    asyncio.run(message_hook.handle(_pipeline(ingested), upsert))

    assert ingested == ["a", "b"]


def test_failed_ingest_does_not_stop_batch(caplog):
    ingested = []
    upsert = MessagesUpsert(messages=[make_message("a"), make_message("b")])

    asyncio.run(message_hook.handle(_pipeline(ingested, failing={"a"}), upsert))

    assert ingested == ["a", "b"]
    assert "Ingestion failed for message a" in caplog.text
