from types import SimpleNamespace

import pytest

from fakes import PEER, make_message
from whatsapp_snippets.ingestion import HistoryReplayer, IngestResult
from whatsapp_snippets.memory.store import MessageStore


def _recording_pipeline(log, *, failing=()):
    async def ingest(message):
        log.append(("ingest", message.id))
        if message.id in failing:
            return IngestResult(message.id, "failed", reason="boom")
        if message.id == "explode":
            raise RuntimeError("unexpected")
        return IngestResult(message.id, "stored")

    return SimpleNamespace(ingest=ingest)


def _store(tmp_path, count, **kwargs):
    store = MessageStore(tmp_path / "store.json.gz")
    for i in range(count):
        store.append(make_message(f"m{i}", offset=i, **kwargs))
    return store


@pytest.mark.asyncio
async def test_twelve_messages_replay_in_three_batches(tmp_path):
    log = []

    async def fake_sleep(delay):
        log.append(("sleep", delay))

    replayer = HistoryReplayer(
        _store(tmp_path, 12),
        _recording_pipeline(log),
        batch_size=5,
        batch_delay=2.0,
        sleep=fake_sleep,
    )

    report = await replayer.fetch_history(PEER, 50)

    kinds = [entry[0] for entry in log]
    assert kinds == ["ingest"] * 5 + ["sleep"] + ["ingest"] * 5 + ["sleep"] + ["ingest"] * 2
    assert [entry for entry in log if entry[0] == "sleep"] == [("sleep", 2.0), ("sleep", 2.0)]
    assert (report.count, report.processed, report.failed, report.batches) == (12, 12, 0, 3)


@pytest.mark.asyncio
async def test_limit_takes_newest_messages(tmp_path):
    log = []

    async def no_sleep(delay):
        pass

    replayer = HistoryReplayer(
        _store(tmp_path, 12), _recording_pipeline(log), batch_size=5, sleep=no_sleep
    )

    report = await replayer.fetch_history(PEER, 3)

    assert [m.id for m in report.messages] == ["m9", "m10", "m11"]
    assert log == [("ingest", "m9"), ("ingest", "m10"), ("ingest", "m11")]


@pytest.mark.asyncio
async def test_own_messages_returned_but_not_replayed(tmp_path):
    log = []
    store = MessageStore(tmp_path / "store.json.gz")
    store.append(make_message("peer"))
    store.append(make_message("mine", from_me=True))

    report = await HistoryReplayer(store, _recording_pipeline(log)).fetch_history(PEER)

    assert report.count == 2
    assert log == [("ingest", "peer")]
    assert report.processed == 1


@pytest.mark.asyncio
async def test_failures_counted_without_aborting(tmp_path):
    log = []
    store = MessageStore(tmp_path / "store.json.gz")
    for mid in ("a", "explode", "b", "c"):
        store.append(make_message(mid))

    async def no_sleep(delay):
        pass

    replayer = HistoryReplayer(
        store, _recording_pipeline(log, failing={"b"}), batch_size=2, sleep=no_sleep
    )
    report = await replayer.fetch_history(PEER)

    assert (report.processed, report.failed, report.batches) == (2, 2, 2)
    assert len(log) == 4


@pytest.mark.asyncio
async def test_unknown_chat_yields_empty_report(tmp_path):
    replayer = HistoryReplayer(MessageStore(tmp_path / "s.json.gz"), _recording_pipeline([]))

    report = await replayer.fetch_history("nobody@s.whatsapp.net")

    assert (report.count, report.processed, report.failed, report.batches) == (0, 0, 0, 0)


@pytest.mark.parametrize("batch_size", [0, -1])
def test_batch_size_must_be_positive(tmp_path, batch_size):
    with pytest.raises(ValueError):
        HistoryReplayer(MessageStore(tmp_path / "s.json.gz"), None, batch_size=batch_size)
