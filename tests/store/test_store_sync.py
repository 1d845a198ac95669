import asyncio

import pytest

from fakes import make_message
from whatsapp_snippets.memory.store import MessageStore, StoreSync


@pytest.mark.asyncio
async def test_flush_skipped_while_disconnected(tmp_path):
    store = MessageStore(tmp_path / "store.json.gz")
    store.append(make_message("m1"))
    sync = StoreSync(store, lambda: False, interval=60)

    assert await sync.flush_if_connected() is False
    assert not store.path.exists()


@pytest.mark.asyncio
async def test_flush_runs_while_connected(tmp_path):
    store = MessageStore(tmp_path / "store.json.gz")
    store.append(make_message("m1"))
    sync = StoreSync(store, lambda: True, interval=60)

    assert await sync.flush_if_connected() is True
    assert store.path.exists()


@pytest.mark.asyncio
async def test_timer_flushes_on_interval_until_stopped(tmp_path):
    store = MessageStore(tmp_path / "store.json.gz")
    store.append(make_message("m1"))
    sync = StoreSync(store, lambda: True, interval=0.01)

    await sync.start()
    assert sync.running
    for _ in range(50):
        if store.path.exists():
            break
        await asyncio.sleep(0.01)
    await sync.stop()

    assert store.path.exists()
    assert not sync.running


@pytest.mark.asyncio
async def test_restart_replaces_existing_timer(tmp_path):
    store = MessageStore(tmp_path / "store.json.gz")
    sync = StoreSync(store, lambda: True, interval=60)

    await sync.start()
    first = sync._task
    await sync.start()

    assert first.cancelled() or first.done()
    assert sync.running
    await sync.stop()
