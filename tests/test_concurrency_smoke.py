import asyncio

import core.config as config
from core.context import RequestContext
from core.models import Message
from core.services import embeddings, store
from core.services.store import KeyedLocks, handle_store


async def _store_twice(query: str) -> list[dict]:
    context = RequestContext.from_values("user-1", "concurrency")
    return await asyncio.gather(
        handle_store(query, context),
        handle_store(query, context),
    )


def test_concurrent_stores_for_one_email_merge(server_db, db_session, monkeypatch):
    original_embed = embeddings.embed_text

    async def slow_embed(text: str) -> list[float]:
        await asyncio.sleep(0.01)
        return await original_embed(text)

    monkeypatch.setattr(embeddings, "embed_text", slow_embed)
    monkeypatch.setattr(config, "STORE_MERGE_LOCKING", True)

    results = asyncio.run(_store_twice("store name=Jo; email=jo@x.com"))

    assert sorted(result["action"] for result in results) == ["inserted", "updated"]
    assert db_session.query(Message).filter(Message.email == "jo@x.com").count() == 1


def test_keyed_locks_serialize_one_key_and_clean_up():
    locks = KeyedLocks()
    events = []

    async def worker(key: str, label: str) -> None:
        async with locks.hold(key):
            events.append(f"{label}-start")
            await asyncio.sleep(0.01)
            events.append(f"{label}-end")

    async def run() -> None:
        await asyncio.gather(worker("a", "one"), worker("a", "two"))

    asyncio.run(run())

    assert events == ["one-start", "one-end", "two-start", "two-end"]
    assert locks._locks == {}


def test_store_stamps_created_at_after_taking_email_lock(server_db, monkeypatch, load_message):
    monkeypatch.setattr(config, "STORE_MERGE_LOCKING", True)
    stamps = []

    def fake_timestamp() -> str:
        stamp = f"2024-01-01T00:00:0{len(stamps)}.000Z"
        stamps.append(stamp)
        return stamp

    monkeypatch.setattr(store, "utc_timestamp", fake_timestamp)
    context = RequestContext.from_values("user-1", "concurrency")

    async def run() -> dict:
        async with store.email_locks.hold("jo@x.com"):
            waiting = asyncio.create_task(handle_store("store name=Jo; email=jo@x.com", context))
            await asyncio.sleep(0.01)
            assert stamps == []
            fake_timestamp()
        return await waiting

    result = asyncio.run(run())

    assert stamps == ["2024-01-01T00:00:00.000Z", "2024-01-01T00:00:01.000Z"]
    assert load_message(result["id"])["created_at"] == "2024-01-01T00:00:01.000Z"
