"""
Tests for durable entity stores.

The same behaviour is exercised against the in-memory, SQLite (in-memory
database) and JSONL (temporary file) stores.
"""

import json

import pytest

from chat_sync_storage.backends import (
    JsonlEntityStore,
    MemoryEntityStore,
    SQLiteConfig,
    SQLiteEntityStore,
)
from chat_sync_storage.exceptions import StorageIOError
from chat_sync_storage.protocol import Channel, Message, SyncStatus


@pytest.fixture(params=["memory", "sqlite", "jsonl"])
async def store(request, tmp_path):
    """Fixture providing each channel store implementation, initialized."""
    if request.param == "memory":
        backend = MemoryEntityStore(Channel)
    elif request.param == "sqlite":
        backend = SQLiteEntityStore(SQLiteConfig(db_path=":memory:"), Channel)
    else:
        backend = JsonlEntityStore(tmp_path / "channels.jsonl", Channel)

    await backend.initialize()
    yield backend
    await backend.close()


class TestEntityStore:
    """Behaviour shared by every store."""

    @pytest.mark.asyncio
    async def test_upsert_and_select(self, store, general_channel):
        await store.upsert_many([general_channel])

        found = await store.select_by_keys(["messaging:general"])

        assert found == [general_channel]

    @pytest.mark.asyncio
    async def test_missing_keys_omitted(self, store, make_channel):
        await store.upsert_many([make_channel("a")])

        found = await store.select_by_keys(["messaging:a", "messaging:nope"])

        assert [c.key for c in found] == ["messaging:a"]

    @pytest.mark.asyncio
    async def test_upsert_replaces_by_key(self, store, make_channel):
        await store.upsert_many([make_channel("a", sync_status=SyncStatus.PENDING)])
        await store.upsert_many([make_channel("a", sync_status=SyncStatus.COMPLETED)])

        found = await store.select_by_keys(["messaging:a"])

        assert len(found) == 1
        assert found[0].sync_status == SyncStatus.COMPLETED
        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_select_sync_needed(self, store, make_channel):
        await store.upsert_many(
            [
                make_channel("pending", sync_status=SyncStatus.PENDING),
                make_channel("transient", sync_status=SyncStatus.FAILED_TRANSIENT),
                make_channel("done", sync_status=SyncStatus.COMPLETED),
                make_channel("dead", sync_status=SyncStatus.FAILED_PERMANENTLY),
                make_channel("flight", sync_status=SyncStatus.IN_PROGRESS),
            ]
        )

        pending = await store.select_sync_needed()

        assert sorted(c.id for c in pending) == ["pending", "transient"]

    @pytest.mark.asyncio
    async def test_select_where(self, store, make_channel):
        await store.upsert_many(
            [make_channel("a", frozen=True), make_channel("b"), make_channel("c", frozen=True)]
        )

        frozen = await store.select_where(lambda c: c.frozen)

        assert sorted(c.id for c in frozen) == ["a", "c"]

    @pytest.mark.asyncio
    async def test_empty_upsert_is_noop(self, store):
        await store.upsert_many([])
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_returned_entities_are_copies(self, store, make_channel):
        """Mutating a loaded entity never changes what the store holds."""
        await store.upsert_many([make_channel("a")])

        loaded = (await store.select_by_keys(["messaging:a"]))[0]
        loaded.extra_data["scribble"] = True

        again = (await store.select_by_keys(["messaging:a"]))[0]
        assert again.extra_data == {}


class TestSQLiteEntityStore:
    """SQLite-specific behaviour."""

    @pytest.mark.asyncio
    async def test_create_with_defaults(self, monkeypatch):
        """Store creates with configuration from the environment."""
        monkeypatch.delenv("CHAT_SYNC_DB_PATH", raising=False)
        store = await SQLiteEntityStore.create(Message)
        assert store._initialized is True
        assert store.table == "messages"
        await store.close()

    @pytest.mark.asyncio
    async def test_persists_across_reopen(self, tmp_path, general_channel):
        config = SQLiteConfig(db_path=tmp_path / "offline.db")

        store = await SQLiteEntityStore.create(Channel, config)
        await store.upsert_many([general_channel])
        await store.close()

        reopened = await SQLiteEntityStore.create(Channel, config)
        try:
            assert await reopened.select_by_keys([general_channel.cid]) == [general_channel]
        finally:
            await reopened.close()

    @pytest.mark.asyncio
    async def test_large_key_lookup_is_chunked(self, sqlite_channel_store, make_channel):
        channels = [make_channel(f"c{i}") for i in range(1200)]
        await sqlite_channel_store.upsert_many(channels)

        found = await sqlite_channel_store.select_by_keys([c.key for c in channels])

        assert len(found) == 1200

    @pytest.mark.asyncio
    async def test_backlog_ordered_by_write(self, sqlite_channel_store, make_channel):
        await sqlite_channel_store.upsert_many(
            [
                make_channel("b", sync_status=SyncStatus.PENDING),
                make_channel("a", sync_status=SyncStatus.PENDING),
            ]
        )

        pending = await sqlite_channel_store.select_sync_needed()

        # Same write batch, so ties break on key
        assert [c.id for c in pending] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_operations_before_initialize_fail(self, general_channel):
        store = SQLiteEntityStore(SQLiteConfig(), Channel)

        with pytest.raises(StorageIOError) as exc_info:
            await store.upsert_many([general_channel])

        assert exc_info.value.operation == "upsert_many"


class TestJsonlEntityStore:
    """JSONL-specific behaviour."""

    @pytest.mark.asyncio
    async def test_last_line_wins_on_reload(self, tmp_path, make_channel):
        path = tmp_path / "channels.jsonl"
        store = JsonlEntityStore(path, Channel)
        await store.upsert_many([make_channel("a", sync_status=SyncStatus.PENDING)])
        await store.upsert_many([make_channel("a", sync_status=SyncStatus.COMPLETED)])
        await store.close()

        reopened = JsonlEntityStore(path, Channel)
        found = await reopened.select_by_keys(["messaging:a"])

        assert [c.sync_status for c in found] == [SyncStatus.COMPLETED]
        assert len(path.read_text().splitlines()) == 2

    @pytest.mark.asyncio
    async def test_torn_final_line_skipped(self, tmp_path, make_channel):
        """A batch cut short mid-write is dropped; earlier batches survive."""
        path = tmp_path / "channels.jsonl"
        store = JsonlEntityStore(path, Channel)
        await store.upsert_many([make_channel("a")])
        await store.close()

        with open(path, "a", encoding="utf-8") as f:
            f.write('{"key": "messaging:b", "sync_status": "pend')

        reopened = JsonlEntityStore(path, Channel)
        assert [c.id for c in await reopened.select_where(lambda c: True)] == ["a"]

        # The next append starts on a fresh line
        await reopened.upsert_many([make_channel("c")])
        await reopened.close()

        final = JsonlEntityStore(path, Channel)
        assert sorted(c.id for c in await final.select_where(lambda c: True)) == ["a", "c"]

    @pytest.mark.asyncio
    async def test_compact(self, tmp_path, make_channel):
        path = tmp_path / "channels.jsonl"
        store = JsonlEntityStore(path, Channel)
        for status in (SyncStatus.PENDING, SyncStatus.FAILED_TRANSIENT, SyncStatus.COMPLETED):
            await store.upsert_many([make_channel("a", sync_status=status)])
        await store.upsert_many([make_channel("b")])

        written = await store.compact()

        lines = [json.loads(line) for line in path.read_text().splitlines()]
        assert written == 2
        assert [line["key"] for line in lines] == ["messaging:a", "messaging:b"]
        assert lines[0]["sync_status"] == "completed"

    @pytest.mark.asyncio
    async def test_write_failure_raises_storage_error(self, tmp_path, make_channel):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        store = JsonlEntityStore(blocker / "channels.jsonl", Channel)

        with pytest.raises(StorageIOError):
            await store.upsert_many([make_channel("a")])

        assert await store.count() == 0
