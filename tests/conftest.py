"""
Shared test configuration and fixtures.

Provides sample users, channels and messages, in-memory and SQLite stores,
and a scripted remote service that answers each push from a per-key table
of outcomes instead of talking to a real chat server.
"""

from datetime import UTC, datetime
from typing import Any

import pytest

from chat_sync_storage.backends import MemoryEntityStore, SQLiteConfig, SQLiteEntityStore
from chat_sync_storage.exceptions import RemoteServiceError
from chat_sync_storage.protocol import Channel, Member, Message, SyncStatus, User
from chat_sync_storage.sync.remote import RemoteService, SyncOutcome


class ScriptedRemoteService(RemoteService):
    """
    Remote service double.

    Outcomes are looked up by entity key. A value may be a SyncOutcome, a
    RemoteServiceError (returned as a failure outcome) or any other
    exception (raised from create_or_update). Unknown keys succeed.
    """

    def __init__(self, script: dict[str, Any] | None = None):
        self.script = dict(script or {})
        self.pushed: list[Any] = []
        self.closed = False

    async def create_or_update(self, entity: Any) -> SyncOutcome:
        self.pushed.append(entity)
        planned = self.script.get(entity.key)
        if planned is None:
            return SyncOutcome.success(entity)
        if isinstance(planned, SyncOutcome):
            return planned
        if isinstance(planned, RemoteServiceError):
            return SyncOutcome.failure(planned)
        raise planned

    async def close(self) -> None:
        self.closed = True

    @property
    def pushed_keys(self) -> list[str]:
        return [e.key for e in self.pushed]


@pytest.fixture
def alice() -> User:
    return User(id="alice", name="Alice", role="admin")


@pytest.fixture
def bob() -> User:
    return User(id="bob", name="Bob")


def _make_channel(
    channel_id: str,
    created_by: User | None = None,
    sync_status: SyncStatus = SyncStatus.COMPLETED,
    **kwargs: Any,
) -> Channel:
    return Channel(
        type="messaging",
        id=channel_id,
        created_by=created_by,
        created_at=datetime(2024, 1, 15, 10, 0, tzinfo=UTC),
        sync_status=sync_status,
        **kwargs,
    )


def _make_message(
    message_id: str,
    cid: str = "messaging:general",
    user: User | None = None,
    sync_status: SyncStatus = SyncStatus.COMPLETED,
    **kwargs: Any,
) -> Message:
    return Message(
        id=message_id,
        cid=cid,
        text=f"text of {message_id}",
        user=user,
        sync_status=sync_status,
        **kwargs,
    )


@pytest.fixture
def make_channel():
    """Factory for channels in the "messaging" type."""
    return _make_channel


@pytest.fixture
def make_message():
    """Factory for messages, in messaging:general unless told otherwise."""
    return _make_message


@pytest.fixture
def general_channel(alice, bob) -> Channel:
    return _make_channel(
        "general",
        created_by=alice,
        member_count=2,
        members=[Member(user=alice, role="owner"), Member(user=bob)],
        extra_data={"topic": "everything"},
    )


@pytest.fixture
def channel_store() -> MemoryEntityStore[Channel]:
    return MemoryEntityStore(Channel)


@pytest.fixture
def message_store() -> MemoryEntityStore[Message]:
    return MemoryEntityStore(Message)


@pytest.fixture
async def sqlite_channel_store():
    """Initialized SQLite channel store on an in-memory database."""
    store = await SQLiteEntityStore.create(Channel, SQLiteConfig(db_path=":memory:"))
    yield store
    await store.close()


@pytest.fixture
def remote() -> ScriptedRemoteService:
    return ScriptedRemoteService()


@pytest.fixture
def scripted_remote():
    """Factory for remote services with a per-key outcome table."""
    return ScriptedRemoteService
