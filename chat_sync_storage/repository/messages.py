"""Message repository."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from ..backends.base import EntityStore
from ..cache import DEFAULT_CACHE_SIZE
from ..exceptions import SyncError
from ..protocol import Message, User
from ..sync.coordinator import SyncConfig
from ..sync.remote import RemoteService
from .base import EntityRepository


def _chronological(message: Message) -> tuple[bool, datetime, str]:
    """Sort key: oldest first, undated last. Naive timestamps are taken as UTC."""
    created_at = message.created_at
    if created_at is None:
        return (True, datetime.min.replace(tzinfo=UTC), message.id)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return (False, created_at, message.id)


class MessageRepository(EntityRepository[Message]):
    """Repository for messages, keyed by message id."""

    def __init__(
        self,
        store: EntityStore[Message],
        current_user: User,
        client: RemoteService | None = None,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ):
        super().__init__(store, cache_size=cache_size)
        self.current_user = current_user
        self.client = client

    async def insert_message(self, message: Message) -> None:
        await self.insert([message])

    async def insert_messages(self, messages: Sequence[Message]) -> None:
        await self.insert(messages)

    async def select_message(self, message_id: str) -> Message | None:
        return await self.select_one(message_id)

    async def select_messages(self, message_ids: Sequence[str]) -> list[Message]:
        return await self.select(message_ids)

    async def select_messages_for_channel(self, cid: str) -> list[Message]:
        """All stored messages of a channel, oldest first."""
        messages = await self.select_where(lambda m: m.cid == cid)
        return sorted(messages, key=_chronological)

    async def retry_messages(self, config: SyncConfig | None = None) -> list[Message]:
        """Push messages written while offline."""
        if self.client is None:
            raise SyncError("No remote client configured for message retry")
        return await self.retry_pending_sync(self.client, config=config)
