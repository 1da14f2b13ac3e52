"""
Channel repository.

Keeps the most recently used channels in memory (100 by default) on top
of the durable channel store, and retries channels that were created
offline.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..backends.base import EntityStore
from ..cache import DEFAULT_CACHE_SIZE
from ..exceptions import SyncError
from ..protocol import Channel, User
from ..sync.coordinator import SyncConfig
from ..sync.remote import RemoteService
from .base import EntityRepository


class ChannelRepository(EntityRepository[Channel]):
    """Repository for channels, keyed by cid."""

    def __init__(
        self,
        store: EntityStore[Channel],
        current_user: User,
        client: RemoteService | None = None,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ):
        """
        Args:
            store: Durable channel store
            current_user: Signed-in user
            client: Remote service used by ``retry_channels``
            cache_size: Channels kept in memory
        """
        super().__init__(store, cache_size=cache_size)
        self.current_user = current_user
        self.client = client

    async def insert_channel(self, channel: Channel) -> None:
        await self.insert([channel])

    async def insert_channels(self, channels: Sequence[Channel]) -> None:
        await self.insert(channels)

    async def select_channel(self, cid: str) -> Channel | None:
        return await self.select_one(cid)

    async def select_channels(self, cids: Sequence[str]) -> list[Channel]:
        return await self.select(cids)

    async def select_sync_needed(self) -> list[Channel]:
        return await self.select_pending_sync()

    async def retry_channels(self, config: SyncConfig | None = None) -> list[Channel]:
        """
        Push channels created offline.

        Only the channel itself is pushed; members are left exactly as
        stored.
        """
        if self.client is None:
            raise SyncError("No remote client configured for channel retry")
        return await self.retry_pending_sync(self.client, config=config)
