"""
Wiring for a complete offline storage stack.

Builds the SQLite stores, the channel and message repositories, the HTTP
chat service and a scheduler from one ``ChatSyncConfig``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .backends.sqlite import SQLiteConfig, SQLiteEntityStore
from .config import ChatSyncConfig
from .logging_utils import ROOT_LOGGER, get_storage_logger
from .mapping.context import UserContext
from .protocol import Channel, Message, User
from .repository.channels import ChannelRepository
from .repository.messages import MessageRepository
from .sync.coordinator import SyncConfig, SyncCoordinator
from .sync.http import HttpChatService, HttpServiceConfig
from .sync.remote import RemoteService
from .sync.scheduler import SyncScheduler

logger = get_storage_logger("offline")


@dataclass
class OfflineStorage:
    """Repositories, remote client and scheduler sharing one configuration."""

    config: ChatSyncConfig
    channels: ChannelRepository
    messages: MessageRepository
    client: RemoteService | None
    scheduler: SyncScheduler | None
    # True when the client was built here rather than passed in
    owns_client: bool = False

    async def close(self) -> None:
        """Stop the scheduler, close an owned client, then the stores."""
        if self.scheduler is not None:
            await self.scheduler.stop()
        if self.client is not None and self.owns_client:
            await self.client.close()
        await self.channels.store.close()
        await self.messages.store.close()

    async def __aenter__(self) -> OfflineStorage:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()


async def open_offline_storage(
    current_user: User,
    config: ChatSyncConfig | None = None,
    client: RemoteService | None = None,
) -> OfflineStorage:
    """
    Create and initialize the offline storage stack.

    Args:
        current_user: Signed-in user, seeds the user context
        config: Configuration (defaults to ``ChatSyncConfig.from_env()``)
        client: Remote service; built from ``config.remote_base_url`` if omitted.
            A client passed in stays open on ``close()``

    Returns:
        Initialized OfflineStorage. The scheduler is created but not started,
        and is None when there is no remote client.
    """
    if config is None:
        config = ChatSyncConfig.from_env()

    logging.getLogger(ROOT_LOGGER).setLevel(config.log_level.upper())

    sqlite_config = SQLiteConfig(db_path=config.db_path)
    channel_store = await SQLiteEntityStore.create(Channel, sqlite_config)
    try:
        message_store = await SQLiteEntityStore.create(Message, sqlite_config)
    except Exception:
        await channel_store.close()
        raise

    owns_client = client is None and bool(config.remote_base_url)
    if owns_client:
        client = HttpChatService(
            HttpServiceConfig(
                base_url=config.remote_base_url,
                api_key=config.api_key,
                timeout=config.request_timeout,
            ),
            UserContext(current_user=current_user),
        )

    channels = ChannelRepository(channel_store, current_user, client, config.cache_size)
    messages = MessageRepository(message_store, current_user, client, config.cache_size)

    scheduler = None
    if client is not None:
        sync_config = SyncConfig(batch_size=config.batch_size)
        scheduler = SyncScheduler(
            [
                # Channels first so messages never reach the server before their channel
                SyncCoordinator(channels, client, sync_config),
                SyncCoordinator(messages, client, sync_config),
            ],
            interval_seconds=config.sync_interval_seconds,
        )
    else:
        logger.info("No remote service configured; running local-only")

    return OfflineStorage(
        config=config,
        channels=channels,
        messages=messages,
        client=client,
        scheduler=scheduler,
        owns_client=owns_client,
    )
