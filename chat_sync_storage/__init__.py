"""
Chat Sync Storage

Offline-first synchronization layer for a chat client.

Provides:
- Bounded LRU cache in front of a durable local store (read-through, write-through)
- Durable stores (SQLite, JSONL, in-memory)
- Channel and message repositories
- Retry of locally-created entities against the remote chat service
- Pure mapping between the server's wire format and the domain model

Usage:

    >>> from chat_sync_storage import ChatSyncConfig, User, open_offline_storage
    >>> me = User(id="alice", name="Alice")
    >>> async with await open_offline_storage(me, ChatSyncConfig.from_env()) as storage:
    ...     await storage.channels.insert_channel(channel)
    ...     cached = await storage.channels.select_channel(channel.cid)
    ...
    ...     # Push everything created while offline
    ...     await storage.channels.retry_channels()

Store Selection:

    # SQLite for on-device persistence
    from chat_sync_storage.backends import SQLiteEntityStore, SQLiteConfig

    # Append-only JSONL file
    from chat_sync_storage.backends import JsonlEntityStore

    # In-memory, for tests
    from chat_sync_storage.backends import MemoryEntityStore
"""

from .backends import (
    EntityStore,
    JsonlEntityStore,
    MemoryEntityStore,
    SQLiteConfig,
    SQLiteEntityStore,
)
from .cache import EntityCache
from .config import ChatSyncConfig
from .exceptions import (
    ChatStorageError,
    EntityNotFoundError,
    PermanentRemoteError,
    RemoteServiceError,
    StorageConnectionError,
    StorageIOError,
    SyncError,
    TransientRemoteError,
    ValidationError,
)
from .mapping import UserContext, to_domain, to_wire
from .offline import OfflineStorage, open_offline_storage
from .protocol import Attachment, Channel, Member, Message, Reaction, SyncStatus, User
from .repository import ChannelRepository, EntityRepository, MessageRepository
from .sync import (
    HttpChatService,
    HttpServiceConfig,
    RemoteService,
    SyncConfig,
    SyncCoordinator,
    SyncOutcome,
    SyncResult,
    SyncScheduler,
)

__all__ = [
    # Domain
    "SyncStatus",
    "User",
    "Attachment",
    "Reaction",
    "Member",
    "Channel",
    "Message",
    # Mapping
    "UserContext",
    "to_wire",
    "to_domain",
    # Cache and stores
    "EntityCache",
    "EntityStore",
    "MemoryEntityStore",
    "JsonlEntityStore",
    "SQLiteConfig",
    "SQLiteEntityStore",
    # Repositories
    "EntityRepository",
    "ChannelRepository",
    "MessageRepository",
    # Sync
    "RemoteService",
    "SyncOutcome",
    "SyncConfig",
    "SyncCoordinator",
    "SyncResult",
    "SyncScheduler",
    "HttpChatService",
    "HttpServiceConfig",
    # Wiring
    "ChatSyncConfig",
    "OfflineStorage",
    "open_offline_storage",
    # Exceptions
    "ChatStorageError",
    "EntityNotFoundError",
    "StorageIOError",
    "StorageConnectionError",
    "ValidationError",
    "SyncError",
    "RemoteServiceError",
    "PermanentRemoteError",
    "TransientRemoteError",
]

__version__ = "0.1.0"
