"""
Durable entity store abstraction layer.

Provides the EntityStore interface and its implementations (memory,
SQLite, JSONL). Each store implements the same interface, allowing
seamless switching under the repositories.
"""

from .base import EntityPredicate, EntityStore, needs_sync
from .jsonl import JsonlEntityStore
from .memory import MemoryEntityStore
from .sqlite import SQLiteConfig, SQLiteEntityStore

__all__ = [
    "EntityStore",
    "EntityPredicate",
    "needs_sync",
    "MemoryEntityStore",
    "JsonlEntityStore",
    "SQLiteConfig",
    "SQLiteEntityStore",
]
