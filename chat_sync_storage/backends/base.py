"""
Abstract base class for durable entity stores.

All store implementations (memory, SQLite, JSONL) must implement this
interface. The repositories only rely on three capabilities: bulk upsert,
lookup by a set of keys, and the "needs sync" predicate query.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar

from ..protocol import SYNC_NEEDED_STATUSES

E = TypeVar("E")

# Predicate over a stored entity
EntityPredicate = Callable[[Any], bool]


def needs_sync(entity: Any) -> bool:
    """The ``needsSync`` predicate: PENDING or FAILED_TRANSIENT."""
    return entity.sync_status in SYNC_NEEDED_STATUSES


class EntityStore(ABC, Generic[E]):
    """
    Key-addressable persistent map of entities of one type.

    Implementations must provide at-least bulk-upsert atomicity for the
    entities written by a single ``upsert_many`` call.
    """

    entity_cls: type

    @abstractmethod
    async def initialize(self) -> None:
        """Open connections and create schema. Safe to call twice."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release resources held by the store."""
        ...

    @abstractmethod
    async def upsert_many(self, entities: Sequence[E]) -> None:
        """
        Insert or replace entities by key.

        Args:
            entities: Entities to write

        Raises:
            StorageIOError: If the write fails; nothing is written
        """
        ...

    @abstractmethod
    async def select_by_keys(self, keys: Sequence[str]) -> list[E]:
        """
        Load entities by key.

        Args:
            keys: Keys to look up

        Returns:
            Entities found. Missing keys are silently omitted.
        """
        ...

    @abstractmethod
    async def select_sync_needed(self) -> list[E]:
        """Return all entities whose status is PENDING or FAILED_TRANSIENT."""
        ...

    @abstractmethod
    async def select_where(self, predicate: EntityPredicate) -> list[E]:
        """Return all entities for which ``predicate`` is true."""
        ...

    async def count(self) -> int:
        """Number of stored entities."""
        return len(await self.select_where(lambda _: True))

    async def __aenter__(self) -> EntityStore[E]:
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()
