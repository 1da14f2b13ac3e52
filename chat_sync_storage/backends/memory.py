"""
In-memory entity store.

Keeps the serialized form of each entity in a dict, so callers never share
instances with the store. Useful for tests and for clients that run
without a local database.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

from .base import E, EntityPredicate, EntityStore, needs_sync


class MemoryEntityStore(EntityStore[E]):
    """Dict-backed store guarded by an ``asyncio.Lock``."""

    def __init__(self, entity_cls: type):
        """
        Args:
            entity_cls: Entity dataclass with to_dict/from_dict and a ``key``
        """
        self.entity_cls = entity_cls
        self._rows: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def upsert_many(self, entities: Sequence[E]) -> None:
        if not entities:
            return
        # Serialize everything first so a bad entity writes nothing
        rows = {e.key: e.to_dict() for e in entities}  # type: ignore[attr-defined]
        async with self._lock:
            self._rows.update(rows)

    async def select_by_keys(self, keys: Sequence[str]) -> list[E]:
        async with self._lock:
            rows = [self._rows[k] for k in dict.fromkeys(keys) if k in self._rows]
        return [self.entity_cls.from_dict(r) for r in rows]

    async def select_sync_needed(self) -> list[E]:
        return await self.select_where(needs_sync)

    async def select_where(self, predicate: EntityPredicate) -> list[E]:
        async with self._lock:
            rows = list(self._rows.values())
        entities = [self.entity_cls.from_dict(r) for r in rows]
        return [e for e in entities if predicate(e)]
