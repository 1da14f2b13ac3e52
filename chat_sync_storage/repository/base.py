"""
Read-through / write-through entity repository.

Combines an ``EntityCache`` with a durable ``EntityStore``:
- insert: store first, cache second, so the cache never exposes state
  that is not durable
- select: cache hits first, then exactly one bulk store lookup for the
  misses, which backfills the cache
- select_pending_sync: straight to the store; backlog scans bypass the cache

The store is the arbiter of the current value. Concurrent inserts of the
same key race on the cache and the last cache write wins.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Generic

from ..backends.base import E, EntityPredicate, EntityStore
from ..cache import DEFAULT_CACHE_SIZE, EntityCache
from ..exceptions import EntityNotFoundError
from ..sync.coordinator import SyncConfig, SyncCoordinator
from ..sync.remote import RemoteService

logger = logging.getLogger(__name__)


class EntityRepository(Generic[E]):
    """Repository over one entity type."""

    def __init__(
        self,
        store: EntityStore[E],
        cache_size: int = DEFAULT_CACHE_SIZE,
        cache: EntityCache[E] | None = None,
    ):
        """
        Args:
            store: Durable store, the source of truth
            cache_size: Capacity of the LRU cache (ignored if ``cache`` is given)
            cache: Pre-built cache to share or inspect
        """
        self.store = store
        self.cache: EntityCache[E] = cache if cache is not None else EntityCache(cache_size)

    def _update_cache(self, entities: Sequence[E]) -> None:
        self.cache.put_many((e.key, e) for e in entities)  # type: ignore[attr-defined]

    async def insert(self, entities: Sequence[E]) -> None:
        """
        Persist entities, then cache them.

        No-op for an empty sequence. If the store write raises, the cache
        is left untouched and the error propagates.
        """
        if not entities:
            return

        entities = list(entities)
        await self.store.upsert_many(entities)
        self._update_cache(entities)

    async def insert_one(self, entity: E) -> None:
        await self.insert([entity])

    async def select(self, keys: Sequence[str]) -> list[E]:
        """
        Load entities by key.

        Cache hits are served from memory; all misses are fetched from
        the store in one call and backfill the cache. Unknown keys are
        absent from the result. Result order is store hits, then cache
        hits, and does not follow ``keys``.
        """
        if not keys:
            return []

        cached: list[E] = []
        missing: list[str] = []
        for key in dict.fromkeys(keys):
            entity = self.cache.get(key)
            if entity is None:
                missing.append(key)
            else:
                cached.append(entity)

        if not missing:
            return cached

        loaded = await self.store.select_by_keys(missing)
        self._update_cache(loaded)
        logger.debug(
            f"select: {len(cached)} cache hits, {len(missing)} misses, {len(loaded)} loaded"
        )
        return loaded + cached

    async def select_one(self, key: str) -> E | None:
        found = await self.select([key])
        return found[0] if found else None

    async def require(self, key: str) -> E:
        """Like ``select_one`` but raises ``EntityNotFoundError`` when absent."""
        entity = await self.select_one(key)
        if entity is None:
            raise EntityNotFoundError(key, getattr(self.store.entity_cls, "entity_type", None))
        return entity

    async def select_pending_sync(self) -> list[E]:
        """Entities awaiting sync (PENDING or FAILED_TRANSIENT)."""
        return await self.store.select_sync_needed()

    async def select_where(self, predicate: EntityPredicate) -> list[E]:
        """Predicate query against the store; results are not cached."""
        return await self.store.select_where(predicate)

    async def retry_pending_sync(
        self,
        remote_service: RemoteService,
        config: SyncConfig | None = None,
    ) -> list[E]:
        """
        Drain the sync backlog once.

        Returns:
            The entities processed, carrying their post-pass status
        """
        coordinator = SyncCoordinator(self, remote_service, config=config)
        return await coordinator.retry_pending_sync()
