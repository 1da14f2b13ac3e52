"""
LRU cache for domain entities with a fixed capacity.

Holds the most recently used channels or messages in memory so repeated
reads skip the durable store. The cache is never authoritative: anything
evicted or lost can be rebuilt from the store.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Iterable
from threading import Lock
from typing import Any, Generic, TypeVar

E = TypeVar("E")

DEFAULT_CACHE_SIZE = 100


class EntityCache(Generic[E]):
    """
    LRU cache mapping entity keys to entities.

    Features:
    - Least Recently Used eviction policy
    - Fixed max entries set at construction
    - Silent eviction (no callbacks)
    - Thread-safe: one lock guards the ordered map
    """

    def __init__(self, max_entries: int = DEFAULT_CACHE_SIZE):
        """
        Initialize entity cache.

        Args:
            max_entries: Maximum number of entities to keep
        """
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")

        self.max_entries = max_entries
        self._cache: OrderedDict[str, E] = OrderedDict()
        self._lock = Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> E | None:
        """
        Get a cached entity and mark it most recently used.

        Args:
            key: Entity key

        Returns:
            Cached entity or None if not found
        """
        with self._lock:
            entity = self._cache.get(key)
            if entity is None:
                self._misses += 1
                return None
            self._cache.move_to_end(key)
            self._hits += 1
            return entity

    def get_many(self, keys: Iterable[str]) -> dict[str, E]:
        """Return the cached subset of ``keys``, refreshing each hit."""
        found: dict[str, E] = {}
        for key in keys:
            entity = self.get(key)
            if entity is not None:
                found[key] = entity
        return found

    def put(self, key: str, entity: E) -> None:
        """
        Store an entity, replacing any previous value for the key.

        If the cache is full, evicts the least recently used entry.

        Args:
            key: Entity key
            entity: Entity to cache
        """
        with self._lock:
            if key in self._cache:
                del self._cache[key]

            # Add to cache (at end = most recent)
            self._cache[key] = entity

            if len(self._cache) > self.max_entries:
                self._cache.popitem(last=False)

    def put_many(self, entries: Iterable[tuple[str, E]]) -> None:
        """Store several entities in iteration order."""
        for key, entity in entries:
            self.put(key, entity)

    def contains(self, key: str) -> bool:
        """Check membership without touching recency."""
        with self._lock:
            return key in self._cache

    def remove(self, key: str) -> bool:
        """Drop a key. Returns True if it was cached."""
        with self._lock:
            return self._cache.pop(key, None) is not None

    def keys(self) -> list[str]:
        """Cached keys from least to most recently used."""
        with self._lock:
            return list(self._cache.keys())

    def clear(self) -> None:
        """Clear all cached entities."""
        with self._lock:
            self._cache.clear()

    def size(self) -> int:
        """Get current number of cached entities."""
        with self._lock:
            return len(self._cache)

    def stats(self) -> dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dict with cache metrics
        """
        with self._lock:
            size = len(self._cache)
            return {
                "size": size,
                "max_entries": self.max_entries,
                "utilization": size / self.max_entries,
                "hits": self._hits,
                "misses": self._misses,
            }
