"""
SQLite entity store.

One table per entity type, holding the serialized entity next to an
indexed sync_status column so the "needs sync" backlog is a cheap
predicate query. Ideal for on-device persistence and for tests
(``:memory:``).
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from ..exceptions import StorageConnectionError, StorageIOError
from ..protocol import SYNC_NEEDED_STATUSES
from .base import E, EntityPredicate, EntityStore

logger = logging.getLogger(__name__)

# SQLite's default SQLITE_MAX_VARIABLE_NUMBER on older builds is 999
MAX_KEYS_PER_QUERY = 500


@dataclass
class SQLiteConfig:
    """Configuration for SQLite storage."""

    db_path: str | Path = ":memory:"

    @classmethod
    def from_env(cls) -> SQLiteConfig:
        """Create config from environment variables."""
        import os

        return cls(db_path=os.environ.get("CHAT_SYNC_DB_PATH", ":memory:"))


class SQLiteEntityStore(EntityStore[E]):
    """
    SQLite-backed store for one entity type.

    Schema (table named after ``entity_cls.entity_type``):
        key TEXT PRIMARY KEY
        sync_status TEXT NOT NULL   -- indexed
        data TEXT NOT NULL          -- JSON of entity.to_dict()
        stored_at TEXT NOT NULL
    """

    def __init__(self, config: SQLiteConfig, entity_cls: type):
        """
        Initialize SQLite store.

        Args:
            config: SQLite configuration
            entity_cls: Entity dataclass with to_dict/from_dict, ``key`` and ``entity_type``
        """
        self.config = config
        self.entity_cls = entity_cls
        self.table = f"{entity_cls.entity_type}s"
        self.conn: aiosqlite.Connection | None = None
        self._initialized = False
        self._write_lock = asyncio.Lock()

    @classmethod
    async def create(cls, entity_cls: type, config: SQLiteConfig | None = None) -> SQLiteEntityStore:
        """Create and initialize SQLite store."""
        if config is None:
            config = SQLiteConfig.from_env()

        store = cls(config, entity_cls)
        await store.initialize()
        return store

    async def initialize(self) -> None:
        """Initialize SQLite connection and schema."""
        if self._initialized:
            return

        try:
            self.conn = await aiosqlite.connect(str(self.config.db_path))

            await self.conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    key TEXT NOT NULL PRIMARY KEY,
                    sync_status TEXT NOT NULL,
                    data TEXT NOT NULL,
                    stored_at TEXT NOT NULL
                )
            """)
            await self.conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{self.table}_sync_status "
                f"ON {self.table} (sync_status)"
            )
            await self.conn.commit()

            self._initialized = True
            logger.info(f"SQLite store ready: {self.config.db_path} ({self.table})")

        except Exception as e:
            raise StorageConnectionError(str(self.config.db_path), e) from e

    async def close(self) -> None:
        """Close SQLite connection."""
        if self.conn:
            await self.conn.close()
            self.conn = None

        self._initialized = False

    def _require_conn(self, operation: str) -> aiosqlite.Connection:
        if self.conn is None:
            raise StorageIOError(operation, cause=RuntimeError("Not initialized"))
        return self.conn

    def _row_to_entity(self, data: str) -> E:
        return self.entity_cls.from_dict(json.loads(data))

    # =========================================================================
    # Writes
    # =========================================================================

    async def upsert_many(self, entities: Sequence[E]) -> None:
        """Insert or replace entities in a single transaction."""
        if not entities:
            return

        conn = self._require_conn("upsert_many")
        stored_at = datetime.now(UTC).isoformat()
        rows = [
            (
                e.key,  # type: ignore[attr-defined]
                e.sync_status.value,  # type: ignore[attr-defined]
                json.dumps(e.to_dict()),  # type: ignore[attr-defined]
                stored_at,
            )
            for e in entities
        ]

        async with self._write_lock:
            try:
                await conn.executemany(
                    f"""
                    INSERT INTO {self.table} (key, sync_status, data, stored_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT (key) DO UPDATE SET
                        sync_status = excluded.sync_status,
                        data = excluded.data,
                        stored_at = excluded.stored_at
                    """,
                    rows,
                )
                await conn.commit()
            except Exception as e:
                await conn.rollback()
                raise StorageIOError("upsert_many", str(self.config.db_path), e) from e

        logger.debug(f"Upserted {len(rows)} rows into {self.table}")

    # =========================================================================
    # Reads
    # =========================================================================

    async def select_by_keys(self, keys: Sequence[str]) -> list[E]:
        """Load entities by key, chunking to respect SQLite's parameter limit."""
        conn = self._require_conn("select_by_keys")
        unique_keys = list(dict.fromkeys(keys))
        results: list[E] = []

        for start in range(0, len(unique_keys), MAX_KEYS_PER_QUERY):
            chunk = unique_keys[start : start + MAX_KEYS_PER_QUERY]
            placeholders = ", ".join("?" for _ in chunk)
            try:
                async with conn.execute(
                    f"SELECT data FROM {self.table} WHERE key IN ({placeholders})",
                    chunk,
                ) as cursor:
                    rows = await cursor.fetchall()
            except Exception as e:
                raise StorageIOError("select_by_keys", str(self.config.db_path), e) from e
            results.extend(self._row_to_entity(row[0]) for row in rows)

        return results

    async def select_sync_needed(self) -> list[E]:
        """Backlog query on the indexed sync_status column."""
        conn = self._require_conn("select_sync_needed")
        statuses = sorted(s.value for s in SYNC_NEEDED_STATUSES)
        placeholders = ", ".join("?" for _ in statuses)
        try:
            async with conn.execute(
                f"SELECT data FROM {self.table} WHERE sync_status IN ({placeholders}) "
                f"ORDER BY stored_at, key",
                statuses,
            ) as cursor:
                rows = await cursor.fetchall()
        except Exception as e:
            raise StorageIOError("select_sync_needed", str(self.config.db_path), e) from e
        return [self._row_to_entity(row[0]) for row in rows]

    async def select_where(self, predicate: EntityPredicate) -> list[E]:
        """Full scan filtered in Python."""
        conn = self._require_conn("select_where")
        try:
            async with conn.execute(f"SELECT data FROM {self.table} ORDER BY key") as cursor:
                rows = await cursor.fetchall()
        except Exception as e:
            raise StorageIOError("select_where", str(self.config.db_path), e) from e
        entities = [self._row_to_entity(row[0]) for row in rows]
        return [e for e in entities if predicate(e)]

    async def count(self) -> int:
        conn = self._require_conn("count")
        async with conn.execute(f"SELECT COUNT(*) FROM {self.table}") as cursor:
            row: Any = await cursor.fetchone()
        return int(row[0]) if row else 0
