"""
Append-only JSONL entity store.

Every upsert appends one line per entity; on load the last line for a key
wins. A line cut short by a crash mid-write is skipped, so the store
always reopens with every batch that was fully written.

Layout:
    {path}             # one JSON object per line: {"key", "sync_status", "data"}
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from ..exceptions import StorageIOError
from .base import E, EntityPredicate, EntityStore, needs_sync

logger = logging.getLogger(__name__)


class JsonlEntityStore(EntityStore[E]):
    """File-backed store keeping an in-memory index of the latest rows."""

    def __init__(self, path: str | Path, entity_cls: type):
        """
        Args:
            path: JSONL file to append to (created on first write)
            entity_cls: Entity dataclass with to_dict/from_dict and a ``key``
        """
        self.path = Path(path)
        self.entity_cls = entity_cls
        self._rows: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()
        self._loaded = False
        self._torn_tail = False

    async def initialize(self) -> None:
        """Load the log into memory."""
        if self._loaded:
            return

        async with self._lock:
            if await aiofiles.os.path.exists(self.path):
                try:
                    async with aiofiles.open(self.path, encoding="utf-8") as f:
                        line_no = 0
                        async for line in f:
                            line_no += 1
                            self._torn_tail = not line.endswith("\n")
                            line = line.strip()
                            if not line:
                                continue
                            try:
                                record = json.loads(line)
                            except json.JSONDecodeError:
                                logger.warning(f"Skipping unreadable line {line_no} in {self.path}")
                                continue
                            self._rows[record["key"]] = record["data"]
                except OSError as e:
                    raise StorageIOError("load", str(self.path), e) from e

            self._loaded = True

        logger.info(f"JSONL store ready: {self.path} ({len(self._rows)} entities)")

    async def close(self) -> None:
        self._rows.clear()
        self._loaded = False

    async def upsert_many(self, entities: Sequence[E]) -> None:
        """Append one line per entity in a single write."""
        if not entities:
            return

        await self.initialize()
        rows = {e.key: e.to_dict() for e in entities}  # type: ignore[attr-defined]
        payload = "".join(
            json.dumps({"key": key, "sync_status": data["sync_status"], "data": data}) + "\n"
            for key, data in rows.items()
        )

        async with self._lock:
            try:
                await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
                async with aiofiles.open(self.path, "a", encoding="utf-8") as f:
                    if self._torn_tail:
                        # Terminate the partial line an interrupted write left behind
                        await f.write("\n")
                        self._torn_tail = False
                    await f.write(payload)
                    await f.flush()
            except OSError as e:
                raise StorageIOError("upsert_many", str(self.path), e) from e

            # Index only after the append succeeded
            self._rows.update(rows)

    async def select_by_keys(self, keys: Sequence[str]) -> list[E]:
        await self.initialize()
        async with self._lock:
            rows = [self._rows[k] for k in dict.fromkeys(keys) if k in self._rows]
        return [self.entity_cls.from_dict(r) for r in rows]

    async def select_sync_needed(self) -> list[E]:
        return await self.select_where(needs_sync)

    async def select_where(self, predicate: EntityPredicate) -> list[E]:
        await self.initialize()
        async with self._lock:
            rows = list(self._rows.values())
        entities = [self.entity_cls.from_dict(r) for r in rows]
        return [e for e in entities if predicate(e)]

    async def compact(self) -> int:
        """Rewrite the log with one line per key. Returns lines written."""
        await self.initialize()
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")

        async with self._lock:
            try:
                await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
                async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                    for key, data in self._rows.items():
                        line = {"key": key, "sync_status": data["sync_status"], "data": data}
                        await f.write(json.dumps(line) + "\n")
                await aiofiles.os.replace(tmp_path, self.path)
                self._torn_tail = False
            except OSError as e:
                raise StorageIOError("compact", str(self.path), e) from e

            return len(self._rows)
