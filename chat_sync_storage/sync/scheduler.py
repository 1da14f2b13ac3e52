"""
Periodic driver for sync coordinators.

Runs ``retry_pending_sync`` on every registered coordinator at a fixed
interval, and on demand via ``trigger()`` (e.g. when connectivity comes
back). Drains never overlap. There is no backoff: a transient failure
simply waits for the next tick.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from .coordinator import SyncCoordinator, SyncResult

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    """Current state of the scheduler."""

    IDLE = "idle"
    SYNCING = "syncing"
    PAUSED = "paused"
    STOPPED = "stopped"


class SyncScheduler:
    """Drives one or more coordinators on a timer."""

    def __init__(self, coordinators: list[SyncCoordinator], interval_seconds: float = 30.0):
        """
        Args:
            coordinators: Coordinators drained in order on every tick
            interval_seconds: Seconds between scheduled drains
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")

        self.coordinators = list(coordinators)
        self.interval_seconds = interval_seconds
        self._state = SchedulerState.STOPPED
        self._paused = False
        self._drain_lock = asyncio.Lock()
        self._sync_task: asyncio.Task[None] | None = None

    @property
    def state(self) -> SchedulerState:
        """Get current scheduler state."""
        return self._state

    @property
    def is_running(self) -> bool:
        return self._sync_task is not None

    async def trigger(self) -> list[SyncResult]:
        """
        Drain every coordinator now.

        Waits for an in-flight drain to finish first. Returns one result
        per coordinator; an empty list while paused.
        """
        if self._paused:
            return []

        async with self._drain_lock:
            previous = self._state
            self._state = SchedulerState.SYNCING
            results: list[SyncResult] = []
            try:
                for coordinator in self.coordinators:
                    await coordinator.retry_pending_sync()
                    if coordinator.last_result is not None:
                        results.append(coordinator.last_result)
            finally:
                self._state = SchedulerState.PAUSED if self._paused else previous
            return results

    async def start(self) -> None:
        """Start automatic background drains."""
        if self._sync_task is not None:
            return

        async def sync_loop() -> None:
            while True:
                try:
                    await asyncio.sleep(self.interval_seconds)
                    await self.trigger()
                except asyncio.CancelledError:
                    break
                except Exception as e:
                    logger.error(f"Scheduled sync failed: {e}", exc_info=True)

        self._state = SchedulerState.PAUSED if self._paused else SchedulerState.IDLE
        self._sync_task = asyncio.create_task(sync_loop())
        logger.info(f"Sync scheduler started (every {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Stop automatic background drains."""
        if self._sync_task is not None:
            self._sync_task.cancel()
            try:
                await self._sync_task
            except asyncio.CancelledError:
                pass
            self._sync_task = None
            logger.info("Sync scheduler stopped")

        self._state = SchedulerState.STOPPED

    def pause(self) -> None:
        """Skip drains until resumed."""
        self._paused = True
        if self._state != SchedulerState.STOPPED:
            self._state = SchedulerState.PAUSED

    def resume(self) -> None:
        """Resume drains."""
        self._paused = False
        if self._state == SchedulerState.PAUSED:
            self._state = SchedulerState.IDLE
