"""
Sync coordinator: drains the "needs sync" backlog once.

For each entity awaiting sync (PENDING or FAILED_TRANSIENT), one push is
attempted against the remote service, sequentially:
- success: status becomes COMPLETED and the entity is re-inserted
- permanent failure: status becomes FAILED_PERMANENTLY and is re-inserted
- transient failure: nothing is written; the entity stays eligible

Scheduling and backoff belong to the caller (see ``SyncScheduler``). A
pass is restartable: if it is cancelled, only entities already re-inserted
have changed, and the rest are picked up by the next pass.

Re-inserts write the copy loaded at the start of the pass, so an insert of
the same key that lands while its push is in flight is overwritten.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from ..exceptions import RemoteServiceError, TransientRemoteError
from ..logging_utils import entity_context
from ..protocol import SyncStatus
from .remote import RemoteService, SyncOutcome

if TYPE_CHECKING:
    from ..repository.base import EntityRepository

logger = logging.getLogger(__name__)


@dataclass
class SyncConfig:
    """Configuration for a drain pass."""

    # Max entities pushed per pass; None drains everything
    batch_size: int | None = None


@dataclass
class SyncResult:
    """Result of a drain pass."""

    completed: int = 0
    failed_permanently: int = 0
    still_pending: int = 0
    errors: list[str] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def processed(self) -> int:
        return self.completed + self.failed_permanently + self.still_pending

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "completed": self.completed,
            "failed_permanently": self.failed_permanently,
            "still_pending": self.still_pending,
            "errors": list(self.errors),
            "duration_ms": self.duration_ms,
        }


class SyncCoordinator:
    """Pushes pending entities of one repository to the remote service."""

    def __init__(
        self,
        repository: EntityRepository[Any],
        remote_service: RemoteService,
        config: SyncConfig | None = None,
    ):
        """
        Args:
            repository: Repository whose backlog is drained
            remote_service: Push target
            config: Pass configuration
        """
        self.repository = repository
        self.remote = remote_service
        self.config = config or SyncConfig()
        self.last_result: SyncResult | None = None

    async def retry_pending_sync(self) -> list[Any]:
        """
        Drain the backlog once.

        Returns:
            Processed entities with their post-pass status. Transient
            failures are returned unchanged.

        Raises:
            StorageIOError: If re-inserting an entity fails
        """
        start_time = datetime.now(UTC)
        result = SyncResult()

        pending = await self.repository.select_pending_sync()
        if self.config.batch_size is not None:
            pending = pending[: self.config.batch_size]

        if pending:
            logger.info(f"Sync pass started: {len(pending)} pending")

        processed: list[Any] = []
        for entity in pending:
            outcome = await self._push(entity)

            if outcome.is_success:
                updated = replace(entity, sync_status=SyncStatus.COMPLETED)
                await self.repository.insert([updated])
                result.completed += 1
                logger.debug(f"Synced {updated.key}", extra=entity_context(updated))
            elif outcome.error is not None and outcome.error.is_permanent():
                updated = replace(entity, sync_status=SyncStatus.FAILED_PERMANENTLY)
                await self.repository.insert([updated])
                result.failed_permanently += 1
                result.errors.append(f"Permanent failure for {entity.key}: {outcome.error}")
                logger.error(
                    f"Sync permanently failed for {entity.key}: {outcome.error}",
                    extra=entity_context(updated),
                )
            else:
                updated = entity
                result.still_pending += 1
                logger.warning(
                    f"Sync deferred for {entity.key}: {outcome.error}",
                    extra=entity_context(entity),
                )

            processed.append(updated)

        result.duration_ms = int((datetime.now(UTC) - start_time).total_seconds() * 1000)
        self.last_result = result

        if pending:
            logger.info(
                f"Sync pass finished: {result.completed} completed, "
                f"{result.failed_permanently} failed permanently, "
                f"{result.still_pending} still pending"
            )
        return processed

    async def _push(self, entity: Any) -> SyncOutcome:
        """Push one entity, folding raised errors into an outcome."""
        try:
            return await self.remote.create_or_update(entity)
        except RemoteServiceError as e:
            return SyncOutcome.failure(e)
        except Exception as e:
            # Anything the transport did not classify is retried next pass
            logger.warning(
                f"Unclassified error pushing {entity.key}: {e}", extra=entity_context(entity)
            )
            return SyncOutcome.failure(
                TransientRemoteError(f"Unclassified error: {e}", key=entity.key, cause=e)
            )
