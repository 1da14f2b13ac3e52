"""
Remote chat service interface.

The coordinator only needs one call per entity and a way to tell
permanent failures from transient ones. Transports (HTTP, test doubles)
implement ``RemoteService`` and report failures as ``RemoteServiceError``
subclasses carrying that classification.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from ..exceptions import RemoteServiceError


@dataclass
class SyncOutcome:
    """Result of pushing one entity: the server's copy, or an error."""

    entity: Any = None
    error: RemoteServiceError | None = None

    @classmethod
    def success(cls, entity: Any = None) -> SyncOutcome:
        return cls(entity=entity)

    @classmethod
    def failure(cls, error: RemoteServiceError) -> SyncOutcome:
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_error(self) -> bool:
        return self.error is not None


class RemoteService(ABC):
    """Push side of the remote chat service."""

    @abstractmethod
    async def create_or_update(self, entity: Any) -> SyncOutcome:
        """
        Push an entity's create/update intent.

        Must be idempotent per entity key: the coordinator may push the
        same entity again after an interrupted pass.

        Args:
            entity: Channel or Message to push

        Returns:
            SyncOutcome with the server's copy or a classified error
        """
        ...

    async def close(self) -> None:
        """Release transport resources."""
        return None
