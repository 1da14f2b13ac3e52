"""
Offline sync module.

Drains locally-created entities that have not reached the remote chat
service, and marks each as completed, permanently failed, or still
pending according to the service's error classification.
"""

from .coordinator import SyncConfig, SyncCoordinator, SyncResult
from .http import HttpChatService, HttpServiceConfig
from .remote import RemoteService, SyncOutcome
from .scheduler import SchedulerState, SyncScheduler

__all__ = [
    "RemoteService",
    "SyncOutcome",
    "SyncConfig",
    "SyncCoordinator",
    "SyncResult",
    "SyncScheduler",
    "SchedulerState",
    "HttpChatService",
    "HttpServiceConfig",
]
