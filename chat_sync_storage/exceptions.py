"""
Custom exceptions for chat sync storage.

All stores, repositories and remote service adapters raise these
exceptions for consistent error handling across backends.
"""


class ChatStorageError(Exception):
    """Base exception for all chat sync storage errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EntityNotFoundError(ChatStorageError):
    """Raised when an entity is required but absent from every layer."""

    def __init__(self, key: str, entity_type: str | None = None):
        details = {"key": key}
        if entity_type:
            details["entity_type"] = entity_type
        super().__init__(f"Entity not found: {key}", details)
        self.key = key
        self.entity_type = entity_type


class StorageIOError(ChatStorageError):
    """A durable store call (load, upsert_many, select_*) failed.

    The cache is never updated when this is raised from a write, so the
    caller can retry the same insert.
    """

    def __init__(self, operation: str, location: str | None = None, cause: Exception | None = None):
        self.operation = operation
        self.location = location
        self.cause = cause
        super().__init__(
            f"Store {operation} failed" + (f" at {location}" if location else ""),
            {
                "operation": operation,
                **({"location": location} if location else {}),
                **({"cause": str(cause)} if cause else {}),
            },
        )


class StorageConnectionError(ChatStorageError):
    """The durable store could not be opened (bad path, locked or corrupt file)."""

    def __init__(self, location: str, cause: Exception | None = None):
        self.location = location
        self.cause = cause
        super().__init__(
            f"Cannot open store at {location}",
            {"location": location, **({"cause": str(cause)} if cause else {})},
        )


class ValidationError(ChatStorageError):
    """Raised when data validation fails."""

    def __init__(self, field: str, reason: str, value: str | None = None):
        details = {"field": field, "reason": reason}
        if value is not None:
            details["value"] = value
        super().__init__(f"Validation failed for {field}: {reason}", details)
        self.field = field
        self.reason = reason
        self.value = value


class SyncError(ChatStorageError):
    """Raised when synchronization of an entity fails."""

    def __init__(self, message: str, key: str | None = None, cause: Exception | None = None):
        details: dict = {}
        if key:
            details["key"] = key
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details)
        self.key = key
        self.cause = cause


class RemoteServiceError(SyncError):
    """Error reported by the remote chat service.

    The remote service owns the error taxonomy. Callers only ask
    ``is_permanent()`` to decide whether an entity may be retried.
    """

    permanent: bool = False

    def __init__(
        self,
        message: str,
        key: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, key=key, cause=cause)
        self.status_code = status_code
        if status_code is not None:
            self.details["status_code"] = status_code
        self.details["permanent"] = self.is_permanent()

    def is_permanent(self) -> bool:
        """True when retrying the same request can never succeed."""
        return self.permanent


class PermanentRemoteError(RemoteServiceError):
    """Validation rejection, unresolvable conflict, or other final refusal."""

    permanent = True


class TransientRemoteError(RemoteServiceError):
    """Network unreachable, timeout, throttling, or server unavailable."""

    permanent = False
