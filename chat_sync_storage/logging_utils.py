"""
Structured JSON logging for sync passes.

Drains run unattended in the background; emitting one JSON object per line
lets a log collector group lines by entity key and sync status.

Example:
    >>> configure_structured_logging("DEBUG")
    >>> logger.warning("Sync deferred", extra=entity_context(channel))
    {"timestamp": "...", "level": "WARNING", "logger": "chat_sync_storage.sync.coordinator",
     "message": "Sync deferred", "entity_type": "channel", "key": "messaging:general",
     "sync_status": "pending"}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import Any

ROOT_LOGGER = "chat_sync_storage"

# LogRecord attributes that are never copied into the JSON object
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


def _plain(value: Any) -> Any:
    """Enum members log as their value; anything else as-is."""
    return value.value if isinstance(value, Enum) else value


def entity_context(entity: Any) -> dict[str, Any]:
    """Log fields identifying an entity: its type, key and sync status."""
    return {
        "entity_type": getattr(entity, "entity_type", type(entity).__name__.lower()),
        "key": getattr(entity, "key", None),
        "sync_status": _plain(getattr(entity, "sync_status", None)),
    }


class StructuredJsonFormatter(logging.Formatter):
    """
    Render each record as a single-line JSON object.

    Fixed fields are timestamp (UTC, ISO 8601), level, logger and message,
    followed by the exception text if any and every ``extra`` field.
    Values that JSON cannot encode are logged as their ``str()``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        for name, value in record.__dict__.items():
            if name in _RECORD_ATTRS or name.startswith("_"):
                continue
            value = _plain(value)
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                value = str(value)
            payload[name] = value

        return json.dumps(payload, default=str)


def configure_structured_logging(
    level: int | str = logging.INFO,
    logger_name: str | None = ROOT_LOGGER,
) -> logging.Logger:
    """
    Send a logger's output to stdout as JSON lines.

    Args:
        level: Level as a number or a name such as "DEBUG"
        logger_name: Logger to configure; defaults to the package logger,
            pass None for the root logger

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)

    # Reconfiguring must not stack handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())
    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    return logger


def get_storage_logger(name: str) -> logging.Logger:
    """Logger named ``chat_sync_storage.{name}``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


class StorageLoggerAdapter(logging.LoggerAdapter):
    """
    Adapter stamping fixed context (e.g. the repository's entity type) on
    every record. Adapter context overrides a call's own ``extra`` keys.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**kwargs.get("extra", {}), **(self.extra or {})}
        return msg, kwargs
