"""
Top-level configuration for chat sync storage.

Configuration can be provided directly, via environment variables, or via
a YAML settings file:

```yaml
sync:
  cache_size: 100
  db_path: ~/.chat/offline.db
  remote_base_url: https://chat.example.com/api
  api_key: "..."
  request_timeout: 10
  sync_interval_seconds: 30
  batch_size: 50
  log_level: INFO
```

Environment Variables:
    CHAT_SYNC_CACHE_SIZE: Entities kept in each repository cache (default: 100)
    CHAT_SYNC_DB_PATH: SQLite database path (default: :memory:)
    CHAT_SYNC_REMOTE_URL: Base URL of the remote chat service
    CHAT_SYNC_API_KEY: API key sent to the remote service
    CHAT_SYNC_REQUEST_TIMEOUT: Remote request timeout in seconds (default: 10)
    CHAT_SYNC_INTERVAL_SECONDS: Seconds between scheduled drains (default: 30)
    CHAT_SYNC_BATCH_SIZE: Max entities per drain (default: unlimited)
    CHAT_SYNC_LOG_LEVEL: Log level name (default: INFO)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ValidationError


@dataclass
class ChatSyncConfig:
    """Configuration for repositories, stores and the sync coordinator."""

    cache_size: int = 100
    db_path: str = ":memory:"
    remote_base_url: str | None = None
    api_key: str | None = None
    request_timeout: float = 10.0
    sync_interval_seconds: float = 30.0
    batch_size: int | None = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.cache_size < 1:
            raise ValidationError("cache_size", "must be >= 1", str(self.cache_size))
        if self.batch_size is not None and self.batch_size < 1:
            raise ValidationError("batch_size", "must be >= 1", str(self.batch_size))
        if self.sync_interval_seconds <= 0:
            raise ValidationError(
                "sync_interval_seconds", "must be positive", str(self.sync_interval_seconds)
            )

    @classmethod
    def from_env(cls) -> ChatSyncConfig:
        """Create config from environment variables."""
        batch_size = os.environ.get("CHAT_SYNC_BATCH_SIZE")
        return cls(
            cache_size=int(os.environ.get("CHAT_SYNC_CACHE_SIZE", "100")),
            db_path=os.environ.get("CHAT_SYNC_DB_PATH", ":memory:"),
            remote_base_url=os.environ.get("CHAT_SYNC_REMOTE_URL"),
            api_key=os.environ.get("CHAT_SYNC_API_KEY"),
            request_timeout=float(os.environ.get("CHAT_SYNC_REQUEST_TIMEOUT", "10")),
            sync_interval_seconds=float(os.environ.get("CHAT_SYNC_INTERVAL_SECONDS", "30")),
            batch_size=int(batch_size) if batch_size else None,
            log_level=os.environ.get("CHAT_SYNC_LOG_LEVEL", "INFO"),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> ChatSyncConfig:
        """Load the ``sync`` section of a YAML settings file.

        A missing file yields the defaults. Unknown keys are ignored.
        """
        config_path = Path(path).expanduser()
        if not config_path.exists():
            return cls()

        data = yaml.safe_load(config_path.read_text()) or {}
        if not isinstance(data, dict):
            raise ValidationError("settings", "top level must be a mapping", str(config_path))

        section: dict[str, Any] = data.get("sync") or {}
        allowed = {f.name for f in fields(cls)}
        values = {k: v for k, v in section.items() if k in allowed}
        if "db_path" in values and values["db_path"] != ":memory:":
            values["db_path"] = str(Path(values["db_path"]).expanduser())
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Serialize without the API key."""
        return {
            "cache_size": self.cache_size,
            "db_path": self.db_path,
            "remote_base_url": self.remote_base_url,
            "request_timeout": self.request_timeout,
            "sync_interval_seconds": self.sync_interval_seconds,
            "batch_size": self.batch_size,
            "log_level": self.log_level,
        }
