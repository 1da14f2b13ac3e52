"""
Core domain types for chat sync storage.

This module defines the entities the repositories cache, persist and push
to the remote service, together with their durable ``to_dict`` form.
Entities are plain dataclasses; once handed to a repository they are
treated as values and state transitions produce new instances via
``dataclasses.replace``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

# =============================================================================
# Sync Status
# =============================================================================


class SyncStatus(Enum):
    """Lifecycle tag governing retry eligibility of an entity."""

    PENDING = "pending"  # Created locally, never pushed
    IN_PROGRESS = "in_progress"  # Push currently in flight
    COMPLETED = "completed"  # Remote service accepted the entity
    FAILED_TRANSIENT = "failed_transient"  # Last push failed, retry allowed
    FAILED_PERMANENTLY = "failed_permanently"  # Rejected, kept for audit only

    def needs_sync(self) -> bool:
        """True for statuses the sync backlog should pick up."""
        return self in SYNC_NEEDED_STATUSES


SYNC_NEEDED_STATUSES: frozenset[SyncStatus] = frozenset(
    {SyncStatus.PENDING, SyncStatus.FAILED_TRANSIENT}
)


def _dt_to_str(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _dt_from_str(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


# =============================================================================
# Nested Value Types
# =============================================================================


@dataclass
class User:
    """A chat user as embedded in channels, messages and reactions."""

    id: str
    name: str | None = None
    image: str | None = None
    role: str = "user"
    online: bool = False
    banned: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_active: datetime | None = None
    extra_data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "image": self.image,
            "role": self.role,
            "online": self.online,
            "banned": self.banned,
            "created_at": _dt_to_str(self.created_at),
            "updated_at": _dt_to_str(self.updated_at),
            "last_active": _dt_to_str(self.last_active),
            "extra_data": dict(self.extra_data),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            name=data.get("name"),
            image=data.get("image"),
            role=data.get("role", "user"),
            online=data.get("online", False),
            banned=data.get("banned", False),
            created_at=_dt_from_str(data.get("created_at")),
            updated_at=_dt_from_str(data.get("updated_at")),
            last_active=_dt_from_str(data.get("last_active")),
            extra_data=dict(data.get("extra_data") or {}),
        )


@dataclass
class Attachment:
    """A file, image or link preview attached to a message."""

    type: str | None = None
    title: str | None = None
    text: str | None = None
    asset_url: str | None = None
    image_url: str | None = None
    thumb_url: str | None = None
    mime_type: str | None = None
    file_size: int = 0
    extra_data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "type": self.type,
            "title": self.title,
            "text": self.text,
            "asset_url": self.asset_url,
            "image_url": self.image_url,
            "thumb_url": self.thumb_url,
            "mime_type": self.mime_type,
            "file_size": self.file_size,
            "extra_data": dict(self.extra_data),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Attachment":
        """Create from dictionary."""
        return cls(
            type=data.get("type"),
            title=data.get("title"),
            text=data.get("text"),
            asset_url=data.get("asset_url"),
            image_url=data.get("image_url"),
            thumb_url=data.get("thumb_url"),
            mime_type=data.get("mime_type"),
            file_size=data.get("file_size", 0),
            extra_data=dict(data.get("extra_data") or {}),
        )


@dataclass
class Reaction:
    """A user's reaction to a message."""

    message_id: str
    type: str
    score: int = 1
    user: User | None = None
    user_id: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    extra_data: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # user_id always names the reacting user when one is attached
        if not self.user_id and self.user is not None:
            self.user_id = self.user.id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "message_id": self.message_id,
            "type": self.type,
            "score": self.score,
            "user": self.user.to_dict() if self.user else None,
            "user_id": self.user_id,
            "created_at": _dt_to_str(self.created_at),
            "updated_at": _dt_to_str(self.updated_at),
            "extra_data": dict(self.extra_data),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Reaction":
        """Create from dictionary."""
        user = data.get("user")
        return cls(
            message_id=data["message_id"],
            type=data["type"],
            score=data.get("score", 1),
            user=User.from_dict(user) if user else None,
            user_id=data.get("user_id", ""),
            created_at=_dt_from_str(data.get("created_at")),
            updated_at=_dt_from_str(data.get("updated_at")),
            extra_data=dict(data.get("extra_data") or {}),
        )


@dataclass
class Member:
    """Membership of a user in a channel."""

    user: User
    role: str = "member"
    created_at: datetime | None = None
    updated_at: datetime | None = None
    banned: bool = False
    extra_data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "user": self.user.to_dict(),
            "role": self.role,
            "created_at": _dt_to_str(self.created_at),
            "updated_at": _dt_to_str(self.updated_at),
            "banned": self.banned,
            "extra_data": dict(self.extra_data),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Member":
        """Create from dictionary."""
        return cls(
            user=User.from_dict(data["user"]),
            role=data.get("role", "member"),
            created_at=_dt_from_str(data.get("created_at")),
            updated_at=_dt_from_str(data.get("updated_at")),
            banned=data.get("banned", False),
            extra_data=dict(data.get("extra_data") or {}),
        )


# =============================================================================
# Syncable Entities
# =============================================================================


@dataclass
class Channel:
    """A chat channel, addressed by its composite cid ``"type:id"``."""

    entity_type: ClassVar[str] = "channel"

    type: str
    id: str
    created_by: User | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None
    last_message_at: datetime | None = None
    member_count: int = 0
    members: list[Member] = field(default_factory=list)
    frozen: bool = False
    hidden: bool = False
    extra_data: dict[str, Any] = field(default_factory=dict)
    sync_status: SyncStatus = SyncStatus.COMPLETED

    @property
    def cid(self) -> str:
        """Composite channel id."""
        return f"{self.type}:{self.id}"

    @property
    def key(self) -> str:
        """Cache and store key."""
        return self.cid

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "cid": self.cid,
            "type": self.type,
            "id": self.id,
            "created_by": self.created_by.to_dict() if self.created_by else None,
            "created_at": _dt_to_str(self.created_at),
            "updated_at": _dt_to_str(self.updated_at),
            "deleted_at": _dt_to_str(self.deleted_at),
            "last_message_at": _dt_to_str(self.last_message_at),
            "member_count": self.member_count,
            "members": [m.to_dict() for m in self.members],
            "frozen": self.frozen,
            "hidden": self.hidden,
            "extra_data": dict(self.extra_data),
            "sync_status": self.sync_status.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Channel":
        """Create from dictionary."""
        created_by = data.get("created_by")
        return cls(
            type=data["type"],
            id=data["id"],
            created_by=User.from_dict(created_by) if created_by else None,
            created_at=_dt_from_str(data.get("created_at")),
            updated_at=_dt_from_str(data.get("updated_at")),
            deleted_at=_dt_from_str(data.get("deleted_at")),
            last_message_at=_dt_from_str(data.get("last_message_at")),
            member_count=data.get("member_count", 0),
            members=[Member.from_dict(m) for m in data.get("members") or []],
            frozen=data.get("frozen", False),
            hidden=data.get("hidden", False),
            extra_data=dict(data.get("extra_data") or {}),
            sync_status=SyncStatus(data.get("sync_status", SyncStatus.COMPLETED.value)),
        )


@dataclass
class Message:
    """A chat message, addressed by its id."""

    entity_type: ClassVar[str] = "message"

    id: str
    cid: str = ""
    text: str = ""
    html: str = ""
    type: str = "regular"
    user: User | None = None
    attachments: list[Attachment] = field(default_factory=list)
    mentioned_users: list[User] = field(default_factory=list)
    latest_reactions: list[Reaction] = field(default_factory=list)
    own_reactions: list[Reaction] = field(default_factory=list)
    reaction_counts: dict[str, int] = field(default_factory=dict)
    reaction_scores: dict[str, int] = field(default_factory=dict)
    thread_participants: list[User] = field(default_factory=list)
    parent_id: str | None = None
    reply_message_id: str | None = None
    reply_count: int = 0
    deleted_reply_count: int = 0
    pinned: bool = False
    pinned_at: datetime | None = None
    pinned_by: User | None = None
    pin_expires: datetime | None = None
    silent: bool = False
    shadowed: bool = False
    show_in_channel: bool = False
    command: str | None = None
    i18n: dict[str, str] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None
    extra_data: dict[str, Any] = field(default_factory=dict)
    sync_status: SyncStatus = SyncStatus.COMPLETED

    @property
    def key(self) -> str:
        """Cache and store key."""
        return self.id

    @property
    def mentioned_users_ids(self) -> list[str]:
        """Ids of mentioned users, in mention order."""
        return [u.id for u in self.mentioned_users]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "cid": self.cid,
            "text": self.text,
            "html": self.html,
            "type": self.type,
            "user": self.user.to_dict() if self.user else None,
            "attachments": [a.to_dict() for a in self.attachments],
            "mentioned_users": [u.to_dict() for u in self.mentioned_users],
            "latest_reactions": [r.to_dict() for r in self.latest_reactions],
            "own_reactions": [r.to_dict() for r in self.own_reactions],
            "reaction_counts": dict(self.reaction_counts),
            "reaction_scores": dict(self.reaction_scores),
            "thread_participants": [u.to_dict() for u in self.thread_participants],
            "parent_id": self.parent_id,
            "reply_message_id": self.reply_message_id,
            "reply_count": self.reply_count,
            "deleted_reply_count": self.deleted_reply_count,
            "pinned": self.pinned,
            "pinned_at": _dt_to_str(self.pinned_at),
            "pinned_by": self.pinned_by.to_dict() if self.pinned_by else None,
            "pin_expires": _dt_to_str(self.pin_expires),
            "silent": self.silent,
            "shadowed": self.shadowed,
            "show_in_channel": self.show_in_channel,
            "command": self.command,
            "i18n": dict(self.i18n),
            "created_at": _dt_to_str(self.created_at),
            "updated_at": _dt_to_str(self.updated_at),
            "deleted_at": _dt_to_str(self.deleted_at),
            "extra_data": dict(self.extra_data),
            "sync_status": self.sync_status.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        """Create from dictionary."""
        user = data.get("user")
        pinned_by = data.get("pinned_by")
        return cls(
            id=data["id"],
            cid=data.get("cid", ""),
            text=data.get("text", ""),
            html=data.get("html", ""),
            type=data.get("type", "regular"),
            user=User.from_dict(user) if user else None,
            attachments=[Attachment.from_dict(a) for a in data.get("attachments") or []],
            mentioned_users=[User.from_dict(u) for u in data.get("mentioned_users") or []],
            latest_reactions=[Reaction.from_dict(r) for r in data.get("latest_reactions") or []],
            own_reactions=[Reaction.from_dict(r) for r in data.get("own_reactions") or []],
            reaction_counts=dict(data.get("reaction_counts") or {}),
            reaction_scores=dict(data.get("reaction_scores") or {}),
            thread_participants=[
                User.from_dict(u) for u in data.get("thread_participants") or []
            ],
            parent_id=data.get("parent_id"),
            reply_message_id=data.get("reply_message_id"),
            reply_count=data.get("reply_count", 0),
            deleted_reply_count=data.get("deleted_reply_count", 0),
            pinned=data.get("pinned", False),
            pinned_at=_dt_from_str(data.get("pinned_at")),
            pinned_by=User.from_dict(pinned_by) if pinned_by else None,
            pin_expires=_dt_from_str(data.get("pin_expires")),
            silent=data.get("silent", False),
            shadowed=data.get("shadowed", False),
            show_in_channel=data.get("show_in_channel", False),
            command=data.get("command"),
            i18n=dict(data.get("i18n") or {}),
            created_at=_dt_from_str(data.get("created_at")),
            updated_at=_dt_from_str(data.get("updated_at")),
            deleted_at=_dt_from_str(data.get("deleted_at")),
            extra_data=dict(data.get("extra_data") or {}),
            sync_status=SyncStatus(data.get("sync_status", SyncStatus.COMPLETED.value)),
        )
