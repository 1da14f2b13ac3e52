"""
Wire records exchanged with the remote chat service.

Records mirror the server's JSON: snake_case names, optional fields the
server may omit, ISO-8601 timestamps as strings. Keys a record does not
recognise are collected into ``extra_data`` on decode and flattened back
into the top level on encode, so forward-compatible fields survive an
encode -> decode -> encode cycle unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _split_extra(data: dict[str, Any], known: frozenset[str]) -> dict[str, Any]:
    """Return the keys of ``data`` a record does not model."""
    return {k: v for k, v in data.items() if k not in known}


def _with_extra(payload: dict[str, Any], extra_data: dict[str, Any]) -> dict[str, Any]:
    """Flatten extension fields into ``payload``; modelled keys win."""
    for key, value in extra_data.items():
        if key not in payload:
            payload[key] = value
    return payload


@dataclass
class UserRecord:
    """Wire form of a user."""

    KNOWN_FIELDS = frozenset(
        {"id", "name", "image", "role", "online", "banned", "created_at", "updated_at", "last_active"}
    )

    id: str
    name: str | None = None
    image: str | None = None
    role: str | None = None
    online: bool | None = None
    banned: bool | None = None
    created_at: str | None = None
    updated_at: str | None = None
    last_active: str | None = None
    extra_data: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        payload = {
            "id": self.id,
            "name": self.name,
            "image": self.image,
            "role": self.role,
            "online": self.online,
            "banned": self.banned,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "last_active": self.last_active,
        }
        return _with_extra(payload, self.extra_data)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> UserRecord:
        return cls(
            id=data["id"],
            name=data.get("name"),
            image=data.get("image"),
            role=data.get("role"),
            online=data.get("online"),
            banned=data.get("banned"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            last_active=data.get("last_active"),
            extra_data=_split_extra(data, cls.KNOWN_FIELDS),
        )


@dataclass
class AttachmentRecord:
    """Wire form of a message attachment."""

    KNOWN_FIELDS = frozenset(
        {"type", "title", "text", "asset_url", "image_url", "thumb_url", "mime_type", "file_size"}
    )

    type: str | None = None
    title: str | None = None
    text: str | None = None
    asset_url: str | None = None
    image_url: str | None = None
    thumb_url: str | None = None
    mime_type: str | None = None
    file_size: int | None = None
    extra_data: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        payload = {
            "type": self.type,
            "title": self.title,
            "text": self.text,
            "asset_url": self.asset_url,
            "image_url": self.image_url,
            "thumb_url": self.thumb_url,
            "mime_type": self.mime_type,
            "file_size": self.file_size,
        }
        return _with_extra(payload, self.extra_data)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> AttachmentRecord:
        return cls(
            type=data.get("type"),
            title=data.get("title"),
            text=data.get("text"),
            asset_url=data.get("asset_url"),
            image_url=data.get("image_url"),
            thumb_url=data.get("thumb_url"),
            mime_type=data.get("mime_type"),
            file_size=data.get("file_size"),
            extra_data=_split_extra(data, cls.KNOWN_FIELDS),
        )


@dataclass
class ReactionRecord:
    """Wire form of a reaction. ``user`` may be omitted in favour of ``user_id``."""

    KNOWN_FIELDS = frozenset(
        {"message_id", "type", "score", "user", "user_id", "created_at", "updated_at"}
    )

    message_id: str
    type: str
    score: int | None = None
    user: UserRecord | None = None
    user_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    extra_data: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        payload = {
            "message_id": self.message_id,
            "type": self.type,
            "score": self.score,
            "user": self.user.to_json() if self.user else None,
            "user_id": self.user_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        return _with_extra(payload, self.extra_data)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ReactionRecord:
        user = data.get("user")
        return cls(
            message_id=data["message_id"],
            type=data["type"],
            score=data.get("score"),
            user=UserRecord.from_json(user) if user else None,
            user_id=data.get("user_id"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            extra_data=_split_extra(data, cls.KNOWN_FIELDS),
        )


@dataclass
class MemberRecord:
    """Wire form of a channel member."""

    KNOWN_FIELDS = frozenset(
        {"user", "user_id", "channel_role", "created_at", "updated_at", "banned"}
    )

    user: UserRecord | None = None
    user_id: str | None = None
    channel_role: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    banned: bool | None = None
    extra_data: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        payload = {
            "user": self.user.to_json() if self.user else None,
            "user_id": self.user_id,
            "channel_role": self.channel_role,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "banned": self.banned,
        }
        return _with_extra(payload, self.extra_data)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> MemberRecord:
        user = data.get("user")
        return cls(
            user=UserRecord.from_json(user) if user else None,
            user_id=data.get("user_id"),
            channel_role=data.get("channel_role"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            banned=data.get("banned"),
            extra_data=_split_extra(data, cls.KNOWN_FIELDS),
        )


@dataclass
class ChannelRecord:
    """Wire form of a channel."""

    KNOWN_FIELDS = frozenset(
        {
            "cid", "id", "type", "created_by", "created_by_id", "created_at",
            "updated_at", "deleted_at", "last_message_at", "member_count",
            "members", "frozen", "hidden",
        }
    )

    id: str
    type: str
    cid: str | None = None
    created_by: UserRecord | None = None
    created_by_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    deleted_at: str | None = None
    last_message_at: str | None = None
    member_count: int | None = None
    members: list[MemberRecord] | None = None
    frozen: bool | None = None
    hidden: bool | None = None
    extra_data: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        payload = {
            "cid": self.cid,
            "id": self.id,
            "type": self.type,
            "created_by": self.created_by.to_json() if self.created_by else None,
            "created_by_id": self.created_by_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "deleted_at": self.deleted_at,
            "last_message_at": self.last_message_at,
            "member_count": self.member_count,
            "members": [m.to_json() for m in self.members] if self.members is not None else None,
            "frozen": self.frozen,
            "hidden": self.hidden,
        }
        return _with_extra(payload, self.extra_data)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ChannelRecord:
        created_by = data.get("created_by")
        members = data.get("members")
        return cls(
            id=data["id"],
            type=data["type"],
            cid=data.get("cid"),
            created_by=UserRecord.from_json(created_by) if created_by else None,
            created_by_id=data.get("created_by_id"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            deleted_at=data.get("deleted_at"),
            last_message_at=data.get("last_message_at"),
            member_count=data.get("member_count"),
            members=[MemberRecord.from_json(m) for m in members] if members is not None else None,
            frozen=data.get("frozen"),
            hidden=data.get("hidden"),
            extra_data=_split_extra(data, cls.KNOWN_FIELDS),
        )


@dataclass
class MessageRecord:
    """Wire form of a message.

    Upstream requests may carry only ``user_id`` and ``mentioned_users_ids``;
    downstream responses embed full user objects.
    """

    KNOWN_FIELDS = frozenset(
        {
            "id", "cid", "text", "html", "type", "user", "user_id", "attachments",
            "mentioned_users", "mentioned_users_ids", "latest_reactions",
            "own_reactions", "reaction_counts", "reaction_scores",
            "thread_participants", "parent_id", "quoted_message_id", "reply_count",
            "deleted_reply_count", "pinned", "pinned_at", "pinned_by", "pin_expires",
            "silent", "shadowed", "show_in_channel", "command", "i18n",
            "created_at", "updated_at", "deleted_at",
        }
    )

    id: str
    cid: str | None = None
    text: str | None = None
    html: str | None = None
    type: str | None = None
    user: UserRecord | None = None
    user_id: str | None = None
    attachments: list[AttachmentRecord] | None = None
    mentioned_users: list[UserRecord] | None = None
    mentioned_users_ids: list[str] | None = None
    latest_reactions: list[ReactionRecord] | None = None
    own_reactions: list[ReactionRecord] | None = None
    reaction_counts: dict[str, int] | None = None
    reaction_scores: dict[str, int] | None = None
    thread_participants: list[UserRecord] | None = None
    parent_id: str | None = None
    quoted_message_id: str | None = None
    reply_count: int | None = None
    deleted_reply_count: int | None = None
    pinned: bool | None = None
    pinned_at: str | None = None
    pinned_by: UserRecord | None = None
    pin_expires: str | None = None
    silent: bool | None = None
    shadowed: bool | None = None
    show_in_channel: bool | None = None
    command: str | None = None
    i18n: dict[str, str] | None = None
    created_at: str | None = None
    updated_at: str | None = None
    deleted_at: str | None = None
    extra_data: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        def _list(items: list[Any] | None) -> list[dict[str, Any]] | None:
            return [i.to_json() for i in items] if items is not None else None

        payload = {
            "id": self.id,
            "cid": self.cid,
            "text": self.text,
            "html": self.html,
            "type": self.type,
            "user": self.user.to_json() if self.user else None,
            "user_id": self.user_id,
            "attachments": _list(self.attachments),
            "mentioned_users": _list(self.mentioned_users),
            "mentioned_users_ids": self.mentioned_users_ids,
            "latest_reactions": _list(self.latest_reactions),
            "own_reactions": _list(self.own_reactions),
            "reaction_counts": self.reaction_counts,
            "reaction_scores": self.reaction_scores,
            "thread_participants": _list(self.thread_participants),
            "parent_id": self.parent_id,
            "quoted_message_id": self.quoted_message_id,
            "reply_count": self.reply_count,
            "deleted_reply_count": self.deleted_reply_count,
            "pinned": self.pinned,
            "pinned_at": self.pinned_at,
            "pinned_by": self.pinned_by.to_json() if self.pinned_by else None,
            "pin_expires": self.pin_expires,
            "silent": self.silent,
            "shadowed": self.shadowed,
            "show_in_channel": self.show_in_channel,
            "command": self.command,
            "i18n": self.i18n,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "deleted_at": self.deleted_at,
        }
        return _with_extra(payload, self.extra_data)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> MessageRecord:
        def _users(items: list[dict[str, Any]] | None) -> list[UserRecord] | None:
            return [UserRecord.from_json(u) for u in items] if items is not None else None

        def _reactions(items: list[dict[str, Any]] | None) -> list[ReactionRecord] | None:
            return [ReactionRecord.from_json(r) for r in items] if items is not None else None

        user = data.get("user")
        pinned_by = data.get("pinned_by")
        attachments = data.get("attachments")
        return cls(
            id=data["id"],
            cid=data.get("cid"),
            text=data.get("text"),
            html=data.get("html"),
            type=data.get("type"),
            user=UserRecord.from_json(user) if user else None,
            user_id=data.get("user_id"),
            attachments=(
                [AttachmentRecord.from_json(a) for a in attachments]
                if attachments is not None
                else None
            ),
            mentioned_users=_users(data.get("mentioned_users")),
            mentioned_users_ids=data.get("mentioned_users_ids"),
            latest_reactions=_reactions(data.get("latest_reactions")),
            own_reactions=_reactions(data.get("own_reactions")),
            reaction_counts=data.get("reaction_counts"),
            reaction_scores=data.get("reaction_scores"),
            thread_participants=_users(data.get("thread_participants")),
            parent_id=data.get("parent_id"),
            quoted_message_id=data.get("quoted_message_id"),
            reply_count=data.get("reply_count"),
            deleted_reply_count=data.get("deleted_reply_count"),
            pinned=data.get("pinned"),
            pinned_at=data.get("pinned_at"),
            pinned_by=UserRecord.from_json(pinned_by) if pinned_by else None,
            pin_expires=data.get("pin_expires"),
            silent=data.get("silent"),
            shadowed=data.get("shadowed"),
            show_in_channel=data.get("show_in_channel"),
            command=data.get("command"),
            i18n=data.get("i18n"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            deleted_at=data.get("deleted_at"),
            extra_data=_split_extra(data, cls.KNOWN_FIELDS),
        )
