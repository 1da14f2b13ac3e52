"""
Bidirectional mapping between wire records and domain entities.

Every function here is pure: no I/O, no mutation of its inputs. Decoding
fills fields the server omitted with their zero value; encoding writes the
wire-null representation for absent optionals. Nested users, attachments,
reactions and members are mapped by the corresponding per-type function,
keeping list order.

Local sync state never crosses the wire. Decoded entities are COMPLETED
unless the caller passes another status.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from ..protocol import Attachment, Channel, Member, Message, Reaction, SyncStatus, User
from .context import UserContext
from .records import (
    AttachmentRecord,
    ChannelRecord,
    MemberRecord,
    MessageRecord,
    ReactionRecord,
    UserRecord,
)


def _ts_to_wire(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _ts_to_domain(value: str | None) -> datetime | None:
    if not value:
        return None
    # Servers commonly emit a trailing "Z" for UTC
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _or(value: Any, default: Any) -> Any:
    return default if value is None else value


# =============================================================================
# Users
# =============================================================================


def user_to_wire(user: User) -> UserRecord:
    return UserRecord(
        id=user.id,
        name=user.name,
        image=user.image,
        role=user.role,
        online=user.online,
        banned=user.banned,
        created_at=_ts_to_wire(user.created_at),
        updated_at=_ts_to_wire(user.updated_at),
        last_active=_ts_to_wire(user.last_active),
        extra_data=dict(user.extra_data),
    )


def user_to_domain(record: UserRecord) -> User:
    return User(
        id=record.id,
        name=record.name,
        image=record.image,
        role=_or(record.role, "user"),
        online=bool(record.online),
        banned=bool(record.banned),
        created_at=_ts_to_domain(record.created_at),
        updated_at=_ts_to_domain(record.updated_at),
        last_active=_ts_to_domain(record.last_active),
        extra_data=dict(record.extra_data),
    )


def _user_or_reference(
    record: UserRecord | None,
    user_id: str | None,
    user_context: UserContext,
) -> User | None:
    """Decode an embedded user, falling back to resolving a bare id."""
    if record is not None:
        return user_to_domain(record)
    if user_id:
        return user_context.resolve(user_id)
    return None


# =============================================================================
# Attachments and Reactions
# =============================================================================


def attachment_to_wire(attachment: Attachment) -> AttachmentRecord:
    return AttachmentRecord(
        type=attachment.type,
        title=attachment.title,
        text=attachment.text,
        asset_url=attachment.asset_url,
        image_url=attachment.image_url,
        thumb_url=attachment.thumb_url,
        mime_type=attachment.mime_type,
        file_size=attachment.file_size,
        extra_data=dict(attachment.extra_data),
    )


def attachment_to_domain(record: AttachmentRecord) -> Attachment:
    return Attachment(
        type=record.type,
        title=record.title,
        text=record.text,
        asset_url=record.asset_url,
        image_url=record.image_url,
        thumb_url=record.thumb_url,
        mime_type=record.mime_type,
        file_size=_or(record.file_size, 0),
        extra_data=dict(record.extra_data),
    )


def reaction_to_wire(reaction: Reaction) -> ReactionRecord:
    return ReactionRecord(
        message_id=reaction.message_id,
        type=reaction.type,
        score=reaction.score,
        user=user_to_wire(reaction.user) if reaction.user else None,
        user_id=reaction.user_id or None,
        created_at=_ts_to_wire(reaction.created_at),
        updated_at=_ts_to_wire(reaction.updated_at),
        extra_data=dict(reaction.extra_data),
    )


def reaction_to_domain(record: ReactionRecord, user_context: UserContext | None = None) -> Reaction:
    user_context = user_context or UserContext()
    # Only substitute users the context actually knows; a reaction may
    # legitimately reference a user this client has never seen.
    user = user_to_domain(record.user) if record.user else user_context.get(record.user_id)
    return Reaction(
        message_id=record.message_id,
        type=record.type,
        score=_or(record.score, 1),
        user=user,
        user_id=record.user_id or (user.id if user else ""),
        created_at=_ts_to_domain(record.created_at),
        updated_at=_ts_to_domain(record.updated_at),
        extra_data=dict(record.extra_data),
    )


# =============================================================================
# Channels
# =============================================================================


def member_to_wire(member: Member) -> MemberRecord:
    return MemberRecord(
        user=user_to_wire(member.user),
        user_id=member.user.id,
        channel_role=member.role,
        created_at=_ts_to_wire(member.created_at),
        updated_at=_ts_to_wire(member.updated_at),
        banned=member.banned,
        extra_data=dict(member.extra_data),
    )


def member_to_domain(record: MemberRecord, user_context: UserContext | None = None) -> Member:
    user_context = user_context or UserContext()
    user = _user_or_reference(record.user, record.user_id, user_context)
    return Member(
        user=user or User(id=""),
        role=_or(record.channel_role, "member"),
        created_at=_ts_to_domain(record.created_at),
        updated_at=_ts_to_domain(record.updated_at),
        banned=bool(record.banned),
        extra_data=dict(record.extra_data),
    )


def channel_to_wire(channel: Channel) -> ChannelRecord:
    return ChannelRecord(
        id=channel.id,
        type=channel.type,
        cid=channel.cid,
        created_by=user_to_wire(channel.created_by) if channel.created_by else None,
        created_by_id=channel.created_by.id if channel.created_by else None,
        created_at=_ts_to_wire(channel.created_at),
        updated_at=_ts_to_wire(channel.updated_at),
        deleted_at=_ts_to_wire(channel.deleted_at),
        last_message_at=_ts_to_wire(channel.last_message_at),
        member_count=channel.member_count,
        members=[member_to_wire(m) for m in channel.members],
        frozen=channel.frozen,
        hidden=channel.hidden,
        extra_data=dict(channel.extra_data),
    )


def channel_to_domain(
    record: ChannelRecord,
    user_context: UserContext | None = None,
    sync_status: SyncStatus = SyncStatus.COMPLETED,
) -> Channel:
    user_context = user_context or UserContext()
    return Channel(
        type=record.type,
        id=record.id,
        created_by=_user_or_reference(record.created_by, record.created_by_id, user_context),
        created_at=_ts_to_domain(record.created_at),
        updated_at=_ts_to_domain(record.updated_at),
        deleted_at=_ts_to_domain(record.deleted_at),
        last_message_at=_ts_to_domain(record.last_message_at),
        member_count=_or(record.member_count, 0),
        members=[member_to_domain(m, user_context) for m in record.members or []],
        frozen=bool(record.frozen),
        hidden=bool(record.hidden),
        extra_data=dict(record.extra_data),
        sync_status=sync_status,
    )


# =============================================================================
# Messages
# =============================================================================


def message_to_wire(message: Message) -> MessageRecord:
    return MessageRecord(
        id=message.id,
        cid=message.cid,
        text=message.text,
        html=message.html,
        type=message.type,
        user=user_to_wire(message.user) if message.user else None,
        user_id=message.user.id if message.user else None,
        attachments=[attachment_to_wire(a) for a in message.attachments],
        mentioned_users=[user_to_wire(u) for u in message.mentioned_users],
        mentioned_users_ids=message.mentioned_users_ids,
        latest_reactions=[reaction_to_wire(r) for r in message.latest_reactions],
        own_reactions=[reaction_to_wire(r) for r in message.own_reactions],
        reaction_counts=dict(message.reaction_counts),
        reaction_scores=dict(message.reaction_scores),
        thread_participants=[user_to_wire(u) for u in message.thread_participants],
        parent_id=message.parent_id,
        quoted_message_id=message.reply_message_id,
        reply_count=message.reply_count,
        deleted_reply_count=message.deleted_reply_count,
        pinned=message.pinned,
        pinned_at=_ts_to_wire(message.pinned_at),
        pinned_by=user_to_wire(message.pinned_by) if message.pinned_by else None,
        pin_expires=_ts_to_wire(message.pin_expires),
        silent=message.silent,
        shadowed=message.shadowed,
        show_in_channel=message.show_in_channel,
        command=message.command,
        i18n=dict(message.i18n),
        created_at=_ts_to_wire(message.created_at),
        updated_at=_ts_to_wire(message.updated_at),
        deleted_at=_ts_to_wire(message.deleted_at),
        extra_data=dict(message.extra_data),
    )


def message_to_domain(
    record: MessageRecord,
    user_context: UserContext | None = None,
    sync_status: SyncStatus = SyncStatus.COMPLETED,
) -> Message:
    user_context = user_context or UserContext()

    if record.mentioned_users is not None:
        mentioned = [user_to_domain(u) for u in record.mentioned_users]
    else:
        mentioned = [user_context.resolve(uid) for uid in record.mentioned_users_ids or []]

    return Message(
        id=record.id,
        cid=_or(record.cid, ""),
        text=_or(record.text, ""),
        html=_or(record.html, ""),
        type=_or(record.type, "regular"),
        user=_user_or_reference(record.user, record.user_id, user_context),
        attachments=[attachment_to_domain(a) for a in record.attachments or []],
        mentioned_users=mentioned,
        latest_reactions=[
            reaction_to_domain(r, user_context) for r in record.latest_reactions or []
        ],
        own_reactions=[reaction_to_domain(r, user_context) for r in record.own_reactions or []],
        reaction_counts=dict(record.reaction_counts or {}),
        reaction_scores=dict(record.reaction_scores or {}),
        thread_participants=[user_to_domain(u) for u in record.thread_participants or []],
        parent_id=record.parent_id,
        reply_message_id=record.quoted_message_id,
        reply_count=_or(record.reply_count, 0),
        deleted_reply_count=_or(record.deleted_reply_count, 0),
        pinned=bool(record.pinned),
        pinned_at=_ts_to_domain(record.pinned_at),
        pinned_by=user_to_domain(record.pinned_by) if record.pinned_by else None,
        pin_expires=_ts_to_domain(record.pin_expires),
        silent=bool(record.silent),
        shadowed=bool(record.shadowed),
        show_in_channel=bool(record.show_in_channel),
        command=record.command,
        i18n=dict(record.i18n or {}),
        created_at=_ts_to_domain(record.created_at),
        updated_at=_ts_to_domain(record.updated_at),
        deleted_at=_ts_to_domain(record.deleted_at),
        extra_data=dict(record.extra_data),
        sync_status=sync_status,
    )


# =============================================================================
# Dispatch
# =============================================================================


def to_wire(entity: Channel | Message) -> ChannelRecord | MessageRecord:
    """Encode a syncable entity into its wire record."""
    if isinstance(entity, Channel):
        return channel_to_wire(entity)
    if isinstance(entity, Message):
        return message_to_wire(entity)
    raise TypeError(f"No wire mapping for {type(entity).__name__}")


def to_domain(
    record: ChannelRecord | MessageRecord,
    user_context: UserContext | None = None,
    sync_status: SyncStatus = SyncStatus.COMPLETED,
) -> Channel | Message:
    """Decode a wire record into its domain entity."""
    if isinstance(record, ChannelRecord):
        return channel_to_domain(record, user_context, sync_status)
    if isinstance(record, MessageRecord):
        return message_to_domain(record, user_context, sync_status)
    raise TypeError(f"No domain mapping for {type(record).__name__}")
