"""
Wire mapping between the remote chat service and the domain model.

Provides:
- Wire record types mirroring the server JSON
- UserContext for resolving bare user ids
- Pure to_wire / to_domain translation functions
"""

from .context import UserContext
from .mappers import (
    attachment_to_domain,
    attachment_to_wire,
    channel_to_domain,
    channel_to_wire,
    member_to_domain,
    member_to_wire,
    message_to_domain,
    message_to_wire,
    reaction_to_domain,
    reaction_to_wire,
    to_domain,
    to_wire,
    user_to_domain,
    user_to_wire,
)
from .records import (
    AttachmentRecord,
    ChannelRecord,
    MemberRecord,
    MessageRecord,
    ReactionRecord,
    UserRecord,
)

__all__ = [
    "UserContext",
    # Records
    "UserRecord",
    "AttachmentRecord",
    "ReactionRecord",
    "MemberRecord",
    "ChannelRecord",
    "MessageRecord",
    # Mapping
    "to_wire",
    "to_domain",
    "user_to_wire",
    "user_to_domain",
    "attachment_to_wire",
    "attachment_to_domain",
    "reaction_to_wire",
    "reaction_to_domain",
    "member_to_wire",
    "member_to_domain",
    "channel_to_wire",
    "channel_to_domain",
    "message_to_wire",
    "message_to_domain",
]
