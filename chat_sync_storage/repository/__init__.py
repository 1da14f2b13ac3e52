"""
Entity repositories.

Read-through / write-through access to channels and messages over a
bounded in-memory cache and a durable store.
"""

from .base import EntityRepository
from .channels import ChannelRepository
from .messages import MessageRepository

__all__ = [
    "EntityRepository",
    "ChannelRepository",
    "MessageRepository",
]
