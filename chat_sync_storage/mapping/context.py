"""
User context for wire decoding.

The remote service often references users by id only. The context holds
the users this client already knows (at minimum the signed-in user) so
those references can be turned into full ``User`` objects without a
round trip.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from ..protocol import User


@dataclass
class UserContext:
    """Resolved user identities available while mapping.

    Attributes:
        current_user: The signed-in user, if known
        users: Known users keyed by id (includes current_user)
    """

    current_user: User | None = None
    users: dict[str, User] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.current_user is not None:
            self.users.setdefault(self.current_user.id, self.current_user)

    @classmethod
    def for_user(cls, current_user: User, others: Iterable[User] = ()) -> UserContext:
        """Build a context seeded with the signed-in user and any extras."""
        users = {u.id: u for u in others}
        return cls(current_user=current_user, users=users)

    def get(self, user_id: str | None) -> User | None:
        """Return the known user for ``user_id`` or None."""
        if not user_id:
            return None
        return self.users.get(user_id)

    def resolve(self, user_id: str) -> User:
        """Return the known user, or a bare ``User`` carrying only the id."""
        return self.users.get(user_id) or User(id=user_id)

    def add(self, user: User) -> None:
        """Remember a user seen in a response."""
        self.users[user.id] = user
