"""
Identity - who is making the request.

This is the lightweight object passed explicitly through the call chain
from the session resolver to the guard and the services. It has exactly
two real states: anonymous and authenticated.
"""

from __future__ import annotations

from dataclasses import dataclass

from scribe.core.models import User


@dataclass(frozen=True)
class Identity:
    """
    The resolved caller of a request.

    Usage in routes:
        async def my_route(identity: Identity = Depends(require_auth)):
            print(f"User {identity.user_id} is here")
    """

    user: User | None = None

    @property
    def is_authenticated(self) -> bool:
        """Is there a logged-in user?"""
        return self.user is not None

    @property
    def is_anonymous(self) -> bool:
        """Is this an anonymous request?"""
        return self.user is None

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.is_admin

    @property
    def user_id(self) -> str | None:
        return self.user.id if self.user else None

    def owns(self, author_id: str) -> bool:
        """Compare on the stable id value, never on object identity."""
        return self.user is not None and str(self.user.id) == str(author_id)

    @classmethod
    def anonymous(cls) -> Identity:
        """Create an anonymous identity (no user)."""
        return cls()

    @classmethod
    def of(cls, user: User) -> Identity:
        return cls(user=user)
