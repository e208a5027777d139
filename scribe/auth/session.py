"""
Session resolver - turn the raw credential carried by a request into an
`Identity`.

A missing token, a token that fails verification, and a token whose user
no longer exists all come out as anonymous. The last two also ask the
caller to clear the credential, so downstream code only ever sees the
anonymous and authenticated states.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from scribe.auth.context import Identity
from scribe.auth.jwt import TokenService
from scribe.core.models import User

logger = logging.getLogger(__name__)


class UserLookup(Protocol):
    async def get_user(self, user_id: str) -> User | None: ...


@dataclass(frozen=True)
class Session:
    """Result of resolving a credential."""

    identity: Identity
    clear_credential: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.identity.is_authenticated


async def resolve_session(
    raw_credential: str | None,
    tokens: TokenService,
    users: UserLookup,
) -> Session:
    """Resolve a raw token to an identity, falling back to anonymous."""
    if not raw_credential:
        return Session(Identity.anonymous())

    user_id = tokens.verify(raw_credential)
    if user_id is None:
        logger.debug("Session token failed verification; treating as anonymous")
        return Session(Identity.anonymous(), clear_credential=True)

    user = await users.get_user(user_id)
    if user is None:
        logger.debug("Session token names unknown user %s; treating as anonymous", user_id)
        return Session(Identity.anonymous(), clear_credential=True)

    return Session(Identity.of(user))
