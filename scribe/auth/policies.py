"""
Policies - the authorization guard and its FastAPI wiring.

Two layers:
- `authorize()` is a pure decision: capability + identity (+ resource)
  in, allow or deny(reason) out. Services call `enforce()` on top of it.
- `optional_auth`, `require_auth` and `require_admin` are FastAPI
  dependencies that resolve the session cookie into an `Identity`.
  Route handlers receive the identity as a parameter and pass it on.

Usage:
    @router.post("/blog")
    async def create(identity: Identity = Depends(require_auth)):
        ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import Depends, Request

from scribe.auth.capabilities import Capability, DenyReason
from scribe.auth.context import Identity
from scribe.auth.session import Session, resolve_session
from scribe.core.errors import AuthenticationRequired, ForbiddenError
from scribe.integrations.sentry import set_user


# =============================================================================
# Decision
# =============================================================================


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: DenyReason | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def _author_of(resource: Any) -> str | None:
    if resource is None:
        return None
    if isinstance(resource, str):
        return resource
    author = getattr(resource, "author", None)
    if author is None and isinstance(resource, dict):
        author = resource.get("author")
    return str(author) if author is not None else None


def authorize(
    capability: Capability | str,
    identity: Identity,
    resource: Any = None,
) -> Decision:
    """
    Decide whether `identity` satisfies `capability`.

    `resource` is only consulted for OWNER; it may be a post, a stored
    post document, or a bare author id.
    """
    capability = Capability(capability)

    if identity.is_anonymous:
        return Decision(False, DenyReason.UNAUTHENTICATED)

    if capability == Capability.AUTHENTICATED:
        return ALLOW

    if capability == Capability.ADMIN:
        return ALLOW if identity.is_admin else Decision(False, DenyReason.FORBIDDEN)

    if capability == Capability.OWNER:
        author_id = _author_of(resource)
        if author_id is not None and identity.owns(author_id):
            return ALLOW
        return Decision(False, DenyReason.FORBIDDEN)

    return Decision(False, DenyReason.FORBIDDEN)


def enforce(capability: Capability | str, identity: Identity, resource: Any = None) -> None:
    """
    Raise if `identity` does not satisfy `capability`.

    Raises:
        AuthenticationRequired: caller is anonymous
        ForbiddenError: caller is authenticated but not allowed
    """
    decision = authorize(capability, identity, resource)
    if decision:
        return
    if decision.reason == DenyReason.UNAUTHENTICATED:
        raise AuthenticationRequired()
    if capability == Capability.ADMIN:
        raise ForbiddenError("Access denied. Admin privileges required.")
    raise ForbiddenError()


# =============================================================================
# FastAPI Dependencies
# =============================================================================


async def get_session(request: Request) -> Session:
    """
    Resolve the session cookie for this request.

    Collaborators come from app state (set up in the lifespan). If the
    credential was rejected, the response middleware clears the cookie.
    """
    state = request.app.state
    raw = request.cookies.get(state.settings.session_cookie_name)
    session = await resolve_session(raw, state.tokens, state.accounts)
    if session.clear_credential:
        request.state.clear_session = True
    elif session.is_authenticated:
        set_user(session.identity.user_id, session.identity.user.username)
    return session


async def optional_auth(session: Session = Depends(get_session)) -> Identity:
    """Identity for routes that also serve anonymous visitors."""
    return session.identity


async def require_auth(session: Session = Depends(get_session)) -> Identity:
    """Identity for routes that need a logged-in user; short-circuits otherwise."""
    enforce(Capability.AUTHENTICATED, session.identity)
    return session.identity


async def require_admin(session: Session = Depends(get_session)) -> Identity:
    """Identity for admin-only routes."""
    enforce(Capability.ADMIN, session.identity)
    return session.identity
