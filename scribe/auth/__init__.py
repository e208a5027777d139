"""
Authentication and authorization.

Design principles:
1. One signed token in an httponly cookie is the whole session
2. The session resolves to an explicit `Identity`, passed as a parameter
3. Three capabilities: authenticated, admin, owner
4. Deny distinguishes "log in first" from "not allowed"
"""

from scribe.auth.context import Identity
from scribe.auth.capabilities import Capability, DenyReason
from scribe.auth.policies import (
    Decision,
    authorize,
    enforce,
    optional_auth,
    require_auth,
    require_admin,
)
from scribe.auth.session import Session, resolve_session
from scribe.auth.jwt import (
    TokenService,
    TokenError,
    TokenExpiredError,
    TokenInvalidError,
)
from scribe.auth.passwords import hash_password, verify_password
from scribe.auth.accounts import AccountService, AuthResult
from scribe.auth.routes import router as auth_router

__all__ = [
    # Main interface
    "authorize",
    "enforce",
    "optional_auth",
    "require_auth",
    "require_admin",
    "resolve_session",
    "Identity",
    "Session",
    # Types
    "Capability",
    "DenyReason",
    "Decision",
    # Tokens / credentials
    "TokenService",
    "TokenError",
    "TokenExpiredError",
    "TokenInvalidError",
    "hash_password",
    "verify_password",
    # Accounts
    "AccountService",
    "AuthResult",
    # Router
    "auth_router",
]
