"""
Error taxonomy for the scribe core.

Every failure an operation can report is one of these types. The HTTP
layer maps them onto responses through `status_code`; anything else that
escapes a request is treated as an uncategorized fault.
"""

from __future__ import annotations


class ScribeError(Exception):
    """Base exception for all categorized core failures."""

    status_code: int = 500
    default_message: str = "Something went wrong!"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ScribeError):
    """User input is malformed, missing, too short, or collides with a unique field."""

    status_code = 400
    default_message = "Invalid input"


class InvalidCredentials(ScribeError):
    """Login failed. Deliberately silent about which half was wrong."""

    status_code = 401
    default_message = "Invalid email or password"


class AuthenticationRequired(ScribeError):
    """The operation needs a logged-in user; callers should prompt for login."""

    status_code = 401
    default_message = "Authentication required"

    def __init__(self, message: str | None = None, login_url: str = "/auth/login"):
        super().__init__(message)
        self.login_url = login_url


class ForbiddenError(ScribeError):
    """Authenticated, but lacking ownership or admin capability."""

    status_code = 403
    default_message = "Access denied"


class NotFound(ScribeError):
    """Id does not resolve to a live, visible record."""

    status_code = 404
    default_message = "Post not found"


class TransientStoreError(ScribeError):
    """Persistence layer unavailable. Not retried by the core."""

    status_code = 503
    default_message = "Storage temporarily unavailable"


class DuplicateKeyError(ScribeError):
    """Raised by storage adapters when a unique field collides."""

    status_code = 400
    default_message = "Duplicate key"

    def __init__(self, fields: list[str] | None = None, message: str | None = None):
        super().__init__(message)
        self.fields = fields or []
