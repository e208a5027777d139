# =============================================================================
# JWT Token Service
# =============================================================================
#
# Issues and validates the signed identity token that travels in the
# session cookie:
#   - one token type, absolute expiry (7 days by default)
#   - no refresh; re-authenticate after expiry
#   - rotating the secret invalidates every outstanding token
#
# =============================================================================

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging

from pydantic import BaseModel
import jwt

from scribe.config import Settings
from scribe.core.utils import generate_id, utc_now

logger = logging.getLogger(__name__)


# =============================================================================
# Models
# =============================================================================

class TokenPayload(BaseModel):
    """JWT token payload."""
    sub: str  # user_id
    exp: datetime
    iat: datetime
    jti: str  # unique token ID


# =============================================================================
# Errors
# =============================================================================

class TokenError(Exception):
    """Base exception for token errors."""
    pass


class TokenExpiredError(TokenError):
    """Token has expired."""
    pass


class TokenInvalidError(TokenError):
    """Token is invalid or malformed."""
    pass


# =============================================================================
# Service
# =============================================================================

class TokenService:
    """
    Signs and verifies identity tokens.

    Built once at startup from settings; the secret is fixed for the life
    of the instance.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_days: int = 7):
        if not secret_key:
            raise ValueError("Token signing secret must not be empty")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._lifetime = timedelta(days=expire_days)

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenService:
        return cls(
            secret_key=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            expire_days=settings.jwt_token_expire_days,
        )

    @property
    def lifetime(self) -> timedelta:
        return self._lifetime

    def issue(self, user_id: str, now: datetime | None = None) -> str:
        """Create a signed token for `user_id`, expiring one lifetime from `now`."""
        now = now or utc_now()
        payload = {
            "sub": user_id,
            "iat": now,
            "exp": now + self._lifetime,
            "jti": generate_id("tok"),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def decode(self, token: str) -> TokenPayload:
        """
        Decode and validate a token.

        Raises:
            TokenExpiredError: Token has expired
            TokenInvalidError: Signature mismatch or malformed payload
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(f"Invalid token: {e}")

        sub = payload.get("sub")
        if not isinstance(sub, str) or not sub:
            raise TokenInvalidError("Invalid token: missing subject")

        return TokenPayload(
            sub=sub,
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            jti=payload.get("jti", ""),
        )

    def verify(self, token: str) -> str | None:
        """Return the user id a token was issued for, or None if it is not valid."""
        try:
            return self.decode(token).sub
        except TokenError as e:
            logger.debug("Token rejected: %s", e)
            return None
