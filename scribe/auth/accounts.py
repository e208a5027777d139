"""
Accounts - registration, login, and user lookup.

Users live in the `users` collection with a uniqueness constraint over
username and email. Passwords never leave this module unhashed.
"""

from __future__ import annotations

import logging
from typing import Iterable

from pydantic import BaseModel, EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from scribe.auth.jwt import TokenService
from scribe.auth.passwords import hash_password, verify_password
from scribe.config import Settings
from scribe.core.errors import DuplicateKeyError, InvalidCredentials, ValidationError
from scribe.core.models import PublicProfile, User
from scribe.storage.base import Collections, StorageProvider

logger = logging.getLogger(__name__)

_email = TypeAdapter(EmailStr)


class AuthResult(BaseModel):
    """A user together with a freshly issued session token."""
    user: User
    token: str


class AccountService:
    """User accounts backed by the metadata store."""

    def __init__(self, storage: StorageProvider, tokens: TokenService, settings: Settings):
        self.storage = storage
        self.tokens = tokens
        self.settings = settings

    # =========================================================================
    # Registration / Login
    # =========================================================================

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        confirm_password: str,
    ) -> AuthResult:
        """
        Create an account and issue its first token.

        Raises:
            ValidationError: missing fields, mismatched or short password,
                malformed email, or username/email already taken
        """
        username = (username or "").strip()
        email = (email or "").strip().lower()

        if not username or not email or not password:
            raise ValidationError("All fields are required")
        if password != confirm_password:
            raise ValidationError("Passwords do not match")
        if len(password) < self.settings.password_min_length:
            raise ValidationError(
                f"Password must be at least {self.settings.password_min_length} characters long"
            )
        try:
            email = _email.validate_python(email)
        except PydanticValidationError:
            raise ValidationError("Please enter a valid email address")

        existing = await self.storage.metadata.find_one(
            Collections.USERS,
            [{"email": email}, {"username": username}],
        )
        if existing:
            raise ValidationError("Username or email already exists")

        user = User(username=username, email=email, password_hash=hash_password(password))
        try:
            await self.storage.metadata.insert(
                Collections.USERS,
                user.id,
                user.model_dump(),
                unique=("username", "email"),
            )
        except DuplicateKeyError:
            # Lost a race with a concurrent registration
            raise ValidationError("Username or email already exists")

        logger.info("Registered user %s (%s)", user.id, user.username)
        return AuthResult(user=user, token=self.tokens.issue(user.id))

    async def login(self, email: str, password: str) -> AuthResult:
        """
        Authenticate by email and password.

        Raises:
            ValidationError: either field missing
            InvalidCredentials: unknown email or wrong password
        """
        email = (email or "").strip().lower()
        if not email or not password:
            raise ValidationError("Email and password are required")

        doc = await self.storage.metadata.find_one(Collections.USERS, [{"email": email}])
        if doc is None or not verify_password(password, doc["password_hash"]):
            logger.info("Failed login for %s", email)
            raise InvalidCredentials()

        user = User.model_validate(doc)
        logger.info("User %s logged in", user.id)
        return AuthResult(user=user, token=self.tokens.issue(user.id))

    # =========================================================================
    # Lookup
    # =========================================================================

    async def get_user(self, user_id: str) -> User | None:
        doc = await self.storage.metadata.get(Collections.USERS, user_id)
        return User.model_validate(doc) if doc else None

    async def get_profiles(self, user_ids: Iterable[str]) -> dict[str, PublicProfile]:
        """Resolve user ids to public profiles; unknown ids get a placeholder."""
        profiles: dict[str, PublicProfile] = {}
        for user_id in dict.fromkeys(user_ids):
            user = await self.get_user(user_id)
            profiles[user_id] = PublicProfile.of(user) if user else PublicProfile.deleted(user_id)
        return profiles

    async def list_users(self, limit: int = 100, offset: int = 0) -> list[User]:
        docs = await self.storage.metadata.query(
            Collections.USERS,
            sort=[("created_at", False)],
            limit=limit,
            offset=offset,
        )
        return [User.model_validate(doc) for doc in docs]
