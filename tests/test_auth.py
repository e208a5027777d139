"""
Tests for credentials, tokens, the authorization guard, the session
resolver and accounts.
"""

from datetime import timedelta

import jwt
import pytest

from scribe.auth import (
    Capability,
    DenyReason,
    Identity,
    TokenService,
    authorize,
    enforce,
    hash_password,
    resolve_session,
    verify_password,
)
from scribe.core.errors import (
    AuthenticationRequired,
    ForbiddenError,
    InvalidCredentials,
    ValidationError,
)
from scribe.core.models import Post, User
from scribe.core.utils import utc_now


def make_user(user_id="user_1", is_admin=False):
    return User(
        id=user_id,
        username=user_id,
        email=f"{user_id}@example.com",
        password_hash="x:y",
        is_admin=is_admin,
    )


# =============================================================================
# Credential Store
# =============================================================================


class TestPasswords:
    def test_hash_is_not_the_password(self):
        hashed = hash_password("hunter22")
        assert hashed != "hunter22"
        assert "hunter22" not in hashed

    def test_verify(self):
        hashed = hash_password("hunter22")
        assert verify_password("hunter22", hashed)
        assert not verify_password("hunter23", hashed)

    def test_salted(self):
        assert hash_password("same") != hash_password("same")

    def test_malformed_hash_never_matches(self):
        assert not verify_password("anything", "not-a-hash")


# =============================================================================
# Token Service
# =============================================================================


class TestTokenService:
    def test_issue_then_verify(self, tokens):
        token = tokens.issue("user_abc")
        assert tokens.verify(token) == "user_abc"

    def test_expires_after_seven_days(self, tokens):
        payload = tokens.decode(tokens.issue("user_abc"))
        assert payload.exp - payload.iat == timedelta(days=7)

    def test_expired_token_is_invalid(self, tokens):
        token = tokens.issue("user_abc", now=utc_now() - timedelta(days=8))
        assert tokens.verify(token) is None

    def test_wrong_secret_is_invalid(self, tokens):
        other = TokenService("another-secret")
        assert tokens.verify(other.issue("user_abc")) is None

    def test_garbage_is_invalid(self, tokens):
        assert tokens.verify("not.a.token") is None
        assert tokens.verify("") is None

    def test_payload_without_subject_is_invalid(self, tokens):
        now = utc_now()
        token = jwt.encode(
            {"iat": now, "exp": now + timedelta(days=1)},
            "test-secret",
            algorithm="HS256",
        )
        assert tokens.verify(token) is None

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenService("")


# =============================================================================
# Authorization Guard
# =============================================================================


class TestAuthorize:
    def test_authenticated(self):
        assert authorize(Capability.AUTHENTICATED, Identity.of(make_user()))
        decision = authorize(Capability.AUTHENTICATED, Identity.anonymous())
        assert not decision
        assert decision.reason == DenyReason.UNAUTHENTICATED

    def test_admin(self):
        assert authorize("admin", Identity.of(make_user(is_admin=True)))

        decision = authorize("admin", Identity.of(make_user()))
        assert decision.reason == DenyReason.FORBIDDEN

        decision = authorize("admin", Identity.anonymous())
        assert decision.reason == DenyReason.UNAUTHENTICATED

    def test_owner(self):
        post = Post(title="t", content="c" * 20, excerpt="e", author="user_1")
        assert authorize(Capability.OWNER, Identity.of(make_user("user_1")), post)

        decision = authorize(Capability.OWNER, Identity.of(make_user("user_2")), post)
        assert decision.reason == DenyReason.FORBIDDEN

        decision = authorize(Capability.OWNER, Identity.anonymous(), post)
        assert decision.reason == DenyReason.UNAUTHENTICATED

    def test_owner_accepts_documents_and_ids(self):
        identity = Identity.of(make_user("user_1"))
        assert authorize(Capability.OWNER, identity, {"author": "user_1"})
        assert authorize(Capability.OWNER, identity, "user_1")
        assert not authorize(Capability.OWNER, identity, None)

    def test_enforce_keeps_the_two_denials_apart(self):
        with pytest.raises(AuthenticationRequired):
            enforce(Capability.OWNER, Identity.anonymous(), "user_1")
        with pytest.raises(ForbiddenError):
            enforce(Capability.OWNER, Identity.of(make_user("user_2")), "user_1")
        with pytest.raises(ForbiddenError):
            enforce(Capability.ADMIN, Identity.of(make_user()))


# =============================================================================
# Session Resolver
# =============================================================================


class TestResolveSession:
    @pytest.mark.asyncio
    async def test_no_token_is_anonymous(self, tokens, accounts):
        session = await resolve_session(None, tokens, accounts)
        assert session.identity.is_anonymous
        assert not session.clear_credential

    @pytest.mark.asyncio
    async def test_valid_token(self, tokens, accounts, alice):
        session = await resolve_session(tokens.issue(alice.id), tokens, accounts)
        assert session.is_authenticated
        assert session.identity.user_id == alice.id
        assert not session.clear_credential

    @pytest.mark.asyncio
    async def test_bad_token_falls_back_and_clears(self, tokens, accounts):
        session = await resolve_session("garbage", tokens, accounts)
        assert session.identity.is_anonymous
        assert session.clear_credential

    @pytest.mark.asyncio
    async def test_unknown_user_falls_back_and_clears(self, tokens, accounts):
        session = await resolve_session(tokens.issue("user_missing"), tokens, accounts)
        assert session.identity.is_anonymous
        assert session.clear_credential


# =============================================================================
# Accounts
# =============================================================================


class TestAccounts:
    @pytest.mark.asyncio
    async def test_register_and_login(self, accounts, storage):
        result = await accounts.register("carol", "Carol@Example.com ", "pass123", "pass123")

        stored = await storage.metadata.get("users", result.user.id)
        assert stored["password_hash"] != "pass123"
        assert stored["email"] == "carol@example.com"
        assert accounts.tokens.verify(result.token) == result.user.id

        login = await accounts.login("carol@example.com", "pass123")
        assert login.user.id == result.user.id

    @pytest.mark.asyncio
    async def test_duplicate_email(self, accounts, alice):
        with pytest.raises(ValidationError, match="already exists"):
            await accounts.register("alice2", "alice@example.com", "secret1", "secret1")

    @pytest.mark.asyncio
    async def test_duplicate_username(self, accounts, alice):
        with pytest.raises(ValidationError, match="already exists"):
            await accounts.register("alice", "other@example.com", "secret1", "secret1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "username,email,password,confirm,message",
        [
            ("", "x@example.com", "secret1", "secret1", "required"),
            ("x", "x@example.com", "secret1", "secret2", "do not match"),
            ("x", "x@example.com", "abc", "abc", "at least 6"),
            ("x", "not-an-email", "secret1", "secret1", "valid email"),
        ],
    )
    async def test_register_validation(self, accounts, username, email, password, confirm, message):
        with pytest.raises(ValidationError, match=message):
            await accounts.register(username, email, password, confirm)

    @pytest.mark.asyncio
    async def test_login_failures_look_the_same(self, accounts, alice):
        with pytest.raises(InvalidCredentials) as wrong_password:
            await accounts.login("alice@example.com", "nope")
        with pytest.raises(InvalidCredentials) as unknown_email:
            await accounts.login("nobody@example.com", "secret1")
        assert wrong_password.value.message == unknown_email.value.message

    @pytest.mark.asyncio
    async def test_login_requires_both_fields(self, accounts):
        with pytest.raises(ValidationError):
            await accounts.login("", "")

    @pytest.mark.asyncio
    async def test_profiles_for_missing_users(self, accounts, alice):
        profiles = await accounts.get_profiles([alice.id, "user_gone"])
        assert profiles[alice.id].username == "alice"
        assert profiles["user_gone"].username == "[deleted]"
