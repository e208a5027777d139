"""
Shared fixtures.
"""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from scribe.api.app import create_app
from scribe.auth import AccountService, Identity, TokenService
from scribe.config import Settings
from scribe.services.posts import PostService
from scribe.storage import create_local_storage


# =============================================================================
# Infrastructure
# =============================================================================


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        environment="test",
        debug=False,
        jwt_secret_key="test-secret",
        sentry_dsn="",
    )


@pytest.fixture
def storage():
    """Fresh in-memory storage."""
    return create_local_storage()


@pytest.fixture
def tokens(settings):
    return TokenService.from_settings(settings)


@pytest.fixture
def accounts(storage, tokens, settings):
    return AccountService(storage, tokens, settings)


@pytest.fixture
def posts(storage, accounts, settings):
    return PostService(storage, accounts, settings)


# =============================================================================
# Users
# =============================================================================


@pytest_asyncio.fixture
async def alice(accounts):
    result = await accounts.register("alice", "alice@example.com", "secret1", "secret1")
    return result.user


@pytest_asyncio.fixture
async def bob(accounts):
    result = await accounts.register("bob", "bob@example.com", "secret2", "secret2")
    return result.user


@pytest.fixture
def as_alice(alice):
    return Identity.of(alice)


@pytest.fixture
def as_bob(bob):
    return Identity.of(bob)


@pytest.fixture
def anonymous():
    return Identity.anonymous()


# =============================================================================
# HTTP
# =============================================================================


@pytest.fixture
def client(settings, storage):
    """Test client with the lifespan running against the shared storage."""
    with TestClient(create_app(settings, storage)) as c:
        yield c
