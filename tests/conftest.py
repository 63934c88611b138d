"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

from mfa_bridge.config import Settings
from mfa_bridge.errors import ExchangeFailed, SessionInvalid
from mfa_bridge.main import create_app
from mfa_bridge.models.user import User
from mfa_bridge.services.credential_service import CredentialGate, InMemoryIdentityStore
from mfa_bridge.services.descope_service import ProviderIdentity
from mfa_bridge.services.token_service import SessionClaims, TokenCodec

TEST_SECRET = "test-jwt-secret-that-is-long-enough-for-hs256"


class FakeMFAProvider:
    """In-memory MFA provider double that records every call.

    ``validcode123`` exchanges once; any other code, or a second exchange of
    the same code, fails like the real provider would.
    """

    def __init__(self, identity=None, valid_codes=("validcode123",)):
        self.identity = identity or ProviderIdentity(subject_id="descope-user-123", contact="demo@example.com")
        self.valid_codes = set(valid_codes)
        self.used_codes = set()
        self.calls = {"start": 0, "exchange": 0, "validate": 0}
        self.start_args = []
        self.start_error = None
        self.validate_error = None

    async def start(self, return_url: str, login_hint: str) -> str:
        self.calls["start"] += 1
        self.start_args.append((return_url, login_hint))
        if self.start_error:
            raise self.start_error
        return f"https://auth.example.test/oauth/authorize?client=test&login_hint={quote(login_hint)}"

    async def exchange(self, code: str) -> str:
        self.calls["exchange"] += 1
        if code not in self.valid_codes or code in self.used_codes:
            raise ExchangeFailed("Token exchange failed: invalid or used code")
        self.used_codes.add(code)
        return f"provider-session-{code}"

    async def validate(self, provider_session_token: str) -> ProviderIdentity:
        self.calls["validate"] += 1
        if self.validate_error:
            raise self.validate_error
        if not provider_session_token.startswith("provider-session-"):
            raise SessionInvalid()
        return self.identity


@pytest.fixture
def settings():
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        JWT_SECRET=TEST_SECRET,
        DESCOPE_PROJECT_ID="P2testproject",
        DESCOPE_MANAGEMENT_KEY="K2testkey",
        DESCOPE_REDIRECT_URL="http://testserver/auth/callback",
        FRONTEND_URL="http://localhost:3000",
    )


@pytest.fixture
def demo_user():
    return User(id="1", username="demo", email="demo@example.com", password="password")


@pytest.fixture
def identity_store(demo_user):
    return InMemoryIdentityStore([demo_user])


@pytest.fixture
def gate(identity_store):
    return CredentialGate(identity_store)


@pytest.fixture
def codec():
    return TokenCodec(TEST_SECRET)


@pytest.fixture
def fake_provider():
    return FakeMFAProvider()


@pytest.fixture
def app(settings, identity_store, fake_provider):
    return create_app(settings, identity_store=identity_store, mfa_provider=fake_provider)


@pytest.fixture
def client(app):
    """Test client for the app wired to the fake provider."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def logged_in_client(client):
    """Client that passed the password step and holds the login transaction cookie."""
    response = client.post("/auth/login", json={"identity": "demo", "secret": "password"})
    assert response.status_code == 200
    return client


@pytest.fixture
def session_token(codec):
    """A valid session token for the provider-reported demo identity."""
    return codec.issue(SessionClaims(subject="descope-user-123", contact="demo@example.com"))


@pytest.fixture
def expired_token():
    """A correctly signed token that expired an hour ago."""
    two_hours_ago = datetime.now(timezone.utc) - timedelta(hours=2)
    past_codec = TokenCodec(TEST_SECRET, clock=lambda: two_hours_ago)
    return past_codec.issue(SessionClaims(subject="descope-user-123", contact="demo@example.com"))


@pytest.fixture
def auth_headers(session_token):
    """Authentication headers for API requests."""
    return {"Authorization": f"Bearer {session_token}"}
