"""Tests for the access guard and authentication middleware."""

import pytest
from starlette.requests import Request

from mfa_bridge.errors import ExpiredTokenError, InvalidTokenError, MissingCredential, Unauthorized
from mfa_bridge.middleware.auth import AccessGuard, AuthMiddleware, get_session_claims


def make_request(authorization=None, path="/protected"):
    headers = []
    if authorization is not None:
        headers.append((b"authorization", authorization.encode()))
    return Request({"type": "http", "method": "GET", "path": path, "headers": headers, "query_string": b""})


class TestAccessGuard:
    """Bearer token extraction and verification."""

    @pytest.fixture(autouse=True)
    def _guard(self, codec):
        self.guard = AccessGuard(codec)

    def test_valid_token_attaches_claims(self, session_token):
        request = make_request(f"Bearer {session_token}")

        claims = self.guard.authorize(request)

        assert claims.subject == "descope-user-123"
        assert request.state.claims is claims
        assert get_session_claims(request) is claims

    def test_scheme_is_case_insensitive(self, session_token):
        assert self.guard.authorize(make_request(f"bearer {session_token}")).subject == "descope-user-123"

    @pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer   ", "Basic dXNlcjpwYXNz", "token-without-scheme"])
    def test_missing_credential(self, header):
        with pytest.raises(MissingCredential):
            self.guard.authorize(make_request(header))

    def test_expired_token_is_unauthorized(self, expired_token):
        with pytest.raises(Unauthorized) as exc_info:
            self.guard.authorize(make_request(f"Bearer {expired_token}"))

        # Internal kind survives for logging
        assert exc_info.value.kind == "EXPIRED_TOKEN"
        assert isinstance(exc_info.value.__cause__, ExpiredTokenError)

    def test_invalid_token_is_unauthorized(self):
        with pytest.raises(Unauthorized) as exc_info:
            self.guard.authorize(make_request("Bearer not.a.token"))

        assert exc_info.value.kind == "INVALID_TOKEN"
        assert isinstance(exc_info.value.__cause__, InvalidTokenError)

    def test_expired_and_invalid_share_public_message(self, expired_token):
        with pytest.raises(Unauthorized) as expired:
            self.guard.authorize(make_request(f"Bearer {expired_token}"))
        with pytest.raises(Unauthorized) as invalid:
            self.guard.authorize(make_request("Bearer not.a.token"))

        assert expired.value.message == invalid.value.message

    def test_failed_request_has_no_claims(self):
        request = make_request("Bearer not.a.token")
        with pytest.raises(Unauthorized):
            self.guard.authorize(request)

        with pytest.raises(Unauthorized):
            get_session_claims(request)


class TestPublicPaths:
    """Only the login flow, pages, health and static assets skip the guard."""

    def setup_method(self):
        self.middleware = AuthMiddleware(app=None, guard=None)

    @pytest.mark.parametrize(
        "path",
        ["/", "/health", "/auth/login", "/auth/callback", "/protected.html", "/static/auth.js"],
    )
    def test_public(self, path):
        assert self.middleware._is_public_path(path)

    @pytest.mark.parametrize(
        "path",
        ["/protected", "/auth/me", "/anything", "/auth/login-admin", "/healthz"],
    )
    def test_protected(self, path):
        assert not self.middleware._is_public_path(path)
