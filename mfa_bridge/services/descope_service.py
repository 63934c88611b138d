"""
Descope MFA Provider Adapter.

Wraps the hosted second factor behind three operations:
- start: build the authorization URL the user is sent to for MFA
- exchange: trade the one-time authorization code for a Descope session
- validate: verify that session with the Descope SDK

Descope is used for the MFA step only. Session management stays with our own
tokens (see token_service).
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx
import requests
from descope import REFRESH_SESSION_TOKEN_NAME, SESSION_TOKEN_NAME, AuthException, DescopeClient, RateLimitException
from starlette.concurrency import run_in_threadpool

from mfa_bridge.config import Settings
from mfa_bridge.errors import (
    ExchangeFailed,
    ProviderRejected,
    ProviderUnavailable,
    SessionInvalid,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderIdentity:
    """Identity reported by the provider for a completed MFA session."""

    subject_id: str
    contact: str = ""


class MFAProvider(Protocol):
    """Port to the external MFA service."""

    async def start(self, return_url: str, login_hint: str) -> str:
        """
        Begin an MFA flow.

        Args:
            return_url: Callback the provider redirects to afterwards
            login_hint: Contact address used to pre-fill the provider's UI

        Returns:
            Authorization URL to send the user agent to

        Raises:
            ProviderUnavailable: provider unreachable or not configured
            ProviderRejected: provider returned a structured error
        """
        ...

    async def exchange(self, code: str) -> str:
        """
        Trade an authorization code for a provider session token.

        Raises:
            ExchangeFailed: provider error, or expired/already used code
        """
        ...

    async def validate(self, provider_session_token: str) -> ProviderIdentity:
        """
        Confirm the provider session corresponds to a completed MFA.

        Raises:
            SessionInvalid: the token does not verify
        """
        ...


def _describe(error: AuthException) -> str:
    return error.error_message or error.error_type or f"HTTP {error.status_code}"


class DescopeMFAProvider:
    """Descope OAuth/OIDC flow used purely as a second factor."""

    def __init__(
        self,
        project_id: str,
        management_key: str = "",
        oauth_provider: str = "Descope",
        timeout: float = 30.0,
    ):
        self.project_id = project_id
        self.oauth_provider = oauth_provider
        self.timeout = timeout
        self._management_key = management_key
        self._client: Optional[DescopeClient] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "DescopeMFAProvider":
        return cls(
            project_id=settings.DESCOPE_PROJECT_ID,
            management_key=settings.DESCOPE_MANAGEMENT_KEY,
            oauth_provider=settings.DESCOPE_OAUTH_PROVIDER,
            timeout=settings.DESCOPE_TIMEOUT_SECONDS,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.project_id)

    @property
    def client(self) -> DescopeClient:
        """Lazy initialization of the Descope SDK client."""
        if self._client is None:
            if not self.is_configured:
                raise ProviderUnavailable("Missing Descope configuration: DESCOPE_PROJECT_ID is not set")
            try:
                self._client = DescopeClient(
                    project_id=self.project_id,
                    management_key=self._management_key or None,
                    timeout_seconds=self.timeout,
                )
            except AuthException as e:
                raise ProviderUnavailable(f"Descope client could not be created: {_describe(e)}") from e
        return self._client

    async def start(self, return_url: str, login_hint: str) -> str:
        if not return_url:
            raise ProviderUnavailable("Missing Descope configuration: DESCOPE_REDIRECT_URL is not set")
        client = self.client

        logger.info(f"Starting Descope OAuth flow, provider={self.oauth_provider}, redirect={return_url}")

        try:
            response = await run_in_threadpool(client.oauth.start, self.oauth_provider, return_url)
        except RateLimitException as e:
            raise ProviderUnavailable(f"OAuth start rate limited: {_describe(e)}") from e
        except AuthException as e:
            if e.status_code and e.status_code >= 500:
                raise ProviderUnavailable(f"OAuth start failed: {_describe(e)}") from e
            raise ProviderRejected(f"OAuth start failed: {_describe(e)}") from e
        except requests.RequestException as e:
            logger.error(f"Descope unreachable during OAuth start: {e}")
            raise ProviderUnavailable(f"Descope unreachable: {e}") from e

        url = response.get("url") if isinstance(response, dict) else None
        if not url:
            raise ProviderRejected("No redirect URL in response")

        # Pre-fill the user's address in Descope's UI
        return str(httpx.URL(url).copy_add_param("login_hint", login_hint))

    async def exchange(self, code: str) -> str:
        try:
            client = self.client
            jwt_response = await run_in_threadpool(client.oauth.exchange_token, code)
        except ProviderUnavailable as e:
            raise ExchangeFailed(e.message) from e
        except AuthException as e:
            raise ExchangeFailed(f"Token exchange failed: {_describe(e)}") from e
        except requests.RequestException as e:
            logger.error(f"Descope unreachable during code exchange: {e}")
            raise ExchangeFailed(f"Descope unreachable: {e}") from e

        # The refresh JWT is the long-lived proof that the MFA flow completed
        session_token = _jwt_of(jwt_response, REFRESH_SESSION_TOKEN_NAME) or _jwt_of(jwt_response, SESSION_TOKEN_NAME)
        if not session_token:
            raise ExchangeFailed("No session token received")

        logger.info("Exchanged authorization code for a Descope session")
        return session_token

    async def validate(self, provider_session_token: str) -> ProviderIdentity:
        try:
            client = self.client
            claims = await run_in_threadpool(client.validate_session, provider_session_token)
            subject = claims.get("sub") or claims.get("userId")
            if not subject:
                raise SessionInvalid("Provider session has no subject")

            contact = claims.get("email")
            if not contact:
                # Default Descope JWTs carry no address; ask for the user record
                user = await run_in_threadpool(client.me, provider_session_token)
                contact = (user or {}).get("email") or ""
        except ProviderUnavailable as e:
            raise SessionInvalid(e.message) from e
        except AuthException as e:
            raise SessionInvalid(f"Provider session rejected: {_describe(e)}") from e
        except requests.RequestException as e:
            raise SessionInvalid(f"Descope unreachable during validation: {e}") from e

        return ProviderIdentity(subject_id=subject, contact=contact)


def _jwt_of(jwt_response: Any, name: str) -> Optional[str]:
    """Pull the raw JWT for ``name`` out of an SDK token response."""
    if not isinstance(jwt_response, dict):
        return None
    token: Dict[str, Any] = jwt_response.get(name) or {}
    return token.get("jwt") if isinstance(token, dict) else None
