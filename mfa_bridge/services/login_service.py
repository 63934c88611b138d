"""
Two-factor login orchestration.

A login is two HTTP requests that share no server-side state:

1. ``begin_login``: check the homegrown credentials, then ask the MFA
   provider for an authorization URL. The client gets that URL plus a
   short-lived signed login transaction naming the user who passed.
2. ``complete_login``: the provider redirects back with a one-time code. We
   verify the login transaction, exchange the code, validate the resulting
   provider session, check it belongs to the same user, and only then mint
   our own session token.

Every failure ends the attempt. Nothing is retried and nothing is stored.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import List, Optional
import logging

from mfa_bridge.errors import (
    AuthBridgeError,
    CallbackRejected,
    ConfigurationError,
    IllegalTransition,
    MalformedCallback,
    SessionInvalid,
    TokenError,
)
from mfa_bridge.models.user import User
from mfa_bridge.services.credential_service import CredentialGate
from mfa_bridge.services.descope_service import MFAProvider, ProviderIdentity
from mfa_bridge.services.token_service import LOGIN_TRANSACTION, SessionClaims, TokenCodec

logger = logging.getLogger(__name__)


class LoginState(str, Enum):
    IDLE = "idle"
    AWAITING_FIRST_FACTOR = "awaiting_first_factor"
    AWAITING_SECOND_FACTOR = "awaiting_second_factor"
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"


TRANSITIONS = {
    LoginState.IDLE: {LoginState.AWAITING_FIRST_FACTOR},
    LoginState.AWAITING_FIRST_FACTOR: {LoginState.AWAITING_SECOND_FACTOR, LoginState.REJECTED},
    LoginState.AWAITING_SECOND_FACTOR: {LoginState.AUTHENTICATED, LoginState.REJECTED},
    LoginState.AUTHENTICATED: set(),
    LoginState.REJECTED: set(),
}


@dataclass
class LoginAttempt:
    """One login transaction as seen by a single request."""

    identity: Optional[str] = None
    state: LoginState = LoginState.IDLE
    history: List[LoginState] = field(default_factory=list)
    failure: Optional[str] = None

    def advance(self, target: LoginState):
        if target not in TRANSITIONS[self.state]:
            raise IllegalTransition(f"{self.state.value} -> {target.value}")
        self.history.append(self.state)
        self.state = target

    def reject(self, error: AuthBridgeError):
        self.failure = error.code
        self.advance(LoginState.REJECTED)

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self.state]


@dataclass
class LoginStarted:
    redirect_url: str
    transaction: str
    attempt: LoginAttempt


@dataclass
class SessionIssued:
    token: str
    claims: SessionClaims
    attempt: LoginAttempt




class LoginOrchestrator:
    """Sequences the credential gate, the MFA provider and the token codec."""

    def __init__(
        self,
        gate: CredentialGate,
        provider: MFAProvider,
        codec: TokenCodec,
        return_url: str,
        session_ttl: timedelta = timedelta(hours=1),
        transaction_ttl: timedelta = timedelta(minutes=10),
    ):
        if session_ttl <= timedelta(0) or transaction_ttl <= timedelta(0):
            raise ConfigurationError("Session and login transaction lifetimes must be positive")
        self.gate = gate
        self.provider = provider
        self.codec = codec
        self.return_url = return_url
        self.session_ttl = session_ttl
        self.transaction_ttl = transaction_ttl

    async def begin_login(self, identity: str, secret: str) -> LoginStarted:
        """First factor, then hand off to the provider. Never issues a session token."""
        attempt = LoginAttempt(identity=identity)
        attempt.advance(LoginState.AWAITING_FIRST_FACTOR)

        try:
            user = self.gate.check(identity, secret)
            attempt.advance(LoginState.AWAITING_SECOND_FACTOR)
            redirect_url = await self.provider.start(self.return_url, user.email)
        except AuthBridgeError as e:
            attempt.reject(e)
            logger.warning(f"Login rejected at {attempt.history[-1].value}: {e.code}")
            raise

        logger.info(f"First factor accepted for user id {user.id}, redirecting to MFA")
        return LoginStarted(redirect_url=redirect_url, transaction=self._open_transaction(user), attempt=attempt)

    async def complete_login(
        self,
        code: Optional[str] = None,
        error: Optional[str] = None,
        transaction: Optional[str] = None,
    ) -> SessionIssued:
        """Handle the provider's redirect back and mint our session token."""
        attempt = LoginAttempt()
        attempt.advance(LoginState.AWAITING_FIRST_FACTOR)

        try:
            if error:
                raise CallbackRejected(error)
            if not code:
                raise MalformedCallback()

            first_factor = self._resume_transaction(transaction)
            attempt.identity = first_factor.subject
            attempt.advance(LoginState.AWAITING_SECOND_FACTOR)

            provider_session = await self.provider.exchange(code)
            identity = await self.provider.validate(provider_session)
            if not _same_contact(identity.contact, first_factor.contact):
                raise SessionInvalid("MFA was completed by a different user than the password check")
            token, claims = self._issue(identity)
        except AuthBridgeError as e:
            attempt.reject(e)
            logger.warning(f"MFA callback rejected: {e.code} ({e.message})")
            raise

        attempt.advance(LoginState.AUTHENTICATED)
        logger.info(f"MFA completed for user id {first_factor.subject}, session token issued")
        return SessionIssued(token=token, claims=claims, attempt=attempt)

    def _open_transaction(self, user: User) -> str:
        claims = SessionClaims(subject=user.id, contact=user.email)
        return self.codec.issue(claims, ttl=self.transaction_ttl, token_type=LOGIN_TRANSACTION)

    def _resume_transaction(self, transaction: Optional[str]) -> SessionClaims:
        """Proof that this browser passed the first factor moments ago."""
        if not transaction:
            raise SessionInvalid("No login transaction; the password step was skipped")
        try:
            return self.codec.verify(transaction, token_type=LOGIN_TRANSACTION)
        except TokenError as e:
            raise SessionInvalid(f"Login transaction rejected: {e.code}") from e

    def _issue(self, identity: ProviderIdentity):
        claims = SessionClaims(subject=identity.subject_id, contact=identity.contact)
        token = self.codec.issue(claims, ttl=self.session_ttl)
        return token, claims


def _same_contact(provider_contact: str, first_factor_contact: str) -> bool:
    return bool(provider_contact) and provider_contact.strip().lower() == first_factor_contact.strip().lower()
