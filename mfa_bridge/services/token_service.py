"""Session token issuance and verification."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Union
import logging

import jwt

from mfa_bridge.errors import ConfigurationError, ExpiredTokenError, InvalidTokenError

logger = logging.getLogger(__name__)

RESERVED_CLAIMS = ("sub", "email", "iat", "exp", "typ")

# Values of the "typ" claim. A token of one type never verifies as another.
SESSION_TOKEN = "session"
LOGIN_TRANSACTION = "login_tx"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SessionClaims:
    """Identity claims carried by a session token."""

    subject: str
    contact: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)
    issued_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    def to_payload(self) -> Dict[str, Any]:
        payload = {k: v for k, v in self.extra.items() if k not in RESERVED_CLAIMS}
        payload["sub"] = self.subject
        payload["email"] = self.contact
        return payload

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SessionClaims":
        return cls(
            subject=payload["sub"],
            contact=payload.get("email", ""),
            extra={k: v for k, v in payload.items() if k not in RESERVED_CLAIMS},
            issued_at=datetime.fromtimestamp(payload["iat"], timezone.utc) if "iat" in payload else None,
            expires_at=datetime.fromtimestamp(payload["exp"], timezone.utc),
        )

    def as_user(self) -> Dict[str, Any]:
        """Claims shaped for API responses."""
        user = {"id": self.subject, "email": self.contact}
        user.update(self.extra)
        return user


class TokenCodec:
    """Issues and verifies HMAC-signed session JWTs.

    The codec is a pure function of its inputs, the signing secret and the
    clock. It refuses to exist without a secret: an empty HMAC key would
    produce tokens anyone can forge.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        default_ttl: timedelta = timedelta(hours=1),
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not secret or not secret.strip():
            raise ConfigurationError("JWT_SECRET is not set; refusing to sign session tokens")
        if not algorithm.startswith("HS"):
            raise ConfigurationError(f"Unsupported session token algorithm: {algorithm}")
        if default_ttl <= timedelta(0):
            raise ConfigurationError("Session token lifetime must be positive")
        self._secret = secret
        self.algorithm = algorithm
        self.default_ttl = default_ttl
        self._clock = clock or utc_now

    def issue(
        self,
        claims: Union[SessionClaims, Dict[str, Any]],
        ttl: Optional[timedelta] = None,
        token_type: str = SESSION_TOKEN,
    ) -> str:
        """Mint a token for the given claims, valid for ``ttl`` (default one hour).

        Raises ``ValueError`` for a missing subject or a non-positive ``ttl``.
        """
        if isinstance(claims, dict):
            claims = SessionClaims(
                subject=claims["subject"],
                contact=claims.get("contact", ""),
                extra=claims.get("extra") or {},
            )
        if not claims.subject:
            raise ValueError("Refusing to issue a token without a subject")

        now = self._clock()
        expires_in = ttl if ttl is not None else self.default_ttl
        if expires_in <= timedelta(0):
            raise ValueError(f"Token lifetime must be positive, got {expires_in}")

        payload = claims.to_payload()
        payload["typ"] = token_type
        payload["iat"] = int(now.timestamp())
        payload["exp"] = int((now + expires_in).timestamp())

        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str, token_type: str = SESSION_TOKEN) -> SessionClaims:
        """Decode a token of the given type, raising ``InvalidTokenError`` or ``ExpiredTokenError``."""
        if not token:
            raise InvalidTokenError("Empty token")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                # Expiry is checked below against the injected clock
                options={"require": ["sub", "exp"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e

        if payload.get("typ") != token_type:
            raise InvalidTokenError(f"Expected a {token_type} token, got {payload.get('typ')!r}")

        try:
            expires_at = int(payload["exp"])
        except (TypeError, ValueError) as e:
            raise InvalidTokenError("Expiration claim is not an integer") from e

        if expires_at <= int(self._clock().timestamp()):
            raise ExpiredTokenError()

        return SessionClaims.from_payload(payload)
