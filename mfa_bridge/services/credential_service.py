"""First-factor credential checking against the homegrown user store."""

from typing import Iterable, Optional, Protocol
import hmac
import logging
import secrets

from mfa_bridge.errors import CredentialRejected
from mfa_bridge.models.user import User

logger = logging.getLogger(__name__)

# Stand-in checked when no user matches; its secret is never disclosed
UNKNOWN_USER = User(id="", username="", email="", password=secrets.token_urlsafe(32))


class IdentityStore(Protocol):
    """Port to the authoritative user database."""

    def find_by_identity(self, identity: str) -> Optional[User]:
        """Return the user with this handle or contact address, if any."""
        ...

    def check_secret(self, user: User, secret: str) -> bool:
        """Compare a submitted secret with the user's check material."""
        ...


class InMemoryIdentityStore:
    """Seeded, read-only stand-in for an existing user database.

    Secrets are held in plaintext here, which is only acceptable for a demo
    store; a real store would keep a password hash.
    """

    def __init__(self, users: Iterable[User]):
        self._users = list(users)

    def find_by_identity(self, identity: str) -> Optional[User]:
        needle = (identity or "").strip()
        if not needle:
            return None
        for user in self._users:
            if user.username == needle or user.email.lower() == needle.lower():
                return user
        return None

    def check_secret(self, user: User, secret: str) -> bool:
        return hmac.compare_digest(user.password.encode("utf-8"), (secret or "").encode("utf-8"))


class CredentialGate:
    """Accepts or rejects an identity/secret pair."""

    def __init__(self, store: IdentityStore):
        self.store = store

    def check(self, identity: str, secret: str) -> User:
        """Return the matching user, or raise ``CredentialRejected``.

        Unknown identities and wrong secrets raise the same error with the same
        message; only the log line tells them apart.
        """
        user = self.store.find_by_identity(identity)

        if user is None:
            # Same comparison work as a known user, so timing does not reveal the miss
            self.store.check_secret(UNKNOWN_USER, secret)
            logger.warning(f"Login attempt for unknown identity: {identity!r}")
            raise CredentialRejected(reason="unknown_identity")

        if not self.store.check_secret(user, secret):
            logger.warning(f"Login attempt with wrong secret for user id {user.id}")
            raise CredentialRejected(reason="wrong_secret")

        return user
