"""Authentication and security middleware package."""

from .auth import AccessGuard, AuthMiddleware, get_session_claims
from .security import SecurityHeadersMiddleware

__all__ = [
    "AccessGuard",
    "AuthMiddleware",
    "get_session_claims",
    "SecurityHeadersMiddleware",
]
