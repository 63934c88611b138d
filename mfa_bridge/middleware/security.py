"""
Security Middleware
Response headers that keep issued session tokens out of caches and referrers.
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
import logging

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds baseline security headers to every response."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        # Prevents MIME sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"

        # Prevents clickjacking of the login page
        response.headers["X-Frame-Options"] = "DENY"

        # The callback page carries a session token; never leak its URL
        response.headers["Referrer-Policy"] = "no-referrer"

        response.headers["Permissions-Policy"] = (
            "geolocation=(), microphone=(), camera=(), payment=()"
        )

        # Auth responses contain tokens or redirect URLs bound to one login
        if request.url.path.startswith("/auth/"):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, private"
            response.headers["Pragma"] = "no-cache"
            response.headers["Expires"] = "0"

        return response
