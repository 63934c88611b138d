"""Authentication middleware for protected routes."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
import logging

from mfa_bridge.errors import AccessDenied, MissingCredential, TokenError, Unauthorized
from mfa_bridge.services.token_service import SessionClaims, TokenCodec

logger = logging.getLogger(__name__)

# Paths that don't require authentication
PUBLIC_PATHS = [
    "/",
    "/protected.html",   # Page shell; its API calls carry the token
    "/auth/login",
    "/auth/callback",
    "/health",
    "/static",
    "/docs",
    "/openapi.json",
]


class AccessGuard:
    """Verifies the bearer token on a request and attaches its claims."""

    def __init__(self, codec: TokenCodec):
        self.codec = codec

    def authorize(self, request: Request) -> SessionClaims:
        auth_header = request.headers.get("Authorization", "")
        scheme, _, token = auth_header.partition(" ")

        if scheme.lower() != "bearer" or not token.strip():
            raise MissingCredential()

        try:
            claims = self.codec.verify(token.strip())
        except TokenError as e:
            # Expired and invalid look identical to the caller
            logger.warning(f"Rejected session token on {request.url.path}: {e.code}")
            raise Unauthorized(kind=e.code) from e

        request.state.claims = claims
        return claims


class AuthMiddleware(BaseHTTPMiddleware):
    """Runs the access guard on every non-public path."""

    def __init__(self, app, guard: AccessGuard):
        super().__init__(app)
        self.guard = guard

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path

        # Skip authentication for public paths and CORS preflight
        if request.method == "OPTIONS" or self._is_public_path(path):
            return await call_next(request)

        try:
            self.guard.authorize(request)
        except AccessDenied as e:
            return JSONResponse(status_code=401, content={"message": e.message})

        return await call_next(request)

    def _is_public_path(self, path: str) -> bool:
        """Check if path is public (no auth required)."""
        for public_path in PUBLIC_PATHS:
            if path == public_path:
                return True
            if public_path != "/" and path.startswith(public_path + "/"):
                return True
        return False


def get_session_claims(request: Request) -> SessionClaims:
    """Claims attached by the middleware, for use as a route dependency."""
    claims = getattr(request.state, "claims", None)
    if claims is None:
        # Route was registered as public by mistake
        raise Unauthorized(kind="NO_CLAIMS")
    return claims
