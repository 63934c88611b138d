"""
Exception handlers for FastAPI.

Maps bridge errors to a small set of HTTP responses. The specific error code
is logged; clients only ever see the status and a generic message.
"""

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mfa_bridge.errors import (
    AccessDenied,
    AuthBridgeError,
    CallbackRejected,
    ConfigurationError,
    CredentialRejected,
    ExchangeFailed,
    MalformedCallback,
    ProviderRejected,
    ProviderUnavailable,
    SessionInvalid,
    TokenError,
)

logger = logging.getLogger(__name__)

GENERIC_AUTH_FAILURE = "Authentication failed"

# (error type, status, public message). First match wins; None keeps exc.message.
ERROR_RESPONSES = [
    (CredentialRejected, status.HTTP_401_UNAUTHORIZED, None),
    (CallbackRejected, status.HTTP_400_BAD_REQUEST, GENERIC_AUTH_FAILURE),
    (MalformedCallback, status.HTTP_400_BAD_REQUEST, None),
    (ExchangeFailed, status.HTTP_401_UNAUTHORIZED, GENERIC_AUTH_FAILURE),
    (SessionInvalid, status.HTTP_401_UNAUTHORIZED, GENERIC_AUTH_FAILURE),
    (ProviderUnavailable, status.HTTP_500_INTERNAL_SERVER_ERROR, "Error getting redirect URL"),
    (ProviderRejected, status.HTTP_500_INTERNAL_SERVER_ERROR, "Error getting redirect URL"),
    (TokenError, status.HTTP_401_UNAUTHORIZED, "Invalid token"),
    (AccessDenied, status.HTTP_401_UNAUTHORIZED, None),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Server is misconfigured"),
]


def error_response(exc: AuthBridgeError):
    """Return (status_code, message) for a bridge error."""
    for error_type, status_code, message in ERROR_RESPONSES:
        if isinstance(exc, error_type):
            return status_code, message or exc.message
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "Error processing authentication"


async def auth_bridge_error_handler(request: Request, exc: AuthBridgeError):
    status_code, message = error_response(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(f"{request.method} {request.url.path} failed with {exc.code}: {exc.message}")
    return JSONResponse(status_code=status_code, content={"message": message})


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and return a JSON 500 with logging."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    logger.error(f"Stack trace:\n{traceback.format_exc()}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Error processing authentication"},
    )


def register_exception_handlers(app: FastAPI):
    """Register uniform exception handlers for the app."""
    app.add_exception_handler(AuthBridgeError, auth_bridge_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
