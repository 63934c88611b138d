"""
Error taxonomy for the login bridge.

Each failure keeps a specific kind (``code``) for logging, while the HTTP
layer collapses them into a handful of generic responses so callers cannot
tell which step of a login failed.
"""

from typing import Optional, Any


class AuthBridgeError(Exception):
    """Base class for all login bridge errors."""

    def __init__(
        self,
        message: str,
        code: str = "AUTH_ERROR",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ConfigurationError(AuthBridgeError):
    """Raised when a required setting (signing secret, project id) is missing."""

    def __init__(self, message: str = "Server is misconfigured", code: str = "CONFIGURATION_ERROR"):
        super().__init__(message, code)


class CredentialRejected(AuthBridgeError):
    """First factor failed. Unknown identity and wrong secret look the same."""

    def __init__(self, reason: str = "rejected"):
        super().__init__("Invalid credentials", "CREDENTIAL_REJECTED", {"reason": reason})
        self.reason = reason


# Second factor

class SecondFactorError(AuthBridgeError):
    """Base class for failures talking to the MFA provider."""


class ProviderUnavailable(SecondFactorError):
    """Provider cannot be reached or is not configured."""

    def __init__(self, message: str = "MFA provider unavailable", code: str = "PROVIDER_UNAVAILABLE"):
        super().__init__(message, code)


class ProviderRejected(SecondFactorError):
    """Provider answered with a structured error."""

    def __init__(self, message: str = "MFA provider rejected the request", code: str = "PROVIDER_REJECTED"):
        super().__init__(message, code)


class ExchangeFailed(SecondFactorError):
    """Authorization code could not be exchanged. Terminal for that code."""

    def __init__(self, message: str = "Failed to exchange authorization code", code: str = "EXCHANGE_FAILED"):
        super().__init__(message, code)


class SessionInvalid(SecondFactorError):
    """Provider session does not correspond to a completed MFA."""

    def __init__(self, message: str = "Invalid session", code: str = "SESSION_INVALID"):
        super().__init__(message, code)


class CallbackRejected(SecondFactorError):
    """Provider redirected back with an error instead of a code."""

    def __init__(self, error: str):
        super().__init__(f"Authentication failed: {error}", "CALLBACK_REJECTED", {"error": error})
        self.error = error


class MalformedCallback(SecondFactorError):
    """Callback arrived with neither a code nor an error."""

    def __init__(self, message: str = "No authorization code provided"):
        super().__init__(message, "MALFORMED_CALLBACK")


# Session tokens

class TokenError(AuthBridgeError):
    """Base class for session token verification failures."""


class InvalidTokenError(TokenError):
    """Token is malformed, has a bad signature or an unexpected algorithm."""

    def __init__(self, message: str = "Invalid token", code: str = "INVALID_TOKEN"):
        super().__init__(message, code)


class ExpiredTokenError(TokenError):
    """Token is well formed and correctly signed but past its expiry."""

    def __init__(self, message: str = "Token has expired", code: str = "EXPIRED_TOKEN"):
        super().__init__(message, code)


# Access guard

class AccessDenied(AuthBridgeError):
    """Base class for protected-route rejections."""


class MissingCredential(AccessDenied):
    def __init__(self):
        super().__init__("No token provided", "MISSING_CREDENTIAL")


class Unauthorized(AccessDenied):
    def __init__(self, kind: str = "INVALID_TOKEN"):
        super().__init__("Invalid token", "UNAUTHORIZED", {"kind": kind})
        self.kind = kind


class IllegalTransition(RuntimeError):
    """A login attempt was driven through a transition its state does not allow."""
