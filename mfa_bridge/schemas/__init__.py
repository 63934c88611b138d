"""Pydantic schemas for request/response validation."""

from mfa_bridge.schemas.auth import (
    HealthResponse,
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    ProtectedResponse,
    UserInfo,
)

__all__ = [
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MeResponse",
    "MessageResponse",
    "ProtectedResponse",
    "UserInfo",
]
