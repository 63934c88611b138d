"""Domain models."""

from mfa_bridge.models.user import User

__all__ = ["User"]
