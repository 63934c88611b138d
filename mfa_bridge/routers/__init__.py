"""API routers."""

from mfa_bridge.routers import auth, pages, protected

__all__ = ["auth", "pages", "protected"]
