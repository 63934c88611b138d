"""
Application Configuration Settings
Homegrown login with hosted MFA (Descope)
"""

from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment
    ENVIRONMENT: str = "development"  # "production" = invoked per request by the host, no local listener
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Application
    APP_NAME: str = "Homegrown Auth with Descope MFA"
    APP_VERSION: str = "1.0.0"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Session tokens (issued by us after MFA completes)
    JWT_SECRET: str = ""  # Required; an empty secret is refused at startup
    JWT_ALGORITHM: str = "HS256"
    SESSION_TOKEN_TTL_MINUTES: int = 60  # Must be positive
    LOGIN_TRANSACTION_TTL_MINUTES: int = 10  # Time allowed between password check and MFA callback

    # Descope (second factor)
    DESCOPE_PROJECT_ID: str = ""
    DESCOPE_MANAGEMENT_KEY: str = ""
    DESCOPE_REDIRECT_URL: str = ""  # Must match the callback registered in the Descope console exactly
    DESCOPE_OAUTH_PROVIDER: str = "Descope"
    DESCOPE_TIMEOUT_SECONDS: float = 30.0

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"
    PROTECTED_PAGE_PATH: str = "/protected.html"

    # Security
    ALLOWED_ORIGINS: List[str] = ["*"]

    # Homegrown user database (single seeded record)
    DEMO_USER_ID: str = "1"
    DEMO_USERNAME: str = "demo"
    DEMO_USER_EMAIL: str = "demo@example.com"
    DEMO_USER_PASSWORD: str = "password"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def protected_page_url(self) -> str:
        return self.FRONTEND_URL.rstrip("/") + self.PROTECTED_PAGE_PATH


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
