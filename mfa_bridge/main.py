"""
Main FastAPI Application Entry Point

Homegrown username/password login with Descope as the second factor:
1. POST /auth/login checks the password against our own user store
2. the client is sent to Descope for MFA
3. Descope redirects to GET /auth/callback, where we validate the Descope
   session and issue our own session token
4. protected routes only accept that token
"""

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from mfa_bridge.config import Settings, get_settings
from mfa_bridge.exception_handlers import register_exception_handlers
from mfa_bridge.middleware.auth import AccessGuard, AuthMiddleware
from mfa_bridge.middleware.security import SecurityHeadersMiddleware
from mfa_bridge.models.user import User
from mfa_bridge.routers import auth, pages, protected
from mfa_bridge.schemas.auth import HealthResponse
from mfa_bridge.services.credential_service import CredentialGate, IdentityStore, InMemoryIdentityStore
from mfa_bridge.services.descope_service import DescopeMFAProvider, MFAProvider
from mfa_bridge.services.login_service import LoginOrchestrator
from mfa_bridge.services.token_service import TokenCodec
from mfa_bridge.templating import STATIC_DIR

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def seeded_identity_store(settings: Settings) -> InMemoryIdentityStore:
    """The homegrown user database: one configured user."""
    return InMemoryIdentityStore([
        User(
            id=settings.DEMO_USER_ID,
            username=settings.DEMO_USERNAME,
            email=settings.DEMO_USER_EMAIL,
            password=settings.DEMO_USER_PASSWORD,
        )
    ])


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = app.state.settings
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})")
    logger.info(f"DESCOPE_PROJECT_ID: {settings.DESCOPE_PROJECT_ID or 'Not Set'}")
    logger.info(f"DESCOPE_MANAGEMENT_KEY: {'Set' if settings.DESCOPE_MANAGEMENT_KEY else 'Not Set'}")
    if not settings.DESCOPE_REDIRECT_URL:
        logger.warning("DESCOPE_REDIRECT_URL is not set; logins will fail until it is configured")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")


def create_app(
    settings: Optional[Settings] = None,
    *,
    identity_store: Optional[IdentityStore] = None,
    mfa_provider: Optional[MFAProvider] = None,
) -> FastAPI:
    """
    Build the application from an explicit configuration.

    Raises ConfigurationError immediately when JWT_SECRET is missing, so a
    misconfigured deployment fails at startup instead of on the first login.
    """
    settings = settings or get_settings()
    logging.getLogger().setLevel(settings.LOG_LEVEL.upper())

    codec = TokenCodec(
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        default_ttl=timedelta(minutes=settings.SESSION_TOKEN_TTL_MINUTES),
    )
    identity_store = identity_store or seeded_identity_store(settings)
    mfa_provider = mfa_provider or DescopeMFAProvider.from_settings(settings)
    orchestrator = LoginOrchestrator(
        gate=CredentialGate(identity_store),
        provider=mfa_provider,
        codec=codec,
        return_url=settings.DESCOPE_REDIRECT_URL,
        session_ttl=timedelta(minutes=settings.SESSION_TOKEN_TTL_MINUTES),
        transaction_ttl=timedelta(minutes=settings.LOGIN_TRANSACTION_TTL_MINUTES),
    )

    app = FastAPI(
        title=settings.APP_NAME,
        description="Homegrown authentication with Descope MFA as the second factor",
        version=settings.APP_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
    )
    app.state.settings = settings
    app.state.token_codec = codec
    app.state.identity_store = identity_store
    app.state.login_orchestrator = orchestrator

    register_exception_handlers(app)

    # Middleware order: last added runs first
    app.add_middleware(AuthMiddleware, guard=AccessGuard(codec))
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type"],
    )

    app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
    app.include_router(protected.router, tags=["Protected"])
    app.include_router(pages.router)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Simple health check for load balancers."""
        return HealthResponse(status="ok")

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    if settings.ENVIRONMENT == "production":
        # Hosting platforms import api/index.py and invoke the app per request
        logger.info("ENVIRONMENT=production; not starting a local listener")
    else:
        uvicorn.run(
            "mfa_bridge.main:create_app",
            factory=True,
            host=settings.HOST,
            port=settings.PORT,
            reload=settings.DEBUG,
        )
