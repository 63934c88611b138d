"""Authentication API endpoints."""

from fastapi import APIRouter, Cookie, Depends, Request, Response
from fastapi.responses import HTMLResponse
from typing import Optional
import logging

from mfa_bridge.middleware.auth import get_session_claims
from mfa_bridge.schemas.auth import LoginRequest, LoginResponse, MeResponse, MessageResponse, UserInfo
from mfa_bridge.services.login_service import LoginOrchestrator
from mfa_bridge.services.token_service import SessionClaims
from mfa_bridge.templating import templates

router = APIRouter()
logger = logging.getLogger(__name__)

# Carries the signed login transaction from /auth/login to /auth/callback
LOGIN_TRANSACTION_COOKIE = "login_tx"
CALLBACK_PATH = "/auth/callback"

ERROR_RESPONSES = {
    400: {"model": MessageResponse},
    401: {"model": MessageResponse},
    500: {"model": MessageResponse},
}


def get_orchestrator(request: Request) -> LoginOrchestrator:
    return request.app.state.login_orchestrator


def user_info_from_claims(request: Request, claims: SessionClaims) -> UserInfo:
    """Session claims, enriched with the homegrown handle when the address is known."""
    user = request.app.state.identity_store.find_by_identity(claims.contact) if claims.contact else None
    return UserInfo(id=claims.subject, email=claims.contact, username=user.username if user else None)


@router.post("/login", response_model=LoginResponse, responses=ERROR_RESPONSES)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    orchestrator: LoginOrchestrator = Depends(get_orchestrator),
):
    """
    First factor against the homegrown store, then hand off to Descope.

    Returns the Descope authorization URL instead of a token; the token is only
    issued by the callback once MFA completes, and only to the browser holding
    the login transaction cookie set here.
    """
    started = await orchestrator.begin_login(body.identity, body.secret)

    settings = request.app.state.settings
    response.set_cookie(
        LOGIN_TRANSACTION_COOKIE,
        started.transaction,
        max_age=settings.LOGIN_TRANSACTION_TTL_MINUTES * 60,
        path=CALLBACK_PATH,
        httponly=True,
        samesite="lax",
        secure=settings.DESCOPE_REDIRECT_URL.startswith("https://"),
    )
    return LoginResponse(redirect_url=started.redirect_url)


@router.get("/callback", response_class=HTMLResponse, responses=ERROR_RESPONSES)
async def callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    login_tx: Optional[str] = Cookie(default=None, alias=LOGIN_TRANSACTION_COOKIE),
    orchestrator: LoginOrchestrator = Depends(get_orchestrator),
):
    """
    Descope redirects here after MFA.

    Checks the login transaction cookie, exchanges the code, validates the
    Descope session against the user who passed the password step, and issues
    our own session token, handed to the browser by a page that stores it and
    moves on to the protected page.
    """
    logger.info(f"MFA callback received: code={'yes' if code else 'no'}, state={'yes' if state else 'no'}, error={error}")

    issued = await orchestrator.complete_login(code=code, error=error, transaction=login_tx)

    settings = request.app.state.settings
    page = templates.TemplateResponse(
        request,
        "callback.html",
        {
            "token": issued.token,
            "redirect_url": settings.protected_page_url,
        },
    )
    page.delete_cookie(LOGIN_TRANSACTION_COOKIE, path=CALLBACK_PATH)
    return page


@router.get("/me", response_model=MeResponse, responses={401: {"model": MessageResponse}})
async def me(request: Request, claims: SessionClaims = Depends(get_session_claims)):
    """Get current authenticated user information."""
    return MeResponse(user=user_info_from_claims(request, claims))
