"""Example protected resource."""

from fastapi import APIRouter, Depends, Request

from mfa_bridge.middleware.auth import get_session_claims
from mfa_bridge.routers.auth import user_info_from_claims
from mfa_bridge.schemas.auth import MessageResponse, ProtectedResponse
from mfa_bridge.services.token_service import SessionClaims

router = APIRouter()


@router.get("/protected", response_model=ProtectedResponse, responses={401: {"model": MessageResponse}})
async def protected(request: Request, claims: SessionClaims = Depends(get_session_claims)):
    """Only reachable with a session token minted after both factors."""
    return ProtectedResponse(
        message="This is a protected route",
        user=user_info_from_claims(request, claims),
    )
