"""Frontend pages."""

from fastapi import APIRouter, Request

from mfa_bridge.templating import templates

router = APIRouter(include_in_schema=False)


@router.get("/")
async def login_page(request: Request):
    return templates.TemplateResponse(request, "login.html", {"environment": request.app.state.settings.ENVIRONMENT})


@router.get("/protected.html")
async def protected_page(request: Request):
    """Page shell; the token is read from localStorage by auth.js."""
    return templates.TemplateResponse(request, "protected.html", {"environment": request.app.state.settings.ENVIRONMENT})
