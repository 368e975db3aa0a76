"""Page-level routes behind the session guard: login, logout and dashboard."""

from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException, status
from fastapi.responses import RedirectResponse

from feetracker.api.v1.auth.router import set_session_cookie
from feetracker.auth.dependencies import get_current_user, get_gateway, get_session_token, get_settings
from feetracker.auth.schemas import Identity
from feetracker.auth.services import AuthGateway
from feetracker.core.config import Settings
from feetracker.core.exceptions import ServiceError

from .schemas import TOOLS_BY_ROLE, DashboardResponse

router = APIRouter(tags=["pages"])


@router.get("/login")
async def login_page(settings: Settings = Depends(get_settings)) -> dict:
    return {"detail": "Sign in to continue", "login_url": settings.login_path}


@router.post("/login")
async def login_form(
    email: str = Form(...),
    password: str = Form(...),
    gateway: AuthGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    try:
        result = await gateway.sign_in(email.strip(), password)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    response = RedirectResponse(settings.landing_path, status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, settings, result.access_token)
    return response


@router.post("/logout")
async def logout_form(
    token: Optional[str] = Depends(get_session_token),
    gateway: AuthGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    await gateway.sign_out(token)
    response = RedirectResponse(settings.login_path, status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(current_user: Identity = Depends(get_current_user)) -> DashboardResponse:
    return DashboardResponse(
        full_name=current_user.full_name,
        role=current_user.role,
        tools=TOOLS_BY_ROLE.get(current_user.role, []),
    )
