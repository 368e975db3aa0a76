from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi import status as http_status
from fastapi.security import OAuth2PasswordRequestForm

from feetracker.auth.dependencies import get_current_user, get_gateway, get_session_token, get_settings
from feetracker.auth.schemas import Identity, LoginRequest, LoginResponse, UserInfo
from feetracker.auth.services import AuthGateway
from feetracker.core.config import Settings
from feetracker.core.exceptions import ServiceError

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def set_session_cookie(response: Response, settings: Settings, token: str) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_expire_minutes * 60,
        httponly=True,
        samesite="lax",
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=http_status.HTTP_200_OK,
)
async def login(
    payload: LoginRequest,
    response: Response,
    gateway: AuthGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    try:
        result = await gateway.sign_in(payload.email, payload.password)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    set_session_cookie(response, settings, result.access_token)
    return result


@router.post("/login-oauth")
async def login_oauth(
    form_data: OAuth2PasswordRequestForm = Depends(),
    gateway: AuthGateway = Depends(get_gateway),
):
    try:
        result = await gateway.sign_in(form_data.username.strip(), form_data.password)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {
        "access_token": result.access_token,
        "token_type": "bearer",
    }


@router.post("/logout", status_code=http_status.HTTP_204_NO_CONTENT)
async def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    gateway: AuthGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> None:
    await gateway.sign_out(token)
    response.delete_cookie(settings.session_cookie_name)


@router.get("/me", response_model=UserInfo)
async def me(current_user: Identity = Depends(get_current_user)) -> UserInfo:
    return UserInfo(
        id=current_user.id,
        name=current_user.full_name,
        email=current_user.email,
        role=current_user.role,
    )
