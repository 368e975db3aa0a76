from datetime import date
from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from feetracker.auth.schemas import Identity
from feetracker.auth.services import AuthGateway
from feetracker.backend.base import Backend
from feetracker.core.config import Settings

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login-oauth", auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_backend(request: Request) -> Backend:
    return request.app.state.backend


def get_gateway(request: Request) -> AuthGateway:
    return request.app.state.gateway


def get_clock() -> Callable[[], date]:
    """Source of "today" for same-day rules: the local clock of this process."""
    return date.today


def get_today(clock: Callable[[], date] = Depends(get_clock)) -> date:
    return clock()


def get_session_token(
    request: Request,
    bearer: Optional[str] = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
) -> Optional[str]:
    return bearer or request.cookies.get(settings.session_cookie_name)


async def get_current_user(
    token: Optional[str] = Depends(get_session_token),
    gateway: AuthGateway = Depends(get_gateway),
) -> Identity:
    """Resolve the authenticated actor from the bearer token or session cookie."""
    identity = await gateway.current_user(token)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


def get_user_backend(
    current_user: Identity = Depends(get_current_user),
    backend: Backend = Depends(get_backend),
) -> Backend:
    """Backend scoped to the signed-in actor's session."""
    return backend.with_token(current_user.access_token)
