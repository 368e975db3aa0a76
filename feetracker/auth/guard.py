"""Session guard applied to page navigations."""

import logging
from typing import Optional

from fastapi import status
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

UNGUARDED_PREFIXES = ("/api", "/static", "/docs", "/redoc", "/openapi.json", "/favicon.ico")


def decide_navigation(
    path: str, has_session: bool, login_path: str, landing_path: str
) -> Optional[str]:
    """Redirect target for a navigation, or None to let it through."""
    on_login = path.startswith(login_path)
    if not has_session and not on_login:
        return login_path
    if has_session and on_login:
        return landing_path
    return None


class SessionGuardMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if path.startswith(UNGUARDED_PREFIXES):
            return await call_next(request)

        settings = request.app.state.settings
        token = request.cookies.get(settings.session_cookie_name)
        scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
        if scheme.lower() == "bearer" and credentials:
            token = credentials
        identity = await request.app.state.gateway.current_user(token)
        target = decide_navigation(
            path, identity is not None, settings.login_path, settings.landing_path
        )
        if target is not None:
            logger.debug("Redirecting %s to %s", path, target)
            return RedirectResponse(target, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
        return await call_next(request)
