"""Authentication gateway: sign-in, sign-out and current-user resolution."""

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi import status
from jose import JWTError

from feetracker.auth.schemas import Identity, LoginResponse, UserInfo
from feetracker.auth.security import create_token, decode_token
from feetracker.backend.base import Backend, BackendAuthError, BackendError
from feetracker.core.config import Settings
from feetracker.core.enums import Role
from feetracker.core.exceptions import ServiceError

logger = logging.getLogger(__name__)


class AuthGateway:
    """Only producer of identity tokens; every other component consumes ``Identity``."""

    def __init__(self, backend: Backend, settings: Settings) -> None:
        self._backend = backend
        self._settings = settings

    async def sign_in(self, email: str, password: str) -> LoginResponse:
        # 1. Authenticate against the backend
        try:
            session = await self._backend.sign_in_with_password(email, password)
        except BackendAuthError as e:
            logger.info("Sign-in rejected for %s: %s", email, e.message)
            raise ServiceError(e.message, status.HTTP_401_UNAUTHORIZED) from e
        except BackendError as e:
            logger.warning("Sign-in failed for %s: %s", email, e.message)
            raise ServiceError(e.message, status.HTTP_502_BAD_GATEWAY) from e

        # 2. Resolve the staff profile once; its role travels in the session token
        user_backend = self._backend.with_token(session.access_token)
        try:
            profile = await user_backend.select_one("user_profiles", {"id": session.user.id})
        except BackendError as e:
            logger.warning("Profile lookup failed for %s: %s", session.user.id, e.message)
            raise ServiceError(e.message, status.HTTP_502_BAD_GATEWAY) from e
        if not profile:
            await self._revoke(session.access_token)
            raise ServiceError("No staff profile found for this account", status.HTTP_403_FORBIDDEN)
        try:
            role = Role(str(profile.get("role", "")).lower())
        except ValueError:
            await self._revoke(session.access_token)
            raise ServiceError("Account has no recognised role", status.HTTP_403_FORBIDDEN)

        identity = Identity(
            id=session.user.id,
            email=session.user.email,
            full_name=profile.get("full_name") or "",
            role=role,
            access_token=session.access_token,
        )
        issued_at = datetime.now(timezone.utc)
        token = create_token(
            subject={
                "sub": str(identity.id),
                "email": identity.email,
                "name": identity.full_name,
                "role": identity.role.value,
                "bst": session.access_token,
            },
            secret_key=self._settings.session_secret_key,
            expires_minutes=self._settings.session_expire_minutes,
            algorithm=self._settings.session_algorithm,
        )
        logger.info("Signed in %s as %s", identity.email, identity.role.value)
        return LoginResponse(
            access_token=token,
            user=UserInfo(id=identity.id, name=identity.full_name, email=identity.email, role=identity.role),
            issued_at=issued_at,
        )

    async def sign_out(self, token: Optional[str]) -> None:
        """Invalidate the session. Backend failures are logged, never raised."""
        identity = self.decode(token) if token else None
        if identity is None:
            return
        await self._revoke(identity.access_token)

    async def _revoke(self, access_token: str) -> None:
        try:
            await self._backend.sign_out(access_token)
        except BackendError as e:
            logger.warning("Backend sign-out failed: %s", e.message)

    def decode(self, token: str) -> Optional[Identity]:
        try:
            claims = decode_token(
                token, self._settings.session_secret_key, self._settings.session_algorithm
            )
            return Identity(
                id=UUID(claims["sub"]),
                email=claims.get("email", ""),
                full_name=claims.get("name", ""),
                role=Role(claims["role"]),
                access_token=claims["bst"],
            )
        except (JWTError, KeyError, ValueError):
            return None

    async def current_user(self, token: Optional[str]) -> Optional[Identity]:
        """Identity for a live session, or None. Any lookup failure counts as no session."""
        if not token:
            return None
        identity = self.decode(token)
        if identity is None:
            return None
        try:
            user = await self._backend.get_user(identity.access_token)
            profile = None
            if user.id == identity.id:
                profile = await self._backend.with_token(identity.access_token).select_one(
                    "user_profiles", {"id": identity.id}
                )
        except BackendError as e:
            logger.debug("Session lookup failed: %s", e.message)
            return None
        if not profile:
            return None

        # Role changes apply to live sessions, not only to the next sign-in
        try:
            role = Role(str(profile.get("role", "")).lower())
        except ValueError:
            return None
        if role != identity.role:
            logger.info("Role of %s is now %s", identity.email, role.value)
            return identity.model_copy(update={"role": role})
        return identity
