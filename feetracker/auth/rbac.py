from fastapi import Depends, HTTPException, status

from feetracker.auth.dependencies import get_current_user
from feetracker.auth.schemas import Identity
from feetracker.core.enums import Role


def require_role(*roles: Role):
    """Dependency that returns the current identity if its role is one of ``roles``."""

    async def _checker(current_user: Identity = Depends(get_current_user)) -> Identity:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return _checker


require_admin = require_role(Role.ADMIN)
# Admins may also operate the scanner
require_staff = require_role(Role.STAFF, Role.ADMIN)
