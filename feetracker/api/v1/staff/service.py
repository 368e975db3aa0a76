import logging
from typing import List
from uuid import UUID

from fastapi import status

from feetracker.backend.base import Backend, BackendError
from feetracker.core.enums import Role
from feetracker.core.exceptions import ServiceError, backend_failure

from .schemas import StaffCreate, StaffResponse

logger = logging.getLogger(__name__)

TABLE = "user_profiles"


async def list_staff(backend: Backend) -> List[StaffResponse]:
    """Staff profiles, newest first, with account e-mails merged in."""
    try:
        profiles = await backend.select(TABLE, order_by="created_at", descending=True)
        users = await backend.list_users()
    except BackendError as e:
        raise backend_failure(e, "Error fetching staff")

    emails = {u.id: u.email for u in users}
    return [
        StaffResponse(
            id=p["id"],
            email=emails.get(UUID(str(p["id"]))),
            full_name=p["full_name"],
            role=p["role"],
            created_at=p.get("created_at"),
        )
        for p in profiles
    ]


async def create_staff(backend: Backend, payload: StaffCreate) -> List[StaffResponse]:
    try:
        user = await backend.create_user(payload.email, payload.password)
    except BackendError as e:
        raise backend_failure(e, "Error creating user")

    try:
        await backend.insert(
            TABLE,
            {"id": user.id, "full_name": payload.full_name, "role": payload.role.value},
        )
    except BackendError as e:
        # Do not leave an account without a profile behind
        try:
            await backend.delete_user(user.id)
        except BackendError as cleanup_error:
            logger.error("Could not remove account %s after failed profile insert: %s", user.id, cleanup_error.message)
        raise backend_failure(e, "Error creating profile")

    logger.info("Created %s account for %s", payload.role.value, payload.email)
    return await list_staff(backend)


async def change_role(backend: Backend, staff_id: UUID, role: Role) -> List[StaffResponse]:
    try:
        rows = await backend.update(TABLE, {"id": staff_id}, {"role": role.value})
    except BackendError as e:
        raise backend_failure(e, "Error updating role")
    if not rows:
        raise ServiceError("Staff member not found", status.HTTP_404_NOT_FOUND)
    logger.info("Changed role of %s to %s", staff_id, role.value)
    return await list_staff(backend)


async def delete_staff(backend: Backend, staff_id: UUID) -> List[StaffResponse]:
    try:
        await backend.delete_user(staff_id)
    except BackendError as e:
        raise backend_failure(e, "Error deleting auth user")
    try:
        # Usually already removed by the account cascade
        await backend.delete(TABLE, {"id": staff_id})
    except BackendError as e:
        raise backend_failure(e, "Error deleting profile")
    logger.info("Deleted staff account %s", staff_id)
    return await list_staff(backend)
