from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from feetracker.auth.dependencies import get_backend
from feetracker.auth.rbac import require_admin
from feetracker.backend.base import Backend
from feetracker.core.exceptions import ServiceError

from .schemas import RoleChange, StaffCreate, StaffResponse
from . import service

# Account administration needs the project key, not the admin's own session.
router = APIRouter(
    prefix="/api/v1/staff",
    tags=["staff"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=List[StaffResponse])
async def list_staff(backend: Backend = Depends(get_backend)) -> List[StaffResponse]:
    try:
        return await service.list_staff(backend)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "",
    response_model=List[StaffResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_staff(
    payload: StaffCreate,
    backend: Backend = Depends(get_backend),
) -> List[StaffResponse]:
    try:
        return await service.create_staff(backend, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch("/{staff_id}/role", response_model=List[StaffResponse])
async def change_role(
    staff_id: UUID,
    payload: RoleChange,
    backend: Backend = Depends(get_backend),
) -> List[StaffResponse]:
    try:
        return await service.change_role(backend, staff_id, payload.role)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{staff_id}", response_model=List[StaffResponse])
async def delete_staff(
    staff_id: UUID,
    backend: Backend = Depends(get_backend),
) -> List[StaffResponse]:
    try:
        return await service.delete_staff(backend, staff_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
