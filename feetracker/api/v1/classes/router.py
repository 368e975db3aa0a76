from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from feetracker.auth.dependencies import get_user_backend
from feetracker.auth.rbac import require_admin
from feetracker.backend.base import Backend
from feetracker.core.exceptions import ServiceError

from .schemas import ClassCreate, ClassResponse, ClassUpdate
from . import service

router = APIRouter(
    prefix="/api/v1/classes",
    tags=["classes"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=List[ClassResponse])
async def list_classes(backend: Backend = Depends(get_user_backend)) -> List[ClassResponse]:
    try:
        return await service.list_classes(backend)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "",
    response_model=List[ClassResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_class(
    payload: ClassCreate,
    backend: Backend = Depends(get_user_backend),
) -> List[ClassResponse]:
    try:
        return await service.create_class(backend, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch("/{class_id}", response_model=List[ClassResponse])
async def update_class(
    class_id: int,
    payload: ClassUpdate,
    backend: Backend = Depends(get_user_backend),
) -> List[ClassResponse]:
    try:
        return await service.update_class(backend, class_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{class_id}", response_model=List[ClassResponse])
async def delete_class(
    class_id: int,
    backend: Backend = Depends(get_user_backend),
) -> List[ClassResponse]:
    try:
        return await service.delete_class(backend, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
