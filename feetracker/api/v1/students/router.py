from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from feetracker.auth.dependencies import get_user_backend
from feetracker.auth.rbac import require_admin
from feetracker.backend.base import Backend
from feetracker.core.exceptions import ServiceError

from .schemas import StudentCreate, StudentResponse, StudentUpdate
from . import service

router = APIRouter(
    prefix="/api/v1/students",
    tags=["students"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=List[StudentResponse])
async def list_students(
    search: Optional[str] = Query(None, description="Matches name or parent contact"),
    class_id: Optional[int] = Query(None),
    backend: Backend = Depends(get_user_backend),
) -> List[StudentResponse]:
    try:
        return await service.list_students(backend, search=search, class_id=class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "",
    response_model=List[StudentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_student(
    payload: StudentCreate,
    backend: Backend = Depends(get_user_backend),
) -> List[StudentResponse]:
    try:
        return await service.create_student(backend, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch("/{student_id}", response_model=List[StudentResponse])
async def update_student(
    student_id: int,
    payload: StudentUpdate,
    backend: Backend = Depends(get_user_backend),
) -> List[StudentResponse]:
    try:
        return await service.update_student(backend, student_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{student_id}", response_model=List[StudentResponse])
async def delete_student(
    student_id: int,
    backend: Backend = Depends(get_user_backend),
) -> List[StudentResponse]:
    try:
        return await service.delete_student(backend, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
