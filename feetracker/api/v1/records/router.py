from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from feetracker.api.v1.reports.schemas import PaymentUpdate, StaffRecordRow
from feetracker.auth.dependencies import get_today, get_user_backend
from feetracker.auth.rbac import require_staff
from feetracker.auth.schemas import Identity
from feetracker.backend.base import Backend
from feetracker.core.enums import FeeCategory
from feetracker.core.exceptions import ServiceError

from . import service

router = APIRouter(prefix="/api/v1/records", tags=["records"])


@router.get("", response_model=List[StaffRecordRow])
async def list_records(
    current_user: Identity = Depends(require_staff),
    backend: Backend = Depends(get_user_backend),
    today: date = Depends(get_today),
) -> List[StaffRecordRow]:
    try:
        return await service.list_own_records(backend, current_user.id, today)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch("/{category}/{record_id}", response_model=List[StaffRecordRow])
async def update_record(
    category: FeeCategory,
    record_id: int,
    payload: PaymentUpdate,
    current_user: Identity = Depends(require_staff),
    backend: Backend = Depends(get_user_backend),
    today: date = Depends(get_today),
) -> List[StaffRecordRow]:
    if not category.is_daily:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only feeding and transport records can be amended here")
    try:
        return await service.amend_own_record(
            backend, current_user.id, category, record_id, payload.amount, today
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
