from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from feetracker.auth.dependencies import get_today, get_user_backend
from feetracker.auth.rbac import require_admin
from feetracker.auth.schemas import Identity
from feetracker.backend.base import Backend
from feetracker.core.enums import FeeCategory, PaymentStatusFilter
from feetracker.core.exceptions import ServiceError

from .schemas import FeeRow, PaymentCreate, PaymentRow, PaymentUpdate
from . import service

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


@router.get("/{category}", response_model=List[FeeRow])
async def fee_report(
    category: FeeCategory,
    class_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    payment_status: PaymentStatusFilter = Query(PaymentStatusFilter.ALL, alias="status"),
    current_user: Identity = Depends(require_admin),
    backend: Backend = Depends(get_user_backend),
    today: date = Depends(get_today),
) -> List[FeeRow]:
    try:
        return await service.fee_report(
            backend,
            category,
            today,
            class_id=class_id,
            start_date=start_date,
            end_date=end_date,
            payment_status=payment_status,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/{category}/payments", response_model=List[PaymentRow])
async def payment_records(
    category: FeeCategory,
    class_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: Identity = Depends(require_admin),
    backend: Backend = Depends(get_user_backend),
    today: date = Depends(get_today),
) -> List[PaymentRow]:
    try:
        return await service.payment_records(
            backend, category, today, class_id=class_id, start_date=start_date, end_date=end_date
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/{category}/payments",
    response_model=List[FeeRow],
    status_code=status.HTTP_201_CREATED,
)
async def add_payment(
    category: FeeCategory,
    payload: PaymentCreate,
    current_user: Identity = Depends(require_admin),
    backend: Backend = Depends(get_user_backend),
    today: date = Depends(get_today),
) -> List[FeeRow]:
    try:
        return await service.add_payment(
            backend, category, payload.student_id, payload.amount, current_user.id, today
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch("/{category}/payments/{record_id}", response_model=List[FeeRow])
async def update_payment(
    category: FeeCategory,
    record_id: int,
    payload: PaymentUpdate,
    current_user: Identity = Depends(require_admin),
    backend: Backend = Depends(get_user_backend),
    today: date = Depends(get_today),
) -> List[FeeRow]:
    try:
        await service.amend_payment(backend, category, record_id, payload.amount, today)
        return await service.fee_report(backend, category, today)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
