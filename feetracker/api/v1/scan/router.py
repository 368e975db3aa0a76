"""QR scan payment flow for staff: start, decode, pay."""

from datetime import date
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Request, status

from feetracker.auth.dependencies import get_clock, get_user_backend
from feetracker.auth.rbac import require_staff
from feetracker.auth.schemas import Identity
from feetracker.backend.base import Backend
from feetracker.payments.recorder import PaymentRecorder
from feetracker.payments.scanning import ScanSession, ScanSessionError, ScanSessionStore

from .schemas import DecodeRequest, DecodeResponse, PayRequest, PayResponse, ScanSessionResponse

router = APIRouter(prefix="/api/v1/scan", tags=["scan"])


def get_scan_store(request: Request) -> ScanSessionStore:
    return request.app.state.scan_sessions


def _active_session(store: ScanSessionStore, current_user: Identity) -> ScanSession:
    session = store.get(current_user.id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No active scan session; start scanning first")
    return session


@router.get("", response_model=ScanSessionResponse)
async def current_session(
    current_user: Identity = Depends(require_staff),
    store: ScanSessionStore = Depends(get_scan_store),
) -> ScanSessionResponse:
    return ScanSessionResponse.from_session(store.get(current_user.id))


@router.post("/start", response_model=ScanSessionResponse)
async def start_scanning(
    current_user: Identity = Depends(require_staff),
    backend: Backend = Depends(get_user_backend),
    clock: Callable[[], date] = Depends(get_clock),
    store: ScanSessionStore = Depends(get_scan_store),
) -> ScanSessionResponse:
    recorder = PaymentRecorder(backend, current_user.id, today=clock)
    return ScanSessionResponse.from_session(store.start(current_user.id, recorder))


@router.post("/decode", response_model=DecodeResponse)
async def decode(
    payload: DecodeRequest,
    current_user: Identity = Depends(require_staff),
    store: ScanSessionStore = Depends(get_scan_store),
) -> DecodeResponse:
    session = _active_session(store, current_user)
    accepted = await session.decode(payload.code)
    return DecodeResponse.from_session(session, accepted=accepted)


@router.post("/pay", response_model=PayResponse)
async def pay(
    payload: PayRequest,
    current_user: Identity = Depends(require_staff),
    store: ScanSessionStore = Depends(get_scan_store),
) -> PayResponse:
    session = _active_session(store, current_user)
    try:
        outcome = await session.pay(payload.category)
    except ScanSessionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return PayResponse.from_session(session, result=outcome.result, record_id=outcome.record_id)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def stop_scanning(
    current_user: Identity = Depends(require_staff),
    store: ScanSessionStore = Depends(get_scan_store),
) -> None:
    store.discard(current_user.id)
