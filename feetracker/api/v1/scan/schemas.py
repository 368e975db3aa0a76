from typing import Optional

from pydantic import BaseModel, field_validator

from feetracker.core.enums import FeeCategory, PaymentResult, ScanState
from feetracker.core.schemas import NonEmptyStr
from feetracker.payments.scanning import ScanSession


class DecodeRequest(BaseModel):
    code: NonEmptyStr


class PayRequest(BaseModel):
    category: FeeCategory

    @field_validator("category")
    @classmethod
    def daily_category_only(cls, v: FeeCategory) -> FeeCategory:
        if not v.is_daily:
            raise ValueError("Only feeding and transport fees are recorded by scanning")
        return v


class StudentCardResponse(BaseModel):
    id: int
    student_code: str
    name: str
    class_name: Optional[str] = None


class ScanSessionResponse(BaseModel):
    state: ScanState
    scanner_active: bool
    scanned_code: Optional[str] = None
    student: Optional[StudentCardResponse] = None
    error: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def from_session(cls, session: Optional[ScanSession], **extra) -> "ScanSessionResponse":
        if session is None:
            return cls(state=ScanState.IDLE, scanner_active=False, **extra)
        student = None
        if session.student is not None:
            s = session.student
            student = StudentCardResponse(id=s.id, student_code=s.student_code, name=s.name, class_name=s.class_name)
        return cls(
            state=session.state,
            scanner_active=session.scanner_active,
            scanned_code=session.last_code,
            student=student,
            error=session.error,
            message=session.message,
            **extra,
        )


class DecodeResponse(ScanSessionResponse):
    accepted: bool


class PayResponse(ScanSessionResponse):
    result: PaymentResult
    record_id: Optional[int] = None
