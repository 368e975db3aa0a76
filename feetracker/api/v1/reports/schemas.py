from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from feetracker.core.enums import FeeCategory
from feetracker.core.schemas import Amount


class FeeRow(BaseModel):
    """One student's standing for a fee category."""

    student_id: int
    student_name: str
    class_id: Optional[int] = None
    class_name: Optional[str] = None
    total_fees: Decimal
    amount_paid: Decimal
    balance: Decimal
    payment_count: int = 0
    latest_payment_id: Optional[int] = None
    latest_amount: Optional[Decimal] = None
    date_paid: Optional[date] = None
    staff_name: Optional[str] = None
    staff_role: Optional[str] = None
    editable: bool = Field(False, description="Latest payment is dated today and may be amended")


class PaymentRow(BaseModel):
    """One payment record; balance is the class fee less this payment."""

    record_id: int
    student_id: int
    student_name: str
    class_id: Optional[int] = None
    class_name: Optional[str] = None
    total_fees: Decimal
    amount_paid: Decimal
    balance: Decimal
    date_paid: date
    staff_name: Optional[str] = None
    staff_role: Optional[str] = None
    editable: bool = False


class PaymentCreate(BaseModel):
    student_id: int
    amount: Amount = Field(..., gt=0)


class PaymentUpdate(BaseModel):
    amount: Amount = Field(..., gt=0)


class StaffRecordRow(BaseModel):
    record_id: int
    category: FeeCategory
    student_name: Optional[str] = None
    class_name: Optional[str] = None
    amount_paid: Decimal
    date_paid: date
    editable: bool = False
