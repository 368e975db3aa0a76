from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from feetracker.core.schemas import Amount, NonEmptyStr


class ClassCreate(BaseModel):
    class_name: NonEmptyStr = Field(..., max_length=100)


class ClassUpdate(BaseModel):
    class_name: Optional[NonEmptyStr] = Field(None, max_length=100)
    set_feeding_fees: Optional[Amount] = None
    set_transport_fees: Optional[Amount] = None
    set_school_fees: Optional[Amount] = None


class ClassResponse(BaseModel):
    id: int
    class_name: str
    set_feeding_fees: Decimal
    set_transport_fees: Decimal
    set_school_fees: Decimal
