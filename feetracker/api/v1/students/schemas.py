from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from feetracker.core.schemas import NonEmptyStr


class StudentCreate(BaseModel):
    student_code: NonEmptyStr = Field(..., max_length=50, description="Value encoded in the student's QR code")
    name: NonEmptyStr = Field(..., max_length=255)
    class_id: int
    parent_contact: NonEmptyStr = Field(..., max_length=100)


class StudentUpdate(BaseModel):
    student_code: Optional[NonEmptyStr] = Field(None, max_length=50)
    name: Optional[NonEmptyStr] = Field(None, max_length=255)
    class_id: Optional[int] = None
    parent_contact: Optional[NonEmptyStr] = Field(None, max_length=100)


class StudentResponse(BaseModel):
    id: int
    student_code: str
    name: str
    class_id: Optional[int] = None
    class_name: Optional[str] = None
    parent_contact: str = ""
    created_at: Optional[datetime] = None
