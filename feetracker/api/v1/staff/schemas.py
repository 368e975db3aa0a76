from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from feetracker.core.enums import Role
from feetracker.core.schemas import NonEmptyStr


class StaffCreate(BaseModel):
    email: EmailStr
    full_name: NonEmptyStr = Field(..., max_length=255)
    role: Role = Role.STAFF
    # Without a password the account is invited by e-mail
    password: Optional[str] = Field(None, min_length=8)


class RoleChange(BaseModel):
    role: Role


class StaffResponse(BaseModel):
    id: UUID
    email: Optional[str] = None
    full_name: str
    role: Role
    created_at: Optional[datetime] = None
