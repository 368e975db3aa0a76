from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from feetracker.core.enums import Role


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class Identity(BaseModel):
    """The authenticated actor. Carried in the session token; the role is re-read from the profile per request."""

    id: UUID
    email: str
    full_name: str
    role: Role
    # Backend access token for calls made on the actor's behalf
    access_token: str = Field("", exclude=True, repr=False)


class UserInfo(BaseModel):
    id: UUID
    name: str
    email: str
    role: Role


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserInfo
    issued_at: datetime
