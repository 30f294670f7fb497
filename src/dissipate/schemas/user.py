"""Pydantic schemas for login and account settings.

Learn: UserRead is the only user shape that ever leaves the API —
id, email, username and timestamps. The credential never appears in a response.
"""

from datetime import datetime

from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"


class LoginRequest(BaseModel):
    # Deliberately unvalidated: a malformed email must fail exactly like a wrong one.
    email: str
    password: str


class UserRead(BaseModel):
    id: str
    email: str
    username: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    token: str
    user: UserRead


class UpdateEmailRequest(BaseModel):
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)


class UpdateUsernameRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)


class UpdatePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=8)


class SuccessResponse(BaseModel):
    success: bool = True
