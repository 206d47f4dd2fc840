"""Authentication schemas."""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

# (field, pydantic error type) -> message; used when turning a
# ValidationError into field errors.
REGISTER_MESSAGES: dict[tuple[str, str], str] = {
    ("email", "missing"): "Email is required",
    ("email", "value_error"): "Please enter a valid email address",
    ("email", "string_type"): "Please enter a valid email address",
    ("password", "missing"): "Password is required",
    ("password", "string_too_short"): "Password must be at least 8 characters",
    ("password", "string_too_long"): "Password must be less than 100 characters",
}

LOGIN_MESSAGES: dict[tuple[str, str], str] = {
    ("email", "missing"): "Email is required",
    ("email", "value_error"): "Please enter a valid email address",
    ("email", "string_type"): "Please enter a valid email address",
    ("password", "missing"): "Password is required",
    ("password", "string_too_short"): "Password is required",
}


class RegistrationRequest(BaseModel):
    """Sign-up payload."""

    email: EmailStr
    password: str = Field(min_length=8, max_length=100)

class LoginRequest(BaseModel):
    """Sign-in payload; no strength rules on login."""

    email: EmailStr
    password: str = Field(min_length=1)

class UserRead(BaseModel):
    """Public view of the signed-in user."""

    id: uuid.UUID
    email: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
