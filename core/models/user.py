# =============================================================================
# core/models/user.py - User & Credential Schemas
# =============================================================================
# These models define the API contract for authentication:
# - RegisterRequest: Input for POST /api/auth/register
# - LoginRequest: Input for POST /api/auth/login
# - UserPublic: The user as returned to clients (never the password hash)
# =============================================================================

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

PASSWORD_MIN_LENGTH = 6
_PASSWORD_CLASSES = (
    re.compile(r"[a-z]"),
    re.compile(r"[A-Z]"),
    re.compile(r"\d"),
)


class RegisterRequest(BaseModel):
    """
    Schema for registering a new user.

    Example:
        {"email": "a@example.com", "password": "Passw0rd"}
    """

    model_config = ConfigDict(extra="ignore")

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="Plain text password (hashed before storage)")

    @field_validator("email", mode="before")
    @classmethod
    def _email_is_string(cls, value):
        if not isinstance(value, str):
            raise ValueError("Invalid email address")
        return value.strip()

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password", mode="before")
    @classmethod
    def _password_is_string(cls, value):
        if not isinstance(value, str):
            raise ValueError("Password must be a string")
        return value

    @field_validator("password")
    @classmethod
    def _password_strength(cls, value: str) -> str:
        if len(value) < PASSWORD_MIN_LENGTH:
            raise ValueError(
                f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
            )
        if not all(pattern.search(value) for pattern in _PASSWORD_CLASSES):
            raise ValueError(
                "Password must contain at least one lowercase letter, "
                "one uppercase letter, and one number"
            )
        return value


class LoginRequest(BaseModel):
    """Schema for logging in. Only presence is checked; the hash decides."""

    model_config = ConfigDict(extra="ignore")

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserPublic(BaseModel):
    """
    Schema for returning a user to clients.

    Built from a `users` row; the password hash is not a field here,
    so it can't be serialized by accident.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    email: str
    created_at: datetime | None = None
