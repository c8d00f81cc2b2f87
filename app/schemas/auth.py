"""Identity and authentication request/response models."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, EmailStr, Field


def normalize_email(email: str) -> str:
    """Lower-case and strip an email address so lookups are case-insensitive."""
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    """Same check EmailStr applies, for callers outside a request model."""
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


class Identity(BaseModel):
    """Verified caller identity carried by a bearer token."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    email: str
    name: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    name: str = Field(max_length=255)


class LoginRequest(BaseModel):
    email: str
    password: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str
    created_at: Optional[datetime] = None
