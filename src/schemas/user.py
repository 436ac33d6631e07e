"""Pydantic schemas for registration, login and user endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

# bcrypt only looks at the first 72 bytes of a password
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 72


class UserRegister(BaseModel):
    """Schema for registering a new user."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Trim the display name."""
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v: object) -> object:
        """Drop surrounding whitespace before the address is parsed."""
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        """Store the whole address lower-cased; it is the login identifier."""
        return v.lower()

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, v: str) -> str:
        """Reject passwords bcrypt would silently truncate."""
        if len(v.encode("utf-8")) > MAX_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_LENGTH} bytes")
        return v


class UserLogin(BaseModel):
    """Schema for logging in."""

    email: EmailStr
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v: object) -> object:
        """Drop surrounding whitespace before the address is parsed."""
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        """Lower-case the email for lookup."""
        return v.lower()


class UserResponse(BaseModel):
    """Schema for user responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str
    created_at: datetime


class AccessTokenResponse(BaseModel):
    """Returned by register and login."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse
