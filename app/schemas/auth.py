"""Pydantic schemas for authentication endpoints."""

from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from pydantic import Field, field_validator

from app.models.user import IndustryType
from app.schemas.common import CamelModel

PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


def _check_email(value: str) -> str:
    """Reject malformed addresses. The address is kept as given, not normalized."""
    value = value.strip()
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("Please provide a valid email") from None
    return value


class RegisterRequest(CamelModel):
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    email: str = Field(max_length=255)
    password: str = Field(min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    phone: str | None = Field(default=None, max_length=20)
    industry_type: IndustryType = IndustryType.OTHER

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _check_email(v)


class LoginRequest(CamelModel):
    email: str = Field(max_length=255)
    password: str = Field(min_length=1, max_length=PASSWORD_MAX_LEN)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _check_email(v)


class RefreshRequest(CamelModel):
    refresh_token: str | None = None


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class LogoutRequest(CamelModel):
    refresh_token: str | None = None


class UserResponse(CamelModel):
    """Public view of a user. Never carries the password hash."""

    id: str
    first_name: str
    last_name: str
    email: str
    role: str
    industry_type: str
    phone: str | None = None
    avatar: str | None = None
    is_active: bool
    is_email_verified: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class TokenPairResponse(CamelModel):
    access_token: str
    refresh_token: str


class AuthPayload(TokenPairResponse):
    user: UserResponse


class UserPayload(CamelModel):
    user: UserResponse
