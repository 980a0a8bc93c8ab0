"""Schemas for auth flows (sign-in, register, recovery, reset)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

PASSWORD_MIN_LENGTH = 6
# Matches the user.name column.
NAME_MAX_LENGTH = 255


def check_email_syntax(value: str) -> str:
    """Reject syntactically invalid addresses but keep the value as typed.

    Emails are matched exactly as stored, so no normalization happens here.
    """
    value = value.strip()
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError(f"invalid email: {exc}") from exc
    return value


class CredentialsRequest(BaseModel):
    email: str
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)

    @field_validator("email")
    @classmethod
    def validate_email_syntax(cls, v: str) -> str:
        return check_email_syntax(v)


class RegisterRequest(BaseModel):
    email: str
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    name: Optional[str] = Field(default=None, max_length=NAME_MAX_LENGTH)

    @field_validator("email")
    @classmethod
    def validate_email_syntax(cls, v: str) -> str:
        return check_email_syntax(v)


class ForgotPasswordRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def validate_email_syntax(cls, v: str) -> str:
        return check_email_syntax(v)


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    confirm_password: str = Field(min_length=PASSWORD_MIN_LENGTH, alias="confirmPassword")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def passwords_match(self) -> "ResetPasswordRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class SessionUser(BaseModel):
    """Identity claims carried by a session token."""

    id: int
    email: str
    name: Optional[str] = None


class ResetTokenStatus(BaseModel):
    valid: bool = True
    email: str
    expires_at: datetime

    def to_json(self) -> dict:
        return {"valid": self.valid, "email": self.email, "expiresAt": self.expires_at.isoformat()}
