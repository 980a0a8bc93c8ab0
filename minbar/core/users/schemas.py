"""Typed schemas for user IO."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from minbar.core.auth.schemas import NAME_MAX_LENGTH, PASSWORD_MIN_LENGTH, check_email_syntax
from minbar.core.users.models import Role

if TYPE_CHECKING:
    from minbar.core.users.models import User


class UserCreateRequest(BaseModel):
    email: str
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    name: Optional[str] = Field(default=None, max_length=NAME_MAX_LENGTH)
    role: Role = Role.ADMIN

    @field_validator("email")
    @classmethod
    def validate_email_syntax(cls, v: str) -> str:
        return check_email_syntax(v)


class UserUpdateRequest(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    password: Optional[str] = Field(default=None, min_length=PASSWORD_MIN_LENGTH)
    role: Optional[Role] = None

    @field_validator("email")
    @classmethod
    def validate_email_syntax(cls, v: Optional[str]) -> Optional[str]:
        return check_email_syntax(v) if v is not None else None


class UserResponse(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    role: Role
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


def serialize_user(user: "User") -> dict:
    """JSON-ready user without password or reset material."""
    return UserResponse.model_validate(user).model_dump(mode="json")
