"""User model and back-office roles."""

from __future__ import annotations

import enum
from datetime import datetime

from flask_login import UserMixin
from sqlalchemy.orm import Mapped, mapped_column

from minbar.core.utils.dates import utcnow
from minbar.extensions import db


class Role(str, enum.Enum):
    """Back-office roles, highest access first."""

    OWNER = "OWNER"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)


class User(db.Model, TimestampMixin, UserMixin):
    __tablename__ = "user"
    __table_args__ = (db.Index("ix_user_reset_token", "reset_token"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(db.String(255), unique=True, nullable=False, index=True)
    name: Mapped[str | None] = mapped_column(db.String(255))
    password_hash: Mapped[str] = mapped_column(db.String(255), nullable=False)
    role: Mapped[Role] = mapped_column(
        db.Enum(Role, name="user_role"), nullable=False, default=Role.ADMIN
    )
    reset_token: Mapped[str | None] = mapped_column(db.String(128))
    reset_token_expiry: Mapped[datetime | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
