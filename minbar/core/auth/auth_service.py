"""Authentication service layer: credential checks and registration."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from minbar.core.auth.errors import ConflictError
from minbar.core.auth.password import burn_password_check, hash_password, verify_password
from minbar.core.auth.schemas import CredentialsRequest, RegisterRequest, SessionUser
from minbar.core.users.models import User
from minbar.extensions import db

logger = logging.getLogger(__name__)


def authenticate_user(email: Any, password: Any) -> Optional[SessionUser]:
    """Return the session identity if the credentials are valid.

    Malformed input, an unknown email and a wrong password all return ``None``;
    callers must not tell them apart.
    """
    try:
        data = CredentialsRequest.model_validate({"email": email, "password": password})
    except ValidationError:
        return None

    user = User.query.filter_by(email=data.email).first()
    if not user:
        burn_password_check(data.password)
        logger.info("Sign-in rejected for %s", data.email)
        return None
    if not verify_password(data.password, user.password_hash):
        logger.info("Sign-in rejected for %s", data.email)
        return None
    return SessionUser(id=user.id, email=user.email, name=user.name)


def authenticate_payload(payload: Mapping[str, Any]) -> Optional[SessionUser]:
    """``authenticate_user`` for a raw JSON body."""
    return authenticate_user(payload.get("email"), payload.get("password"))


def register_user(payload: RegisterRequest) -> User:
    """Create a user with a hashed password; duplicate emails are a conflict."""
    if User.query.filter_by(email=payload.email).first():
        raise ConflictError()

    user = User(
        email=payload.email,
        name=payload.name,
        password_hash=hash_password(payload.password),
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email.
        db.session.rollback()
        raise ConflictError()
    logger.info("Registered user %s", user.id)
    return user
