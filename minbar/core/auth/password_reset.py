"""Password-reset token lifecycle: issue, verify, redeem.

The token lives on the user row (``reset_token`` / ``reset_token_expiry``).
Issuing overwrites any previous token. Every write that depends on the token's
current value is a conditional UPDATE, so two concurrent redemptions cannot
both succeed and a rollback never clobbers a newer token.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Protocol

from flask import current_app
from sqlalchemy import update

from minbar.core.auth.errors import DeliveryError, InvalidResetTokenError
from minbar.core.auth.password import hash_password
from minbar.core.auth.schemas import ResetPasswordRequest, ResetTokenStatus
from minbar.core.users.models import User
from minbar.core.users.services import find_user
from minbar.core.utils.dates import utcnow
from minbar.extensions import db

logger = logging.getLogger(__name__)

RESET_TOKEN_BYTES = 32
DEFAULT_RESET_TOKEN_TTL_HOURS = 24
# Identical for "sent" and "no such user".
GENERIC_RESET_MESSAGE = "If the user exists, a reset link has been sent"


class ResetNotifier(Protocol):
    def send_reset_password_email(self, email: str, token: str) -> bool: ...


@dataclass(frozen=True)
class ResetIssueResult:
    message: str = GENERIC_RESET_MESSAGE


def generate_reset_token() -> str:
    return secrets.token_hex(RESET_TOKEN_BYTES)


def mask_email(email: str) -> str:
    """``ahmed@example.com`` -> ``a***d@example.com``."""
    local, sep, domain = email.partition("@")
    if not sep:
        return "***"
    if len(local) <= 2:
        masked = local[:1] + "***"
    else:
        masked = f"{local[0]}***{local[-1]}"
    return f"{masked}@{domain}"


def _token_ttl() -> timedelta:
    hours = current_app.config.get("RESET_TOKEN_TTL_HOURS", DEFAULT_RESET_TOKEN_TTL_HOURS)
    return timedelta(hours=hours)


def _default_notifier() -> ResetNotifier:
    return current_app.extensions["reset_notifier"]


def _find_user(user_id: Optional[int], email: Optional[str]) -> Optional[User]:
    if user_id is not None:
        return find_user(user_id)
    if email:
        return User.query.filter_by(email=email).first()
    return None


def _clear_issued_token(user_id: int, token: str) -> None:
    """Undo an issuance, but only if the stored token is still ours."""
    try:
        db.session.execute(
            update(User)
            .where(User.id == user_id, User.reset_token == token)
            .values(reset_token=None, reset_token_expiry=None)
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception("Failed to roll back reset token for user %s", user_id)
        raise


def issue_reset_token(
    user_id: Optional[int] = None,
    email: Optional[str] = None,
    notifier: Optional[ResetNotifier] = None,
) -> ResetIssueResult:
    """Create a reset token for a user and deliver it.

    An unknown user gets the same result as a successful send. If delivery
    fails (``False`` or any exception) the token is cleared again and
    ``DeliveryError`` is raised.
    """
    user = _find_user(user_id, email)
    if not user:
        logger.info("Password reset requested for unknown account")
        return ResetIssueResult()

    notifier = notifier or _default_notifier()
    token = generate_reset_token()
    expires_at = utcnow() + _token_ttl()
    db.session.execute(
        update(User)
        .where(User.id == user.id)
        .values(reset_token=token, reset_token_expiry=expires_at)
    )
    db.session.commit()

    try:
        delivered = notifier.send_reset_password_email(user.email, token)
    except Exception:
        logger.exception("Reset notifier raised for user %s", user.id)
        delivered = False

    if not delivered:
        _clear_issued_token(user.id, token)
        logger.warning("Reset email not delivered for user %s; token cleared", user.id)
        raise DeliveryError()

    logger.info("Password reset issued for user %s (expires %s)", user.id, expires_at.isoformat())
    return ResetIssueResult()


def _active_token_user(token: str, now: datetime) -> Optional[User]:
    return User.query.filter(
        User.reset_token == token,
        User.reset_token_expiry > now,
    ).first()


def verify_reset_token(token: str) -> ResetTokenStatus:
    """Read-only check that a token is known and unexpired."""
    user = _active_token_user(token, utcnow()) if token else None
    if not user:
        raise InvalidResetTokenError()
    return ResetTokenStatus(email=mask_email(user.email), expires_at=user.reset_token_expiry)


def redeem_reset_token(payload: ResetPasswordRequest) -> None:
    """Replace the password and consume the token in one conditional write."""
    new_hash = hash_password(payload.password)
    result = db.session.execute(
        update(User)
        .where(User.reset_token == payload.token, User.reset_token_expiry > utcnow())
        .values(password_hash=new_hash, reset_token=None, reset_token_expiry=None)
        # Keep loaded rows in sync without a pre-UPDATE SELECT.
        .execution_options(synchronize_session="evaluate")
    )
    if result.rowcount != 1:
        db.session.rollback()
        logger.info("Password reset redemption rejected")
        raise InvalidResetTokenError()
    db.session.commit()
    logger.info("Password reset completed")
