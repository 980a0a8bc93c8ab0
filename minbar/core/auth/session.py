"""Stateless signed sessions.

A session is nothing more than a JWT carrying ``{sub, email, name}`` plus its
own expiry. Validity is decided by signature and ``exp`` alone: nothing is
looked up or written server-side, and an invalid token simply means "no
session".
"""

from __future__ import annotations

import logging
from typing import Optional

from flask import g
from flask_jwt_extended import create_access_token, decode_token, get_jwt, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from minbar.core.auth.schemas import SessionUser

logger = logging.getLogger(__name__)

_SESSION_CACHE_KEY = "auth_session"


def issue_session_token(identity: SessionUser) -> str:
    """Mint a signed session token for a verified identity."""
    return create_access_token(
        identity=str(identity.id),
        additional_claims={"email": identity.email, "name": identity.name},
    )


def _identity_from_claims(claims: dict) -> Optional[SessionUser]:
    try:
        return SessionUser(
            id=int(claims["sub"]),
            email=claims["email"],
            name=claims.get("name"),
        )
    except (KeyError, TypeError, ValueError):
        return None


def decode_session_token(token: str) -> Optional[SessionUser]:
    """Verify a raw token and return its identity, or ``None`` if unusable."""
    if not token:
        return None
    try:
        claims = decode_token(token)
    except (JWTExtendedException, PyJWTError):
        return None
    if claims.get("type") != "access":
        return None
    return _identity_from_claims(claims)


def current_session() -> Optional[SessionUser]:
    """Session for the current request (header or cookie), cached on ``g``."""
    if _SESSION_CACHE_KEY in g:
        return g.get(_SESSION_CACHE_KEY)

    session_user: Optional[SessionUser] = None
    try:
        # None when no token was sent (or the method is exempt, e.g. OPTIONS).
        if verify_jwt_in_request(optional=True) is not None:
            session_user = _identity_from_claims(get_jwt())
    except (JWTExtendedException, PyJWTError) as exc:
        logger.debug("Ignoring unusable session token: %s", exc.__class__.__name__)

    setattr(g, _SESSION_CACHE_KEY, session_user)
    return session_user
