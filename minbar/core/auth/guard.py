"""Route guard for authenticated-only and guest-only pages.

``resolve_guard`` is the whole decision table; ``private`` applies it to a Flask
view. Public pages are simply not decorated.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from functools import wraps
from typing import Callable, Optional, TypeVar

from flask import current_app, redirect

from minbar.core.auth.session import current_session

F = TypeVar("F", bound=Callable)


class SessionStatus(str, enum.Enum):
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class GuardOutcome(str, enum.Enum):
    RENDER = "render"
    REDIRECT = "redirect"
    LOADING = "loading"


@dataclass(frozen=True)
class GuardDecision:
    outcome: GuardOutcome
    target: Optional[str] = None


def resolve_guard(
    status: SessionStatus,
    guest_only: bool = False,
    redirect_to: str = "/",
) -> GuardDecision:
    """Decide what a guarded page does for the given session status.

    While the session is still loading nothing is rendered and nothing is
    redirected; once resolved exactly one of render/redirect comes out.
    """
    status = SessionStatus(status)
    if status is SessionStatus.LOADING:
        return GuardDecision(GuardOutcome.LOADING)

    authenticated = status is SessionStatus.AUTHENTICATED
    if guest_only:
        if authenticated:
            return GuardDecision(GuardOutcome.REDIRECT, redirect_to)
        return GuardDecision(GuardOutcome.RENDER)

    if not authenticated:
        return GuardDecision(GuardOutcome.REDIRECT, redirect_to)
    return GuardDecision(GuardOutcome.RENDER)


def session_status() -> SessionStatus:
    """Server-side status; the token check is synchronous so it is never loading."""
    if current_session() is not None:
        return SessionStatus.AUTHENTICATED
    return SessionStatus.UNAUTHENTICATED


def _default_target(guest_only: bool) -> str:
    if guest_only:
        return current_app.config.get("AUTH_LANDING_ROUTE", "/admin")
    return current_app.config.get("AUTH_FALLBACK_ROUTE", "/")


def private(guest_only: bool = False, redirect_to: Optional[str] = None):
    """Guard a page view.

    Protected views redirect anonymous visitors to ``redirect_to`` (default:
    ``AUTH_FALLBACK_ROUTE``); guest-only views redirect signed-in users to
    ``redirect_to`` (default: ``AUTH_LANDING_ROUTE``).
    Server-side the session is always resolved, so the loading outcome
    belongs to clients polling ``/api/auth/session``, not to this decorator.
    """

    def decorator(fn: F) -> F:
        @wraps(fn)
        def wrapper(*args, **kwargs):  # type: ignore[misc]
            target = redirect_to or _default_target(guest_only)
            decision = resolve_guard(session_status(), guest_only=guest_only, redirect_to=target)
            if decision.outcome is GuardOutcome.REDIRECT:
                return redirect(decision.target)
            return fn(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
