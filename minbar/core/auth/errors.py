"""Service-level failures raised by the auth and user layers.

Each error carries a machine ``code`` (used verbatim in JSON responses) and the
HTTP ``status`` the controllers map it to. They subclass ``ValueError`` so
callers that only care about "the operation was refused" can keep catching
that.
"""

from __future__ import annotations


class AuthError(ValueError):
    code = "auth_error"
    status = 400

    def __init__(self, code: str | None = None):
        if code:
            self.code = code
        super().__init__(self.code)


class InvalidRequestError(AuthError):
    code = "bad_request"
    status = 400


class AuthenticationError(AuthError):
    code = "invalid_credentials"
    status = 401


class ForbiddenError(AuthError):
    code = "forbidden"
    status = 403


class NotFoundError(AuthError):
    code = "not_found"
    status = 404


class ConflictError(AuthError):
    code = "email_already_exists"
    status = 409


class InvalidResetTokenError(AuthError):
    # Same code for unknown and expired tokens.
    code = "invalid_or_expired_token"
    status = 400


class DeliveryError(AuthError):
    code = "email_delivery_failed"
    status = 500
