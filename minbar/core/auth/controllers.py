"""Auth HTTP controllers (JSON API + guarded auth pages)."""

from __future__ import annotations

from flask import Blueprint, jsonify, render_template, request, session
from flask_jwt_extended import set_access_cookies, unset_jwt_cookies
from pydantic import ValidationError

from minbar.core.auth.auth_service import authenticate_payload, register_user
from minbar.core.auth.errors import AuthError, AuthenticationError
from minbar.core.auth.guard import private, session_status
from minbar.core.auth.password_reset import issue_reset_token, verify_reset_token
from minbar.core.auth.schemas import ForgotPasswordRequest, RegisterRequest
from minbar.core.auth.session import current_session, issue_session_token
from minbar.core.utils.validation import jsonable_errors
from minbar.extensions import limiter

auth_api_bp = Blueprint("auth_api", __name__)
auth_pages_bp = Blueprint("auth_pages", __name__)


@auth_api_bp.post("/register")
@limiter.limit("5/minute")
def register():
    payload = request.get_json(silent=True) or {}
    try:
        data = RegisterRequest.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "bad_request", "details": jsonable_errors(exc)}), 400
    try:
        user = register_user(data)
    except AuthError as exc:
        return jsonify({"ok": False, "error": exc.code}), exc.status
    return jsonify({"ok": True, "id": user.id, "email": user.email}), 201


@auth_api_bp.post("/auth/login")
@limiter.limit("10/minute")
def login():
    # Sessions are stateless; drop anything a stale Flask cookie carried in.
    session.clear()
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    identity = authenticate_payload(payload)
    if identity is None:
        exc = AuthenticationError()
        return jsonify({"ok": False, "error": exc.code}), exc.status

    token = issue_session_token(identity)
    resp = jsonify({"ok": True, "access_token": token, "user": identity.model_dump()})
    set_access_cookies(resp, token)
    return resp


@auth_api_bp.post("/auth/logout")
def logout():
    # No server-side state to revoke; the client simply forgets the token.
    resp = jsonify({"ok": True})
    unset_jwt_cookies(resp)
    return resp


@auth_api_bp.get("/auth/session")
def session_info():
    identity = current_session()
    return jsonify(
        {
            "ok": True,
            "status": session_status().value,
            "session": identity.model_dump() if identity else None,
        }
    )


@auth_api_bp.post("/auth/forgot-password")
@limiter.limit("5/minute")
def forgot_password():
    payload = request.get_json(silent=True) or {}
    try:
        data = ForgotPasswordRequest.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "bad_request", "details": jsonable_errors(exc)}), 400
    try:
        result = issue_reset_token(email=data.email)
    except AuthError as exc:
        return jsonify({"ok": False, "error": exc.code}), exc.status
    return jsonify({"ok": True, "message": result.message})


@auth_pages_bp.get("/login")
@private(guest_only=True)
def login_page():
    return render_template("auth/login.html")


@auth_pages_bp.get("/register")
@private(guest_only=True)
def register_page():
    return render_template("auth/register.html")


@auth_pages_bp.get("/password-reset/<token>")
def password_reset_page(token: str):
    try:
        status = verify_reset_token(token)
    except AuthError:
        status = None
    return render_template("auth/password_reset.html", token=token, status=status)
