"""User controllers: back-office administration and password reset."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required
from pydantic import ValidationError

from minbar.core.auth.errors import AuthError
from minbar.core.auth.password_reset import issue_reset_token, redeem_reset_token, verify_reset_token
from minbar.core.auth.schemas import ResetPasswordRequest
from minbar.core.users.models import Role
from minbar.core.users.schemas import UserCreateRequest, UserUpdateRequest, serialize_user
from minbar.core.users.services import create_user, delete_user, get_user_for, list_users, update_user
from minbar.core.utils.decorators import require_roles
from minbar.core.utils.validation import jsonable_errors, parse_positive_id
from minbar.extensions import limiter

user_api_bp = Blueprint("user_api", __name__)


def _bad_request(exc: ValidationError):
    return jsonify({"ok": False, "error": "bad_request", "details": jsonable_errors(exc)}), 400


def _invalid_id():
    return jsonify({"ok": False, "error": "invalid_user_id"}), 400


def _failed(exc: AuthError):
    return jsonify({"ok": False, "error": exc.code}), exc.status


# --- administration ---


@user_api_bp.get("")
@login_required
def api_list_users():
    return jsonify({"ok": True, "users": [serialize_user(u) for u in list_users()]})


@user_api_bp.post("")
@require_roles({Role.OWNER, Role.MANAGER})
def api_create_user():
    payload = request.get_json(silent=True) or {}
    try:
        data = UserCreateRequest.model_validate(payload)
    except ValidationError as exc:
        return _bad_request(exc)
    try:
        user = create_user(current_user, data)
    except AuthError as exc:
        return _failed(exc)
    return jsonify({"ok": True, "user": serialize_user(user)}), 201


@user_api_bp.get("/<user_id>")
@login_required
def api_get_user(user_id: str):
    parsed = parse_positive_id(user_id)
    if parsed is None:
        return _invalid_id()
    try:
        user = get_user_for(current_user, parsed)
    except AuthError as exc:
        return _failed(exc)
    return jsonify({"ok": True, "user": serialize_user(user)})


@user_api_bp.put("/<user_id>")
@login_required
def api_update_user(user_id: str):
    parsed = parse_positive_id(user_id)
    if parsed is None:
        return _invalid_id()
    payload = request.get_json(silent=True) or {}
    try:
        data = UserUpdateRequest.model_validate(payload)
    except ValidationError as exc:
        return _bad_request(exc)
    try:
        user = update_user(current_user, parsed, data)
    except AuthError as exc:
        return _failed(exc)
    return jsonify({"ok": True, "user": serialize_user(user), "message": "User updated successfully"})


@user_api_bp.delete("/<user_id>")
@login_required
def api_delete_user(user_id: str):
    parsed = parse_positive_id(user_id)
    if parsed is None:
        return _invalid_id()
    try:
        delete_user(current_user, parsed)
    except AuthError as exc:
        return _failed(exc)
    return jsonify({"ok": True, "message": "User deleted successfully"})


# --- password reset ---


@user_api_bp.post("/<user_id>/password-reset")
@limiter.limit("5/minute")
def api_issue_password_reset(user_id: str):
    parsed = parse_positive_id(user_id)
    if parsed is None:
        return _invalid_id()
    try:
        result = issue_reset_token(user_id=parsed)
    except AuthError as exc:
        return _failed(exc)
    return jsonify({"ok": True, "message": result.message})


@user_api_bp.get("/password-reset/<token>")
def api_verify_password_reset(token: str):
    try:
        status = verify_reset_token(token)
    except AuthError as exc:
        return _failed(exc)
    return jsonify({"ok": True, **status.to_json()})


@user_api_bp.post("/password-reset/<token>")
@limiter.limit("10/minute")
def api_redeem_password_reset(token: str):
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    try:
        data = ResetPasswordRequest.model_validate({**payload, "token": token})
    except ValidationError as exc:
        return _bad_request(exc)
    try:
        redeem_reset_token(data)
    except AuthError as exc:
        return _failed(exc)
    return jsonify({"ok": True, "message": "Password reset successfully"})
