from __future__ import annotations

import pytest

pytestmark = pytest.mark.integration

from minbar.core.auth.password_reset import GENERIC_RESET_MESSAGE
from minbar.core.users.models import User
from minbar.extensions import db


def _stored_token(app, user_id):
    with app.app_context():
        return db.session.get(User, user_id).reset_token


@pytest.mark.parametrize(
    "raw_id",
    # "%C2%B2" is "²", "%E2%91%A0" is "①", "%D9%A1" is Arabic-Indic one.
    ["abc", "0", "-3", "1.5", "%C2%B2", "%E2%91%A0", "%D9%A1"],
)
def test_issue_rejects_non_positive_ids(client, notifier, raw_id):
    resp = client.post(f"/api/users/{raw_id}/password-reset")
    assert resp.status_code == 400
    assert resp.get_json() == {"ok": False, "error": "invalid_user_id"}
    assert notifier.calls == []


def test_known_and_unknown_ids_get_the_same_response(client, make_user, notifier):
    user_id = make_user(email="x@y.com")

    known = client.post(f"/api/users/{user_id}/password-reset")
    unknown = client.post(f"/api/users/{user_id + 50}/password-reset")
    out_of_range = client.post("/api/users/99999999999999999999999/password-reset")

    assert known.status_code == unknown.status_code == out_of_range.status_code == 200
    generic = {"ok": True, "message": GENERIC_RESET_MESSAGE}
    assert known.get_json() == unknown.get_json() == out_of_range.get_json() == generic
    assert [email for email, _ in notifier.calls] == ["x@y.com"]


def test_delivery_failure_is_reported_and_token_cleared(app, client, make_user, notifier):
    user_id = make_user(email="x@y.com")
    notifier.result = False

    resp = client.post(f"/api/users/{user_id}/password-reset")

    assert resp.status_code == 500
    assert resp.get_json() == {"ok": False, "error": "email_delivery_failed"}
    assert _stored_token(app, user_id) is None


def test_forgot_password_issues_by_email(app, client, make_user, notifier):
    user_id = make_user(email="x@y.com")

    resp = client.post("/api/auth/forgot-password", json={"email": "x@y.com"})
    ghost = client.post("/api/auth/forgot-password", json={"email": "ghost@y.com"})

    assert resp.get_json() == ghost.get_json() == {"ok": True, "message": GENERIC_RESET_MESSAGE}
    assert notifier.calls == [("x@y.com", _stored_token(app, user_id))]


def test_forgot_password_rejects_malformed_email(client, notifier):
    resp = client.post("/api/auth/forgot-password", json={"email": "nope"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "bad_request"


def test_verify_endpoint(client, make_user, notifier):
    user_id = make_user(email="ahmed@example.com")
    client.post(f"/api/users/{user_id}/password-reset")
    token = notifier.calls[0][1]

    ok = client.get(f"/api/users/password-reset/{token}")
    bad = client.get("/api/users/password-reset/not-a-token")

    assert ok.status_code == 200
    body = ok.get_json()
    assert body["valid"] is True
    assert body["email"] == "a***d@example.com"
    assert body["expiresAt"]
    assert bad.status_code == 400
    assert bad.get_json() == {"ok": False, "error": "invalid_or_expired_token"}


def test_redeem_endpoint_consumes_token_once(client, make_user, notifier):
    user_id = make_user(email="x@y.com", password="old-secret")
    client.post(f"/api/users/{user_id}/password-reset")
    token = notifier.calls[0][1]
    body = {"password": "new-secret", "confirmPassword": "new-secret"}

    first = client.post(f"/api/users/password-reset/{token}", json=body)
    second = client.post(f"/api/users/password-reset/{token}", json=body)

    assert first.status_code == 200
    assert first.get_json() == {"ok": True, "message": "Password reset successfully"}
    assert second.status_code == 400
    assert second.get_json()["error"] == "invalid_or_expired_token"

    login = client.post("/api/auth/login", json={"email": "x@y.com", "password": "new-secret"})
    assert login.status_code == 200


@pytest.mark.parametrize(
    "body",
    [
        {"password": "new-secret", "confirmPassword": "other-secret"},
        {"password": "short", "confirmPassword": "short"},
        {},
    ],
)
def test_redeem_rejects_invalid_payload_without_consuming(app, client, make_user, notifier, body):
    user_id = make_user(email="x@y.com")
    client.post(f"/api/users/{user_id}/password-reset")
    token = notifier.calls[0][1]

    resp = client.post(f"/api/users/password-reset/{token}", json=body)

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "bad_request"
    assert _stored_token(app, user_id) == token


def test_reset_page_renders_for_valid_and_invalid_tokens(client, make_user, notifier):
    user_id = make_user(email="x@y.com")
    client.post(f"/api/users/{user_id}/password-reset")
    token = notifier.calls[0][1]

    assert client.get(f"/auth/password-reset/{token}").status_code == 200
    assert client.get("/auth/password-reset/unknown").status_code == 200
