from __future__ import annotations

from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token, create_refresh_token

pytestmark = pytest.mark.integration

from minbar.core.auth.schemas import SessionUser
from minbar.core.auth.session import decode_session_token, issue_session_token


def test_token_round_trips_identity_claims(app):
    identity = SessionUser(id=7, email="imam@example.com", name="Imam")
    with app.app_context():
        token = issue_session_token(identity)
        assert decode_session_token(token) == identity


def test_expired_token_is_no_session(app):
    with app.app_context():
        token = create_access_token(
            identity="7",
            additional_claims={"email": "imam@example.com", "name": None},
            expires_delta=timedelta(seconds=-5),
        )
        assert decode_session_token(token) is None


def test_tampered_or_foreign_tokens_are_no_session(app):
    with app.app_context():
        token = issue_session_token(SessionUser(id=7, email="imam@example.com"))
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        refresh = create_refresh_token(identity="7")

        assert decode_session_token(tampered) is None
        assert decode_session_token("not-a-jwt") is None
        assert decode_session_token("") is None
        assert decode_session_token(refresh) is None


def test_session_endpoint_reports_unauthenticated_without_token(client):
    resp = client.get("/api/auth/session")
    assert resp.status_code == 200
    assert resp.get_json() == {"ok": True, "status": "unauthenticated", "session": None}


def test_session_endpoint_reads_bearer_token(client, make_user, auth_headers):
    user_id = make_user(email="imam@example.com", name="Imam")

    resp = client.get("/api/auth/session", headers=auth_headers(user_id))

    body = resp.get_json()
    assert body["status"] == "authenticated"
    assert body["session"] == {"id": user_id, "email": "imam@example.com", "name": "Imam"}


def test_garbage_token_is_treated_as_no_session(client):
    resp = client.get("/api/auth/session", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 200
    assert resp.get_json()["session"] is None


def test_expired_bearer_token_is_treated_as_no_session(app, client):
    with app.app_context():
        token = create_access_token(
            identity="7",
            additional_claims={"email": "imam@example.com", "name": None},
            expires_delta=timedelta(seconds=-5),
        )
    resp = client.get("/api/auth/session", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "unauthenticated"


def test_cookie_session_survives_until_logout(client, make_user):
    make_user(email="imam@example.com", password="secret123")
    client.post("/api/auth/login", json={"email": "imam@example.com", "password": "secret123"})

    assert client.get("/api/auth/session").get_json()["status"] == "authenticated"

    resp = client.post("/api/auth/logout")
    assert resp.status_code == 200
    assert client.get("/api/auth/session").get_json()["status"] == "unauthenticated"


def test_session_is_not_checked_against_the_database(app, client, make_user, auth_headers):
    """Stateless trust: a valid token still reads as a session after the row is gone."""
    from minbar.core.users.models import User
    from minbar.extensions import db

    user_id = make_user(email="gone@example.com")
    headers = auth_headers(user_id)
    with app.app_context():
        db.session.delete(db.session.get(User, user_id))
        db.session.commit()

    body = client.get("/api/auth/session", headers=headers).get_json()
    assert body["session"]["email"] == "gone@example.com"
