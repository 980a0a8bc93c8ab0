from __future__ import annotations

import pytest

from minbar.core.auth.guard import GuardDecision, GuardOutcome, SessionStatus, resolve_guard, session_status


@pytest.mark.unit
@pytest.mark.parametrize(
    "status,guest_only,expected",
    [
        (SessionStatus.UNAUTHENTICATED, False, GuardDecision(GuardOutcome.REDIRECT, "/fallback")),
        (SessionStatus.AUTHENTICATED, True, GuardDecision(GuardOutcome.REDIRECT, "/fallback")),
        (SessionStatus.AUTHENTICATED, False, GuardDecision(GuardOutcome.RENDER)),
        (SessionStatus.UNAUTHENTICATED, True, GuardDecision(GuardOutcome.RENDER)),
        (SessionStatus.LOADING, False, GuardDecision(GuardOutcome.LOADING)),
        (SessionStatus.LOADING, True, GuardDecision(GuardOutcome.LOADING)),
    ],
)
def test_resolve_guard_decision_table(status, guest_only, expected):
    assert resolve_guard(status, guest_only=guest_only, redirect_to="/fallback") == expected


@pytest.mark.unit
def test_resolve_guard_defaults_to_site_root_and_accepts_plain_strings():
    assert resolve_guard("unauthenticated") == GuardDecision(GuardOutcome.REDIRECT, "/")
    assert resolve_guard("authenticated").target is None


@pytest.mark.integration
def test_protected_page_redirects_anonymous_visitor_to_fallback(client):
    resp = client.get("/admin")
    assert resp.status_code == 302
    assert resp.headers["Location"] == "/"


@pytest.mark.integration
def test_protected_page_renders_for_session(client, make_user, auth_headers):
    user_id = make_user(email="imam@example.com", name="Imam")
    resp = client.get("/admin", headers=auth_headers(user_id))
    assert resp.status_code == 200
    assert b"Signed in as Imam" in resp.data


@pytest.mark.integration
@pytest.mark.parametrize("path", ["/auth/login", "/auth/register"])
def test_guest_only_pages_redirect_signed_in_users_to_landing(client, make_user, auth_headers, path):
    user_id = make_user()
    resp = client.get(path, headers=auth_headers(user_id))
    assert resp.status_code == 302
    assert resp.headers["Location"] == "/admin"


@pytest.mark.integration
@pytest.mark.parametrize("path", ["/auth/login", "/auth/register"])
def test_guest_only_pages_render_for_visitors(client, path):
    resp = client.get(path)
    assert resp.status_code == 200


@pytest.mark.integration
def test_public_pages_ignore_session_state(client, make_user, auth_headers):
    user_id = make_user()
    assert client.get("/").status_code == 200
    assert client.get("/", headers=auth_headers(user_id)).status_code == 200


@pytest.mark.integration
def test_fallback_route_is_configurable(app, client):
    app.config["AUTH_FALLBACK_ROUTE"] = "/auth/login"
    resp = client.get("/admin")
    assert resp.headers["Location"] == "/auth/login"


@pytest.mark.integration
def test_server_side_status_is_always_resolved(app, make_user, auth_headers):
    user_id = make_user()
    headers = auth_headers(user_id)

    with app.test_request_context("/admin"):
        assert session_status() is SessionStatus.UNAUTHENTICATED
    with app.test_request_context("/admin", headers=headers):
        assert session_status() is SessionStatus.AUTHENTICATED
    with app.test_request_context("/admin", headers={"Authorization": "Bearer garbage"}):
        assert session_status() is SessionStatus.UNAUTHENTICATED
