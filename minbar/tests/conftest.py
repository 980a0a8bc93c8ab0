import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from minbar import create_app
from minbar.core.auth.password import hash_password
from minbar.core.auth.schemas import SessionUser
from minbar.core.auth.session import issue_session_token
from minbar.core.users.models import Role, User
from minbar.extensions import db


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (database, API)")


class FakeNotifier:
    """Records reset deliveries; can be told to fail or raise."""

    def __init__(self, result: bool = True, exc: Exception | None = None):
        self.result = result
        self.exc = exc
        self.calls: list[tuple[str, str]] = []

    def send_reset_password_email(self, email: str, token: str) -> bool:
        self.calls.append((email, token))
        if self.exc is not None:
            raise self.exc
        return self.result


@pytest.fixture()
def app():
    """
    Per-test app on a fresh in-memory database.

    No app context stays pushed while the test runs: each client request gets
    its own context, so per-request caches (``g``, ``current_user``) never
    leak between requests. Tests open ``app.app_context()`` when they touch
    the database directly.
    """
    app = create_app("testing")
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def notifier(app):
    fake = FakeNotifier()
    app.extensions["reset_notifier"] = fake
    return fake


@pytest.fixture()
def make_user(app):
    """Create a user and return its id."""

    def _make(
        email: str = "user@example.com",
        password: str = "secret123",
        name: str | None = None,
        role: Role = Role.ADMIN,
    ) -> int:
        with app.app_context():
            user = User(email=email, name=name, role=role, password_hash=hash_password(password))
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make


@pytest.fixture()
def auth_headers(app):
    """Bearer header for an existing user id."""

    def _headers(user_id: int) -> dict:
        with app.app_context():
            user = db.session.get(User, user_id)
            token = issue_session_token(SessionUser(id=user.id, email=user.email, name=user.name))
        return {"Authorization": f"Bearer {token}"}

    return _headers
