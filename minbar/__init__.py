"""Minbar application factory and bootstrap."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify, render_template

from minbar.config import config_by_name
from minbar.extensions import init_extensions, login_manager


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the Minbar Flask application."""
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()
    project_root = Path(__file__).resolve().parent.parent
    instance_root = project_root / "instance"

    app = Flask(
        __name__,
        instance_path=str(instance_root),
        instance_relative_config=True,
        template_folder=str(Path(__file__).parent / "templates"),
    )
    config_cls = config_by_name.get(env_name, config_by_name["development"])
    app.config.from_object(config_cls)

    # Normalize sqlite path to absolute to avoid "unable to open database file"
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI")
    if db_uri and db_uri.startswith("sqlite:///"):
        db_path = Path(db_uri.replace("sqlite:///", "", 1))
        if not db_path.is_absolute():
            db_path = project_root / db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{db_path}"

    init_extensions(app)
    _register_blueprints(app)
    _register_error_handlers(app)
    _register_auth_handlers(app)
    _register_notifier(app)

    @app.get("/")
    def index():
        return render_template("index.html")

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    from minbar.scripts.accounts import register_commands

    register_commands(app)

    return app


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from minbar.core.admin.controllers import admin_pages_bp
    from minbar.core.auth.controllers import auth_api_bp, auth_pages_bp  # local import to avoid circulars
    from minbar.core.users.controllers import user_api_bp

    app.register_blueprint(auth_api_bp, url_prefix="/api")
    app.register_blueprint(user_api_bp, url_prefix="/api/users")
    app.register_blueprint(auth_pages_bp, url_prefix="/auth")
    app.register_blueprint(admin_pages_bp, url_prefix="/admin")


def _register_error_handlers(app: Flask) -> None:
    """Basic JSON error responses."""
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return {"ok": False, "error": exc.description}, exc.code

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        # In debug/testing, surface the exception message to speed up diagnosis
        if app.debug or app.testing:
            return {"ok": False, "error": str(exc)}, 500
        return {"ok": False, "error": "unexpected_error"}, 500


def _register_auth_handlers(app: Flask) -> None:
    """Bridge stateless session tokens into Flask-Login's ``current_user``."""

    @login_manager.request_loader
    def _load_user_from_session(_request):
        from minbar.core.auth.session import current_session
        from minbar.core.users.models import User
        from minbar.extensions import db

        identity = current_session()
        return db.session.get(User, identity.id) if identity else None

    @login_manager.unauthorized_handler
    def _unauthorized():
        return jsonify({"ok": False, "error": "unauthorized"}), 401


def _register_notifier(app: Flask) -> None:
    from minbar.core.notifications.email import EmailNotifier

    app.extensions["reset_notifier"] = EmailNotifier.from_config(app.config)
