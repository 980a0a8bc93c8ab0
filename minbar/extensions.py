"""Flask extension singletons, bound to an app in ``init_extensions``."""

from pathlib import Path

from flask_bcrypt import Bcrypt
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

db = SQLAlchemy(session_options={"expire_on_commit": False})
migrate = Migrate()
# Session tokens (signed, stateless)
jwt = JWTManager()
# Only used to expose the token's user as ``current_user``; nothing is kept in the Flask session.
login_manager = LoginManager()
login_manager.session_protection = None
bcrypt = Bcrypt()
# Limits, storage and the on/off switch come from RATELIMIT_* config keys.
limiter = Limiter(key_func=get_remote_address)


def init_extensions(app) -> None:
    db.init_app(app)
    migrate.init_app(app, db, directory=str(MIGRATIONS_DIR))
    jwt.init_app(app)
    login_manager.init_app(app)
    bcrypt.init_app(app)
    limiter.init_app(app)
