"""Alembic environment for Minbar.

Runs under ``flask db ...`` so the app (and its engine) come from the active
Flask-Migrate context. Falls back to building the app from ``APP_ENV`` /
the ``minbar_env`` ini option when invoked through plain ``alembic``.
"""

from __future__ import annotations

import logging
from logging.config import fileConfig

from alembic import context
from flask import current_app, has_app_context

config = context.config

if config.config_file_name:
    fileConfig(config.config_file_name)
logger = logging.getLogger("alembic.env")


def _app():
    if has_app_context():
        return current_app._get_current_object()
    from minbar import create_app

    return create_app(config.get_main_option("minbar_env", None))


app = _app()
db = app.extensions["migrate"].db

# Model modules must be imported so their tables are on the metadata.
from minbar.core.users import models as _user_models  # noqa: E402,F401

target_metadata = db.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=app.config["SQLALCHEMY_DATABASE_URI"],
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    def process_revision_directives(context_, revision, directives):
        # Skip empty autogenerate revisions.
        if getattr(config.cmd_opts, "autogenerate", False) and directives[0].upgrade_ops.is_empty():
            directives[:] = []
            logger.info("No changes in schema detected.")

    with app.app_context():
        engine = db.engine
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                render_as_batch=connection.dialect.name == "sqlite",
                process_revision_directives=process_revision_directives,
            )
            with context.begin_transaction():
                context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
