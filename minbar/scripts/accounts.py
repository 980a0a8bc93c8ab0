"""Operator commands for back-office accounts.

Run `flask db upgrade` first so the user table exists.

Usage:
    flask seed-user --email owner@example.com --password secret1 --role OWNER
    flask check-user-password --email owner@example.com --password secret1
    python -m minbar.scripts.accounts seed-user --email owner@example.com --password secret1
"""

from __future__ import annotations

import sys

import click
from flask.cli import with_appcontext

from minbar.core.auth.password import hash_password, verify_password
from minbar.core.auth.schemas import PASSWORD_MIN_LENGTH
from minbar.core.users.models import Role, User
from minbar.extensions import db


def seed_user(email: str, password: str, name: str | None = None, role: Role = Role.OWNER) -> tuple[User, bool]:
    """Create the user if missing, else only update its role.

    Returns ``(user, created)``; an existing user's password is left untouched.
    """
    user = User.query.filter_by(email=email).first()
    created = user is None
    if created:
        user = User(email=email, name=name, password_hash=hash_password(password), role=role)
        db.session.add(user)
    else:
        user.role = role
    db.session.commit()
    return user, created


@click.command("seed-user")
@click.option("--email", required=True, help="Account email (stored exactly as given)")
@click.option(
    "--password",
    required=True,
    help="Initial password; ignored when the account already exists",
)
@click.option("--name", default=None, help="Display name for a new account")
@click.option(
    "--role",
    type=click.Choice([r.value for r in Role]),
    default=Role.OWNER.value,
    show_default=True,
)
@with_appcontext
def seed_user_command(email: str, password: str, name: str | None, role: str):
    """Create a back-office user, or change the role of an existing one."""
    if len(password) < PASSWORD_MIN_LENGTH:
        raise click.BadParameter(f"must be at least {PASSWORD_MIN_LENGTH} characters", param_hint="--password")
    user, created = seed_user(email.strip(), password, name, Role(role))
    if created:
        click.echo(f"Created user {user.email} (id={user.id}, role={user.role.value})")
    else:
        click.echo(
            f"Updated existing user {user.email} (id={user.id}, role={user.role.value}); "
            "password unchanged, use the reset flow to change it"
        )


@click.command("check-user-password")
@click.option("--email", required=True, help="Account email (exact match)")
@click.option("--password", required=True, help="Plaintext to compare with the stored hash")
@with_appcontext
def check_user_password_command(email: str, password: str):
    """Exit 0 when the password matches, 1 on a mismatch or unknown account."""
    user = User.query.filter_by(email=email.strip()).first()
    if user is None:
        raise click.ClickException(f"no account for {email}")
    matches = verify_password(password, user.password_hash)
    verdict = "matches" if matches else "does not match"
    click.echo(f"{user.email} (id={user.id}, role={user.role.value}): password {verdict}")
    if not matches:
        sys.exit(1)


def register_commands(app):
    """Register CLI commands with the app."""
    app.cli.add_command(seed_user_command)
    app.cli.add_command(check_user_password_command)


@click.group()
def cli():
    """Standalone entry point mirroring the `flask` commands."""


cli.add_command(seed_user_command)
cli.add_command(check_user_password_command)


def main(argv: list[str] | None = None) -> int:
    """Entry point for python -m minbar.scripts.accounts."""
    from minbar import create_app

    app = create_app()
    with app.app_context():
        try:
            cli.main(args=argv, standalone_mode=False)
        except click.ClickException as exc:
            exc.show()
            return exc.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
