"""create user table with role and reset token columns

Revision ID: 20261017_core_user
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261017_core_user"
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum("OWNER", "MANAGER", "ADMIN", name="user_role")


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255)),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", user_role, nullable=False, server_default="ADMIN"),
        sa.Column("reset_token", sa.String(length=128)),
        sa.Column("reset_token_expiry", sa.DateTime()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)
    op.create_index("ix_user_reset_token", "user", ["reset_token"])


def downgrade():
    op.drop_index("ix_user_reset_token", table_name="user")
    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
    user_role.drop(op.get_bind(), checkfirst=True)
