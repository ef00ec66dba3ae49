"""Create users, groups and group memberships

Revision ID: 5c0e2f8a9d41
Revises:
Create Date: 2026-10-19 10:12:44.108233

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5c0e2f8a9d41"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            column,
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        )
        for column in ("created_at", "updated_at")
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_digest", sa.String(length=255), nullable=False),
        sa.Column("access_token", sa.String(length=255), nullable=True),
        sa.Column("token", sa.String(length=255), nullable=True),
        sa.Column(
            "preferences",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            server_default=sa.text("'{}'"),
            nullable=False,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("email = lower(email)", name="ck_users_email_lowercase"),
    )
    op.create_index("index_users_on_email", "users", ["email"], unique=True)
    op.create_index("index_users_on_access_token", "users", ["access_token"], unique=True)
    op.create_index("index_users_on_token", "users", ["token"], unique=True)

    op.create_table(
        "groups",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("index_groups_on_name", "groups", ["name"], unique=True)
    op.create_index("index_groups_on_slug", "groups", ["slug"], unique=True)

    op.create_table(
        "group_memberships",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("group_id", sa.Integer(), nullable=False),
        sa.Column("accepted", sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "user_id", "group_id", name="index_group_memberships_on_user_id_and_group_id"
        ),
    )
    op.create_index("index_group_memberships_on_user_id", "group_memberships", ["user_id"])
    op.create_index("index_group_memberships_on_group_id", "group_memberships", ["group_id"])


def downgrade() -> None:
    op.drop_index("index_group_memberships_on_group_id", table_name="group_memberships")
    op.drop_index("index_group_memberships_on_user_id", table_name="group_memberships")
    op.drop_table("group_memberships")
    op.drop_index("index_groups_on_slug", table_name="groups")
    op.drop_index("index_groups_on_name", table_name="groups")
    op.drop_table("groups")
    op.drop_index("index_users_on_token", table_name="users")
    op.drop_index("index_users_on_access_token", table_name="users")
    op.drop_index("index_users_on_email", table_name="users")
    op.drop_table("users")
