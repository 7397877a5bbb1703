"""Create identity tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    ]


def upgrade() -> None:
    """Create users, applications, accounts, devices and device_accounts."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(50), nullable=False, unique=True),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'user'")),
        *_timestamps(),
    )

    op.create_table(
        "applications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("app_name", sa.String(100), nullable=False, unique=True),
        sa.Column("domain", sa.String(255), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("auth0_sub", sa.String(255), nullable=False),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", sa.String(100), nullable=True),
        sa.Column("nickname", sa.String(100), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("email_verified", sa.Boolean(), nullable=True, server_default=sa.text("false")),
        sa.Column("picture", sa.String(1000), nullable=True),
        sa.Column(
            "app_id",
            sa.Integer(),
            sa.ForeignKey("applications.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("login_type", sa.Integer(), nullable=True, server_default=sa.text("1")),
        *_timestamps(),
        sa.UniqueConstraint("auth0_sub", "app_id", name="accounts_auth0_sub_app_id_key"),
    )
    op.create_index("ix_accounts_auth0_sub", "accounts", ["auth0_sub"])
    op.create_index("ix_accounts_app_id", "accounts", ["app_id"])
    op.create_index(
        "uq_accounts_auth0_sub_global",
        "accounts",
        ["auth0_sub"],
        unique=True,
        postgresql_where=sa.text("app_id IS NULL"),
    )

    op.create_table(
        "devices",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("device_number", sa.String(255), nullable=False, unique=True),
        sa.Column("phone_model", sa.String(100), nullable=True),
        sa.Column("country_code", sa.String(10), nullable=True),
        sa.Column("version", sa.String(20), nullable=True),
        sa.Column("login_type", sa.Integer(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "device_accounts",
        sa.Column(
            "account_id",
            sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "device_id",
            sa.Integer(),
            sa.ForeignKey("devices.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("last_login", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("account_id", "device_id", name="device_accounts_pkey"),
    )
    op.create_index("idx_device_accounts_account_id", "device_accounts", ["account_id"])
    op.create_index("idx_device_accounts_device_id", "device_accounts", ["device_id"])
    op.create_index("idx_device_accounts_is_active", "device_accounts", ["is_active"])


def downgrade() -> None:
    """Drop identity tables."""
    op.drop_index("idx_device_accounts_is_active", table_name="device_accounts")
    op.drop_index("idx_device_accounts_device_id", table_name="device_accounts")
    op.drop_index("idx_device_accounts_account_id", table_name="device_accounts")
    op.drop_table("device_accounts")
    op.drop_table("devices")
    op.drop_index("uq_accounts_auth0_sub_global", table_name="accounts")
    op.drop_index("ix_accounts_app_id", table_name="accounts")
    op.drop_index("ix_accounts_auth0_sub", table_name="accounts")
    op.drop_table("accounts")
    op.drop_table("applications")
    op.drop_table("users")
