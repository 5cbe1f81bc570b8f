"""Initial schema – users, scopes, devices, grants and their join tables

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18

Unique constraints on the join tables back the upsert / skip-duplicate
inserts performed by the data-access layer; they must not be dropped.
"""

from alembic import op
import sqlalchemy as sa

# Alembic revision identifiers
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

_LINE_STATUS = sa.Enum("ONLINE", "OFFLINE", name="device_line_status")
_DEVICE_LOCK = sa.Enum("LOCKED", "UNLOCKED", name="device_lock")
_USER_LOCK = sa.Enum("LOCKED", "UNLOCKED", name="user_lock")


def _timestamps(updated=True):
    cols = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        )
    ]
    if updated:
        cols.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.func.now(),
                nullable=False,
            )
        )
    return cols


def upgrade() -> None:
    # -- users ----------------------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(64), nullable=False, unique=True),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("is_locked", _USER_LOCK, nullable=False, server_default="LOCKED"),
        *_timestamps(),
    )
    op.create_index("ix_users_username", "users", ["username"])

    # -- scopes / user_scopes -------------------------------------------
    op.create_table(
        "scopes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(64), nullable=False, unique=True),
        *_timestamps(updated=False),
    )
    op.create_table(
        "user_scopes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("scope_id", sa.Integer(), sa.ForeignKey("scopes.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(updated=False),
        sa.UniqueConstraint("user_id", "scope_id", name="uq_user_scopes_user_scope"),
    )
    op.create_index("ix_user_scopes_user_id", "user_scopes", ["user_id"])
    op.create_index("ix_user_scopes_scope_id", "user_scopes", ["scope_id"])

    # -- devices --------------------------------------------------------
    op.create_table(
        "devices",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("device_id", sa.String(128), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("os", sa.String(64), nullable=True),
        sa.Column("type", sa.String(64), nullable=True),
        sa.Column("engine", sa.String(64), nullable=True),
        sa.Column("is_online", _LINE_STATUS, nullable=False, server_default="ONLINE"),
        sa.Column("is_locked", _DEVICE_LOCK, nullable=False, server_default="UNLOCKED"),
        sa.Column("device_secret", sa.String(255), nullable=False),
        sa.Column("access_token_validate_seconds", sa.Integer(), nullable=False),
        sa.Column("refresh_token_validate_seconds", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_devices_device_id", "devices", ["device_id"])

    # -- grants / grant_on_device ---------------------------------------
    op.create_table(
        "grants",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(64), nullable=False, unique=True),
        *_timestamps(updated=False),
    )
    op.create_table(
        "grant_on_device",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("device_id", sa.Integer(), sa.ForeignKey("devices.id"), nullable=False),
        sa.Column("grant_id", sa.Integer(), sa.ForeignKey("grants.id"), nullable=False),
        *_timestamps(updated=False),
        sa.UniqueConstraint("device_id", "grant_id", name="uq_grant_on_device_device_grant"),
    )
    op.create_index("ix_grant_on_device_device_id", "grant_on_device", ["device_id"])
    op.create_index("ix_grant_on_device_grant_id", "grant_on_device", ["grant_id"])

    # -- user_on_device -------------------------------------------------
    op.create_table(
        "user_on_device",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("device_id", sa.Integer(), sa.ForeignKey("devices.id"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "device_id", name="uq_user_on_device_user_device"),
    )
    op.create_index("ix_user_on_device_user_id", "user_on_device", ["user_id"])
    op.create_index("ix_user_on_device_device_id", "user_on_device", ["device_id"])


def downgrade() -> None:
    op.drop_table("user_on_device")
    op.drop_table("grant_on_device")
    op.drop_table("grants")
    op.drop_table("devices")
    op.drop_table("user_scopes")
    op.drop_table("scopes")
    op.drop_table("users")
