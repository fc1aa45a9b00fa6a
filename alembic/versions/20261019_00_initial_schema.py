"""create tenant, licensing and usage schema

Revision ID: 20261019_00
Revises: 
Create Date: 2026-10-19 09:00:00

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_00"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _tenant_fk() -> sa.Column:
    return sa.Column(
        "tenant_id",
        sa.Integer(),
        sa.ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "tenants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("api_key_hash", sa.String(length=64), nullable=False),
        sa.Column("subscription_tier", sa.String(length=50), nullable=False, server_default="basic"),
        sa.Column("max_hubs", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("max_cameras", sa.Integer(), nullable=False, server_default="50"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("billing_email", sa.String(length=255), nullable=True),
        sa.Column("contact_phone", sa.String(length=50), nullable=True),
        sa.Column("address", sa.JSON(), nullable=True),
        sa.Column("settings", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tenants_slug", "tenants", ["slug"], unique=True)
    op.create_index("ix_tenants_api_key_hash", "tenants", ["api_key_hash"], unique=True)

    op.create_table(
        "tenant_users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _tenant_fk(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("role", sa.String(length=50), nullable=False, server_default="user"),
        sa.Column("permissions", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("api_token_hash", sa.String(length=64), nullable=True),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "email", name="uq_tenant_users_tenant_email"),
    )
    op.create_index("ix_tenant_users_tenant_id", "tenant_users", ["tenant_id"], unique=False)
    op.create_index("ix_tenant_users_email", "tenant_users", ["email"], unique=False)
    op.create_index("ix_tenant_users_api_token_hash", "tenant_users", ["api_token_hash"], unique=True)

    op.create_table(
        "hub_licenses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _tenant_fk(),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("hub_serial", sa.String(length=100), nullable=False),
        sa.Column("license_key_hash", sa.String(length=64), nullable=False),
        sa.Column("hub_name", sa.String(length=255), nullable=True),
        sa.Column("deployment_location", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("max_cameras", sa.Integer(), nullable=False, server_default="16"),
        sa.Column("features", sa.JSON(), nullable=False),
        sa.Column("activated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "sequence", name="uq_hub_licenses_tenant_sequence"),
    )
    op.create_index("ix_hub_licenses_tenant_id", "hub_licenses", ["tenant_id"], unique=False)
    op.create_index("ix_hub_licenses_hub_serial", "hub_licenses", ["hub_serial"], unique=True)
    op.create_index("ix_hub_licenses_license_key_hash", "hub_licenses", ["license_key_hash"], unique=True)

    op.create_table(
        "hubs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _tenant_fk(),
        sa.Column(
            "license_id",
            sa.Integer(),
            sa.ForeignKey("hub_licenses.id"),
            nullable=True,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("serial_number", sa.String(length=100), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False, server_default="offline"),
        sa.Column("system_armed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("last_heartbeat", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("version", sa.String(length=50), nullable=True),
        sa.Column("configuration", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "serial_number", name="uq_hubs_tenant_serial"),
    )
    op.create_index("ix_hubs_tenant_id", "hubs", ["tenant_id"], unique=False)
    op.create_index("ix_hubs_serial_number", "hubs", ["serial_number"], unique=False)
    op.create_index("ix_hubs_status", "hubs", ["status"], unique=False)

    op.create_table(
        "cameras",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _tenant_fk(),
        sa.Column("hub_id", sa.Integer(), sa.ForeignKey("hubs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=50), nullable=False, server_default="offline"),
        sa.Column("ip_address", sa.String(length=45), nullable=False),
        sa.Column("protocol", sa.String(length=20), nullable=False, server_default="RTSP"),
        sa.Column("port", sa.Integer(), nullable=True),
        sa.Column("stream_url", sa.String(length=500), nullable=True),
        sa.Column("manufacturer", sa.String(length=100), nullable=True),
        sa.Column("model", sa.String(length=100), nullable=True),
        sa.Column("ptz_capable", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_recording", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_cameras_tenant_id", "cameras", ["tenant_id"], unique=False)
    op.create_index("ix_cameras_hub_id", "cameras", ["hub_id"], unique=False)

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _tenant_fk(),
        sa.Column("hub_id", sa.Integer(), sa.ForeignKey("hubs.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "camera_id",
            sa.Integer(),
            sa.ForeignKey("cameras.id"),
            nullable=True,
        ),
        sa.Column("type", sa.String(length=100), nullable=False),
        sa.Column("severity", sa.String(length=20), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("acknowledged", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("acknowledged_by", sa.Integer(), sa.ForeignKey("tenant_users.id"), nullable=True),
        sa.Column("acknowledged_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("license_plate", sa.String(length=20), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_events_tenant_id", "events", ["tenant_id"], unique=False)
    op.create_index("ix_events_hub_id", "events", ["hub_id"], unique=False)
    op.create_index("ix_events_type", "events", ["type"], unique=False)
    op.create_index("ix_events_severity", "events", ["severity"], unique=False)
    op.create_index("ix_events_timestamp", "events", ["timestamp"], unique=False)

    op.create_table(
        "api_usage",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _tenant_fk(),
        sa.Column("endpoint", sa.String(length=255), nullable=False),
        sa.Column("method", sa.String(length=10), nullable=False),
        sa.Column("month", sa.String(length=7), nullable=False),
        sa.Column("request_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "tenant_id", "endpoint", "method", "month", name="uq_api_usage_tenant_endpoint_month"
        ),
    )
    op.create_index("ix_api_usage_endpoint", "api_usage", ["endpoint"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_api_usage_endpoint", table_name="api_usage")
    op.drop_table("api_usage")

    for index in ("ix_events_timestamp", "ix_events_severity", "ix_events_type", "ix_events_hub_id", "ix_events_tenant_id"):
        op.drop_index(index, table_name="events")
    op.drop_table("events")

    op.drop_index("ix_cameras_hub_id", table_name="cameras")
    op.drop_index("ix_cameras_tenant_id", table_name="cameras")
    op.drop_table("cameras")

    op.drop_index("ix_hubs_status", table_name="hubs")
    op.drop_index("ix_hubs_serial_number", table_name="hubs")
    op.drop_index("ix_hubs_tenant_id", table_name="hubs")
    op.drop_table("hubs")

    op.drop_index("ix_hub_licenses_license_key_hash", table_name="hub_licenses")
    op.drop_index("ix_hub_licenses_hub_serial", table_name="hub_licenses")
    op.drop_index("ix_hub_licenses_tenant_id", table_name="hub_licenses")
    op.drop_table("hub_licenses")

    op.drop_index("ix_tenant_users_api_token_hash", table_name="tenant_users")
    op.drop_index("ix_tenant_users_email", table_name="tenant_users")
    op.drop_index("ix_tenant_users_tenant_id", table_name="tenant_users")
    op.drop_table("tenant_users")

    op.drop_index("ix_tenants_api_key_hash", table_name="tenants")
    op.drop_index("ix_tenants_slug", table_name="tenants")
    op.drop_table("tenants")
