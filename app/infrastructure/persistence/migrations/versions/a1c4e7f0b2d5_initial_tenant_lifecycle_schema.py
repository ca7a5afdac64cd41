"""initial_tenant_lifecycle_schema

Revision ID: a1c4e7f0b2d5
Revises:
Create Date: 2026-10-18

Plan, organization, tenant (with bucket columns), app_user, append-only
audit_log, and the tenant-scoped record tables removed by full tenant
deletion. organization.tenant_id and tenant.organization_id reference each
other, so the organization -> tenant FK is added after both tables exist.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "a1c4e7f0b2d5"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_TENANT_STATUSES = "'trial', 'active', 'inactive', 'pending_deletion'"
_BUCKET_STATUSES = "'not_created', 'pending', 'created', 'failed'"

# Tenant-scoped tables in creation order (parents first).
_SCOPED_TABLES = (
    "site",
    "building",
    "floor",
    "asset",
    "document",
    "document_comment",
    "approval_history",
    "vendor",
    "notification",
    "email_notification",
    "tenant_setting",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def _scoped(table: str, *columns: sa.Column, constraints: tuple = ()) -> None:
    """Create a tenant-scoped table: id, tenant_id (CASCADE), timestamps, plus columns."""
    op.create_table(
        table,
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        *columns,
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenant.id"], ondelete="CASCADE"),
        *constraints,
    )
    op.create_index(f"ix_{table}_tenant_id", table, ["tenant_id"])


def upgrade() -> None:
    """Create lifecycle schema."""
    op.create_table(
        "plan",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("tier", sa.String(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), server_default=sa.text("0"), nullable=False),
        sa.Column("billing_cycle", sa.String(), server_default=sa.text("'monthly'"), nullable=False),
        sa.Column("is_default", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("max_users", sa.Integer(), nullable=True),
        sa.Column("max_documents", sa.Integer(), nullable=True),
        sa.Column("max_sites", sa.Integer(), nullable=True),
        sa.Column("max_buildings", sa.Integer(), nullable=True),
        sa.Column("max_storage_gb", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_plan_is_default", "plan", ["is_default"])

    op.create_table(
        "organization",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_organization_name"),
    )
    op.create_index("ix_organization_tenant_id", "organization", ["tenant_id"])

    op.create_table(
        "tenant",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("organization_id", sa.String(), nullable=True),
        sa.Column("plan_id", sa.String(), nullable=True),
        sa.Column("is_trial", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("plan_start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("bucket_name", sa.String(63), nullable=True),
        sa.Column("bucket_region", sa.String(), nullable=True),
        sa.Column("bucket_status", sa.String(), server_default=sa.text("'not_created'"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["organization_id"], ["organization.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["plan_id"], ["plan.id"], ondelete="RESTRICT"),
        sa.CheckConstraint(f"status IN ({_TENANT_STATUSES})", name="tenant_status_check"),
        sa.CheckConstraint(f"bucket_status IN ({_BUCKET_STATUSES})", name="tenant_bucket_status_check"),
    )
    op.create_index("ix_tenant_status", "tenant", ["status"])
    op.create_index("ix_tenant_organization_id", "tenant", ["organization_id"])

    op.create_foreign_key(
        "fk_organization_tenant_id",
        "organization",
        "tenant",
        ["tenant_id"],
        ["id"],
        ondelete="CASCADE",
    )

    _scoped(
        "app_user",
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("role_ids", postgresql.ARRAY(sa.String()), server_default=sa.text("'{}'"), nullable=False),
        sa.Column("identity_provider_id", sa.String(), nullable=True),
        constraints=(sa.UniqueConstraint("email", name="uq_app_user_email"),),
    )
    op.create_index("ix_app_user_is_active", "app_user", ["is_active"])
    op.create_index("ix_app_user_identity_provider_id", "app_user", ["identity_provider_id"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("resource_type", sa.String(), nullable=False),
        sa.Column("resource_id", sa.String(), nullable=True),
        sa.Column("actor_id", sa.String(), nullable=True),
        sa.Column("actor_email", sa.String(), nullable=True),
        sa.Column("details", postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenant.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_audit_log_tenant_id", "audit_log", ["tenant_id"])
    op.create_index("ix_audit_log_action", "audit_log", ["action"])

    _scoped(
        "site",
        sa.Column("site_name", sa.String(), nullable=False),
        sa.Column("street", sa.String(), nullable=True),
        sa.Column("suburb", sa.String(), nullable=True),
        sa.Column("state", sa.String(), nullable=True),
        sa.Column("postcode", sa.String(10), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
    )
    _scoped(
        "building",
        sa.Column("site_id", sa.String(), nullable=True),
        sa.Column("building_name", sa.String(), nullable=False),
        sa.Column("building_code", sa.String(), nullable=True),
        sa.Column("category", sa.String(), nullable=True),
        constraints=(sa.ForeignKeyConstraint(["site_id"], ["site.id"], ondelete="CASCADE"),),
    )
    op.create_index("ix_building_site_id", "building", ["site_id"])
    _scoped(
        "floor",
        sa.Column("building_id", sa.String(), nullable=True),
        sa.Column("floor_name", sa.String(), nullable=False),
        sa.Column("floor_number", sa.Integer(), nullable=True),
        sa.Column("floor_type", sa.String(), nullable=True),
        sa.Column("occupancy", sa.Integer(), nullable=True),
        constraints=(sa.ForeignKeyConstraint(["building_id"], ["building.id"], ondelete="CASCADE"),),
    )
    op.create_index("ix_floor_building_id", "floor", ["building_id"])
    _scoped(
        "asset",
        sa.Column("site_id", sa.String(), nullable=True),
        sa.Column("building_id", sa.String(), nullable=True),
        sa.Column("floor_id", sa.String(), nullable=True),
        sa.Column("asset_no", sa.String(), nullable=True),
        sa.Column("device_id", sa.String(), nullable=True),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=True),
        constraints=(
            sa.ForeignKeyConstraint(["site_id"], ["site.id"], ondelete="SET NULL"),
            sa.ForeignKeyConstraint(["building_id"], ["building.id"], ondelete="SET NULL"),
            sa.ForeignKeyConstraint(["floor_id"], ["floor.id"], ondelete="SET NULL"),
        ),
    )
    _scoped(
        "document",
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("object_key", sa.String(), nullable=True),
        sa.Column("file_size", sa.BigInteger(), nullable=True),
        sa.Column("content_type", sa.String(), nullable=True),
        sa.Column("site_id", sa.String(), nullable=True),
        sa.Column("building_id", sa.String(), nullable=True),
        sa.Column("asset_id", sa.String(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        constraints=(
            sa.ForeignKeyConstraint(["site_id"], ["site.id"], ondelete="SET NULL"),
            sa.ForeignKeyConstraint(["building_id"], ["building.id"], ondelete="SET NULL"),
            sa.ForeignKeyConstraint(["asset_id"], ["asset.id"], ondelete="SET NULL"),
        ),
    )
    _scoped(
        "document_comment",
        sa.Column("document_id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("user_name", sa.String(), nullable=True),
        sa.Column("user_email", sa.String(), nullable=True),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("status", sa.String(), nullable=True),
        constraints=(sa.ForeignKeyConstraint(["document_id"], ["document.id"], ondelete="CASCADE"),),
    )
    op.create_index("ix_document_comment_document_id", "document_comment", ["document_id"])
    _scoped(
        "approval_history",
        sa.Column("document_id", sa.String(), nullable=False),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("previous_status", sa.String(), nullable=True),
        sa.Column("new_status", sa.String(), nullable=True),
        sa.Column("performed_by", sa.String(), nullable=True),
        sa.Column("assigned_to", sa.String(), nullable=True),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("extra", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        constraints=(sa.ForeignKeyConstraint(["document_id"], ["document.id"], ondelete="CASCADE"),),
    )
    op.create_index("ix_approval_history_document_id", "approval_history", ["document_id"])
    _scoped(
        "vendor",
        sa.Column("contractor_name", sa.String(), nullable=False),
        sa.Column("trading_name", sa.String(), nullable=True),
        sa.Column("abn", sa.String(20), nullable=True),
        sa.Column("contractor_type", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
    )
    _scoped(
        "notification",
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("user_email", sa.String(), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(), nullable=True),
        sa.Column("priority", sa.String(), server_default=sa.text("'normal'"), nullable=False),
        sa.Column("document_id", sa.String(), nullable=True),
        sa.Column("is_read", sa.Boolean(), server_default=sa.text("false"), nullable=False),
    )
    op.create_index("ix_notification_user_id", "notification", ["user_id"])
    _scoped(
        "email_notification",
        sa.Column("template", sa.String(), nullable=False),
        sa.Column("to", sa.String(), nullable=False),
        sa.Column("subject", sa.String(), nullable=False),
        sa.Column("variables", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("document_id", sa.String(), nullable=True),
        sa.Column("status", sa.String(), server_default=sa.text("'pending'"), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("retry_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
    )
    _scoped(
        "tenant_setting",
        sa.Column("setting_key", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("setting_type", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("value", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("default_value", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("is_editable", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        constraints=(sa.UniqueConstraint("tenant_id", "setting_key", name="uq_tenant_setting_key"),),
    )


def downgrade() -> None:
    """Drop lifecycle schema."""
    for table in reversed(_SCOPED_TABLES):
        op.drop_table(table)
    op.drop_table("audit_log")
    op.drop_table("app_user")
    op.drop_constraint("fk_organization_tenant_id", "organization", type_="foreignkey")
    op.drop_table("tenant")
    op.drop_table("organization")
    op.drop_table("plan")
