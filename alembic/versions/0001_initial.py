"""initial schema: vendor catalog, vendor instances, vendor credentials, audit trail

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    # retail verticals
    op.create_table(
        "retail_verticals",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_retail_verticals_slug", "retail_verticals", ["slug"], unique=True)

    # supported vendor types (vendor_slug is never updated after insert)
    op.create_table(
        "supported_vendor_types",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("vendor_slug", sa.String(length=50), nullable=False),
        sa.Column("vendor_short_code", sa.String(length=50), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("api_type", sa.String(length=20), nullable=False, server_default="rest_api"),
        sa.Column("credential_fields", sa.JSON(), nullable=False),
        sa.Column("is_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_supported_vendor_types_vendor_slug", "supported_vendor_types", ["vendor_slug"], unique=True)
    op.create_index("ix_supported_vendor_types_is_enabled", "supported_vendor_types", ["is_enabled"])

    op.create_table(
        "supported_vendor_type_retail_verticals",
        sa.Column(
            "supported_vendor_type_id",
            sa.Integer(),
            sa.ForeignKey("supported_vendor_types.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "retail_vertical_id",
            sa.Integer(),
            sa.ForeignKey("retail_verticals.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.UniqueConstraint("supported_vendor_type_id", "retail_vertical_id", name="uq_vendor_type_vertical"),
    )

    # per-organization vendor instances
    op.create_table(
        "vendor_instances",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("organization_id", sa.Integer(), nullable=False),
        sa.Column("supported_vendor_type_id", sa.Integer(), sa.ForeignKey("supported_vendor_types.id"), nullable=False),
        sa.Column("vendor_slug", sa.String(length=50), nullable=False),
        sa.Column("instance_slug", sa.String(length=60), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("vendor_short_code", sa.String(length=50), nullable=True),
        sa.Column("enabled_for_price_comparison", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            "organization_id", "supported_vendor_type_id", "instance_slug",
            name="uq_vendor_instance_org_type_slug",
        ),
        sa.UniqueConstraint("organization_id", "instance_slug", name="uq_vendor_instance_org_slug"),
    )
    op.create_index("ix_vendor_instances_organization_id", "vendor_instances", ["organization_id"])
    op.create_index("ix_vendor_instances_supported_vendor_type_id", "vendor_instances", ["supported_vendor_type_id"])
    op.create_index("ix_vendor_instances_vendor_slug", "vendor_instances", ["vendor_slug"])

    # credentials: document + legacy + operational column groups
    op.create_table(
        "vendor_credentials",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("organization_id", sa.Integer(), nullable=False),
        sa.Column("supported_vendor_type_id", sa.Integer(), sa.ForeignKey("supported_vendor_types.id"), nullable=False),
        sa.Column("credentials", sa.JSON(), nullable=True),
        sa.Column("ftp_server", sa.String(length=255), nullable=True),
        sa.Column("ftp_port", sa.Integer(), nullable=True),
        sa.Column("ftp_username", sa.String(length=255), nullable=True),
        sa.Column("ftp_password", sa.String(length=255), nullable=True),
        sa.Column("ftp_base_path", sa.String(length=255), nullable=True),
        sa.Column("user_name", sa.String(length=255), nullable=True),
        sa.Column("password", sa.String(length=255), nullable=True),
        sa.Column("customer_number", sa.String(length=100), nullable=True),
        sa.Column("api_key", sa.String(length=255), nullable=True),
        sa.Column("api_secret", sa.String(length=255), nullable=True),
        sa.Column("sid", sa.String(length=255), nullable=True),
        sa.Column("token", sa.String(length=512), nullable=True),
        sa.Column("catalog_sync_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("catalog_sync_schedule", sa.String(length=50), nullable=True),
        sa.Column("inventory_sync_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("inventory_sync_schedule", sa.String(length=50), nullable=True),
        sa.Column("last_catalog_sync", sa.DateTime(timezone=True), nullable=True),
        sa.Column("catalog_sync_status", sa.String(length=20), nullable=False, server_default="never_synced"),
        sa.Column("catalog_sync_error", sa.Text(), nullable=True),
        sa.Column("last_inventory_sync", sa.DateTime(timezone=True), nullable=True),
        sa.Column("inventory_sync_status", sa.String(length=20), nullable=False, server_default="never_synced"),
        sa.Column("connection_status", sa.String(length=20), nullable=False, server_default="not_tested"),
        sa.Column("last_connection_test", sa.DateTime(timezone=True), nullable=True),
        sa.Column("connection_error", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("organization_id", "supported_vendor_type_id", name="uq_vendor_credentials_org_type"),
    )
    op.create_index("ix_vendor_credentials_organization_id", "vendor_credentials", ["organization_id"])
    op.create_index("ix_vendor_credentials_supported_vendor_type_id", "vendor_credentials", ["supported_vendor_type_id"])
    op.create_index("ix_vendor_credentials_catalog_sync_status", "vendor_credentials", ["catalog_sync_status"])
    op.create_index("ix_vendor_credentials_inventory_sync_status", "vendor_credentials", ["inventory_sync_status"])
    op.create_index("ix_vendor_credentials_connection_status", "vendor_credentials", ["connection_status"])

    # audit trail (append-only)
    op.create_table(
        "audit_trail",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("organization_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.String(length=36), nullable=True),
        sa.Column("old_value", sa.JSON(), nullable=True),
        sa.Column("new_value", sa.JSON(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    for column in ("organization_id", "user_id", "action", "entity_type", "entity_id", "created_at"):
        op.create_index(f"ix_audit_trail_{column}", "audit_trail", [column])


def downgrade():
    op.drop_table("audit_trail")
    op.drop_table("vendor_credentials")
    op.drop_table("vendor_instances")
    op.drop_table("supported_vendor_type_retail_verticals")
    op.drop_table("supported_vendor_types")
    op.drop_table("retail_verticals")
