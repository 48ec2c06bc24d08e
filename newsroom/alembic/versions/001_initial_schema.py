"""Initial schema: users, reference data, content items, audit, notifications.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STAGES = "('draft','needs_reviewer_review','needs_approver_review','approved','translated','published')"
STAFF_ROLES = "('intern','journalist','sub_editor','editor','admin','superadmin')"


def upgrade() -> None:
    # --- Stations ---
    op.create_table(
        "stations",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("has_content_access", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("allowed_language_names", ARRAY(sa.String()), nullable=False, server_default=sa.text("'{}'")),
        sa.Column("allowed_religion_names", ARRAY(sa.String()), nullable=False, server_default=sa.text("'{}'")),
        sa.Column("blocked_category_ids", ARRAY(UUID(as_uuid=True)), nullable=False, server_default=sa.text("'{}'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )

    # --- Users ---
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("email", sa.Text(), nullable=False, unique=True),
        sa.Column("display_name", sa.Text(), nullable=False),
        sa.Column("user_type", sa.Text(), nullable=False, server_default=sa.text("'staff'")),
        sa.Column("staff_role", sa.Text()),
        sa.Column("station_id", UUID(as_uuid=True), sa.ForeignKey("stations.id", ondelete="SET NULL")),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'active'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("status IN ('active','suspended')", name="ck_user_status"),
        sa.CheckConstraint("user_type IN ('staff','radio')", name="ck_user_type"),
        sa.CheckConstraint(f"staff_role IS NULL OR staff_role IN {STAFF_ROLES}", name="ck_user_staff_role"),
    )
    op.create_index("idx_users_email", "users", ["email"])
    op.create_index("idx_users_station", "users", ["station_id"])

    # --- Categories + classifications ---
    op.create_table(
        "categories",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("slug", sa.Text(), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_table(
        "classifications",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("slug", sa.Text(), nullable=False, unique=True),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("type IN ('language','religion','locality')", name="ck_classification_type"),
    )
    op.create_index("idx_classifications_type", "classifications", ["type"])
    op.create_index("idx_classifications_active", "classifications", ["is_active"])

    # --- Content items (originals + translations) ---
    op.create_table(
        "content_items",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("slug", sa.Text(), nullable=False, unique=True),
        sa.Column("stage", sa.Text(), nullable=False, server_default=sa.text("'draft'")),
        sa.Column("language", sa.Text(), nullable=False, server_default=sa.text("'english'")),
        sa.Column("author_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("assigned_reviewer_id", UUID(as_uuid=True), sa.ForeignKey("users.id")),
        sa.Column("assigned_approver_id", UUID(as_uuid=True), sa.ForeignKey("users.id")),
        sa.Column("category_id", UUID(as_uuid=True), sa.ForeignKey("categories.id")),
        sa.Column("is_translation", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("original_item_id", UUID(as_uuid=True), sa.ForeignKey("content_items.id", ondelete="RESTRICT")),
        sa.Column("author_checklist", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("reviewer_checklist", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("approver_checklist", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("publish_checklist", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("published_at", sa.DateTime(timezone=True)),
        sa.Column("published_by", UUID(as_uuid=True), sa.ForeignKey("users.id")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(f"stage IN {STAGES}", name="ck_content_item_stage"),
        sa.CheckConstraint(
            "(is_translation AND original_item_id IS NOT NULL) OR "
            "(NOT is_translation AND original_item_id IS NULL)",
            name="ck_content_item_translation_link",
        ),
    )
    op.create_index("idx_content_items_stage", "content_items", ["stage"])
    op.create_index("idx_content_items_author", "content_items", ["author_id"])
    op.create_index("idx_content_items_original", "content_items", ["original_item_id"])
    op.create_index("idx_content_items_published", "content_items", ["stage", "published_at"])

    op.create_table(
        "content_item_classifications",
        sa.Column("content_item_id", UUID(as_uuid=True), sa.ForeignKey("content_items.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("classification_id", UUID(as_uuid=True), sa.ForeignKey("classifications.id", ondelete="RESTRICT"), primary_key=True),
    )
    op.create_index(
        "idx_item_classifications_classification",
        "content_item_classifications",
        ["classification_id"],
    )

    # --- Audit + notifications ---
    op.create_table(
        "audit_logs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("actor_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("action", sa.Text(), nullable=False),
        sa.Column("target_type", sa.Text(), nullable=False),
        sa.Column("target_id", UUID(as_uuid=True), nullable=False),
        sa.Column("details", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("idx_audit_logs_target", "audit_logs", ["target_type", "target_id"])
    op.create_index("idx_audit_logs_actor", "audit_logs", ["actor_id"])

    op.create_table(
        "notifications",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("notification_type", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("link", sa.Text(), nullable=True),
        sa.Column("metadata", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("idx_notifications_user_read", "notifications", ["user_id", "read_at"])
    op.create_index("idx_notifications_user_created", "notifications", ["user_id", "created_at"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("audit_logs")
    op.drop_table("content_item_classifications")
    op.drop_table("content_items")
    op.drop_table("classifications")
    op.drop_table("categories")
    op.drop_table("users")
    op.drop_table("stations")
