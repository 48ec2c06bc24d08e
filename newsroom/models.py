"""SQLAlchemy ORM models for the newsroom workflow core."""

import enum
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    ARRAY,
    CheckConstraint,
    ForeignKey,
    Index,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import Boolean, DateTime, Integer


class Base(DeclarativeBase):
    pass


# ---------------------------------------------------------------------------
# Enums (stored as checked TEXT columns)
# ---------------------------------------------------------------------------


class StaffRole(str, enum.Enum):
    intern = "intern"
    journalist = "journalist"
    sub_editor = "sub_editor"
    editor = "editor"
    admin = "admin"
    superadmin = "superadmin"


class UserType(str, enum.Enum):
    staff = "staff"
    radio = "radio"


class ContentStage(str, enum.Enum):
    draft = "draft"
    needs_reviewer_review = "needs_reviewer_review"
    needs_approver_review = "needs_approver_review"
    approved = "approved"
    translated = "translated"
    published = "published"


class ClassificationType(str, enum.Enum):
    language = "language"
    religion = "religion"
    locality = "locality"


def _check_in(column: str, values: type[enum.Enum]) -> str:
    quoted = ",".join(f"'{v.value}'" for v in values)
    return f"{column} IN ({quoted})"


# ---------------------------------------------------------------------------
# Users (issued by the external auth service, read here)
# ---------------------------------------------------------------------------


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_email", "email"),
        Index("idx_users_station", "station_id"),
        CheckConstraint("status IN ('active','suspended')", name="ck_user_status"),
        CheckConstraint(_check_in("user_type", UserType), name="ck_user_type"),
        CheckConstraint(
            f"staff_role IS NULL OR {_check_in('staff_role', StaffRole)}",
            name="ck_user_staff_role",
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    user_type: Mapped[str] = mapped_column(
        Text, nullable=False, server_default=text("'staff'")
    )
    staff_role: Mapped[str | None] = mapped_column(Text)
    station_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("stations.id", ondelete="SET NULL")
    )
    status: Mapped[str] = mapped_column(
        Text, nullable=False, server_default=text("'active'")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )


class Classification(Base):
    __tablename__ = "classifications"
    __table_args__ = (
        Index("idx_classifications_type", "type"),
        Index("idx_classifications_active", "is_active"),
        CheckConstraint(_check_in("type", ClassificationType), name="ck_classification_type"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    type: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )
    sort_order: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )


class ItemClassification(Base):
    __tablename__ = "content_item_classifications"
    __table_args__ = (
        Index("idx_item_classifications_classification", "classification_id"),
    )

    content_item_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("content_items.id", ondelete="CASCADE"),
        primary_key=True,
    )
    classification_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("classifications.id", ondelete="RESTRICT"),
        primary_key=True,
    )

    classification: Mapped["Classification"] = relationship(lazy="selectin")


# ---------------------------------------------------------------------------
# Content items (originals and translations share one table)
# ---------------------------------------------------------------------------


class ContentItem(Base):
    __tablename__ = "content_items"
    __table_args__ = (
        Index("idx_content_items_stage", "stage"),
        Index("idx_content_items_author", "author_id"),
        Index("idx_content_items_original", "original_item_id"),
        Index("idx_content_items_published", "stage", "published_at"),
        CheckConstraint(_check_in("stage", ContentStage), name="ck_content_item_stage"),
        CheckConstraint(
            "(is_translation AND original_item_id IS NOT NULL) OR "
            "(NOT is_translation AND original_item_id IS NULL)",
            name="ck_content_item_translation_link",
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("''"))
    slug: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    stage: Mapped[str] = mapped_column(
        Text, nullable=False, server_default=text("'draft'")
    )
    language: Mapped[str] = mapped_column(
        Text, nullable=False, server_default=text("'english'")
    )

    # Who
    author_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("users.id"), nullable=False
    )
    assigned_reviewer_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("users.id")
    )
    assigned_approver_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("users.id")
    )

    category_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("categories.id")
    )

    # Lineage: translation -> parent only; the reverse is a query
    is_translation: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    original_item_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("content_items.id", ondelete="RESTRICT")
    )

    # Checklists recorded with each workflow action
    author_checklist: Mapped[dict] = mapped_column(
        JSONB, nullable=False, server_default=text("'{}'::jsonb")
    )
    reviewer_checklist: Mapped[dict] = mapped_column(
        JSONB, nullable=False, server_default=text("'{}'::jsonb")
    )
    approver_checklist: Mapped[dict] = mapped_column(
        JSONB, nullable=False, server_default=text("'{}'::jsonb")
    )
    publish_checklist: Mapped[dict] = mapped_column(
        JSONB, nullable=False, server_default=text("'{}'::jsonb")
    )

    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    published_by: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("users.id")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )

    classifications: Mapped[list["ItemClassification"]] = relationship(
        lazy="selectin", cascade="all, delete-orphan"
    )

    def classification_ids_of(self, kind: ClassificationType) -> set[UUID]:
        """IDs of linked classifications of one kind."""
        return {
            link.classification_id
            for link in self.classifications
            if link.classification is not None and link.classification.type == kind
        }

    def has_classification_type(self, kind: ClassificationType) -> bool:
        return any(
            link.classification is not None and link.classification.type == kind
            for link in self.classifications
        )


# ---------------------------------------------------------------------------
# Stations (distribution endpoints, read-only here)
# ---------------------------------------------------------------------------


class Station(Base):
    __tablename__ = "stations"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )
    has_content_access: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )
    allowed_language_names: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, server_default=text("'{}'")
    )
    allowed_religion_names: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, server_default=text("'{}'")
    )
    blocked_category_ids: Mapped[list[UUID]] = mapped_column(
        ARRAY(PG_UUID(as_uuid=True)), nullable=False, server_default=text("'{}'")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )


# ---------------------------------------------------------------------------
# Audit trail + notifications (effects of workflow transitions)
# ---------------------------------------------------------------------------


class AuditLog(Base):
    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("idx_audit_logs_target", "target_type", "target_id"),
        Index("idx_audit_logs_actor", "actor_id"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    actor_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL")
    )
    action: Mapped[str] = mapped_column(Text, nullable=False)
    target_type: Mapped[str] = mapped_column(Text, nullable=False)
    target_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    details: Mapped[dict] = mapped_column(
        JSONB, nullable=False, server_default=text("'{}'::jsonb")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("idx_notifications_user_read", "user_id", "read_at"),
        Index("idx_notifications_user_created", "user_id", "created_at"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    notification_type: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    link: Mapped[str | None] = mapped_column(Text)
    metadata_: Mapped[dict] = mapped_column(
        "metadata", JSONB, nullable=False, server_default=text("'{}'::jsonb")
    )
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )
