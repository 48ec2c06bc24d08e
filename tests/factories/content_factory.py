"""In-memory ORM factories for newsroom tests (no database needed)."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from newsroom.models import (
    Classification,
    ClassificationType,
    ContentItem,
    ContentStage,
    ItemClassification,
    StaffRole,
    Station,
    User,
    UserType,
)
from newsroom.services.stage_machine import Actor


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class UserFactory:
    """Factory for staff and radio User instances."""

    @classmethod
    def create(
        cls,
        role: StaffRole | None = StaffRole.journalist,
        user_type: UserType = UserType.staff,
        status: str = "active",
        station_id: UUID | None = None,
        **kwargs: Any,
    ) -> User:
        cls._counter = getattr(cls, "_counter", 0) + 1
        return User(
            id=kwargs.pop("id", uuid4()),
            email=kwargs.pop("email", f"user_{cls._counter}@newsroom.test"),
            display_name=kwargs.pop("display_name", f"User {cls._counter}"),
            user_type=user_type.value,
            staff_role=role.value if role is not None else None,
            station_id=station_id,
            status=status,
            created_at=_utcnow(),
            updated_at=_utcnow(),
            **kwargs,
        )

    @classmethod
    def create_radio(cls, station_id: UUID, **kwargs: Any) -> User:
        return cls.create(role=None, user_type=UserType.radio, station_id=station_id, **kwargs)


def make_actor(role: StaffRole | None = StaffRole.sub_editor, actor_id: UUID | None = None) -> Actor:
    return Actor(id=actor_id or uuid4(), role=role)


def make_classification(
    name: str, kind: ClassificationType, is_active: bool = True
) -> Classification:
    return Classification(
        id=uuid4(),
        name=name,
        slug=f"{kind.value}-{name.lower()}",
        type=kind.value,
        is_active=is_active,
        sort_order=0,
    )


def link(classification: Classification) -> ItemClassification:
    return ItemClassification(
        classification_id=classification.id, classification=classification
    )


@dataclass
class Taxonomy:
    """A small fixed set of classifications shared by a test."""

    english: Classification
    afrikaans: Classification
    xhosa: Classification
    christian: Classification
    muslim: Classification
    western_cape: Classification

    @classmethod
    def create(cls) -> "Taxonomy":
        return cls(
            english=make_classification("English", ClassificationType.language),
            afrikaans=make_classification("Afrikaans", ClassificationType.language),
            xhosa=make_classification("Xhosa", ClassificationType.language),
            christian=make_classification("Christian", ClassificationType.religion),
            muslim=make_classification("Muslim", ClassificationType.religion),
            western_cape=make_classification("Western Cape", ClassificationType.locality),
        )


def make_item(
    stage: ContentStage = ContentStage.draft,
    author_id: UUID | None = None,
    category_id: UUID | None = None,
    classifications: list[Classification] | None = None,
    is_translation: bool = False,
    original_item_id: UUID | None = None,
    language: str = "english",
    **kwargs: Any,
) -> ContentItem:
    """A content item built in memory; no category unless one is passed."""
    item_id = kwargs.pop("id", uuid4())
    return ContentItem(
        id=item_id,
        title=kwargs.pop("title", "Test story"),
        body=kwargs.pop("body", "Body"),
        slug=kwargs.pop("slug", f"story-{item_id.hex[:8]}"),
        stage=stage.value,
        language=language,
        author_id=author_id or uuid4(),
        category_id=category_id,
        is_translation=is_translation,
        original_item_id=original_item_id,
        classifications=[link(c) for c in classifications or []],
        author_checklist={},
        reviewer_checklist={},
        approver_checklist={},
        publish_checklist={},
        created_at=_utcnow(),
        updated_at=_utcnow(),
        **kwargs,
    )


def make_ready_item(taxonomy: Taxonomy, stage: ContentStage = ContentStage.draft, **kwargs: Any) -> ContentItem:
    """An item carrying everything the approval gate asks for."""
    return make_item(
        stage=stage,
        category_id=kwargs.pop("category_id", uuid4()),
        classifications=kwargs.pop(
            "classifications", [taxonomy.english, taxonomy.christian]
        ),
        **kwargs,
    )


def make_translation(
    parent: ContentItem,
    language: Classification,
    stage: ContentStage = ContentStage.draft,
    **kwargs: Any,
) -> ContentItem:
    kept = [
        existing.classification
        for existing in parent.classifications
        if existing.classification.type != ClassificationType.language
    ]
    return make_item(
        stage=stage,
        category_id=parent.category_id,
        classifications=kept + [language],
        is_translation=True,
        original_item_id=parent.id,
        language=language.name.lower(),
        **kwargs,
    )


def make_station(
    languages: list[str] | None = None,
    religions: list[str] | None = None,
    blocked_category_ids: list[UUID] | None = None,
    is_active: bool = True,
    has_content_access: bool = True,
) -> Station:
    return Station(
        id=uuid4(),
        name="Test FM",
        is_active=is_active,
        has_content_access=has_content_access,
        allowed_language_names=languages if languages is not None else ["English"],
        allowed_religion_names=religions if religions is not None else ["Christian"],
        blocked_category_ids=blocked_category_ids or [],
    )
