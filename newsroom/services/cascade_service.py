"""Translation cascade coordinator.

Parents own translations only by foreign key: a translation points at its
original, and the reverse direction is always a query. Three operations
keep the pair consistent, each inside the caller's transaction:

* fan-out creates the translation drafts from an approved original,
* auto-advance moves the original to ``translated`` once every sibling is
  complete,
* the publish cascade publishes translations together with their original.
"""

import enum
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.errors import (
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from newsroom.logging_config import get_logger
from newsroom.models import (
    ClassificationType,
    ContentItem,
    ContentStage,
    ItemClassification,
)
from newsroom.repositories import content_repository as repo
from newsroom.services.audit_service import (
    AUTO_MARK_TRANSLATED,
    AUTO_PUBLISH_TRANSLATION,
    CREATE_TRANSLATION,
    record_audit,
)
from newsroom.services.notification_service import notify_assignee
from newsroom.services.roles import (
    APPROVER_TIER,
    REVIEWER_TIER,
    is_active_staff,
    parse_role,
    role_at_least,
)
from newsroom.services.stage_machine import COMPLETED_STAGES, Actor

logger = get_logger(__name__)


class PublishCascadeMode(str, enum.Enum):
    all = "all"
    completed_only = "completed_only"


def get_publish_cascade_mode() -> PublishCascadeMode:
    raw = os.getenv("PUBLISH_CASCADE_MODE", PublishCascadeMode.all.value).lower()
    try:
        return PublishCascadeMode(raw)
    except ValueError:
        logger.warning("unknown_publish_cascade_mode", value=raw)
        return PublishCascadeMode.all


@dataclass(frozen=True)
class TranslationRequest:
    language: str
    assigned_user_id: UUID


def is_complete(item: ContentItem) -> bool:
    return ContentStage(item.stage) in COMPLETED_STAGES


def translation_slug(parent: ContentItem, language: str) -> str:
    return f"{parent.slug}-{language.lower()}"


def _validate_requests(requests: list[TranslationRequest]) -> list[TranslationRequest]:
    if not requests:
        raise ValidationError("at least one translation is required", field="translations")
    seen: set[str] = set()
    for req in requests:
        language = req.language.strip().lower()
        if not language:
            raise ValidationError("language is required", field="language")
        if language in seen:
            raise ValidationError(
                f"duplicate translation language '{language}'", field="language"
            )
        seen.add(language)
    return [TranslationRequest(r.language.strip().lower(), r.assigned_user_id) for r in requests]


# ---------------------------------------------------------------------------
# Fan-out
# ---------------------------------------------------------------------------


async def create_translations(
    db: AsyncSession,
    actor: Actor,
    parent_id: UUID,
    requests: list[TranslationRequest],
) -> list[ContentItem]:
    """Create one draft translation per ``(language, assignee)`` request.

    The parent must be an approved original with no translations yet;
    re-running fan-out is rejected rather than merged. Rows are added to
    the session, the caller commits.
    """
    if not role_at_least(actor.role, APPROVER_TIER):
        raise ForbiddenError("fan-out requires approver tier")

    requests = _validate_requests(requests)

    parent = await repo.get_item(db, parent_id, for_update=True)
    if parent is None:
        raise NotFoundError("Item", parent_id)
    if parent.is_translation:
        raise InvalidTransitionError("cannot create translations of a translation")
    if ContentStage(parent.stage) != ContentStage.approved:
        raise InvalidTransitionError(
            f"translations can only be created from stage approved, item is in stage "
            f"{ContentStage(parent.stage).value}"
        )
    existing = await repo.list_translations(db, parent.id, for_update=True)
    if existing:
        raise InvalidTransitionError(
            f"item already has {len(existing)} translation(s)"
        )

    parent_language = (parent.language or "").lower()
    kept_links = [
        link
        for link in parent.classifications
        if link.classification is not None
        and link.classification.type != ClassificationType.language
    ]

    created: list[ContentItem] = []
    for req in requests:
        if req.language == parent_language:
            raise ValidationError(
                f"item is already written in {req.language}", field="language"
            )
        language_cls = await repo.get_active_language(db, req.language)
        if language_cls is None:
            raise ValidationError(f"unknown language '{req.language}'", field="language")

        assignee = await repo.get_user(db, req.assigned_user_id)
        if not is_active_staff(assignee) or not role_at_least(
            parse_role(assignee.staff_role), REVIEWER_TIER
        ):
            raise ValidationError(
                "translator must be an active staff member at journalist or above",
                field="assignedUserId",
            )

        translation = ContentItem(
            id=uuid4(),
            title=parent.title,
            body="",
            slug=translation_slug(parent, req.language),
            stage=ContentStage.draft.value,
            language=req.language,
            author_id=assignee.id,
            category_id=parent.category_id,
            is_translation=True,
            original_item_id=parent.id,
            author_checklist={},
            reviewer_checklist={},
            approver_checklist={},
            publish_checklist={},
        )
        translation.classifications = [
            ItemClassification(
                classification_id=link.classification_id,
                classification=link.classification,
            )
            for link in kept_links
        ] + [
            ItemClassification(
                classification_id=language_cls.id, classification=language_cls
            )
        ]
        db.add(translation)

        await record_audit(
            db,
            actor.id,
            CREATE_TRANSLATION,
            translation.id,
            details={
                "original_item_id": str(parent.id),
                "language": req.language,
                "assigned_user_id": str(assignee.id),
            },
        )
        await notify_assignee(
            db,
            translation,
            assignee.id,
            "translation_assigned",
            f"Translation requested: {parent.title} ({req.language})",
            actor_id=actor.id,
        )
        created.append(translation)

    await db.flush()

    logger.info(
        "translations_created",
        parent_id=str(parent.id),
        languages=[t.language for t in created],
        count=len(created),
    )
    return created


# ---------------------------------------------------------------------------
# Auto-advance
# ---------------------------------------------------------------------------


async def auto_advance_parent(
    db: AsyncSession,
    actor: Actor,
    parent: ContentItem,
    now: datetime | None = None,
) -> bool:
    """Advance ``parent`` to translated when every translation is complete.

    The caller must hold the parent row lock; siblings are re-read here so
    two concurrent sibling approvals cannot both miss the advance.
    """
    if ContentStage(parent.stage) != ContentStage.approved:
        return False

    siblings = await repo.list_translations(db, parent.id)
    if not siblings or not all(is_complete(s) for s in siblings):
        return False

    parent.stage = ContentStage.translated.value
    parent.updated_at = now or datetime.now(timezone.utc)
    await record_audit(
        db,
        actor.id,
        AUTO_MARK_TRANSLATED,
        parent.id,
        details={"translation_count": len(siblings)},
    )
    logger.info(
        "parent_auto_advanced",
        parent_id=str(parent.id),
        translation_count=len(siblings),
    )
    return True


# ---------------------------------------------------------------------------
# Publish cascade
# ---------------------------------------------------------------------------


async def publish_translations(
    db: AsyncSession,
    actor: Actor,
    parent: ContentItem,
    translations: list[ContentItem],
    mode: PublishCascadeMode | None = None,
) -> int:
    """Publish ``parent``'s translations with the parent's timestamp and publisher.

    ``translations`` are the locked sibling rows. In ``all`` mode every
    translation is set to published regardless of its stage, including one
    published earlier on its own.
    ``completed_only`` leaves unfinished ones untouched. Returns the number
    of translations written.
    """
    mode = mode or get_publish_cascade_mode()
    published = 0
    for translation in translations:
        stage = ContentStage(translation.stage)
        if mode == PublishCascadeMode.completed_only and stage not in COMPLETED_STAGES:
            continue

        translation.stage = ContentStage.published.value
        translation.published_at = parent.published_at
        translation.published_by = parent.published_by
        translation.updated_at = parent.published_at
        await record_audit(
            db,
            actor.id,
            AUTO_PUBLISH_TRANSLATION,
            translation.id,
            details={
                "original_item_id": str(parent.id),
                "previous_stage": stage.value,
            },
        )
        published += 1

    logger.info(
        "translations_published",
        parent_id=str(parent.id),
        published=published,
        total=len(translations),
        mode=mode.value,
    )
    return published


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def list_translations(db: AsyncSession, parent_id: UUID) -> list[ContentItem]:
    """Translations of an original; NotFound when the item is missing."""
    parent = await repo.get_item(db, parent_id)
    if parent is None:
        raise NotFoundError("Item", parent_id)
    if parent.is_translation:
        raise ValidationError("item is a translation", field="id")
    return await repo.list_translations(db, parent_id)


def translation_summary(translations: list[ContentItem]) -> dict:
    by_stage: dict[str, int] = {}
    for t in translations:
        key = ContentStage(t.stage).value
        by_stage[key] = by_stage.get(key, 0) + 1
    return {
        "total": len(translations),
        "completed": sum(1 for t in translations if is_complete(t)),
        "published": by_stage.get(ContentStage.published.value, 0),
        "by_stage": by_stage,
    }
