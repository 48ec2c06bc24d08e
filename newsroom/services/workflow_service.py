"""Transactional execution of editorial actions.

Each mutating call runs in one database transaction at the workflow
isolation level: rows are locked parent first, the stage machine plans the
transition, and the plan plus all of its effects (audit, notification,
cascade) are written before a single commit. Any failure rolls back
everything, including cascades.
"""

from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar
from uuid import UUID

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.database import begin_workflow_transaction, is_concurrency_conflict
from newsroom.errors import InvalidTransitionError, NotFoundError, ValidationError
from newsroom.logging_config import get_logger
from newsroom.models import ContentItem, ContentStage
from newsroom.repositories import content_repository as repo
from newsroom.services import cascade_service
from newsroom.services.audit_service import record_audit
from newsroom.services.notification_service import notify_assignee
from newsroom.services.stage_machine import (
    Action,
    Actor,
    AuditEffect,
    CascadeEffect,
    CascadeKind,
    NotifyEffect,
    TransitionCheck,
    TransitionPlan,
    actions_for_stage,
    apply_updates,
    evaluate_transition,
    plan_transition,
)

logger = get_logger(__name__)

T = TypeVar("T")

# Actions that need the original's translations loaded (and locked)
_NEEDS_TRANSLATIONS = {Action.mark_translated, Action.publish}


@dataclass
class TransitionResult:
    item: ContentItem
    plan: TransitionPlan
    translations_published: int = 0
    parent_advanced: bool = False


@dataclass
class ReadinessReport:
    item: ContentItem
    checks: list[TransitionCheck] = field(default_factory=list)

    @property
    def can_transition(self) -> bool:
        return any(c.can_transition for c in self.checks)

    @property
    def issues(self) -> list[str]:
        seen: list[str] = []
        for check in self.checks:
            for issue in check.issues:
                if issue not in seen:
                    seen.append(issue)
        return seen


async def run_in_workflow_transaction(
    db: AsyncSession, work: Callable[[], Awaitable[T]]
) -> T:
    """Run ``work`` in one workflow transaction and commit, or roll back.

    Serialization failures and deadlocks surface as InvalidTransitionError.
    """
    try:
        await begin_workflow_transaction(db)
        result = await work()
        await db.commit()
        return result
    except DBAPIError as e:
        await db.rollback()
        if is_concurrency_conflict(e):
            logger.warning("workflow_transaction_conflict", error=str(e.orig))
            raise InvalidTransitionError("item changed concurrently") from e
        raise
    except Exception:
        await db.rollback()
        raise


async def _lock_item(db: AsyncSession, item_id: UUID) -> tuple[ContentItem, ContentItem | None]:
    """Lock the item, taking its parent's lock first when it is a translation."""
    parent = None
    parent_id = await repo.get_original_item_id(db, item_id)
    if parent_id is not None:
        parent = await repo.get_item(db, parent_id, for_update=True)
    item = await repo.get_item(db, item_id, for_update=True)
    if item is None:
        raise NotFoundError("Item", item_id)
    return item, parent


async def _execute_effects(
    db: AsyncSession,
    actor: Actor,
    item: ContentItem,
    parent: ContentItem | None,
    plan: TransitionPlan,
    translations: list[ContentItem],
    result: TransitionResult,
) -> None:
    for effect in plan.effects:
        if isinstance(effect, AuditEffect):
            await record_audit(db, actor.id, effect.action, item.id, effect.details)
        elif isinstance(effect, NotifyEffect):
            await notify_assignee(
                db, item, effect.user_id, effect.notification_type, effect.title, actor.id
            )
        elif isinstance(effect, CascadeEffect):
            if effect.kind == CascadeKind.auto_advance_parent and parent is not None:
                result.parent_advanced = await cascade_service.auto_advance_parent(
                    db, actor, parent
                )
            elif effect.kind == CascadeKind.publish_translations:
                result.translations_published = (
                    await cascade_service.publish_translations(
                        db, actor, item, translations
                    )
                )


async def transition_item(
    db: AsyncSession,
    actor: Actor,
    item_id: UUID,
    action: Action | str,
    assigned_user_id: UUID | None = None,
    checklist_data: dict | None = None,
    expected_stage: ContentStage | str | None = None,
) -> TransitionResult:
    """Apply ``action`` to an item and every cascade it triggers, atomically."""

    async def work() -> TransitionResult:
        item, parent = await _lock_item(db, item_id)

        if expected_stage is not None and ContentStage(item.stage) != ContentStage(expected_stage):
            raise InvalidTransitionError(
                f"item is in stage {ContentStage(item.stage).value}, "
                f"expected {ContentStage(expected_stage).value}"
            )

        translations: list[ContentItem] = []
        if not item.is_translation and action in _NEEDS_TRANSLATIONS:
            translations = await repo.list_translations(db, item.id, for_update=True)

        assignee = None
        if assigned_user_id is not None:
            assignee = await repo.get_user(db, assigned_user_id)

        plan = plan_transition(
            actor,
            item,
            action,
            assignee,
            translations,
            assignee_id=assigned_user_id,
            checklist_data=checklist_data,
        )
        apply_updates(item, plan.updates)
        await db.flush()

        result = TransitionResult(item=item, plan=plan)
        await _execute_effects(db, actor, item, parent, plan, translations, result)
        await db.flush()
        return result

    result = await run_in_workflow_transaction(db, work)

    logger.info(
        "stage_transitioned",
        item_id=str(item_id),
        action=Action(action).value,
        from_stage=result.plan.from_stage.value,
        to_stage=result.plan.to_stage.value,
        translations_published=result.translations_published,
        parent_advanced=result.parent_advanced,
    )
    return result


async def fan_out_translations(
    db: AsyncSession,
    actor: Actor,
    parent_id: UUID,
    requests: list[cascade_service.TranslationRequest],
) -> list[ContentItem]:
    """Create translation drafts for an approved original in one transaction."""

    async def work() -> list[ContentItem]:
        return await cascade_service.create_translations(db, actor, parent_id, requests)

    return await run_in_workflow_transaction(db, work)


async def get_item(db: AsyncSession, item_id: UUID) -> ContentItem:
    item = await repo.get_item(db, item_id)
    if item is None:
        raise NotFoundError("Item", item_id)
    return item


async def get_readiness(
    db: AsyncSession,
    actor: Actor,
    item_id: UUID,
    action: Action | str | None = None,
) -> ReadinessReport:
    """Evaluate one action (or every action from the current stage) read-only.

    Uses the same evaluation as ``transition_item``; the assignee class is
    skipped because no assignee has been chosen yet.
    """
    item = await get_item(db, item_id)

    if action is not None:
        try:
            actions = [Action(action)]
        except ValueError:
            raise ValidationError(f"unknown action '{action}'", field="action")
    else:
        actions = actions_for_stage(item.stage)

    translations: list[ContentItem] = []
    if not item.is_translation and Action.mark_translated in actions:
        translations = await repo.list_translations(db, item.id)

    report = ReadinessReport(item=item)
    for candidate in actions:
        report.checks.append(
            evaluate_transition(
                actor, item, candidate, translations=translations, check_assignee=False
            )
        )
    return report
