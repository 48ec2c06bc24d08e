"""Editorial item endpoints: detail, transitions, readiness, translations."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.auth import get_current_actor
from newsroom.database import get_db
from newsroom.logging_config import get_logger
from newsroom.schemas import (
    ActionReadiness,
    CreateTranslationsRequest,
    ItemResponse,
    ReadinessResponse,
    TransitionRequest,
    TransitionResponse,
    TranslationListResponse,
    TranslationSummary,
    item_response,
)
from newsroom.services import cascade_service, workflow_service
from newsroom.services.stage_machine import Action, Actor, status_for_stage

logger = get_logger(__name__)

router = APIRouter(prefix="/items", tags=["items"])


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(
    item_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Item detail with derived status and progress."""
    item = await workflow_service.get_item(db, item_id)
    return item_response(item)


@router.post("/{item_id}/transition", response_model=TransitionResponse)
async def transition_item(
    item_id: UUID,
    body: TransitionRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Apply one editorial action, with its audit, notification and cascades."""
    result = await workflow_service.transition_item(
        db,
        actor,
        item_id,
        body.action,
        assigned_user_id=body.assigned_user_id,
        checklist_data=body.checklist_data,
        expected_stage=body.expected_stage,
    )
    await db.refresh(result.item)

    return TransitionResponse(
        item=item_response(result.item),
        translations_published=result.translations_published,
        parent_advanced=result.parent_advanced,
    )


@router.get("/{item_id}/transition-readiness", response_model=ReadinessResponse)
async def transition_readiness(
    item_id: UUID,
    action: Action | None = Query(None),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Preview which actions the caller could take. Never writes."""
    report = await workflow_service.get_readiness(db, actor, item_id, action)

    return ReadinessResponse(
        item_id=report.item.id,
        stage=report.item.stage,
        status=status_for_stage(report.item.stage),
        can_transition=report.can_transition,
        issues=report.issues,
        checks={
            check.action: ActionReadiness(
                can_transition=check.can_transition,
                issues=check.issues,
                requires_assignee=check.requires_assignee,
                to_stage=check.to_stage,
                checks=check.checks,
            )
            for check in report.checks
        },
    )


@router.post(
    "/{item_id}/translations",
    response_model=TranslationListResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_translations(
    item_id: UUID,
    body: CreateTranslationsRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Fan an approved original out into one translation draft per language."""
    requests = [
        cascade_service.TranslationRequest(t.language, t.assigned_user_id)
        for t in body.translations
    ]
    created = await workflow_service.fan_out_translations(db, actor, item_id, requests)
    for translation in created:
        await db.refresh(translation)

    return TranslationListResponse(
        items=[item_response(t) for t in created],
        summary=TranslationSummary(**cascade_service.translation_summary(created)),
    )


@router.get("/{item_id}/translations", response_model=TranslationListResponse)
async def list_translations(
    item_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Translations of an original with a completion summary."""
    translations = await cascade_service.list_translations(db, item_id)
    return TranslationListResponse(
        items=[item_response(t) for t in translations],
        summary=TranslationSummary(**cascade_service.translation_summary(translations)),
    )
