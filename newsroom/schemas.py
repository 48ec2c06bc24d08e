"""Pydantic v2 request/response schemas.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from newsroom.models import ContentItem, ContentStage
from newsroom.services.stage_machine import Action, stage_progress, status_for_stage


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


class ClassificationLinkResponse(CamelModel):
    id: UUID
    name: str
    type: str


class ItemResponse(CamelModel):
    id: UUID
    title: str
    slug: str
    stage: ContentStage
    status: str
    progress: int
    language: str
    is_translation: bool
    original_item_id: UUID | None = None
    author_id: UUID
    assigned_reviewer_id: UUID | None = None
    assigned_approver_id: UUID | None = None
    category_id: UUID | None = None
    classifications: list[ClassificationLinkResponse] = Field(default_factory=list)
    published_at: datetime | None = None
    published_by: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


class TransitionRequest(CamelModel):
    action: Action
    assigned_user_id: UUID | None = None
    checklist_data: dict | None = None
    expected_stage: ContentStage | None = None


class TransitionResponse(CamelModel):
    item: ItemResponse
    translations_published: int = 0
    parent_advanced: bool = False


class ActionReadiness(CamelModel):
    can_transition: bool
    issues: list[str] = Field(default_factory=list)
    requires_assignee: bool = False
    to_stage: ContentStage | None = None
    checks: dict[str, bool] = Field(default_factory=dict)


class ReadinessResponse(CamelModel):
    item_id: UUID
    stage: ContentStage
    status: str
    can_transition: bool
    issues: list[str] = Field(default_factory=list)
    checks: dict[str, ActionReadiness] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Translations
# ---------------------------------------------------------------------------


class TranslationRequestItem(CamelModel):
    language: str = Field(..., min_length=1, max_length=50)
    assigned_user_id: UUID


class CreateTranslationsRequest(CamelModel):
    translations: list[TranslationRequestItem]


class TranslationSummary(CamelModel):
    total: int = 0
    completed: int = 0
    published: int = 0
    by_stage: dict[str, int] = Field(default_factory=dict)


class TranslationListResponse(CamelModel):
    items: list[ItemResponse] = Field(default_factory=list)
    summary: TranslationSummary


# ---------------------------------------------------------------------------
# Workflow metadata
# ---------------------------------------------------------------------------


class StageInfo(CamelModel):
    stage: ContentStage
    status: str
    order: int
    progress: int
    actions: list[Action] = Field(default_factory=list)


class StagesResponse(CamelModel):
    stages: list[StageInfo]


# ---------------------------------------------------------------------------
# Common
# ---------------------------------------------------------------------------


class PaginatedItemsResponse(CamelModel):
    items: list[ItemResponse] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 20


def item_response(item: ContentItem) -> ItemResponse:
    """Build the wire representation of a content item."""
    return ItemResponse(
        id=item.id,
        title=item.title,
        slug=item.slug,
        stage=ContentStage(item.stage),
        status=status_for_stage(item.stage),
        progress=stage_progress(item.stage),
        language=item.language,
        is_translation=bool(item.is_translation),
        original_item_id=item.original_item_id,
        author_id=item.author_id,
        assigned_reviewer_id=item.assigned_reviewer_id,
        assigned_approver_id=item.assigned_approver_id,
        category_id=item.category_id,
        classifications=[
            ClassificationLinkResponse(
                id=link.classification_id,
                name=link.classification.name,
                type=link.classification.type,
            )
            for link in item.classifications
            if link.classification is not None
        ],
        published_at=item.published_at,
        published_by=item.published_by,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )
