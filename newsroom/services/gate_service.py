"""Approval gate: metadata an item must carry before it may be approved."""

from newsroom.errors import MissingRequirement
from newsroom.models import ClassificationType, ContentItem, ContentStage

GATED_STAGES = frozenset({ContentStage.approved, ContentStage.translated})

CATEGORY_REQUIRED = MissingRequirement(
    "category", "a category must be assigned before approval"
)
LANGUAGE_REQUIRED = MissingRequirement(
    "language", "at least one language classification is required"
)
RELIGION_REQUIRED = MissingRequirement(
    "religion", "at least one religion classification is required"
)


def is_gated(target_stage: ContentStage | str) -> bool:
    return ContentStage(target_stage) in GATED_STAGES


def check_gate(
    item: ContentItem, target_stage: ContentStage | str
) -> list[MissingRequirement]:
    """Return every unmet requirement for moving ``item`` into ``target_stage``.

    Order is fixed (category, language, religion). An empty list means the
    gate passes; ungated targets always pass. Locality is never required.
    """
    if not is_gated(target_stage):
        return []

    missing: list[MissingRequirement] = []
    if item.category_id is None:
        missing.append(CATEGORY_REQUIRED)
    if not item.has_classification_type(ClassificationType.language):
        missing.append(LANGUAGE_REQUIRED)
    if not item.has_classification_type(ClassificationType.religion):
        missing.append(RELIGION_REQUIRED)
    return missing
