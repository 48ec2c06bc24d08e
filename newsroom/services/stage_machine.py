"""Editorial stage machine.

Transition legality is an explicit table keyed by ``(from_stage, action)``;
stage ordering exists only for progress display because ``send_back`` moves
items backwards. Evaluation is pure: it reads the item, the actor and the
candidate assignee and returns either a plan (stage + field updates +
effects for the caller to execute) or the first failing check.

Checks run in a fixed order and the first failing class decides the error:

1. a rule exists for the edge (``InvalidTransitionError``)
2. actor role meets the rule's minimum (``ForbiddenError``)
3. ownership / assignment (``ForbiddenError``)
4. assignee presence and role (``ValidationError``)
5. gate + translations-complete guard (``GuardFailedError``)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from newsroom.errors import (
    ForbiddenError,
    GuardFailedError,
    InvalidTransitionError,
    MissingRequirement,
    ValidationError,
    WorkflowError,
)
from newsroom.models import ContentItem, ContentStage, StaffRole, User
from newsroom.services.gate_service import check_gate
from newsroom.services.roles import (
    APPROVER_TIER,
    OVERRIDE_TIER,
    REVIEWER_TIER,
    is_active_staff,
    parse_role,
    role_at_least,
)


class Action(str, enum.Enum):
    submit_for_review = "submit_for_review"
    send_for_approval = "send_for_approval"
    approve = "approve"
    mark_translated = "mark_translated"
    publish = "publish"
    send_back = "send_back"


STAGE_ORDER: tuple[ContentStage, ...] = (
    ContentStage.draft,
    ContentStage.needs_reviewer_review,
    ContentStage.needs_approver_review,
    ContentStage.approved,
    ContentStage.translated,
    ContentStage.published,
)

# Legacy publication status, always derived from stage
STAGE_STATUS: dict[ContentStage, str] = {
    ContentStage.draft: "draft",
    ContentStage.needs_reviewer_review: "in_review",
    ContentStage.needs_approver_review: "pending_approval",
    ContentStage.approved: "approved",
    ContentStage.translated: "ready_to_publish",
    ContentStage.published: "published",
}

# A translation in one of these stages counts as done for its parent
COMPLETED_STAGES = frozenset(
    {ContentStage.approved, ContentStage.translated, ContentStage.published}
)


def status_for_stage(stage: ContentStage | str) -> str:
    return STAGE_STATUS[ContentStage(stage)]


def stage_progress(stage: ContentStage | str) -> int:
    """Percentage through the pipeline, for progress bars only."""
    index = STAGE_ORDER.index(ContentStage(stage))
    return round(index * 100 / (len(STAGE_ORDER) - 1))


# ---------------------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TransitionRule:
    to_stage: ContentStage
    min_role: StaffRole
    requires_assignee: bool = False
    assignee_min_role: StaffRole | None = None
    assignee_exact_role: StaffRole | None = None
    assignee_field: str | None = None
    owner_only: bool = False
    owner_override: bool = False
    assigned_only: str | None = None
    originals_only: bool = False
    translation_to_stage: ContentStage | None = None
    checklist_field: str | None = None


TRANSITIONS: dict[tuple[ContentStage, Action], TransitionRule] = {
    (ContentStage.draft, Action.submit_for_review): TransitionRule(
        to_stage=ContentStage.needs_reviewer_review,
        min_role=StaffRole.intern,
        requires_assignee=True,
        assignee_exact_role=REVIEWER_TIER,
        assignee_field="assigned_reviewer_id",
        owner_only=True,
        owner_override=True,
        checklist_field="author_checklist",
    ),
    (ContentStage.draft, Action.send_for_approval): TransitionRule(
        to_stage=ContentStage.needs_approver_review,
        min_role=REVIEWER_TIER,
        requires_assignee=True,
        assignee_min_role=APPROVER_TIER,
        assignee_field="assigned_approver_id",
        owner_only=True,
        owner_override=True,
        checklist_field="author_checklist",
    ),
    # Self-approval: approver-tier authors may approve their own draft
    (ContentStage.draft, Action.approve): TransitionRule(
        to_stage=ContentStage.approved,
        min_role=APPROVER_TIER,
        owner_only=True,
        translation_to_stage=ContentStage.translated,
        checklist_field="approver_checklist",
    ),
    (ContentStage.needs_reviewer_review, Action.send_for_approval): TransitionRule(
        to_stage=ContentStage.needs_approver_review,
        min_role=REVIEWER_TIER,
        requires_assignee=True,
        assignee_min_role=APPROVER_TIER,
        assignee_field="assigned_approver_id",
        checklist_field="reviewer_checklist",
    ),
    (ContentStage.needs_reviewer_review, Action.send_back): TransitionRule(
        to_stage=ContentStage.draft,
        min_role=REVIEWER_TIER,
        assigned_only="assigned_reviewer_id",
        owner_override=True,
        checklist_field="reviewer_checklist",
    ),
    (ContentStage.needs_approver_review, Action.approve): TransitionRule(
        to_stage=ContentStage.approved,
        min_role=APPROVER_TIER,
        translation_to_stage=ContentStage.translated,
        checklist_field="approver_checklist",
    ),
    (ContentStage.needs_approver_review, Action.send_back): TransitionRule(
        to_stage=ContentStage.draft,
        min_role=APPROVER_TIER,
        assigned_only="assigned_approver_id",
        owner_override=True,
        checklist_field="approver_checklist",
    ),
    (ContentStage.approved, Action.mark_translated): TransitionRule(
        to_stage=ContentStage.translated,
        min_role=APPROVER_TIER,
        originals_only=True,
    ),
    (ContentStage.approved, Action.send_back): TransitionRule(
        to_stage=ContentStage.draft,
        min_role=APPROVER_TIER,
    ),
    (ContentStage.translated, Action.publish): TransitionRule(
        to_stage=ContentStage.published,
        min_role=APPROVER_TIER,
        checklist_field="publish_checklist",
    ),
    (ContentStage.translated, Action.send_back): TransitionRule(
        to_stage=ContentStage.draft,
        min_role=APPROVER_TIER,
    ),
}


def actions_for_stage(stage: ContentStage | str) -> list[Action]:
    """Actions with a table entry from ``stage``, in declaration order."""
    stage = ContentStage(stage)
    return [action for (from_stage, action) in TRANSITIONS if from_stage == stage]


# ---------------------------------------------------------------------------
# Actor, effects, plans
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Actor:
    """The user performing an action, threaded through every call."""

    id: UUID
    role: StaffRole | None

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(id=user.id, role=parse_role(user.staff_role))


@dataclass(frozen=True)
class AuditEffect:
    action: str
    details: dict[str, Any]


@dataclass(frozen=True)
class NotifyEffect:
    user_id: UUID
    notification_type: str
    title: str


class CascadeKind(str, enum.Enum):
    auto_advance_parent = "auto_advance_parent"
    publish_translations = "publish_translations"


@dataclass(frozen=True)
class CascadeEffect:
    kind: CascadeKind


Effect = AuditEffect | NotifyEffect | CascadeEffect


@dataclass
class TransitionPlan:
    from_stage: ContentStage
    to_stage: ContentStage
    status: str
    updates: dict[str, Any]
    effects: list[Effect]


@dataclass
class TransitionCheck:
    """Result of evaluating one action against one item. Never raised."""

    action: str
    from_stage: ContentStage
    rule: TransitionRule | None = None
    error: WorkflowError | None = None
    issues: list[str] = field(default_factory=list)
    missing: list[MissingRequirement] = field(default_factory=list)
    checks: dict[str, bool] = field(default_factory=dict)

    @property
    def can_transition(self) -> bool:
        return self.error is None

    @property
    def requires_assignee(self) -> bool:
        return self.rule is not None and self.rule.requires_assignee

    @property
    def to_stage(self) -> ContentStage | None:
        if self.rule is None:
            return None
        return self.rule.to_stage


def _target_stage(rule: TransitionRule, item: ContentItem) -> ContentStage:
    if item.is_translation and rule.translation_to_stage is not None:
        return rule.translation_to_stage
    return rule.to_stage


def _translations_guard(
    translations: list[ContentItem],
) -> MissingRequirement | None:
    done = sum(1 for t in translations if ContentStage(t.stage) in COMPLETED_STAGES)
    if done == len(translations):
        return None
    return MissingRequirement(
        "translations",
        f"all translations must be approved first ({done} of {len(translations)} complete)",
    )


def _assignee_error(
    rule: TransitionRule,
    action: Action,
    assignee: User | None,
    assignee_id: UUID | None,
) -> ValidationError | None:
    if assignee_id is None and assignee is None:
        return ValidationError(
            f"assignedUserId is required for {action.value}", field="assignedUserId"
        )
    if assignee is None:
        return ValidationError("assigned user not found", field="assignedUserId")
    if not is_active_staff(assignee):
        return ValidationError(
            "assigned user must be an active staff member", field="assignedUserId"
        )
    role = parse_role(assignee.staff_role)
    if rule.assignee_exact_role is not None and role != rule.assignee_exact_role:
        return ValidationError(
            f"assigned reviewer must hold the {rule.assignee_exact_role.value} role",
            field="assignedUserId",
        )
    if rule.assignee_min_role is not None and not role_at_least(role, rule.assignee_min_role):
        return ValidationError(
            f"assigned approver must be {rule.assignee_min_role.value} or above",
            field="assignedUserId",
        )
    return None


def evaluate_transition(
    actor: Actor,
    item: ContentItem,
    action: Action | str,
    assignee: User | None = None,
    translations: list[ContentItem] | None = None,
    *,
    assignee_id: UUID | None = None,
    check_assignee: bool = True,
) -> TransitionCheck:
    """Evaluate ``action`` on ``item`` without raising or mutating anything.

    Every check is computed so readiness callers can show all issues; the
    ``error`` field carries the first failing class. ``translations`` are the
    item's current translations (originals only). ``check_assignee=False``
    skips the assignee class for read-only previews where none is chosen yet.
    """
    stage = ContentStage(item.stage)
    try:
        action = Action(action)
    except ValueError:
        check = TransitionCheck(action=str(action), from_stage=stage)
        check.error = ValidationError(f"unknown action '{action}'", field="action")
        check.issues.append(check.error.message)
        check.checks["transition"] = False
        return check

    check = TransitionCheck(action=action.value, from_stage=stage)
    rule = TRANSITIONS.get((stage, action))
    if rule is None or (rule.originals_only and item.is_translation):
        check.error = InvalidTransitionError(
            f"cannot {action.value} an item in stage {stage.value}"
        )
        check.issues.append(check.error.message)
        check.checks["transition"] = False
        return check
    check.rule = rule
    check.checks["transition"] = True

    errors: list[WorkflowError] = []

    role_ok = actor.role is not None and role_at_least(actor.role, rule.min_role)
    check.checks["role"] = role_ok
    if not role_ok:
        errors.append(
            ForbiddenError(
                f"role {actor.role.value if actor.role else None} below {rule.min_role.value}"
            )
        )

    overriding = rule.owner_override and role_at_least(actor.role, OVERRIDE_TIER)
    ownership_ok = True
    if rule.owner_only and item.author_id != actor.id and not overriding:
        ownership_ok = False
    if rule.assigned_only and getattr(item, rule.assigned_only) != actor.id and not overriding:
        ownership_ok = False
    check.checks["ownership"] = ownership_ok
    if not ownership_ok:
        errors.append(ForbiddenError(f"actor not owner/assignee for {action.value}"))
    if not (role_ok and ownership_ok):
        check.issues.append(ForbiddenError.public_message)

    if rule.requires_assignee and check_assignee:
        assignee_error = _assignee_error(
            rule, action, assignee, assignee_id or (assignee.id if assignee else None)
        )
        check.checks["assignee"] = assignee_error is None
        if assignee_error is not None:
            errors.append(assignee_error)
            check.issues.append(assignee_error.message)

    target = _target_stage(rule, item)
    missing = check_gate(item, target)
    failing = {m.code for m in missing}
    for code in ("category", "language", "religion"):
        check.checks[code] = code not in failing

    if action == Action.mark_translated:
        guard = _translations_guard(translations or [])
        check.checks["translations"] = guard is None
        if guard is not None:
            missing.append(guard)
    else:
        check.checks["translations"] = True

    if missing:
        check.missing = missing
        check.issues.extend(m.message for m in missing)
        errors.append(GuardFailedError(missing))

    if errors:
        check.error = errors[0]
    return check


def plan_transition(
    actor: Actor,
    item: ContentItem,
    action: Action | str,
    assignee: User | None = None,
    translations: list[ContentItem] | None = None,
    *,
    assignee_id: UUID | None = None,
    checklist_data: dict | None = None,
    now: datetime | None = None,
) -> TransitionPlan:
    """Plan ``action`` on ``item`` or raise the first failing check's error."""
    check = evaluate_transition(
        actor, item, action, assignee, translations, assignee_id=assignee_id
    )
    if check.error is not None:
        raise check.error

    rule = check.rule
    action = Action(action)
    from_stage = check.from_stage
    to_stage = _target_stage(rule, item)
    now = now or datetime.now(timezone.utc)

    updates: dict[str, Any] = {"stage": to_stage.value, "updated_at": now}
    effects: list[Effect] = []

    if rule.assignee_field is not None and assignee is not None:
        updates[rule.assignee_field] = assignee.id
        title = (
            f"Review requested: {item.title}"
            if rule.assignee_field == "assigned_reviewer_id"
            else f"Approval requested: {item.title}"
        )
        effects.append(
            NotifyEffect(
                user_id=assignee.id,
                notification_type=action.value,
                title=title,
            )
        )

    if rule.checklist_field is not None and checklist_data:
        updates[rule.checklist_field] = checklist_data

    if to_stage == ContentStage.published:
        updates["published_at"] = now
        updates["published_by"] = actor.id

    effects.insert(
        0,
        AuditEffect(
            action=action.value.upper(),
            details={
                "from_stage": from_stage.value,
                "to_stage": to_stage.value,
                "assigned_user_id": str(assignee.id) if assignee else None,
                "is_translation": bool(item.is_translation),
            },
        ),
    )

    if action == Action.approve and item.is_translation:
        effects.append(CascadeEffect(CascadeKind.auto_advance_parent))
    if action == Action.publish and not item.is_translation:
        effects.append(CascadeEffect(CascadeKind.publish_translations))

    return TransitionPlan(
        from_stage=from_stage,
        to_stage=to_stage,
        status=status_for_stage(to_stage),
        updates=updates,
        effects=effects,
    )


def apply_updates(item: ContentItem, updates: dict[str, Any]) -> None:
    for name, value in updates.items():
        setattr(item, name, value)
