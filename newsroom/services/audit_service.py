"""Audit trail for workflow mutations."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.logging_config import get_logger
from newsroom.models import AuditLog

logger = get_logger(__name__)

# Audit actions written by the cascade coordinator
CREATE_TRANSLATION = "CREATE_TRANSLATION"
AUTO_MARK_TRANSLATED = "AUTO_MARK_TRANSLATED"
AUTO_PUBLISH_TRANSLATION = "AUTO_PUBLISH_TRANSLATION"


async def record_audit(
    db: AsyncSession,
    actor_id: UUID | None,
    action: str,
    target_id: UUID,
    details: dict | None = None,
    target_type: str = "content_item",
) -> AuditLog:
    """
    Add an audit entry to the current transaction.

    Args:
        db: Database session (the entry commits or rolls back with it)
        actor_id: User performing the action; None for system actions
        action: e.g. 'APPROVE', 'CREATE_TRANSLATION', 'AUTO_MARK_TRANSLATED'
        target_id: Affected row
        details: Additional context (stages, assignee, parent)
        target_type: Table-level kind of the target
    """
    entry = AuditLog(
        actor_id=actor_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        details=details or {},
    )
    db.add(entry)

    logger.info(
        "audit_recorded",
        action=action,
        target_type=target_type,
        target_id=str(target_id),
    )
    return entry
