"""Notification service: inbox rows for editorial hand-offs.

Delivery (email, push) is handled elsewhere; this only writes the row
inside the caller's transaction.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.logging_config import get_logger
from newsroom.models import ContentItem, ContentStage, Notification

logger = get_logger(__name__)


def item_link(item_id: UUID) -> str:
    return f"/items/{item_id}"


async def create_notification(
    db: AsyncSession,
    user_id: UUID,
    notification_type: str,
    title: str,
    body: str,
    link: str | None = None,
    metadata: dict | None = None,
) -> Notification:
    """Insert a single notification."""
    notif = Notification(
        user_id=user_id,
        notification_type=notification_type,
        title=title,
        body=body,
        link=link,
        metadata_=metadata or {},
    )
    db.add(notif)
    return notif


async def notify_assignee(
    db: AsyncSession,
    item: ContentItem,
    user_id: UUID,
    notification_type: str,
    title: str,
    actor_id: UUID | None = None,
) -> Notification:
    """Tell a newly assigned reviewer/approver/translator about an item."""
    notif = await create_notification(
        db,
        user_id,
        notification_type,
        title,
        body=f'"{item.title}" is waiting for you.',
        link=item_link(item.id),
        metadata={
            "item_id": str(item.id),
            "stage": ContentStage(item.stage).value,
            "assigned_by": str(actor_id) if actor_id else None,
        },
    )
    logger.info(
        "assignee_notified",
        item_id=str(item.id),
        user_id=str(user_id),
        notification_type=notification_type,
    )
    return notif
