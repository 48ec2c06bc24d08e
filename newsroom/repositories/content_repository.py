"""Query helpers for content items and the rows the workflow reads.

Every workflow write path goes through these functions, which keeps row
locking in one place. Locks are always taken parent first, then children
ordered by id.
"""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.models import (
    Classification,
    ClassificationType,
    ContentItem,
    Station,
    User,
)


async def get_item(
    db: AsyncSession, item_id: UUID, for_update: bool = False
) -> ContentItem | None:
    query = select(ContentItem).where(ContentItem.id == item_id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_original_item_id(db: AsyncSession, item_id: UUID) -> UUID | None:
    """Parent id of a translation without loading or locking the row.

    Returns None for originals and for missing items.
    """
    result = await db.execute(
        select(ContentItem.original_item_id).where(ContentItem.id == item_id)
    )
    return result.scalar_one_or_none()


async def list_translations(
    db: AsyncSession, parent_id: UUID, for_update: bool = False
) -> list[ContentItem]:
    """Translations of ``parent_id`` ordered by id (lock order)."""
    query = (
        select(ContentItem)
        .where(ContentItem.original_item_id == parent_id)
        .order_by(ContentItem.id)
    )
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_user(db: AsyncSession, user_id: UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_station(db: AsyncSession, station_id: UUID) -> Station | None:
    result = await db.execute(select(Station).where(Station.id == station_id))
    return result.scalar_one_or_none()


async def get_active_language(db: AsyncSession, language: str) -> Classification | None:
    """Active language classification whose name matches ``language``, ignoring case."""
    result = await db.execute(
        select(Classification)
        .where(
            func.lower(Classification.name) == language.lower(),
            Classification.type == ClassificationType.language.value,
            Classification.is_active.is_(True),
        )
        .order_by(Classification.sort_order)
    )
    return result.scalars().first()
