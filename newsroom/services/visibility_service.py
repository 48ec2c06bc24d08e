"""Content visibility filter for station feeds.

An item is visible to a station iff it is published, its category is not
blocked, and it links at least one allowed language AND at least one
allowed religion. Locality never participates.
"""

from uuid import UUID

from sqlalchemy import ColumnElement, and_, false, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.errors import ForbiddenError, NotFoundError
from newsroom.logging_config import get_logger
from newsroom.models import ContentItem, ContentStage, ItemClassification
from newsroom.repositories import content_repository as repo
from newsroom.services.classification_service import (
    StationFilter,
    resolve_station_filter,
)

logger = get_logger(__name__)


class VisibilityPredicate:
    """One visibility rule, usable in memory and as a SQL clause."""

    def __init__(self, station_filter: StationFilter):
        self.station_filter = station_filter

    def __call__(self, item: ContentItem) -> bool:
        f = self.station_filter
        if ContentStage(item.stage) != ContentStage.published:
            return False
        if item.category_id is not None and item.category_id in f.blocked_category_ids:
            return False
        linked = {link.classification_id for link in item.classifications}
        return bool(linked & f.language_ids) and bool(linked & f.religion_ids)

    def clause(self) -> ColumnElement[bool]:
        f = self.station_filter
        if not f.language_ids or not f.religion_ids:
            return false()

        conditions = [
            ContentItem.stage == ContentStage.published.value,
            _links_any(f.language_ids),
            _links_any(f.religion_ids),
        ]
        if f.blocked_category_ids:
            conditions.append(
                or_(
                    ContentItem.category_id.is_(None),
                    ContentItem.category_id.not_in(list(f.blocked_category_ids)),
                )
            )
        return and_(*conditions)


def _links_any(classification_ids: frozenset[UUID]) -> ColumnElement[bool]:
    return ContentItem.id.in_(
        select(ItemClassification.content_item_id).where(
            ItemClassification.classification_id.in_(list(classification_ids))
        )
    )


def build_visibility_predicate(station_filter: StationFilter) -> VisibilityPredicate:
    return VisibilityPredicate(station_filter)


async def list_station_items(
    db: AsyncSession,
    station_id: UUID,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[ContentItem], int]:
    """Published items visible to a station, newest first, with total count."""
    station = await repo.get_station(db, station_id)
    if station is None:
        raise NotFoundError("Station", station_id)
    if not station.is_active or not station.has_content_access:
        raise ForbiddenError(f"station {station_id} inactive or without content access")

    predicate = build_visibility_predicate(await resolve_station_filter(db, station))

    query = select(ContentItem).where(predicate.clause())
    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    query = query.order_by(ContentItem.published_at.desc(), ContentItem.id)
    query = query.offset((page - 1) * per_page).limit(per_page)
    result = await db.execute(query)
    items = list(result.scalars().all())

    logger.info(
        "station_feed_listed",
        station_id=str(station_id),
        page=page,
        returned=len(items),
        total=total,
    )
    return items, total
