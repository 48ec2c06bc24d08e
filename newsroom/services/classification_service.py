"""Classification resolver: station allow-list names to classification ids."""

import os
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.logging_config import get_logger
from newsroom.models import Classification, ClassificationType, Station
from newsroom.redis import cache_get_json, cache_set_json

logger = get_logger(__name__)


def _station_filter_ttl() -> int:
    return int(os.getenv("STATION_FILTER_TTL_SECONDS", "300"))


def station_filter_key(station_id: UUID) -> str:
    return f"station_filter:{station_id}"


@dataclass(frozen=True)
class StationFilter:
    """A station's allow-lists resolved to classification ids."""

    language_ids: frozenset[UUID] = field(default_factory=frozenset)
    religion_ids: frozenset[UUID] = field(default_factory=frozenset)
    blocked_category_ids: frozenset[UUID] = field(default_factory=frozenset)

    def to_cache(self) -> dict:
        return {
            "language_ids": sorted(str(i) for i in self.language_ids),
            "religion_ids": sorted(str(i) for i in self.religion_ids),
            "blocked_category_ids": sorted(str(i) for i in self.blocked_category_ids),
        }

    @classmethod
    def from_cache(cls, data: dict) -> "StationFilter":
        return cls(
            language_ids=frozenset(UUID(i) for i in data.get("language_ids", [])),
            religion_ids=frozenset(UUID(i) for i in data.get("religion_ids", [])),
            blocked_category_ids=frozenset(
                UUID(i) for i in data.get("blocked_category_ids", [])
            ),
        )


async def resolve_names(
    db: AsyncSession, names: list[str], kind: ClassificationType
) -> list[UUID]:
    """Map names to ids of active classifications of ``kind``.

    Matching is exact and case-sensitive. Unknown names are dropped, so a
    typo in a station's configuration hides that language rather than
    failing the whole feed.
    """
    if not names:
        return []

    result = await db.execute(
        select(Classification.id)
        .where(
            Classification.name.in_(list(names)),
            Classification.type == kind.value,
            Classification.is_active.is_(True),
        )
        .order_by(Classification.sort_order)
    )
    ids = list(result.scalars().all())
    if len(ids) < len(set(names)):
        logger.debug(
            "classification_names_unmatched",
            kind=kind.value,
            requested=len(set(names)),
            matched=len(ids),
        )
    return ids


async def resolve_station_filter(db: AsyncSession, station: Station) -> StationFilter:
    """Resolve (and cache) a station's filter."""
    cache_key = station_filter_key(station.id)
    cached = await cache_get_json(cache_key)
    if cached is not None:
        return StationFilter.from_cache(cached)

    language_ids = await resolve_names(
        db, station.allowed_language_names or [], ClassificationType.language
    )
    religion_ids = await resolve_names(
        db, station.allowed_religion_names or [], ClassificationType.religion
    )
    station_filter = StationFilter(
        language_ids=frozenset(language_ids),
        religion_ids=frozenset(religion_ids),
        blocked_category_ids=frozenset(station.blocked_category_ids or []),
    )

    await cache_set_json(cache_key, station_filter.to_cache(), _station_filter_ttl())
    logger.info(
        "station_filter_resolved",
        station_id=str(station.id),
        languages=len(language_ids),
        religions=len(religion_ids),
        blocked_categories=len(station_filter.blocked_category_ids),
    )
    return station_filter

