"""Station feed: published items filtered by the station's allow-lists."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.auth import get_current_user
from newsroom.database import get_db
from newsroom.errors import ForbiddenError
from newsroom.models import User, UserType
from newsroom.schemas import PaginatedItemsResponse, item_response
from newsroom.services.visibility_service import list_station_items

router = APIRouter(prefix="/stations", tags=["stations"])


@router.get("/{station_id}/items", response_model=PaginatedItemsResponse)
async def station_items(
    station_id: UUID,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100, alias="perPage"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Visible published items for a station, newest first."""
    if user.user_type == UserType.radio and user.station_id != station_id:
        raise ForbiddenError(f"radio user {user.id} reading station {station_id}")

    items, total = await list_station_items(db, station_id, page, per_page)
    return PaginatedItemsResponse(
        items=[item_response(i) for i in items],
        total=total,
        page=page,
        per_page=per_page,
    )
