"""
Event endpoints: public catalogue plus admin lifecycle and analytics.

Route order matters: the literal paths (/published, /upcoming) are declared
before /{event_id}.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventaro.api.deps import CurrentUser, require_admin
from eventaro.db.session import get_db
from eventaro.schemas.event import EventCreate, EventResponse, EventStatsResponse, EventUpdate
from eventaro.services import event_service

router = APIRouter(prefix="/events", tags=["Events"])


@router.get("/published", response_model=list[EventResponse])
async def list_published_events(db: AsyncSession = Depends(get_db, scope="function")):
    """Published events, soonest first, with live places left."""
    return await event_service.list_published(db)


@router.get("/published/{event_id}", response_model=EventResponse)
async def get_published_event(event_id: int, db: AsyncSession = Depends(get_db, scope="function")):
    return await event_service.get_published_event(db, event_id)


@router.get("/upcoming", response_model=list[EventResponse])
async def list_upcoming_events(
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    return await event_service.list_upcoming(db)


@router.get("", response_model=list[EventResponse])
async def list_events(
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    """Every event in every status."""
    return await event_service.list_events(db)


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    """Create a DRAFT event. The date must be in the future."""
    return await event_service.create_event(db, event_data)


@router.get("/{event_id}/stats", response_model=EventStatsResponse)
async def get_event_stats(
    event_id: int,
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    return await event_service.get_event_stats(db, event_id)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: int,
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    return await event_service.get_event(db, event_id)


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: int,
    event_data: EventUpdate,
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    """Partial update; `status` may be set here to publish or cancel."""
    return await event_service.update_event(db, event_id, event_data)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: int,
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    """Cancel a published event, or delete it if it was never published."""
    await event_service.remove_event(db, event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
