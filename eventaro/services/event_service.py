"""
Event service: CRUD, publication lifecycle and capacity read-side.

Places left are computed on every read from one grouped aggregate over
active reservations; nothing about capacity is stored on the event row.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from eventaro.models.event import Event, EventStatus
from eventaro.models.reservation import Reservation, ACTIVE_RESERVATION_STATUSES
from eventaro.schemas.event import EventCreate, EventUpdate, EventResponse, EventStatsResponse
from eventaro.core.logging import get_logger

logger = get_logger(__name__)

EVENT_NOT_FOUND = "Event not found"
DATE_NOT_IN_FUTURE = "Event date must be in the future"


def places_left(max_capacity: int, active_count: int) -> int:
    return max(0, max_capacity - active_count)


def fill_rate_percent(reserved_count: int, max_capacity: int) -> int:
    """Reserved share of capacity as a whole percentage, rounded half up."""
    if max_capacity <= 0:
        return 0
    return int(reserved_count * 100 / max_capacity + 0.5)


def to_response(event: Event, active_count: int) -> EventResponse:
    return EventResponse(
        id=event.id,
        title=event.title,
        description=event.description,
        date_time=event.date_time,
        location=event.location,
        max_capacity=event.max_capacity,
        status=event.status,
        created_at=event.created_at,
        places_left=places_left(event.max_capacity, active_count),
    )


def _ensure_future(date_time: datetime) -> None:
    if date_time <= datetime.now(timezone.utc):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=DATE_NOT_IN_FUTURE,
        )


async def get_active_reservation_counts(
    db: AsyncSession, event_ids: Iterable[int]
) -> dict[int, int]:
    """
    Count PENDING + CONFIRMED reservations per event in one grouped query.
    Events with no active reservation are simply absent from the result.
    """
    ids = list(event_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(Reservation.event_id, func.count(Reservation.id))
        .where(
            Reservation.event_id.in_(ids),
            Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
        )
        .group_by(Reservation.event_id)
    )
    return {event_id: count for event_id, count in result.all()}


async def _with_places_left(db: AsyncSession, events: list[Event]) -> list[EventResponse]:
    counts = await get_active_reservation_counts(db, (e.id for e in events))
    return [to_response(e, counts.get(e.id, 0)) for e in events]


async def get_event_or_404(db: AsyncSession, event_id: int) -> Event:
    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()

    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=EVENT_NOT_FOUND,
        )
    return event


async def create_event(db: AsyncSession, event_data: EventCreate) -> EventResponse:
    """Create a new event in DRAFT; the date must be strictly in the future."""
    _ensure_future(event_data.date_time)

    event = Event(
        title=event_data.title,
        description=event_data.description,
        date_time=event_data.date_time,
        location=event_data.location,
        max_capacity=event_data.max_capacity,
        status=EventStatus.DRAFT.value,
    )
    db.add(event)
    await db.flush()
    await db.refresh(event)

    logger.info("event_created", event_id=event.id, title=event.title, capacity=event.max_capacity)
    return to_response(event, 0)


async def update_event(db: AsyncSession, event_id: int, event_data: EventUpdate) -> EventResponse:
    """
    Apply only the fields present in the request. A new date is checked
    against the time of this update, not the creation time.
    """
    event = await get_event_or_404(db, event_id)
    changes = event_data.model_dump(exclude_unset=True, exclude_none=True)

    if "date_time" in changes:
        _ensure_future(changes["date_time"])
    if "status" in changes:
        changes["status"] = EventStatus(changes["status"]).value

    previous_status = event.status
    for field, value in changes.items():
        setattr(event, field, value)
    await db.flush()
    await db.refresh(event)

    logger.info(
        "event_updated",
        event_id=event.id,
        fields=sorted(changes),
        previous_status=previous_status,
        status=event.status,
    )
    counts = await get_active_reservation_counts(db, [event.id])
    return to_response(event, counts.get(event.id, 0))


async def remove_event(db: AsyncSession, event_id: int) -> None:
    """
    Published events are soft-deleted (CANCELLED) to keep their reservation
    history; drafts and already-cancelled events are deleted outright.
    """
    event = await get_event_or_404(db, event_id)

    if event.status == EventStatus.PUBLISHED.value:
        event.status = EventStatus.CANCELLED.value
        await db.flush()
        logger.info("event_cancelled", event_id=event.id)
        return

    await db.delete(event)
    await db.flush()
    logger.info("event_deleted", event_id=event_id)


async def _list(db: AsyncSession, *criteria) -> list[EventResponse]:
    query = select(Event).where(*criteria).order_by(Event.date_time.asc(), Event.id.asc())
    result = await db.execute(query)
    return await _with_places_left(db, list(result.scalars().all()))


async def list_published(db: AsyncSession) -> list[EventResponse]:
    return await _list(db, Event.status == EventStatus.PUBLISHED.value)


async def list_upcoming(db: AsyncSession) -> list[EventResponse]:
    """Every event, whatever its status, that has not started yet."""
    return await _list(db, Event.date_time >= datetime.now(timezone.utc))


async def list_events(db: AsyncSession) -> list[EventResponse]:
    return await _list(db)


async def get_event(db: AsyncSession, event_id: int) -> EventResponse:
    event = await get_event_or_404(db, event_id)
    counts = await get_active_reservation_counts(db, [event.id])
    return to_response(event, counts.get(event.id, 0))


async def get_published_event(db: AsyncSession, event_id: int) -> EventResponse:
    result = await db.execute(
        select(Event).where(Event.id == event_id, Event.status == EventStatus.PUBLISHED.value)
    )
    event: Optional[Event] = result.scalar_one_or_none()
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=EVENT_NOT_FOUND,
        )
    counts = await get_active_reservation_counts(db, [event.id])
    return to_response(event, counts.get(event.id, 0))


async def get_event_stats(db: AsyncSession, event_id: int) -> EventStatsResponse:
    event = await get_event_or_404(db, event_id)
    counts = await get_active_reservation_counts(db, [event.id])
    reserved = counts.get(event.id, 0)
    return EventStatsResponse(
        event_id=event.id,
        max_capacity=event.max_capacity,
        reserved_count=reserved,
        fill_rate_percent=fill_rate_percent(reserved, event.max_capacity),
    )
