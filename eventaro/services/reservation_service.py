"""
Reservation ledger: creation, status transitions, user cancellation window,
tickets and per-status statistics.

State machine
=============

  PENDING   -> CONFIRMED | REFUSED | CANCELLED
  CONFIRMED -> CANCELLED
  REFUSED, CANCELLED: terminal

Two notions of "capacity consumed" are in use and kept apart on purpose:
  - create:  PENDING + CONFIRMED reservations must stay below capacity
  - confirm: CONFIRMED reservations alone must stay below capacity

CONCURRENCY STRATEGY: Pessimistic lock on the event row
=======================================================

Problem:
  Two users reserve the last place simultaneously. Both count
  active reservations = capacity - 1, both insert. Result: overbooking.

Solution:
  create and confirm read the event with SELECT ... FOR UPDATE before
  counting. Concurrent capacity checks for the same event therefore run one
  after the other inside their request transactions, and the second one sees
  the first one's insert once it commits. Requests for different events never
  wait on each other.

  Status transitions (confirm, refuse, both cancels) also lock the reservation
  row before reading its status, so two admins acting on the same PENDING
  reservation cannot both pass the check. Lock order is always reservation,
  then event.

  SQLite ignores FOR UPDATE but only allows one writer at a time, which gives
  the same outcome for the test suite.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import Select, select, func
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from eventaro.models.event import Event, EventStatus
from eventaro.models.reservation import (
    Reservation,
    ReservationStatus,
    ACTIVE_RESERVATION_STATUSES,
)
from eventaro.services.event_service import EVENT_NOT_FOUND
from eventaro.services.ticket_service import Ticket, render_ticket
from eventaro.core.config import get_settings
from eventaro.core.metrics import record_reservation_attempt, record_transition
from eventaro.core.logging import get_logger

logger = get_logger(__name__)

RESERVATION_NOT_FOUND = "Reservation not found"


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


async def _lock_event(db: AsyncSession, event_id: int) -> Optional[Event]:
    result = await db.execute(
        select(Event)
        .where(Event.id == event_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _count(db: AsyncSession, event_id: int, statuses: tuple[str, ...]) -> int:
    result = await db.execute(
        select(func.count(Reservation.id)).where(
            Reservation.event_id == event_id,
            Reservation.status.in_(statuses),
        )
    )
    return result.scalar_one()


def reservation_query(reservation_id: int, for_update: bool = False) -> Select:
    query = select(Reservation).where(Reservation.id == reservation_id)
    if for_update:
        query = query.with_for_update(of=Reservation)
    return query.execution_options(populate_existing=True)


async def get_reservation(
    db: AsyncSession, reservation_id: int, for_update: bool = False
) -> Reservation:
    """
    Load a reservation with its event and user, always from the database.
    With for_update the row stays locked until the request transaction ends,
    so a status read here cannot be overtaken by a concurrent transition.
    """
    result = await db.execute(reservation_query(reservation_id, for_update))
    reservation = result.scalar_one_or_none()
    if not reservation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=RESERVATION_NOT_FOUND,
        )
    return reservation


async def _transition(
    db: AsyncSession, reservation: Reservation, new_status: ReservationStatus
) -> Reservation:
    previous = reservation.status
    reservation.status = new_status.value
    await db.flush()
    record_transition(previous, new_status.value)
    logger.info(
        "reservation_status_changed",
        reservation_id=reservation.id,
        event_id=reservation.event_id,
        from_status=previous,
        to_status=new_status.value,
    )
    return await get_reservation(db, reservation.id)


async def create_reservation(db: AsyncSession, user_id: int, event_id: int) -> Reservation:
    """
    Reserve a place for user_id at event_id in PENDING.

    Checks, in order: event exists, event is published, active reservations
    are below capacity, the user holds no active reservation for the event.
    """
    event = await _lock_event(db, event_id)
    if not event:
        record_reservation_attempt("not_found")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=EVENT_NOT_FOUND,
        )

    if event.status != EventStatus.PUBLISHED.value:
        record_reservation_attempt("unavailable")
        raise _bad_request("Event is not available for reservation")

    active_count = await _count(db, event.id, ACTIVE_RESERVATION_STATUSES)
    if active_count >= event.max_capacity:
        logger.warning(
            "reservation_failed_full",
            event_id=event.id,
            active=active_count,
            capacity=event.max_capacity,
        )
        record_reservation_attempt("full")
        raise _bad_request("Event is full")

    existing = await db.execute(
        select(Reservation.id).where(
            Reservation.user_id == user_id,
            Reservation.event_id == event.id,
            Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
        ).limit(1)
    )
    if existing.scalar_one_or_none() is not None:
        record_reservation_attempt("duplicate")
        raise _bad_request("You already have a reservation for this event")

    reservation = Reservation(
        user_id=user_id,
        event_id=event.id,
        status=ReservationStatus.PENDING.value,
    )
    db.add(reservation)
    await db.flush()

    logger.info(
        "reservation_created",
        reservation_id=reservation.id,
        user_id=user_id,
        event_id=event.id,
        active_before=active_count,
    )
    record_reservation_attempt("created")
    return await get_reservation(db, reservation.id)


async def confirm_reservation(db: AsyncSession, reservation_id: int) -> Reservation:
    reservation = await get_reservation(db, reservation_id, for_update=True)
    if reservation.status != ReservationStatus.PENDING.value:
        raise _bad_request("Only pending reservations can be confirmed")

    event = await _lock_event(db, reservation.event_id)
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=EVENT_NOT_FOUND,
        )

    confirmed_count = await _count(db, event.id, (ReservationStatus.CONFIRMED.value,))
    if confirmed_count >= event.max_capacity:
        logger.warning(
            "reservation_confirm_rejected",
            reservation_id=reservation.id,
            event_id=event.id,
            confirmed=confirmed_count,
            capacity=event.max_capacity,
        )
        raise _bad_request("Event capacity would be exceeded")

    return await _transition(db, reservation, ReservationStatus.CONFIRMED)


async def refuse_reservation(db: AsyncSession, reservation_id: int) -> Reservation:
    reservation = await get_reservation(db, reservation_id, for_update=True)
    if reservation.status != ReservationStatus.PENDING.value:
        raise _bad_request("Only pending reservations can be refused")
    return await _transition(db, reservation, ReservationStatus.REFUSED)


async def cancel_by_admin(db: AsyncSession, reservation_id: int) -> Reservation:
    reservation = await get_reservation(db, reservation_id, for_update=True)
    if reservation.status not in ACTIVE_RESERVATION_STATUSES:
        raise _bad_request("Reservation cannot be cancelled")
    return await _transition(db, reservation, ReservationStatus.CANCELLED)


async def cancel_by_user(
    db: AsyncSession,
    reservation_id: int,
    user_id: int,
    now: Optional[datetime] = None,
) -> Reservation:
    """
    Owner cancellation of a CONFIRMED reservation, allowed until the lead
    time (CANCELLATION_LEAD_HOURS, default 48h) before the event starts.
    """
    reservation = await get_reservation(db, reservation_id, for_update=True)
    if reservation.user_id != user_id:
        raise _forbidden("Not your reservation")
    if reservation.status != ReservationStatus.CONFIRMED.value:
        raise _bad_request("Only confirmed reservations can be cancelled by user")

    lead_hours = get_settings().CANCELLATION_LEAD_HOURS
    cutoff = reservation.event.date_time - timedelta(hours=lead_hours)
    if (now or datetime.now(timezone.utc)) > cutoff:
        raise _bad_request(
            f"Cancellation is only allowed at least {lead_hours}h before the event"
        )

    return await _transition(db, reservation, ReservationStatus.CANCELLED)


async def get_ticket(
    db: AsyncSession,
    reservation_id: int,
    caller_id: int,
    is_admin: bool,
) -> Ticket:
    reservation = await get_reservation(db, reservation_id)
    if reservation.user_id != caller_id and not is_admin:
        raise _forbidden("Not allowed to download this ticket")
    if reservation.status != ReservationStatus.CONFIRMED.value:
        raise _bad_request("Ticket is only available for confirmed reservations")

    participant = reservation.user.full_name if reservation.user else None
    # ReportLab layout is CPU-bound; keep it off the event loop
    content = await asyncio.to_thread(
        render_ticket,
        reservation_id=reservation.id,
        event_title=reservation.event.title,
        event_date_time=reservation.event.date_time,
        event_location=reservation.event.location,
        participant_name=participant or "Participant",
    )
    logger.info("ticket_issued", reservation_id=reservation.id, caller_id=caller_id)
    return Ticket(
        content=content,
        media_type="application/pdf",
        filename=f"ticket-{reservation.id}.pdf",
    )


async def list_user_reservations(db: AsyncSession, user_id: int) -> list[Reservation]:
    result = await db.execute(
        select(Reservation)
        .where(Reservation.user_id == user_id)
        .order_by(Reservation.created_at.desc(), Reservation.id.desc())
    )
    return list(result.scalars().all())


async def list_all_reservations(db: AsyncSession) -> list[Reservation]:
    result = await db.execute(
        select(Reservation).order_by(Reservation.created_at.desc(), Reservation.id.desc())
    )
    return list(result.scalars().all())


async def get_stats_by_status(db: AsyncSession) -> dict[str, int]:
    """Reservation count for each of the four statuses, zero when absent."""
    result = await db.execute(
        select(Reservation.status, func.count(Reservation.id)).group_by(Reservation.status)
    )
    counts = dict(result.all())
    return {s.value: counts.get(s.value, 0) for s in ReservationStatus}
