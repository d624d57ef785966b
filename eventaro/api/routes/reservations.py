"""
Reservation endpoints: booking, admin moderation, cancellation and tickets.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventaro.api.deps import CurrentUser, require_admin, require_member
from eventaro.db.session import get_db
from eventaro.schemas.reservation import (
    ReservationCreate,
    ReservationResponse,
    AdminReservationResponse,
    ReservationStatsResponse,
)
from eventaro.services import reservation_service

router = APIRouter(prefix="/reservations", tags=["Reservations"])


@router.post("", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    reservation_data: ReservationCreate,
    user: CurrentUser = Depends(require_member),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    """
    Reserve a place at a published event. The reservation starts PENDING
    and counts against capacity until it is refused or cancelled.
    """
    return await reservation_service.create_reservation(db, user.id, reservation_data.event_id)


@router.get("/my", response_model=list[ReservationResponse])
async def list_my_reservations(
    user: CurrentUser = Depends(require_member),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    return await reservation_service.list_user_reservations(db, user.id)


@router.get("/all", response_model=list[AdminReservationResponse])
async def list_all_reservations(
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    return await reservation_service.list_all_reservations(db)


@router.get("/stats", response_model=ReservationStatsResponse)
async def get_reservation_stats(
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    return await reservation_service.get_stats_by_status(db)


@router.patch("/{reservation_id}/confirm", response_model=ReservationResponse)
async def confirm_reservation(
    reservation_id: int,
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    return await reservation_service.confirm_reservation(db, reservation_id)


@router.patch("/{reservation_id}/refuse", response_model=ReservationResponse)
async def refuse_reservation(
    reservation_id: int,
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    return await reservation_service.refuse_reservation(db, reservation_id)


@router.patch("/{reservation_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation(
    reservation_id: int,
    user: CurrentUser = Depends(require_member),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    """
    Admins may cancel any pending or confirmed reservation. Users may cancel
    their own confirmed reservation up to 48h before the event.
    """
    if user.is_admin:
        return await reservation_service.cancel_by_admin(db, reservation_id)
    return await reservation_service.cancel_by_user(db, reservation_id, user.id)


@router.get(
    "/{reservation_id}/ticket",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def download_ticket(
    reservation_id: int,
    user: CurrentUser = Depends(require_member),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    """PDF ticket for a confirmed reservation (owner or admin only)."""
    ticket = await reservation_service.get_ticket(db, reservation_id, user.id, user.is_admin)
    return Response(
        content=ticket.content,
        media_type=ticket.media_type,
        headers={"Content-Disposition": f'attachment; filename="{ticket.filename}"'},
    )
