"""
Pydantic schemas for reservation-related request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import Field

from eventaro.models.reservation import ReservationStatus
from eventaro.schemas.base import CamelModel, RequestModel


class ReservationCreate(RequestModel):
    event_id: int = Field(..., ge=1)


class ReservationEventSummary(CamelModel):
    id: int
    title: str
    date_time: datetime
    location: str


class ReservationUserSummary(CamelModel):
    id: int
    full_name: str
    email: str


class ReservationResponse(CamelModel):
    id: int
    user_id: int
    event_id: int
    status: ReservationStatus
    created_at: datetime
    event: Optional[ReservationEventSummary] = None


class AdminReservationResponse(ReservationResponse):
    """Admin listing: also names who holds the reservation."""

    user: Optional[ReservationUserSummary] = None


class ReservationStatsResponse(CamelModel):
    # Keys are the status names themselves, not camelCased field names
    PENDING: int = Field(0, alias="PENDING")
    CONFIRMED: int = Field(0, alias="CONFIRMED")
    REFUSED: int = Field(0, alias="REFUSED")
    CANCELLED: int = Field(0, alias="CANCELLED")
