"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import Field, field_validator

from eventaro.db.types import as_utc
from eventaro.models.event import EventStatus
from eventaro.schemas.base import CamelModel, RequestModel


class EventCreate(RequestModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    date_time: datetime
    location: str = Field(..., min_length=1, max_length=255)
    max_capacity: int = Field(..., ge=1)

    @field_validator("date_time")
    @classmethod
    def normalise_date_time(cls, v: datetime) -> datetime:
        return as_utc(v)


class EventUpdate(RequestModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    date_time: Optional[datetime] = None
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    max_capacity: Optional[int] = Field(None, ge=1)
    status: Optional[EventStatus] = None

    @field_validator("date_time")
    @classmethod
    def normalise_date_time(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None


class EventResponse(CamelModel):
    id: int
    title: str
    description: str
    date_time: datetime
    location: str
    max_capacity: int
    status: EventStatus
    created_at: datetime
    places_left: int


class EventStatsResponse(CamelModel):
    event_id: int
    max_capacity: int
    reserved_count: int
    fill_rate_percent: int
