"""
Event model with a capacity ceiling and a publication lifecycle.

Key design decisions:
- Places left are never stored: they are derived from active reservations
  on every read, so they cannot drift from the ledger
- Index on `date_time` for the ordered and upcoming listings
- Publishing and cancelling are plain status updates; a published event is
  never physically deleted so its reservation history survives
"""

import enum

from sqlalchemy import Column, Integer, String, Text, Index, CheckConstraint

from eventaro.db.base import Base, TimestampMixin
from eventaro.db.types import UTCDateTime


class EventStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CANCELLED = "CANCELLED"


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    date_time = Column(UTCDateTime(), nullable=False)
    location = Column(String(255), nullable=False)
    max_capacity = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=EventStatus.DRAFT.value)

    __table_args__ = (
        CheckConstraint("max_capacity >= 1", name="check_event_capacity_positive"),
        CheckConstraint(
            "status IN ('DRAFT', 'PUBLISHED', 'CANCELLED')", name="check_event_status"
        ),
        Index("ix_events_date_time", "date_time"),
        # Public catalogue: published events sorted by date
        Index("ix_events_status_date_time", "status", "date_time"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, status={self.status}, capacity={self.max_capacity})>"
