"""
Reservation model: one user's request for a place at one event.

Key design decisions:
- No unique constraint on (user_id, event_id): a user may reserve again once
  an earlier reservation was refused or cancelled. The one-active-reservation
  rule is enforced by the reservation service.
- Status changes instead of deletes, so the ledger keeps its history
- Deleting a draft event removes its reservations (ON DELETE CASCADE)
"""

import enum

from sqlalchemy import Column, Integer, String, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from eventaro.db.base import Base, TimestampMixin


class ReservationStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    REFUSED = "REFUSED"
    CANCELLED = "CANCELLED"


# Statuses that hold a place at the event
ACTIVE_RESERVATION_STATUSES = (ReservationStatus.PENDING.value, ReservationStatus.CONFIRMED.value)


class Reservation(Base, TimestampMixin):
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status = Column(String(20), nullable=False, default=ReservationStatus.PENDING.value)

    # Relationships
    user = relationship("User", lazy="selectin")
    event = relationship("Event", lazy="selectin")

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'REFUSED', 'CANCELLED')",
            name="check_reservation_status",
        ),
        # Active-count aggregate and duplicate check both filter on these
        Index("ix_reservations_event_status", "event_id", "status"),
        Index("ix_reservations_user_event", "user_id", "event_id"),
    )

    def __repr__(self) -> str:
        return f"<Reservation(id={self.id}, user={self.user_id}, event={self.event_id}, status={self.status})>"
