from eventaro.models.user import User, UserRole
from eventaro.models.event import Event, EventStatus
from eventaro.models.reservation import Reservation, ReservationStatus, ACTIVE_RESERVATION_STATUSES

__all__ = [
    "User", "UserRole",
    "Event", "EventStatus",
    "Reservation", "ReservationStatus", "ACTIVE_RESERVATION_STATUSES",
]
