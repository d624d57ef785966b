from eventaro.schemas.user import UserCreate, UserLogin, UserResponse, AuthResponse
from eventaro.schemas.event import EventCreate, EventUpdate, EventResponse, EventStatsResponse
from eventaro.schemas.reservation import (
    ReservationCreate,
    ReservationResponse,
    AdminReservationResponse,
    ReservationStatsResponse,
)
from eventaro.schemas.error import ErrorResponse

__all__ = [
    "UserCreate", "UserLogin", "UserResponse", "AuthResponse",
    "EventCreate", "EventUpdate", "EventResponse", "EventStatsResponse",
    "ReservationCreate", "ReservationResponse", "AdminReservationResponse",
    "ReservationStatsResponse",
    "ErrorResponse",
]
