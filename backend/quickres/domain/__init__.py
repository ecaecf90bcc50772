from quickres.domain.event import Event, EventStatus, EventView, event_status
from quickres.domain.reservation import (
    ConfirmedReservation,
    CreatingReservation,
    PendingReservation,
    Reservation,
    ReservationState,
    ReservationToken,
    TokenState,
)

__all__ = [
    "Event",
    "EventStatus",
    "EventView",
    "event_status",
    "Reservation",
    "CreatingReservation",
    "PendingReservation",
    "ConfirmedReservation",
    "ReservationState",
    "ReservationToken",
    "TokenState",
]
