"""Pydantic schemas for Reservations and their tokens."""
from __future__ import annotations
from datetime import datetime
from uuid import UUID
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from quickres.domain import (
    ConfirmedReservation,
    Event,
    PendingReservation,
    ReservationState,
    ReservationToken,
    TokenState,
)


class ReserveRequest(BaseModel):
    event_id: UUID
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    spot_count: int = Field(ge=1, le=10000)


class ReserveOut(BaseModel):
    reservation_id: UUID
    event_id: UUID
    status: ReservationState
    spot_count: int
    email_sent: bool
    message: str

    @classmethod
    def from_pending(cls, reservation: PendingReservation, email_sent: bool) -> ReserveOut:
        if email_sent:
            message = "Reservation created. Please check your email to verify it."
        else:
            message = "Reservation created, but the verification email could not be sent."
        return cls(
            reservation_id=reservation.id,
            event_id=reservation.event_id,
            status=reservation.state,
            spot_count=reservation.spot_count,
            email_sent=email_sent,
            message=message,
        )


class VerifyOut(BaseModel):
    reservation_id: UUID
    event_id: UUID
    status: ReservationState
    spot_count: int
    verified_at: datetime
    email_sent: bool

    @classmethod
    def from_confirmed(cls, reservation: ConfirmedReservation, email_sent: bool) -> VerifyOut:
        return cls(
            reservation_id=reservation.id,
            event_id=reservation.event_id,
            status=reservation.state,
            spot_count=reservation.spot_count,
            verified_at=reservation.verified_at,
            email_sent=email_sent,
        )


class TokenOut(BaseModel):
    token: str
    status: TokenState
    used_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, token: ReservationToken) -> TokenOut:
        return cls(token=token.token, status=token.state, used_at=token.used_at)


class EventSummary(BaseModel):
    event_id: UUID
    name: str
    location: Optional[str] = None
    start_time: datetime
    end_time: datetime


class RetrieveOut(BaseModel):
    reservation_id: UUID
    name: str
    email: str
    spot_count: int
    status: ReservationState
    verified_at: datetime
    event: EventSummary
    tokens: list[TokenOut]

    @classmethod
    def from_domain(cls, reservation: ConfirmedReservation, event: Event) -> RetrieveOut:
        return cls(
            reservation_id=reservation.id,
            name=reservation.name,
            email=reservation.email,
            spot_count=reservation.spot_count,
            status=reservation.state,
            verified_at=reservation.verified_at,
            event=EventSummary(
                event_id=event.id,
                name=event.name,
                location=event.location,
                start_time=event.start_time,
                end_time=event.end_time,
            ),
            tokens=[TokenOut.from_domain(token) for token in reservation.tokens],
        )


class ScanOut(BaseModel):
    status: TokenState = TokenState.used
    message: str = "Check-in successful"
