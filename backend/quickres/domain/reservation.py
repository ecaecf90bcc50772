"""Reservation lifecycle: Creating -> Pending -> Confirmed.

Each state is its own frozen dataclass carrying only the fields valid in that
state. Transition functions take one state and return the next; nothing is
mutated in place, so a Confirmed value can never be turned back into a
Pending one.

Per-seat reservation tokens follow Active -> Used (scan) and
Active -> Expired (policy). Used and Expired are terminal.
"""

import enum
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from typing import ClassVar, Union
from uuid import UUID, uuid4

from quickres.domain.errors import InvalidSpotCount, TokenInvalid
from quickres.domain.event import Event


class ReservationState(str, enum.Enum):
    creating = "creating"
    pending = "pending"
    confirmed = "confirmed"


class TokenState(str, enum.Enum):
    active = "active"
    used = "used"
    expired = "expired"


@dataclass(frozen=True)
class ReservationToken:
    """A per-seat scan token minted when a reservation is confirmed."""

    token: str
    reservation_id: UUID
    created_at: datetime
    state: TokenState = TokenState.active
    used_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.state is TokenState.active


def mark_used(token: ReservationToken, now: datetime) -> ReservationToken:
    """Active -> Used. Any other starting state is rejected."""
    if not token.is_active:
        raise TokenInvalid()
    return replace(token, state=TokenState.used, used_at=now)


def mark_expired(token: ReservationToken) -> ReservationToken:
    """Active -> Expired. Any other starting state is rejected."""
    if not token.is_active:
        raise TokenInvalid()
    return replace(token, state=TokenState.expired)


@dataclass(frozen=True)
class CreatingReservation:
    """In-memory only. Ready for insertion, never read back from the store."""

    state: ClassVar[ReservationState] = ReservationState.creating

    id: UUID
    event_id: UUID
    name: str
    email: str
    spot_count: int
    verification_token: str


@dataclass(frozen=True)
class PendingReservation:
    """Persisted, not yet email-verified. Consumes no confirmed capacity."""

    state: ClassVar[ReservationState] = ReservationState.pending

    id: UUID
    event_id: UUID
    name: str
    email: str
    spot_count: int
    verification_token: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ConfirmedReservation:
    """Persisted and verified. Holds exactly ``spot_count`` reservation tokens."""

    state: ClassVar[ReservationState] = ReservationState.confirmed

    id: UUID
    event_id: UUID
    name: str
    email: str
    spot_count: int
    verification_token: str
    created_at: datetime
    updated_at: datetime
    verified_at: datetime
    tokens: tuple[ReservationToken, ...]


Reservation = Union[CreatingReservation, PendingReservation, ConfirmedReservation]


def prepare(
    event: Event,
    name: str,
    email: str,
    spot_count: int,
    verification_token: str,
) -> CreatingReservation:
    """(none) -> Creating. Rejects spot counts outside [1, event.capacity]."""
    if not 1 <= spot_count <= event.capacity:
        raise InvalidSpotCount(
            f"Spot count must be between 1 and {event.capacity} for this event"
        )
    return CreatingReservation(
        id=uuid4(),
        event_id=event.id,
        name=name,
        email=email,
        spot_count=spot_count,
        verification_token=verification_token,
    )


def create(creating: CreatingReservation, now: datetime) -> PendingReservation:
    """Creating -> Pending."""
    return PendingReservation(
        id=creating.id,
        event_id=creating.event_id,
        name=creating.name,
        email=creating.email,
        spot_count=creating.spot_count,
        verification_token=creating.verification_token,
        created_at=now,
        updated_at=now,
    )


def confirm(
    pending: PendingReservation, minted_tokens: Sequence[str], now: datetime
) -> ConfirmedReservation:
    """Pending -> Confirmed, minting one Active token per reserved spot.

    Capacity is not checked here; the store re-checks it in the same
    transaction that persists the result.
    """
    if len(minted_tokens) != pending.spot_count:
        raise ValueError(
            f"expected {pending.spot_count} reservation tokens, got {len(minted_tokens)}"
        )
    if len(set(minted_tokens)) != len(minted_tokens):
        raise ValueError("reservation tokens must be distinct")

    return ConfirmedReservation(
        id=pending.id,
        event_id=pending.event_id,
        name=pending.name,
        email=pending.email,
        spot_count=pending.spot_count,
        verification_token=pending.verification_token,
        created_at=pending.created_at,
        updated_at=now,
        verified_at=now,
        tokens=tuple(
            ReservationToken(token=value, reservation_id=pending.id, created_at=now)
            for value in minted_tokens
        ),
    )
