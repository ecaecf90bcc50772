"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Each lookup is scoped to
the state the caller expects: asking for a pending reservation by a token that
belongs to a confirmed one is a ``ReservationNotFound``, not a hit.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from quickres.domain import (
    ConfirmedReservation,
    CreatingReservation,
    Event,
    PendingReservation,
)


class ReservationStore(ABC):
    """Interface for event and reservation persistence operations."""

    # --- events -----------------------------------------------------------

    @abstractmethod
    def insert_event(self, event: Event) -> Event:
        """Persist a new event."""
        ...

    @abstractmethod
    def update_event(self, event: Event, now: datetime) -> Event:
        """Persist changed event fields, only while the event is still Open.

        The status and capacity checks are repeated in the write itself, so a
        confirmation that lands after the caller read the event is respected.

        Raises:
            EventNotFound: If the event does not exist.
            EventNotOpen: If the event has become Full or Finished.
            InvalidCapacity: If the new capacity is below the confirmed seats.
        """
        ...

    @abstractmethod
    def get_event(self, event_id: UUID) -> Event:
        """Return an event regardless of status.

        Raises:
            EventNotFound: If the event does not exist.
        """
        ...

    @abstractmethod
    def get_open_event(self, event_id: UUID, now: datetime) -> Event:
        """Return an event that has not finished yet.

        Raises:
            EventNotFound: If the event does not exist or has ended.
        """
        ...

    @abstractmethod
    def list_events(self) -> list[Event]:
        """Return all events ordered by start_time ascending."""
        ...

    @abstractmethod
    def count_confirmed_seats(self, event_id: UUID) -> int:
        """Sum of spot_count over confirmed reservations of the event."""
        ...

    # --- reservations -----------------------------------------------------

    @abstractmethod
    def insert_pending(self, creating: CreatingReservation, now: datetime) -> PendingReservation:
        """Insert a new pending reservation.

        Raises:
            TokenCollision: If the verification token is already taken.
            ReservationAlreadyExists: If the email already holds a reservation for the event.
        """
        ...

    @abstractmethod
    def get_by_verification_token(self, token: str) -> PendingReservation | ConfirmedReservation:
        """Return the reservation in whichever persisted state it is in.

        Raises:
            ReservationNotFound: If no reservation holds the token.
        """
        ...

    @abstractmethod
    def get_pending_by_id(self, reservation_id: UUID) -> PendingReservation:
        ...

    @abstractmethod
    def get_pending_by_verification_token(self, token: str) -> PendingReservation:
        ...

    @abstractmethod
    def get_confirmed_by_id(self, reservation_id: UUID) -> ConfirmedReservation:
        ...

    @abstractmethod
    def get_confirmed_by_token(self, token: str) -> ConfirmedReservation:
        """Return the confirmed reservation owning the given reservation token."""
        ...

    @abstractmethod
    def confirm_transactional(
        self,
        pending: PendingReservation,
        minted_tokens: Sequence[str],
        now: datetime,
    ) -> ConfirmedReservation:
        """Atomically re-check capacity, flip pending to confirmed and insert tokens.

        Either every write happens or none does.

        Raises:
            CapacityExceeded: If the seats no longer fit.
            EventNotOpen: If the event has finished.
            ReservationAlreadyConfirmed: If another confirmation got there first.
            ReservationNotFound: If the reservation no longer exists.
            TokenCollision: If a minted token is already taken.
        """
        ...

    # --- reservation tokens -----------------------------------------------

    @abstractmethod
    def mark_token_used(self, token: str, now: datetime) -> None:
        """Conditionally flip an active token to used.

        Raises:
            TokenInvalid: If no active token matched.
        """
        ...

    @abstractmethod
    def expire_active_tokens(self, event_id: UUID) -> int:
        """Flip every active token of the event to expired; return how many changed."""
        ...
