"""SQLAlchemy implementation of the ReservationStore.

Concurrency rests on conditional writes, not in-process locks:

- confirming starts with a compare-and-swap on ``events.confirmed_seats``, so
  the first statement of the transaction takes the event row's write lock and
  concurrent confirmations serialize behind it;
- scanning is a single ``UPDATE ... WHERE status = 'active'``.
"""
import logging
from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quickres import models
from quickres.domain import (
    ConfirmedReservation,
    CreatingReservation,
    Event,
    PendingReservation,
    ReservationToken,
    TokenState,
)
from quickres.domain import reservation as lifecycle
from quickres.domain.clock import as_utc
from quickres.domain.errors import (
    CapacityExceeded,
    DomainError,
    EventNotFound,
    EventNotOpen,
    InvalidCapacity,
    ReservationAlreadyConfirmed,
    ReservationAlreadyExists,
    ReservationNotFound,
    TokenCollision,
    TokenInvalid,
    ValidationFailed,
)
from quickres.models.reservation import ReservationStatus, TokenStatus
from quickres.stores.interfaces import ReservationStore

logger = logging.getLogger(__name__)


def _to_event(row: models.Event) -> Event:
    return Event(
        id=UUID(row.id),
        name=row.name,
        description=row.description,
        location=row.location,
        capacity=row.capacity,
        start_time=as_utc(row.start_time),
        end_time=as_utc(row.end_time),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def _to_token(row: models.ReservationToken) -> ReservationToken:
    return ReservationToken(
        token=row.token,
        reservation_id=UUID(row.reservation_id),
        created_at=as_utc(row.created_at),
        state=TokenState(row.status.value),
        used_at=as_utc(row.used_at) if row.used_at else None,
    )


def _to_pending(row: models.Reservation) -> PendingReservation:
    return PendingReservation(
        id=UUID(row.id),
        event_id=UUID(row.event_id),
        name=row.name,
        email=row.email,
        spot_count=row.spot_count,
        verification_token=row.verification_token,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def _to_confirmed(row: models.Reservation) -> ConfirmedReservation:
    return ConfirmedReservation(
        id=UUID(row.id),
        event_id=UUID(row.event_id),
        name=row.name,
        email=row.email,
        spot_count=row.spot_count,
        verification_token=row.verification_token,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
        verified_at=as_utc(row.verified_at),
        tokens=tuple(_to_token(token) for token in row.tokens),
    )


def reservation_from_row(row: models.Reservation) -> PendingReservation | ConfirmedReservation:
    """Map a row to the domain variant named by its status column."""
    if row.status == ReservationStatus.pending:
        return _to_pending(row)
    if row.status == ReservationStatus.confirmed:
        return _to_confirmed(row)
    raise ValueError(f"unknown reservation status {row.status!r}")


class SqlAlchemyReservationStore(ReservationStore):
    """Relational store using the SQLAlchemy ORM. One instance per session."""

    def __init__(self, db: Session) -> None:
        self._db = db

    # --- events -----------------------------------------------------------

    def insert_event(self, event: Event) -> Event:
        row = models.Event(
            id=str(event.id),
            name=event.name,
            description=event.description,
            location=event.location,
            capacity=event.capacity,
            confirmed_seats=0,
            start_time=as_utc(event.start_time),
            end_time=as_utc(event.end_time),
            created_at=as_utc(event.created_at),
            updated_at=as_utc(event.updated_at),
        )
        self._db.add(row)
        self._db.commit()
        self._db.refresh(row)
        return _to_event(row)

    def update_event(self, event: Event, now: datetime) -> Event:
        now = as_utc(now)
        event_id = str(event.id)
        try:
            # Open means not finished and not full; the new capacity must hold the confirmed seats
            result = self._db.execute(
                update(models.Event)
                .where(
                    models.Event.id == event_id,
                    models.Event.end_time > now,
                    models.Event.confirmed_seats < models.Event.capacity,
                    models.Event.confirmed_seats <= event.capacity,
                )
                .values(
                    name=event.name,
                    description=event.description,
                    location=event.location,
                    capacity=event.capacity,
                    start_time=as_utc(event.start_time),
                    end_time=as_utc(event.end_time),
                    updated_at=as_utc(event.updated_at),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                self._db.rollback()
                raise self._update_rejection(event_id, event.capacity, now)
            self._db.commit()
        except IntegrityError:
            self._db.rollback()
            raise self._update_rejection(event_id, event.capacity, now)
        return self.get_event(event.id)

    def _update_rejection(self, event_id: str, new_capacity: int, now: datetime) -> DomainError:
        """Explain why an event edit was refused, from the row as it is now."""
        row = self._db.execute(
            select(
                models.Event.end_time, models.Event.capacity, models.Event.confirmed_seats
            ).where(models.Event.id == event_id)
        ).first()
        if row is None:
            return EventNotFound()
        if as_utc(row.end_time) <= now:
            return EventNotOpen("Only open events can be updated (event is Finished)")
        if row.confirmed_seats >= row.capacity:
            return EventNotOpen("Only open events can be updated (event is Full)")
        if row.confirmed_seats > new_capacity:
            return InvalidCapacity(
                f"Capacity cannot be lower than the {row.confirmed_seats} confirmed seats"
            )
        return ValidationFailed("Event could not be updated")

    def get_event(self, event_id: UUID) -> Event:
        row = self._db.get(models.Event, str(event_id))
        if row is None:
            raise EventNotFound()
        return _to_event(row)

    def get_open_event(self, event_id: UUID, now: datetime) -> Event:
        row = self._db.scalars(
            select(models.Event).where(
                models.Event.id == str(event_id),
                models.Event.end_time > as_utc(now),
            )
        ).first()
        if row is None:
            raise EventNotFound()
        return _to_event(row)

    def list_events(self) -> list[Event]:
        rows = self._db.scalars(select(models.Event).order_by(models.Event.start_time)).all()
        return [_to_event(row) for row in rows]

    def count_confirmed_seats(self, event_id: UUID) -> int:
        total = self._db.scalar(
            select(func.coalesce(func.sum(models.Reservation.spot_count), 0)).where(
                models.Reservation.event_id == str(event_id),
                models.Reservation.status == ReservationStatus.confirmed,
            )
        )
        return int(total or 0)

    # --- reservations -----------------------------------------------------

    def insert_pending(self, creating: CreatingReservation, now: datetime) -> PendingReservation:
        now = as_utc(now)
        row = models.Reservation(
            id=str(creating.id),
            event_id=str(creating.event_id),
            name=creating.name,
            email=creating.email,
            spot_count=creating.spot_count,
            status=ReservationStatus.pending,
            verification_token=creating.verification_token,
            created_at=now,
            updated_at=now,
        )
        self._db.add(row)
        try:
            self._db.commit()
        except IntegrityError:
            self._db.rollback()
            if self._email_taken(creating.event_id, creating.email):
                raise ReservationAlreadyExists()
            if self._verification_token_taken(creating.verification_token):
                raise TokenCollision()
            raise
        self._db.refresh(row)
        return _to_pending(row)

    def _email_taken(self, event_id: UUID, email: str) -> bool:
        return self._db.scalar(
            select(models.Reservation.id).where(
                models.Reservation.event_id == str(event_id),
                models.Reservation.email == email,
            )
        ) is not None

    def _verification_token_taken(self, token: str) -> bool:
        return self._db.scalar(
            select(models.Reservation.id).where(models.Reservation.verification_token == token)
        ) is not None

    def _find_reservation(self, *criteria, status: ReservationStatus) -> models.Reservation:
        row = self._db.scalars(
            select(models.Reservation).where(*criteria, models.Reservation.status == status)
        ).first()
        if row is None:
            raise ReservationNotFound()
        return row

    def get_by_verification_token(self, token: str) -> PendingReservation | ConfirmedReservation:
        row = self._db.scalars(
            select(models.Reservation).where(models.Reservation.verification_token == token)
        ).first()
        if row is None:
            raise ReservationNotFound()
        return reservation_from_row(row)

    def get_pending_by_id(self, reservation_id: UUID) -> PendingReservation:
        row = self._find_reservation(
            models.Reservation.id == str(reservation_id), status=ReservationStatus.pending
        )
        return _to_pending(row)

    def get_pending_by_verification_token(self, token: str) -> PendingReservation:
        row = self._find_reservation(
            models.Reservation.verification_token == token, status=ReservationStatus.pending
        )
        return _to_pending(row)

    def get_confirmed_by_id(self, reservation_id: UUID) -> ConfirmedReservation:
        row = self._find_reservation(
            models.Reservation.id == str(reservation_id), status=ReservationStatus.confirmed
        )
        return _to_confirmed(row)

    def get_confirmed_by_token(self, token: str) -> ConfirmedReservation:
        owner = select(models.ReservationToken.reservation_id).where(
            models.ReservationToken.token == token
        )
        row = self._find_reservation(
            models.Reservation.id.in_(owner), status=ReservationStatus.confirmed
        )
        return _to_confirmed(row)

    def confirm_transactional(
        self,
        pending: PendingReservation,
        minted_tokens: Sequence[str],
        now: datetime,
    ) -> ConfirmedReservation:
        now = as_utc(now)
        confirmed = lifecycle.confirm(pending, minted_tokens, now)
        event_id = str(pending.event_id)
        try:
            # Compare-and-swap on the seat counter: the write lock is taken here
            seats = self._db.execute(
                update(models.Event)
                .where(
                    models.Event.id == event_id,
                    models.Event.end_time > now,
                    models.Event.confirmed_seats + pending.spot_count <= models.Event.capacity,
                )
                .values(confirmed_seats=models.Event.confirmed_seats + pending.spot_count)
                .execution_options(synchronize_session=False)
            )
            if seats.rowcount != 1:
                raise self._confirm_rejection(event_id, now)

            flipped = self._db.execute(
                update(models.Reservation)
                .where(
                    models.Reservation.id == str(pending.id),
                    models.Reservation.status == ReservationStatus.pending,
                )
                .values(status=ReservationStatus.confirmed, verified_at=now, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if flipped.rowcount != 1:
                raise self._flip_rejection(pending.id)

            for position, token in enumerate(confirmed.tokens):
                self._db.add(
                    models.ReservationToken(
                        reservation_id=str(confirmed.id),
                        position=position,
                        token=token.token,
                        status=TokenStatus.active,
                        created_at=token.created_at,
                    )
                )
            self._db.commit()
        except DomainError as exc:
            self._db.rollback()
            logger.info("Confirmation of reservation %s rejected: %s", pending.id, exc.code.value)
            raise
        except IntegrityError:
            self._db.rollback()
            raise TokenCollision()

        return confirmed

    def _confirm_rejection(self, event_id: str, now: datetime) -> DomainError:
        """Explain why the seat counter refused the write."""
        row = self._db.get(models.Event, event_id)
        if row is None:
            return EventNotFound()
        if as_utc(row.end_time) <= now:
            return EventNotOpen("Event has already finished")
        return CapacityExceeded()

    def _flip_rejection(self, reservation_id: UUID) -> DomainError:
        """Explain why the pending row could not be flipped to confirmed."""
        status = self._db.scalar(
            select(models.Reservation.status).where(models.Reservation.id == str(reservation_id))
        )
        if status == ReservationStatus.confirmed:
            return ReservationAlreadyConfirmed()
        return ReservationNotFound()

    # --- reservation tokens -----------------------------------------------

    def mark_token_used(self, token: str, now: datetime) -> None:
        result = self._db.execute(
            update(models.ReservationToken)
            .where(
                models.ReservationToken.token == token,
                models.ReservationToken.status == TokenStatus.active,
            )
            .values(status=TokenStatus.used, used_at=as_utc(now))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self._db.rollback()
            raise TokenInvalid()
        self._db.commit()

    def expire_active_tokens(self, event_id: UUID) -> int:
        reservations = select(models.Reservation.id).where(
            models.Reservation.event_id == str(event_id)
        )
        result = self._db.execute(
            update(models.ReservationToken)
            .where(
                models.ReservationToken.reservation_id.in_(reservations),
                models.ReservationToken.status == TokenStatus.active,
            )
            .values(status=TokenStatus.expired)
            .execution_options(synchronize_session=False)
        )
        self._db.commit()
        return result.rowcount
