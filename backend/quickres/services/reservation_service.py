"""Reservation service: drives reservations through their lifecycle.

Responsibilities:
- reserve: admission check, Creating -> Pending, verification email
- verify: Pending -> Confirmed with capacity re-checked in the store
  transaction, per-seat tokens minted, confirmation email
- retrieve: magic-link lookup of a confirmed reservation
- scan: reservation token Active -> Used, exactly once
- expire_tokens: Active -> Expired for finished events

Emails go out after the transition has committed. A failed email is logged and
reported through ``notification_sent``; it never undoes the transition.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from quickres.domain import ConfirmedReservation, Event, PendingReservation
from quickres.domain import reservation as lifecycle
from quickres.domain.clock import Clock, utcnow
from quickres.domain.errors import (
    CapacityExceeded,
    EventNotOpen,
    NotificationError,
    ReservationAlreadyConfirmed,
    ReservationNotConfirmed,
    ReservationNotFound,
    TokenCollision,
)
from quickres.services import capacity, tokens
from quickres.services.notifications import Notifier
from quickres.stores.interfaces import ReservationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReserveOutcome:
    reservation: PendingReservation
    notification_sent: bool


@dataclass(frozen=True)
class VerifyOutcome:
    reservation: ConfirmedReservation
    notification_sent: bool


def reserve(
    store: ReservationStore,
    notifier: Notifier,
    event_id: UUID,
    name: str,
    email: str,
    spot_count: int,
    clock: Clock = utcnow,
) -> ReserveOutcome:
    """Admit a request and persist it as a pending reservation.

    Raises:
        EventNotFound: If the event does not exist or has finished.
        InvalidSpotCount: If spot_count is outside [1, capacity].
        CapacityExceeded: If the confirmed seats leave no room for the request.
        ReservationAlreadyExists: If the email already holds a reservation for the event.
        TokenCollision: If two generated tokens in a row were already taken.
    """
    now = clock()
    event = store.get_open_event(event_id, now)

    creating = lifecycle.prepare(
        event, name, email, spot_count, tokens.issue_verification_token()
    )
    if not capacity.has_capacity(store, event, spot_count):
        raise CapacityExceeded()

    try:
        pending = store.insert_pending(creating, now)
    except TokenCollision:
        logger.warning("Verification token collision for event %s, retrying once", event.id)
        creating = lifecycle.prepare(
            event, name, email, spot_count, tokens.issue_verification_token()
        )
        pending = store.insert_pending(creating, now)

    logger.info(
        "Reservation %s pending for event %s (%d spots)", pending.id, event.id, spot_count
    )
    sent = _deliver(
        "verification", pending.id, notifier.notify_verification, pending.email, pending.verification_token
    )
    return ReserveOutcome(reservation=pending, notification_sent=sent)


def verify(
    store: ReservationStore,
    notifier: Notifier,
    verification_token: str,
    clock: Clock = utcnow,
) -> VerifyOutcome:
    """Confirm the pending reservation holding ``verification_token``.

    Raises:
        ReservationNotFound: If no reservation holds the token.
        ReservationAlreadyConfirmed: If the reservation was confirmed before.
        EventNotOpen: If the event has finished.
        CapacityExceeded: If the seats no longer fit; the reservation stays pending.
    """
    found = store.get_by_verification_token(verification_token)
    if isinstance(found, ConfirmedReservation):
        raise ReservationAlreadyConfirmed()

    now = clock()
    event = store.get_event(found.event_id)
    if event.is_finished(now):
        raise EventNotOpen("Event has already finished")

    confirmed = _confirm(store, found, now)
    logger.info(
        "Reservation %s confirmed for event %s (%d tokens)",
        confirmed.id, confirmed.event_id, len(confirmed.tokens),
    )
    sent = _deliver("confirmation", confirmed.id, notifier.notify_confirmation, confirmed.email, confirmed)
    return VerifyOutcome(reservation=confirmed, notification_sent=sent)


def _confirm(store: ReservationStore, pending: PendingReservation, now: datetime) -> ConfirmedReservation:
    minted = tokens.issue_reservation_tokens(pending.spot_count)
    try:
        return store.confirm_transactional(pending, minted, now)
    except TokenCollision:
        logger.warning("Reservation token collision confirming %s, retrying once", pending.id)
        minted = tokens.issue_reservation_tokens(pending.spot_count)
        return store.confirm_transactional(pending, minted, now)


def retrieve(store: ReservationStore, token: str) -> tuple[ConfirmedReservation, Event]:
    """Magic-link lookup by verification token or any reservation token.

    Raises:
        ReservationNotConfirmed: If the token belongs to a pending reservation.
        ReservationNotFound: If the token matches nothing.
    """
    try:
        found = store.get_by_verification_token(token)
    except ReservationNotFound:
        found = store.get_confirmed_by_token(token)

    if isinstance(found, PendingReservation):
        raise ReservationNotConfirmed()
    return found, store.get_event(found.event_id)


def scan(store: ReservationStore, token: str, clock: Clock = utcnow) -> str:
    """Check a seat in. Succeeds once per token; every later call is TokenInvalid."""
    store.mark_token_used(token, clock())
    logger.info("Reservation token %s scanned", tokens.redact(token))
    return token


def expire_tokens(store: ReservationStore, event_id: UUID, clock: Clock = utcnow) -> int:
    """Expire the still-active tokens of a finished event.

    Raises:
        EventNotFound: If the event does not exist.
        EventNotOpen: If the event has not finished yet.
    """
    event = store.get_event(event_id)
    if not event.is_finished(clock()):
        raise EventNotOpen("Tokens can only be expired once the event has finished")
    expired = store.expire_active_tokens(event_id)
    logger.info("Expired %d reservation tokens for event %s", expired, event_id)
    return expired


def _deliver(kind: str, reservation_id: UUID, send, *args) -> bool:
    try:
        send(*args)
    except NotificationError as exc:
        logger.warning("Failed to send %s email for reservation %s: %s", kind, reservation_id, exc.message)
        return False
    return True
