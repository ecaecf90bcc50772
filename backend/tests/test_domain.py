"""Tests for the pure domain layer: event status and reservation transitions.

Covers:
- Derived event status (Open / Full / Finished) and its precedence
- Event invariants (capacity, time window) on create and edit
- prepare / create / confirm transitions and their guards
- Reservation token transitions (Active -> Used / Expired, terminal states)
"""
from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone

import pytest

from quickres.domain import (
    ConfirmedReservation,
    Event,
    EventStatus,
    PendingReservation,
    ReservationState,
    TokenState,
    event_status,
)
from quickres.domain import reservation as lifecycle
from quickres.domain.errors import InvalidSpotCount, TokenInvalid, ValidationFailed

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _event(capacity: int = 4, ends_in_hours: int = 3) -> Event:
    return Event.open(
        name="Concert",
        capacity=capacity,
        start_time=NOW + timedelta(hours=1),
        end_time=NOW + timedelta(hours=ends_in_hours),
        now=NOW,
    )


def _pending(event: Event, spot_count: int = 2) -> PendingReservation:
    creating = lifecycle.prepare(event, "Bob", "bob@example.com", spot_count, "verify-me")
    return lifecycle.create(creating, NOW)


class TestEventStatus:
    """Status is derived from time and the ledger, never stored."""

    def test_open_with_seats_left(self):
        assert event_status(_event(capacity=4), 3, NOW) == EventStatus.open

    def test_full_when_seats_taken(self):
        assert event_status(_event(capacity=4), 4, NOW) == EventStatus.full

    def test_finished_at_end_time(self):
        event = _event()
        assert event_status(event, 0, event.end_time) == EventStatus.finished

    def test_finished_takes_precedence_over_full(self):
        event = _event(capacity=2)
        later = event.end_time + timedelta(minutes=1)
        assert event_status(event, 2, later) == EventStatus.finished


class TestEventInvariants:

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValidationFailed):
            _event(capacity=0)

    def test_rejects_end_before_start(self):
        with pytest.raises(ValidationFailed):
            Event.open(
                name="Backwards",
                capacity=5,
                start_time=NOW + timedelta(hours=2),
                end_time=NOW + timedelta(hours=1),
                now=NOW,
            )

    def test_with_changes_rechecks_window(self):
        event = _event()
        with pytest.raises(ValidationFailed):
            event.with_changes(NOW, end_time=event.start_time)

    def test_with_changes_bumps_updated_at(self):
        event = _event()
        later = NOW + timedelta(minutes=5)
        edited = event.with_changes(later, name="Renamed")
        assert edited.name == "Renamed"
        assert edited.updated_at == later
        assert event.name == "Concert"


class TestReservationTransitions:
    """Creating -> Pending -> Confirmed, one way only."""

    def test_prepare_and_create(self):
        event = _event()
        pending = _pending(event)
        assert pending.state == ReservationState.pending
        assert pending.event_id == event.id
        assert pending.created_at == pending.updated_at == NOW

    @pytest.mark.parametrize("spot_count", [0, -1, 5])
    def test_prepare_rejects_out_of_range_spot_count(self, spot_count):
        with pytest.raises(InvalidSpotCount):
            lifecycle.prepare(_event(capacity=4), "Bob", "bob@example.com", spot_count, "t")

    def test_prepare_accepts_full_capacity(self):
        creating = lifecycle.prepare(_event(capacity=4), "Bob", "bob@example.com", 4, "t")
        assert creating.spot_count == 4

    def test_confirm_mints_one_active_token_per_spot(self):
        pending = _pending(_event(), spot_count=2)
        later = NOW + timedelta(minutes=10)
        confirmed = lifecycle.confirm(pending, ["tok-a", "tok-b"], later)

        assert isinstance(confirmed, ConfirmedReservation)
        assert confirmed.id == pending.id
        assert confirmed.verified_at == confirmed.updated_at == later
        assert confirmed.created_at == pending.created_at
        assert [t.token for t in confirmed.tokens] == ["tok-a", "tok-b"]
        assert all(t.state == TokenState.active for t in confirmed.tokens)
        assert all(t.reservation_id == pending.id for t in confirmed.tokens)

    def test_confirm_rejects_wrong_token_count(self):
        pending = _pending(_event(), spot_count=2)
        with pytest.raises(ValueError):
            lifecycle.confirm(pending, ["only-one"], NOW)

    def test_confirm_rejects_duplicate_tokens(self):
        pending = _pending(_event(), spot_count=2)
        with pytest.raises(ValueError):
            lifecycle.confirm(pending, ["same", "same"], NOW)

    def test_states_are_immutable(self):
        pending = _pending(_event())
        with pytest.raises(FrozenInstanceError):
            pending.spot_count = 3


class TestTokenTransitions:

    def _token(self):
        pending = _pending(_event(), spot_count=1)
        return lifecycle.confirm(pending, ["tok"], NOW).tokens[0]

    def test_mark_used(self):
        used = lifecycle.mark_used(self._token(), NOW)
        assert used.state == TokenState.used
        assert used.used_at == NOW

    def test_used_is_terminal(self):
        used = lifecycle.mark_used(self._token(), NOW)
        with pytest.raises(TokenInvalid):
            lifecycle.mark_used(used, NOW)
        with pytest.raises(TokenInvalid):
            lifecycle.mark_expired(used)

    def test_expired_is_terminal(self):
        expired = lifecycle.mark_expired(self._token())
        assert expired.state == TokenState.expired
        with pytest.raises(TokenInvalid):
            lifecycle.mark_used(expired, NOW)
