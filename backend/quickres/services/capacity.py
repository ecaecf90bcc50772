"""Capacity ledger: confirmed seats per event and admission checks.

Reads here are advisory. The binding check is repeated inside the store
transaction that confirms a reservation.
"""
from uuid import UUID

from quickres.domain import Event
from quickres.stores.interfaces import ReservationStore


def confirmed_seat_count(store: ReservationStore, event_id: UUID) -> int:
    """Sum of spot_count over all confirmed reservations for the event."""
    return store.count_confirmed_seats(event_id)


def has_capacity(store: ReservationStore, event: Event, requested_spots: int) -> bool:
    return confirmed_seat_count(store, event.id) + requested_spots <= event.capacity


def remaining_seats(store: ReservationStore, event: Event) -> int:
    return max(event.capacity - confirmed_seat_count(store, event.id), 0)
