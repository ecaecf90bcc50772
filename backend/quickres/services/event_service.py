"""Event service: organizer actions and the read-only lifecycle view.

Responsibilities:
- Create events (end_time > start_time, positive capacity)
- Update events while they are Open; capacity never drops below confirmed seats
- Derive Open / Full / Finished on every read, never cached
"""
import logging
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from quickres.domain import Event, EventStatus, EventView, event_status
from quickres.domain.clock import Clock, utcnow
from quickres.domain.errors import EventNotOpen, InvalidCapacity
from quickres.services import capacity as ledger
from quickres.stores.interfaces import ReservationStore

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "description", "location", "capacity", "start_time", "end_time")


def view_event(store: ReservationStore, event: Event, now: datetime) -> EventView:
    confirmed = ledger.confirmed_seat_count(store, event.id)
    return EventView(event=event, confirmed_seats=confirmed, status=event_status(event, confirmed, now))


def create_event(
    store: ReservationStore,
    name: str,
    capacity: int,
    start_time: datetime,
    end_time: datetime,
    description: Optional[str] = None,
    location: Optional[str] = None,
    clock: Clock = utcnow,
) -> EventView:
    """Open a new event."""
    now = clock()
    event = store.insert_event(
        Event.open(
            name=name,
            capacity=capacity,
            start_time=start_time,
            end_time=end_time,
            now=now,
            description=description,
            location=location,
        )
    )
    logger.info("Created event '%s' (%s) with capacity %d", name, event.id, event.capacity)
    return EventView(event=event, confirmed_seats=0, status=event_status(event, 0, now))


def get_event(store: ReservationStore, event_id: UUID, clock: Clock = utcnow) -> EventView:
    return view_event(store, store.get_event(event_id), clock())


def list_events(
    store: ReservationStore, include_finished: bool = False, clock: Clock = utcnow
) -> list[EventView]:
    now = clock()
    views = [view_event(store, event, now) for event in store.list_events()]
    if include_finished:
        return views
    return [view for view in views if view.status != EventStatus.finished]


def update_event(
    store: ReservationStore,
    event_id: UUID,
    updates: dict[str, Any],
    clock: Clock = utcnow,
) -> EventView:
    """Apply organizer edits to an Open event.

    Raises:
        EventNotFound: If the event does not exist.
        EventNotOpen: If the event is Full or Finished.
        InvalidCapacity: If the new capacity is below the confirmed seat count.
        ValidationFailed: If the edited times end before they start.
    """
    now = clock()
    current = view_event(store, store.get_event(event_id), now)
    if current.status != EventStatus.open:
        raise EventNotOpen(f"Only open events can be updated (event is {current.status.value})")

    changes = {field: value for field, value in updates.items() if field in UPDATABLE_FIELDS}
    if changes.get("capacity") is not None and changes["capacity"] < current.confirmed_seats:
        raise InvalidCapacity(
            f"Capacity cannot be lower than the {current.confirmed_seats} confirmed seats"
        )

    edited = current.event.with_changes(now, **changes)
    event = store.update_event(edited, now)
    logger.info("Updated event %s (%s)", event_id, ", ".join(sorted(changes)) or "no changes")
    return view_event(store, event, now)
