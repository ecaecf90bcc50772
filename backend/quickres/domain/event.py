"""Event domain model and its derived lifecycle status.

Status is never stored: it is recomputed from the event's end time, the
capacity ledger and the current time on every read.
"""

import enum
from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID, uuid4

from quickres.domain.errors import ValidationFailed


class EventStatus(str, enum.Enum):
    open = "Open"
    full = "Full"
    finished = "Finished"


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: UUID
    name: str
    description: str | None
    location: str | None
    capacity: int
    start_time: datetime
    end_time: datetime
    created_at: datetime
    updated_at: datetime

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValidationFailed("Capacity must be a positive integer")
        if self.end_time <= self.start_time:
            raise ValidationFailed("End time must be after start time")

    @classmethod
    def open(
        cls,
        name: str,
        capacity: int,
        start_time: datetime,
        end_time: datetime,
        now: datetime,
        description: str | None = None,
        location: str | None = None,
    ) -> "Event":
        return cls(
            id=uuid4(),
            name=name,
            description=description,
            location=location,
            capacity=capacity,
            start_time=start_time,
            end_time=end_time,
            created_at=now,
            updated_at=now,
        )

    def with_changes(self, now: datetime, **changes) -> "Event":
        """Return a copy with ``changes`` applied; invariants are re-checked."""
        return replace(self, updated_at=now, **changes)

    def is_finished(self, now: datetime) -> bool:
        return now >= self.end_time


def event_status(event: Event, confirmed_seats: int, now: datetime) -> EventStatus:
    """Finished if the event has ended, else Full if no seat is left, else Open."""
    if event.is_finished(now):
        return EventStatus.finished
    if confirmed_seats >= event.capacity:
        return EventStatus.full
    return EventStatus.open


@dataclass(frozen=True)
class EventView:
    """An event together with the ledger figures its status was derived from."""

    event: Event
    confirmed_seats: int
    status: EventStatus

    @property
    def remaining_seats(self) -> int:
        return max(self.event.capacity - self.confirmed_seats, 0)
