"""Event API routes. Lifecycle checks live in event_service."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from quickres.dependencies import get_store
from quickres.schemas.event import EventCreate, EventOut, EventUpdate, ExpireTokensOut
from quickres.services import event_service, reservation_service
from quickres.stores import ReservationStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreate, store: ReservationStore = Depends(get_store)):
    """Create a new event. It starts Open with every seat available."""
    view = event_service.create_event(
        store,
        name=payload.name,
        capacity=payload.capacity,
        start_time=payload.start_time,
        end_time=payload.end_time,
        description=payload.description,
        location=payload.location,
    )
    return EventOut.from_view(view)


@router.get("/", response_model=list[EventOut])
def list_events(
    include_finished: bool = Query(False),
    store: ReservationStore = Depends(get_store),
):
    """List events ordered by start time, hiding finished ones unless asked."""
    views = event_service.list_events(store, include_finished=include_finished)
    return [EventOut.from_view(view) for view in views]


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: UUID, store: ReservationStore = Depends(get_store)):
    return EventOut.from_view(event_service.get_event(store, event_id))


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: UUID,
    payload: EventUpdate,
    store: ReservationStore = Depends(get_store),
):
    """Update an Open event. Capacity may not drop below the confirmed seats."""
    updates = payload.model_dump(exclude_unset=True)
    return EventOut.from_view(event_service.update_event(store, event_id, updates))


@router.post("/{event_id}/expire-tokens", response_model=ExpireTokensOut)
def expire_tokens(event_id: UUID, store: ReservationStore = Depends(get_store)):
    """Expire every unscanned reservation token of a finished event."""
    expired = reservation_service.expire_tokens(store, event_id)
    return ExpireTokensOut(event_id=event_id, expired_tokens=expired)
