"""Reservation API routes: reserve, verify, retrieve and scan."""
import logging

from fastapi import APIRouter, Depends, status

from quickres.dependencies import get_notifier, get_store
from quickres.schemas.reservation import (
    ReserveOut,
    ReserveRequest,
    RetrieveOut,
    ScanOut,
    VerifyOut,
)
from quickres.services import reservation_service
from quickres.services.notifications import Notifier
from quickres.stores import ReservationStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/reserve", response_model=ReserveOut, status_code=status.HTTP_201_CREATED)
def reserve(
    payload: ReserveRequest,
    store: ReservationStore = Depends(get_store),
    notifier: Notifier = Depends(get_notifier),
):
    """Create a pending reservation and email its verification link."""
    outcome = reservation_service.reserve(
        store,
        notifier,
        event_id=payload.event_id,
        name=payload.name,
        email=payload.email,
        spot_count=payload.spot_count,
    )
    return ReserveOut.from_pending(outcome.reservation, outcome.notification_sent)


@router.get("/verify/{token}", response_model=VerifyOut)
def verify(
    token: str,
    store: ReservationStore = Depends(get_store),
    notifier: Notifier = Depends(get_notifier),
):
    """Confirm a pending reservation and mint its reservation tokens."""
    outcome = reservation_service.verify(store, notifier, token)
    return VerifyOut.from_confirmed(outcome.reservation, outcome.notification_sent)


@router.get("/retrieve/{token}", response_model=RetrieveOut)
def retrieve(token: str, store: ReservationStore = Depends(get_store)):
    reservation, event = reservation_service.retrieve(store, token)
    return RetrieveOut.from_domain(reservation, event)


@router.post("/scan/{token}", response_model=ScanOut)
def scan(token: str, store: ReservationStore = Depends(get_store)):
    """Check in one seat. A token scans successfully exactly once."""
    reservation_service.scan(store, token)
    return ScanOut()
