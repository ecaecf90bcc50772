"""FastAPI dependencies wiring routers to the store and the notifier."""
from fastapi import Depends
from sqlalchemy.orm import Session

from quickres.config import settings
from quickres.database import get_db
from quickres.services.notifications import Notifier, build_notifier
from quickres.stores import ReservationStore, SqlAlchemyReservationStore


def get_store(db: Session = Depends(get_db)) -> ReservationStore:
    return SqlAlchemyReservationStore(db)


def get_notifier() -> Notifier:
    return build_notifier(settings)
