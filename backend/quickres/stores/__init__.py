from quickres.stores.interfaces import ReservationStore
from quickres.stores.sqlalchemy_store import SqlAlchemyReservationStore

__all__ = ["ReservationStore", "SqlAlchemyReservationStore"]
