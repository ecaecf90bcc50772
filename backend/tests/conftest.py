"""Pytest fixtures: file-backed SQLite in WAL mode, one database per test."""
import os

# Keep the app's own engine away from the working directory during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from quickres import models  # noqa: E402,F401
from quickres.database import Base, get_db, make_engine  # noqa: E402
from quickres.dependencies import get_notifier  # noqa: E402
from quickres.domain import ConfirmedReservation  # noqa: E402
from quickres.domain.errors import NotificationError  # noqa: E402
from quickres.main import app  # noqa: E402
from quickres.services import event_service  # noqa: E402
from quickres.services.notifications import Notifier  # noqa: E402
from quickres.stores import SqlAlchemyReservationStore  # noqa: E402


class RecordingNotifier(Notifier):
    """Captures outgoing emails instead of sending them."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.verifications: list[tuple[str, str]] = []
        self.confirmations: list[tuple[str, ConfirmedReservation]] = []

    def notify_verification(self, email, verification_token):
        if self.fail:
            raise NotificationError("SMTP unavailable")
        self.verifications.append((email, verification_token))

    def notify_confirmation(self, email, reservation):
        if self.fail:
            raise NotificationError("SMTP unavailable")
        self.confirmations.append((email, reservation))

    def last_verification_token(self) -> str:
        return self.verifications[-1][1]


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create a fresh SQLite file per test; WAL lets readers run beside a writer."""
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")

    @event.listens_for(engine, "connect")
    def _set_wal(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def store(db):
    return SqlAlchemyReservationStore(db)


@pytest.fixture(scope="function")
def notifier():
    return RecordingNotifier()


@pytest.fixture(scope="function")
def client(session_factory, notifier):
    """FastAPI TestClient with the session and notifier dependencies overridden."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def utc(hours: float = 0) -> datetime:
    """Now plus ``hours``, timezone-aware UTC."""
    return datetime.now(timezone.utc) + timedelta(hours=hours)


def open_event(store, capacity: int = 10, name: str = "Launch Party",
               starts_in_hours: float = 24, duration_hours: float = 2):
    """Helper — create an event directly through the service, returns the Event."""
    view = event_service.create_event(
        store,
        name=name,
        capacity=capacity,
        start_time=utc(starts_in_hours),
        end_time=utc(starts_in_hours + duration_hours),
        location="Main Hall",
    )
    return view.event


def finished_event_clock(store, capacity: int = 10):
    """Helper — an event that ended an hour ago, plus a clock reading from while it ran."""
    start = utc(-3)
    view = event_service.create_event(
        store,
        name="Yesterday's Meetup",
        capacity=capacity,
        start_time=start,
        end_time=utc(-1),
        clock=lambda: start - timedelta(hours=1),
    )
    return view.event, (lambda: start)


def create_test_event(client: TestClient, capacity: int = 10, name: str = "Launch Party",
                      starts_in_hours: float = 24, duration_hours: float = 2) -> dict:
    """Helper — POST /api/events and return response JSON."""
    resp = client.post("/api/events/", json={
        "name": name,
        "capacity": capacity,
        "location": "Main Hall",
        "start_time": utc(starts_in_hours).isoformat(),
        "end_time": utc(starts_in_hours + duration_hours).isoformat(),
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def reserve_via_api(client: TestClient, event_id: str, email: str = "alice@example.com",
                    spot_count: int = 1, name: str = "Alice") -> dict:
    """Helper — POST /api/reserve and return response JSON."""
    resp = client.post("/api/reserve", json={
        "event_id": event_id,
        "name": name,
        "email": email,
        "spot_count": spot_count,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()
