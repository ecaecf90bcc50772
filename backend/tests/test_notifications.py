"""Tests for the console notifier and notifier selection."""
import logging
from datetime import datetime, timezone
from uuid import uuid4

import pytest

from quickres.config import Settings
from quickres.domain import ConfirmedReservation, ReservationToken
from quickres.domain.errors import NotificationError
from quickres.services.notifications import ConsoleNotifier, build_notifier


@pytest.fixture
def settings():
    return Settings(_env_file=None, BASE_URL="https://tickets.example.com/", APP_NAME="Quick Res")


def _confirmed() -> ConfirmedReservation:
    now = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)
    reservation_id = uuid4()
    return ConfirmedReservation(
        id=reservation_id,
        event_id=uuid4(),
        name="Carol",
        email="carol@example.com",
        spot_count=1,
        verification_token="magic-token",
        created_at=now,
        updated_at=now,
        verified_at=now,
        tokens=(ReservationToken(token="seat-token", reservation_id=reservation_id, created_at=now),),
    )


class TestConsoleNotifier:

    def test_verification_email_logged_with_link(self, settings, caplog):
        caplog.set_level(logging.INFO, logger="quickres")
        ConsoleNotifier(settings).notify_verification("dave@example.com", "abc123")

        assert "To: dave@example.com" in caplog.text
        assert "https://tickets.example.com/verify/abc123" in caplog.text
        assert "Quick Res" in caplog.text

    def test_confirmation_email_links_magic_retrieval(self, settings):
        body = ConsoleNotifier(settings).render_confirmation("carol@example.com", _confirmed())
        assert "Dear Carol," in body
        assert "https://tickets.example.com/retrieve/magic-token" in body
        assert "- Spots: 1" in body

    def test_invalid_recipient(self, settings):
        with pytest.raises(NotificationError):
            ConsoleNotifier(settings).notify_verification("not an address", "abc123")

    def test_invalid_recipient_on_confirmation(self, settings):
        with pytest.raises(NotificationError):
            ConsoleNotifier(settings).notify_confirmation("carol@", _confirmed())


class TestBuildNotifier:

    def test_console_provider(self, settings):
        assert isinstance(build_notifier(settings), ConsoleNotifier)

    def test_provider_name_is_case_insensitive(self):
        assert isinstance(build_notifier(Settings(_env_file=None, EMAIL_PROVIDER="Console")), ConsoleNotifier)

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            build_notifier(Settings(_env_file=None, EMAIL_PROVIDER="carrier-pigeon"))
