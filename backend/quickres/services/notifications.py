"""Notification collaborator: verification and confirmation emails.

Notifiers are called after the state transition has committed. They raise
``NotificationError`` on failure; callers log it and carry on, the reservation
keeps its new state.
"""
import logging
from abc import ABC, abstractmethod

from email_validator import EmailNotValidError, validate_email

from quickres.config import Settings
from quickres.domain import ConfirmedReservation
from quickres.domain.errors import NotificationError

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Interface required from the email collaborator."""

    @abstractmethod
    def notify_verification(self, email: str, verification_token: str) -> None:
        ...

    @abstractmethod
    def notify_confirmation(self, email: str, reservation: ConfirmedReservation) -> None:
        ...


class ConsoleNotifier(Notifier):
    """Renders emails and writes them to the log instead of sending them."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def verification_link(self, verification_token: str) -> str:
        return f"{self._settings.BASE_URL.rstrip('/')}/verify/{verification_token}"

    def retrieval_link(self, token: str) -> str:
        return f"{self._settings.BASE_URL.rstrip('/')}/retrieve/{token}"

    def render_verification(self, email: str, verification_token: str) -> str:
        app_name = self._settings.APP_NAME
        return "\n".join([
            f"From: {self._settings.EMAIL_FROM_NAME} <{self._settings.EMAIL_FROM}>",
            f"To: {email}",
            f"Subject: Verify your email address for {app_name}",
            "",
            "Please verify your email address by clicking the following link:",
            self.verification_link(verification_token),
            "If you did not request this verification, please ignore this email.",
        ])

    def render_confirmation(self, email: str, reservation: ConfirmedReservation) -> str:
        app_name = self._settings.APP_NAME
        lines = [
            f"From: {self._settings.EMAIL_FROM_NAME} <{self._settings.EMAIL_FROM}>",
            f"To: {email}",
            f"Subject: Reservation Confirmed - {app_name}",
            "",
            f"Dear {reservation.name},",
            "",
            "Your reservation has been confirmed!",
            "Reservation Details:",
            f"- Reservation ID: {reservation.id}",
            f"- Event ID: {reservation.event_id}",
            f"- Spots: {reservation.spot_count}",
            f"- Verified: {reservation.verified_at.isoformat()}",
            "",
            "Access your reservation and tickets at:",
            self.retrieval_link(reservation.verification_token),
            "",
            f"Thank you for using {app_name}!",
        ]
        return "\n".join(lines)

    def notify_verification(self, email: str, verification_token: str) -> None:
        _check_recipient(email)
        logger.info("Verification email:\n%s", self.render_verification(email, verification_token))

    def notify_confirmation(self, email: str, reservation: ConfirmedReservation) -> None:
        _check_recipient(email)
        logger.info("Confirmation email:\n%s", self.render_confirmation(email, reservation))


def _check_recipient(email: str) -> None:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as exc:
        raise NotificationError(f"Invalid email address: {email}") from exc


NOTIFIERS = {
    "console": ConsoleNotifier,
}


def build_notifier(settings: Settings) -> Notifier:
    """Pick the notifier named by ``EMAIL_PROVIDER``."""
    provider = settings.EMAIL_PROVIDER.lower()
    try:
        notifier_cls = NOTIFIERS[provider]
    except KeyError:
        raise ValueError(f"Unsupported EMAIL_PROVIDER: {settings.EMAIL_PROVIDER}") from None
    return notifier_cls(settings)
