"""Domain error codes for the reservation core.

Every error carries a stable ``ErrorCode`` and a user-safe message. The HTTP
layer maps codes to status codes; messages never include store internals.
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    RESERVATION_NOT_FOUND = "RESERVATION_NOT_FOUND"
    RESERVATION_ALREADY_CONFIRMED = "RESERVATION_ALREADY_CONFIRMED"
    RESERVATION_NOT_CONFIRMED = "RESERVATION_NOT_CONFIRMED"
    RESERVATION_ALREADY_EXISTS = "RESERVATION_ALREADY_EXISTS"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    EVENT_NOT_OPEN = "EVENT_NOT_OPEN"
    TOKEN_INVALID = "TOKEN_INVALID"
    TOKEN_COLLISION = "TOKEN_COLLISION"
    INVALID_SPOT_COUNT = "INVALID_SPOT_COUNT"
    INVALID_CAPACITY = "INVALID_CAPACITY"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NOTIFICATION_FAILED = "NOTIFICATION_FAILED"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode = ErrorCode.VALIDATION_FAILED
    default_message: str = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """An entity is absent or not in the state the operation requires."""


class EventNotFound(NotFoundError):
    code = ErrorCode.EVENT_NOT_FOUND
    default_message = "Event not found"


class ReservationNotFound(NotFoundError):
    code = ErrorCode.RESERVATION_NOT_FOUND
    default_message = "Reservation not found"


class ReservationAlreadyConfirmed(NotFoundError):
    """Raised when a pending reservation is expected but it is already confirmed."""

    code = ErrorCode.RESERVATION_ALREADY_CONFIRMED
    default_message = "Reservation already confirmed"


class ReservationNotConfirmed(NotFoundError):
    """Raised when a confirmed reservation is expected but it is still pending."""

    code = ErrorCode.RESERVATION_NOT_CONFIRMED
    default_message = (
        "Reservation must be confirmed before it can be retrieved. "
        "Please check your email for the verification link."
    )


class ReservationAlreadyExists(DomainError):
    code = ErrorCode.RESERVATION_ALREADY_EXISTS
    default_message = "A reservation for this email already exists for this event"


class CapacityExceeded(DomainError):
    code = ErrorCode.CAPACITY_EXCEEDED
    default_message = "Cannot reserve this many spots for this event"


class EventNotOpen(DomainError):
    code = ErrorCode.EVENT_NOT_OPEN
    default_message = "Event is not open"


class TokenInvalid(DomainError):
    """Raised for absent, used or expired reservation tokens alike."""

    code = ErrorCode.TOKEN_INVALID
    default_message = "Reservation token not found or already used"


class TokenCollision(DomainError):
    code = ErrorCode.TOKEN_COLLISION
    default_message = "Could not allocate a unique token, please retry"


class InvalidSpotCount(DomainError):
    code = ErrorCode.INVALID_SPOT_COUNT
    default_message = "Spot count must be between 1 and the event capacity"


class InvalidCapacity(DomainError):
    code = ErrorCode.INVALID_CAPACITY
    default_message = "Capacity cannot be lower than the number of confirmed seats"


class ValidationFailed(DomainError):
    code = ErrorCode.VALIDATION_FAILED
    default_message = "Validation failed"


class NotificationError(DomainError):
    """Raised by a notifier when an email could not be sent."""

    code = ErrorCode.NOTIFICATION_FAILED
    default_message = "Failed to send email"
