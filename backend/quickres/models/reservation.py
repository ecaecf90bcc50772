"""Reservation and ReservationToken ORM models."""
import uuid
import enum
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from quickres.database import Base


class ReservationStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"


class TokenStatus(str, enum.Enum):
    active = "active"
    used = "used"
    expired = "expired"


class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    spot_count = Column(Integer, nullable=False)
    status = Column(
        SAEnum(ReservationStatus, native_enum=False, length=16),
        nullable=False,
        default=ReservationStatus.pending,
    )
    verification_token = Column(String(64), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    verified_at = Column(DateTime(timezone=True), nullable=True)

    event = relationship("Event", back_populates="reservations")
    tokens = relationship(
        "ReservationToken",
        back_populates="reservation",
        cascade="all, delete-orphan",
        order_by="ReservationToken.position",
    )

    __table_args__ = (
        UniqueConstraint("event_id", "email", name="uq_reservations_event_email"),
        CheckConstraint("spot_count > 0", name="ck_reservations_spot_count_positive"),
        CheckConstraint(
            "verified_at IS NULL OR verified_at >= created_at",
            name="ck_reservations_verified_after_created",
        ),
        Index("ix_reservations_event_status", "event_id", "status"),
    )


class ReservationToken(Base):
    __tablename__ = "reservation_tokens"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    reservation_id = Column(
        String(36), ForeignKey("reservations.id", ondelete="CASCADE"), nullable=False
    )
    position = Column(Integer, nullable=False)
    token = Column(String(64), nullable=False, unique=True)
    status = Column(
        SAEnum(TokenStatus, native_enum=False, length=16),
        nullable=False,
        default=TokenStatus.active,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    used_at = Column(DateTime(timezone=True), nullable=True)

    reservation = relationship("Reservation", back_populates="tokens")

    __table_args__ = (
        UniqueConstraint("reservation_id", "position", name="uq_reservation_tokens_position"),
        CheckConstraint(
            "used_at IS NULL OR used_at >= created_at",
            name="ck_reservation_tokens_used_after_created",
        ),
        Index("ix_reservation_tokens_reservation_status", "reservation_id", "status"),
    )
