"""Event ORM model."""
import uuid
from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from quickres.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    capacity = Column(Integer, nullable=False)
    # Sum of spot_count over confirmed reservations; the guard for confirm's conditional write
    confirmed_seats = Column(Integer, nullable=False, default=0)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    reservations = relationship("Reservation", back_populates="event")

    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_events_capacity_positive"),
        CheckConstraint("end_time > start_time", name="ck_events_end_after_start"),
        CheckConstraint(
            "confirmed_seats >= 0 AND confirmed_seats <= capacity",
            name="ck_events_confirmed_seats_within_capacity",
        ),
        Index("ix_events_end_time", "end_time"),
    )
