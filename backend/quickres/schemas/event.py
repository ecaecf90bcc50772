"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from uuid import UUID
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from quickres.domain import EventStatus, EventView
from quickres.domain.clock import as_utc


class EventCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    location: Optional[str] = Field(None, max_length=255)
    capacity: int = Field(ge=1, le=10000)
    start_time: datetime
    end_time: datetime

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @model_validator(mode="after")
    def check_window(self) -> EventCreate:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class EventUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    location: Optional[str] = Field(None, max_length=255)
    capacity: Optional[int] = Field(None, ge=1, le=10000)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None

    @model_validator(mode="after")
    def check_fields(self) -> EventUpdate:
        # description and location may be cleared; the rest may only be changed
        for field in ("name", "capacity", "start_time", "end_time"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class EventOut(BaseModel):
    event_id: UUID
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    capacity: int
    confirmed_seats: int
    remaining_seats: int
    status: EventStatus
    start_time: datetime
    end_time: datetime
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_view(cls, view: EventView) -> EventOut:
        event = view.event
        return cls(
            event_id=event.id,
            name=event.name,
            description=event.description,
            location=event.location,
            capacity=event.capacity,
            confirmed_seats=view.confirmed_seats,
            remaining_seats=view.remaining_seats,
            status=view.status,
            start_time=event.start_time,
            end_time=event.end_time,
            created_at=event.created_at,
            updated_at=event.updated_at,
        )


class ExpireTokensOut(BaseModel):
    event_id: UUID
    expired_tokens: int
