# slotwise/schemas/event_type.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime
from uuid import UUID

from slotwise.schemas.question import QuestionResponse


class EventTypeCreate(BaseModel):
    """Create a bookable event type. Policy ranges are checked by the domain."""
    name: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    duration_minutes: int = Field(30, description="15-480, multiple of 5")
    buffer_before_minutes: int = Field(0, description="0-120, multiple of 5")
    buffer_after_minutes: int = Field(0, description="0-120, multiple of 5")
    minimum_notice_minutes: int = Field(0, description="0-10080")
    booking_window_days: Optional[int] = Field(None, description="1-365, defaults to DEFAULT_BOOKING_WINDOW_DAYS")
    max_bookings_per_day: Optional[int] = Field(None, description="Leave empty for unlimited")


class EventTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    duration_minutes: Optional[int] = None
    buffer_before_minutes: Optional[int] = None
    buffer_after_minutes: Optional[int] = None
    minimum_notice_minutes: Optional[int] = None
    booking_window_days: Optional[int] = None
    max_bookings_per_day: Optional[int] = None
    is_active: Optional[bool] = None


class EventTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    host_id: UUID
    name: str
    slug: str
    description: Optional[str] = None
    duration_minutes: int
    buffer_before_minutes: int
    buffer_after_minutes: int
    minimum_notice_minutes: int
    booking_window_days: int
    max_bookings_per_day: Optional[int] = None
    is_active: bool
    created_at: Optional[datetime] = None


class PublicEventTypeResponse(BaseModel):
    """What a guest sees on the booking page before picking a slot"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    description: Optional[str] = None
    duration_minutes: int
    minimum_notice_minutes: int
    booking_window_days: int
    host_name: str
    host_slug: str
    host_timezone: str
    questions: List[QuestionResponse] = Field(default_factory=list)

    @classmethod
    def from_event_type(cls, event_type) -> "PublicEventTypeResponse":
        return cls(
            id=event_type.id,
            name=event_type.name,
            slug=event_type.slug,
            description=event_type.description,
            duration_minutes=event_type.duration_minutes,
            minimum_notice_minutes=event_type.minimum_notice_minutes,
            booking_window_days=event_type.booking_window_days,
            host_name=event_type.host.name,
            host_slug=event_type.host.slug,
            host_timezone=event_type.host.timezone,
            questions=[QuestionResponse.model_validate(q) for q in event_type.questions],
        )
