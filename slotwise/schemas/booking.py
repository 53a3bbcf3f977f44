# slotwise/schemas/booking.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime, timezone
from uuid import UUID

from slotwise.domain.booking import Booking


def _as_utc(v: Optional[datetime]) -> Optional[datetime]:
    if v is None:
        return v
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v.astimezone(timezone.utc)


class QuestionAnswer(BaseModel):
    question_id: UUID
    value: str = Field("", max_length=5000)


class BookingCreateRequest(BaseModel):
    """Guest booking request"""
    event_type_id: UUID
    start_time_utc: datetime = Field(..., description="Slot start, as returned by the slots query")
    end_time_utc: Optional[datetime] = Field(None, description="Optional, must match the event duration")
    guest_name: str = Field(..., min_length=1, max_length=200)
    guest_email: str = Field(..., max_length=320)
    guest_phone: Optional[str] = Field(None, max_length=50)
    guest_timezone: str = Field(..., description="IANA timezone")
    notes: Optional[str] = Field(None, max_length=2000)
    answers: List[QuestionAnswer] = Field(default_factory=list)

    @field_validator("start_time_utc", "end_time_utc")
    @classmethod
    def normalize_times(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)


class RescheduleRequest(BaseModel):
    new_start_time_utc: datetime

    @field_validator("new_start_time_utc")
    @classmethod
    def normalize_time(cls, v: datetime) -> datetime:
        return _as_utc(v)


class CancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class BookingResponse(BaseModel):
    id: UUID
    event_type_id: UUID
    host_id: UUID
    guest_name: str
    guest_email: str
    guest_phone: Optional[str] = None
    guest_timezone: str
    notes: Optional[str] = None
    start_time_utc: datetime
    end_time_utc: datetime
    status: str
    cancellation_reason: Optional[str] = None
    cancelled_at_utc: Optional[datetime] = None
    answers: List[QuestionAnswer] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, booking: Booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            event_type_id=booking.event_type_id,
            host_id=booking.host_id,
            guest_name=booking.guest.name,
            guest_email=booking.guest.email,
            guest_phone=booking.guest.phone,
            guest_timezone=booking.guest.timezone,
            notes=booking.notes,
            start_time_utc=booking.start_time_utc,
            end_time_utc=booking.end_time_utc,
            status=booking.status.value,
            cancellation_reason=booking.cancellation_reason,
            cancelled_at_utc=booking.cancelled_at_utc,
            answers=[QuestionAnswer(question_id=r.question_id, value=r.value) for r in booking.responses],
        )


class BookingConfirmation(BookingResponse):
    """Returned to the guest right after booking; the only place the reschedule link is shown"""
    reschedule_url: str
