"""
Booking aggregate.

A ``Booking`` is immutable. State changes are methods that return a
``Result[BookingChange]``: the new booking plus the events the change raised.
"""
from __future__ import annotations

import secrets
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Tuple
from uuid import UUID, uuid4

from slotwise.domain.event_policy import EventPolicy
from slotwise.domain.events import (
    BookingCancelled,
    BookingCreated,
    BookingRescheduled,
    CancelledBy,
    DomainEvent,
    SlotBooked,
    SlotReleased,
)
from slotwise.domain.result import Result
from slotwise.domain.value_objects import Duration, GuestInfo, TimeSlot

DURATION_TOLERANCE = timedelta(minutes=1)
MAX_NOTES_LENGTH = 2000
MAX_CANCELLATION_REASON_LENGTH = 500
MAX_RESPONSE_LENGTH = 5000


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


def generate_reschedule_token() -> str:
    return secrets.token_urlsafe(32)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class QuestionResponse:
    question_id: UUID
    value: str


@dataclass(frozen=True)
class BookingChange:
    booking: "Booking"
    events: Tuple[DomainEvent, ...] = ()


@dataclass(frozen=True)
class Booking:
    event_type_id: Optional[UUID]
    host_id: Optional[UUID]
    guest: GuestInfo
    start_time_utc: datetime
    end_time_utc: datetime
    status: BookingStatus = BookingStatus.CONFIRMED
    reschedule_token: str = field(default_factory=generate_reschedule_token)
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_at_utc: Optional[datetime] = None
    responses: Tuple[QuestionResponse, ...] = ()
    id: UUID = field(default_factory=uuid4)

    @classmethod
    def create(
            cls,
            policy: EventPolicy,
            guest: GuestInfo,
            scheduled: TimeSlot,
            notes: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> Result[BookingChange]:
        now = now or _utcnow()

        if not policy.is_active:
            return Result.failure("This event type is not accepting bookings.")
        if scheduled.start_time_utc <= now:
            return Result.failure("Cannot book in the past.")
        if notes and len(notes) > MAX_NOTES_LENGTH:
            return Result.failure("Guest notes are too long.")
        if not _duration_matches(scheduled, policy.duration):
            return Result.failure("Booking duration does not match event type.")

        booking = cls(
            event_type_id=policy.id,
            host_id=policy.host_id,
            guest=guest,
            start_time_utc=scheduled.start_time_utc,
            end_time_utc=scheduled.end_time_utc,
            notes=notes.strip() if notes else None,
        )
        events = (
            BookingCreated(booking.id, booking.event_type_id, booking.host_id,
                           guest.email, booking.start_time_utc),
            SlotBooked(booking.event_type_id, booking.start_time_utc),
        )
        return Result.success(BookingChange(booking, events))

    @property
    def time_slot(self) -> TimeSlot:
        return TimeSlot.from_storage(self.start_time_utc, self.end_time_utc)

    @property
    def is_active(self) -> bool:
        """Counts against availability"""
        return self.status != BookingStatus.CANCELLED

    def overlaps_with(self, slot: TimeSlot) -> bool:
        return self.start_time_utc < slot.end_time_utc and self.end_time_utc > slot.start_time_utc

    def cancel(
            self,
            reason: Optional[str],
            cancelled_by: CancelledBy,
            now: Optional[datetime] = None
    ) -> Result[BookingChange]:
        now = now or _utcnow()

        if self.status == BookingStatus.CANCELLED:
            return Result.failure("Booking is already cancelled.")
        if self.status == BookingStatus.COMPLETED:
            return Result.failure("Cannot cancel a completed booking.")
        if self.status != BookingStatus.CONFIRMED:
            return Result.failure("Only confirmed bookings can be cancelled.")
        if self.start_time_utc <= now:
            return Result.failure("Cannot cancel past bookings.")
        if reason and len(reason) > MAX_CANCELLATION_REASON_LENGTH:
            return Result.failure("Cancellation reason is too long.")

        cancelled = replace(
            self,
            status=BookingStatus.CANCELLED,
            cancellation_reason=reason.strip() if reason else None,
            cancelled_at_utc=now,
        )
        events = (
            BookingCancelled(self.id, self.host_id, self.guest.email, self.start_time_utc,
                             cancelled_by, cancelled.cancellation_reason),
            SlotReleased(self.event_type_id, self.start_time_utc),
        )
        return Result.success(BookingChange(cancelled, events))

    def reschedule(
            self,
            new_time: TimeSlot,
            expected_duration: Duration,
            now: Optional[datetime] = None
    ) -> Result[BookingChange]:
        now = now or _utcnow()

        if self.status != BookingStatus.CONFIRMED:
            return Result.failure("Only confirmed bookings can be rescheduled.")
        if new_time.start_time_utc <= now:
            return Result.failure("Cannot reschedule to a past time.")
        if not _duration_matches(new_time, expected_duration):
            return Result.failure("New time slot duration does not match event type.")

        moved = replace(
            self,
            start_time_utc=new_time.start_time_utc,
            end_time_utc=new_time.end_time_utc,
            reschedule_token=generate_reschedule_token(),
        )
        events = (
            BookingRescheduled(self.id, self.start_time_utc, moved.start_time_utc),
            SlotReleased(self.event_type_id, self.start_time_utc),
            SlotBooked(self.event_type_id, moved.start_time_utc),
        )
        return Result.success(BookingChange(moved, events))

    def mark_completed(self, now: Optional[datetime] = None) -> Result[BookingChange]:
        now = now or _utcnow()
        if self.status != BookingStatus.CONFIRMED:
            return Result.failure("Only confirmed bookings can be marked as completed.")
        if self.end_time_utc > now:
            return Result.failure("Cannot mark future bookings as completed.")
        return Result.success(BookingChange(replace(self, status=BookingStatus.COMPLETED)))

    def mark_no_show(self, now: Optional[datetime] = None) -> Result[BookingChange]:
        now = now or _utcnow()
        if self.status != BookingStatus.CONFIRMED:
            return Result.failure("Only confirmed bookings can be marked as no-show.")
        if self.end_time_utc > now:
            return Result.failure("Cannot mark future bookings as no-show.")
        return Result.success(BookingChange(replace(self, status=BookingStatus.NO_SHOW)))

    def add_response(self, question_id: UUID, value: Optional[str]) -> Result["Booking"]:
        if any(r.question_id == question_id for r in self.responses):
            return Result.failure("Response for this question already exists.")
        if value and len(value) > MAX_RESPONSE_LENGTH:
            return Result.failure("Response is too long.")
        response = QuestionResponse(question_id, (value or "").strip())
        return Result.success(replace(self, responses=self.responses + (response,)))

    def validate_reschedule_token(self, token: Optional[str]) -> bool:
        if not self.reschedule_token or not token:
            return False
        return secrets.compare_digest(self.reschedule_token, token)


def _duration_matches(slot: TimeSlot, duration: Duration) -> bool:
    return abs(slot.duration - duration.to_timedelta()) <= DURATION_TOLERANCE
