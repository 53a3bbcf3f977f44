"""
Commit-time gate for new and moved bookings.

Both operations re-run the slot calculator against the booking set the caller
loaded inside its transaction. That re-check is the only guard against two
guests taking the same slot, so it is never skipped.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence, Tuple
from uuid import UUID

from slotwise.domain.availability import DateOverride, WeeklyAvailabilityRule
from slotwise.domain.booking import (
    DURATION_TOLERANCE,
    Booking,
    BookingChange,
    BookingStatus,
)
from slotwise.domain.event_policy import EventPolicy
from slotwise.domain.questions import BookingQuestion, check_responses
from slotwise.domain.result import Result
from slotwise.domain.slot_calculator import is_slot_available
from slotwise.domain.value_objects import GuestInfo, TimeSlot

SLOT_UNAVAILABLE = "The selected time slot is no longer available."


def create_booking(
        policy: EventPolicy,
        weekly_rules: Sequence[WeeklyAvailabilityRule],
        overrides: Sequence[DateOverride],
        bookings: Sequence[Booking],
        proposed_start_utc: datetime,
        guest: GuestInfo,
        host_timezone: str,
        proposed_end_utc: Optional[datetime] = None,
        notes: Optional[str] = None,
        responses: Iterable[Tuple[UUID, str]] = (),
        questions: Sequence[BookingQuestion] = (),
        now: Optional[datetime] = None
) -> Result[BookingChange]:
    """
    Accept a booking only if it starts exactly on a slot the calculator still
    reports as available, and its answers satisfy ``questions``.
    """
    now = now or datetime.now(timezone.utc)

    if not policy.is_active:
        return Result.failure("This event type is not accepting bookings.")
    if proposed_start_utc <= now:
        return Result.failure("Cannot book in the past.")

    if not is_slot_available(policy, weekly_rules, overrides, bookings,
                             proposed_start_utc, host_timezone, now=now):
        return Result.conflict(SLOT_UNAVAILABLE)

    slot = TimeSlot.for_duration(proposed_start_utc, policy.duration)
    if slot.is_failure:
        return slot.propagate()
    if proposed_end_utc is not None and abs(proposed_end_utc - slot.value.end_time_utc) > DURATION_TOLERANCE:
        return Result.failure("Booking duration does not match event type.")

    answers = check_responses(questions, responses)
    if answers.is_failure:
        return answers.propagate()

    created = Booking.create(policy, guest, slot.value, notes=notes, now=now)
    if created.is_failure:
        return created

    booking = created.value.booking
    for question_id, value in answers.value:
        answered = booking.add_response(question_id, value)
        if answered.is_failure:
            return answered.propagate()
        booking = answered.value

    return Result.success(BookingChange(booking, created.value.events))


def reschedule_booking(
        booking: Booking,
        policy: EventPolicy,
        weekly_rules: Sequence[WeeklyAvailabilityRule],
        overrides: Sequence[DateOverride],
        bookings: Sequence[Booking],
        new_start_utc: datetime,
        host_timezone: str,
        now: Optional[datetime] = None
) -> Result[BookingChange]:
    now = now or datetime.now(timezone.utc)

    if booking.status != BookingStatus.CONFIRMED:
        return Result.failure("Only confirmed bookings can be rescheduled.")
    if new_start_utc <= now:
        return Result.failure("Cannot reschedule to a past time.")

    # The booking's own current interval must not block its new one
    others = [b for b in bookings if b.id != booking.id]
    if not is_slot_available(policy, weekly_rules, overrides, others,
                             new_start_utc, host_timezone, now=now):
        return Result.conflict(SLOT_UNAVAILABLE)

    slot = TimeSlot.for_duration(new_start_utc, policy.duration)
    if slot.is_failure:
        return slot.propagate()

    return booking.reschedule(slot.value, policy.duration, now=now)
