"""Booking policy of an event type"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional
from uuid import UUID

from slotwise.domain.result import Result, first_failure
from slotwise.domain.value_objects import (
    BookingWindow,
    BufferTime,
    Duration,
    MinimumNotice,
)


@dataclass(frozen=True)
class EventPolicy:
    """The subset of an event type the slot calculator and booking gate read"""
    duration: Duration
    buffer_before: BufferTime = BufferTime(0)
    buffer_after: BufferTime = BufferTime(0)
    minimum_notice: MinimumNotice = MinimumNotice(0)
    booking_window: BookingWindow = BookingWindow(60)
    max_bookings_per_day: Optional[int] = None
    is_active: bool = True
    id: Optional[UUID] = None
    host_id: Optional[UUID] = None
    name: str = ""

    @classmethod
    def create(
            cls,
            duration_minutes: int,
            buffer_before_minutes: int = 0,
            buffer_after_minutes: int = 0,
            minimum_notice_minutes: int = 0,
            booking_window_days: int = 60,
            max_bookings_per_day: Optional[int] = None,
            is_active: bool = True,
            id: Optional[UUID] = None,
            host_id: Optional[UUID] = None,
            name: str = ""
    ) -> Result["EventPolicy"]:
        duration = Duration.create(duration_minutes)
        before = BufferTime.create(buffer_before_minutes)
        after = BufferTime.create(buffer_after_minutes)
        notice = MinimumNotice.create(minimum_notice_minutes)
        window = BookingWindow.create(booking_window_days)

        failed = first_failure(duration, before, after, notice, window)
        if failed:
            return failed.propagate()

        if max_bookings_per_day is not None and max_bookings_per_day < 1:
            return Result.failure("Max bookings per day must be at least 1.")

        return Result.success(cls(
            duration=duration.value,
            buffer_before=before.value,
            buffer_after=after.value,
            minimum_notice=notice.value,
            booking_window=window.value,
            max_bookings_per_day=max_bookings_per_day,
            is_active=is_active,
            id=id,
            host_id=host_id,
            name=name,
        ))

    def activate(self) -> "EventPolicy":
        return replace(self, is_active=True)

    def deactivate(self) -> "EventPolicy":
        return replace(self, is_active=False)
