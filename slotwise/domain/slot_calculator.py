"""
Slot calculation engine.

Given an event policy, a host's weekly rules, date overrides and existing
bookings, compute every candidate slot for one calendar date and flag each
as available or not. Everything is passed in; nothing is read or written,
so identical inputs (including ``now``) always produce an identical list.

Local (host wall-clock) arithmetic is done on naive datetimes anchored to the
target date, then converted to UTC through the host's IANA timezone.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from slotwise.domain.availability import DateOverride, WeeklyAvailabilityRule, overrides_for
from slotwise.domain.booking import Booking
from slotwise.domain.event_policy import EventPolicy


SLOT_INTERVAL = timedelta(minutes=15)

LocalRange = Tuple[datetime, datetime]


@dataclass(frozen=True)
class CalculatedSlot:
    """A candidate slot, in host wall-clock time and in UTC"""
    start_time: time
    end_time: time
    start_time_utc: datetime
    end_time_utc: datetime
    is_available: bool


def calculate_slots_for_date(
        policy: EventPolicy,
        weekly_rules: Sequence[WeeklyAvailabilityRule],
        overrides: Sequence[DateOverride],
        bookings: Sequence[Booking],
        target_date: date,
        host_timezone: str,
        now: Optional[datetime] = None
) -> List[CalculatedSlot]:
    """
    Candidate slots for ``target_date``, in start order.

    Returns an empty list when the day is fully blocked, the daily booking cap
    is reached, or there is no base window (no extra-availability override and
    no enabled weekly rule for that weekday).
    """
    tz = ZoneInfo(host_timezone)
    now_utc = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    day_overrides = overrides_for(list(overrides), target_date)

    if any(o.is_full_day_block for o in day_overrides):
        return []

    active_bookings = [b for b in bookings if b.is_active]
    if policy.max_bookings_per_day is not None:
        booked_today = sum(
            1 for b in active_bookings
            if _local(b.start_time_utc, tz).date() == target_date
        )
        if booked_today >= policy.max_bookings_per_day:
            return []

    window = _resolve_base_window(weekly_rules, day_overrides, target_date)
    if window is None:
        return []
    window_start, window_end = window

    blocked_ranges = [
        (datetime.combine(target_date, o.start_time), datetime.combine(target_date, o.end_time))
        for o in day_overrides
        if o.is_partial_block
    ]
    booked_ranges = [
        (_local(b.start_time_utc, tz), _local(b.end_time_utc, tz))
        for b in active_bookings
        if _local(b.start_time_utc, tz).date() == target_date
    ]

    duration = policy.duration.to_timedelta()
    buffer_before = policy.buffer_before.to_timedelta()
    buffer_after = policy.buffer_after.to_timedelta()
    notice_cutoff = _local(now_utc, tz) + policy.minimum_notice.to_timedelta()

    slots: List[CalculatedSlot] = []
    start = window_start
    while start + duration <= window_end:
        end = start + duration
        start_utc = _to_utc(start, tz)
        if start_utc is None:
            # Wall-clock start skipped by a DST transition
            start += SLOT_INTERVAL
            continue
        end_utc = start_utc + duration

        buffered = (start - buffer_before, end + buffer_after)
        is_available = (
            not _overlaps_any(buffered, blocked_ranges)
            and not _overlaps_any(buffered, booked_ranges)
            and start > notice_cutoff
            and start_utc > now_utc
        )

        slots.append(CalculatedSlot(
            start_time=start.time(),
            end_time=_local(end_utc, tz).time(),
            start_time_utc=start_utc,
            end_time_utc=end_utc,
            is_available=is_available,
        ))
        start += SLOT_INTERVAL

    return slots


def is_slot_available(
        policy: EventPolicy,
        weekly_rules: Sequence[WeeklyAvailabilityRule],
        overrides: Sequence[DateOverride],
        bookings: Sequence[Booking],
        proposed_start_utc: datetime,
        host_timezone: str,
        now: Optional[datetime] = None
) -> bool:
    """Re-run the full-date calculation and look for an available slot starting exactly at ``proposed_start_utc``"""
    tz = ZoneInfo(host_timezone)
    proposed = proposed_start_utc.astimezone(timezone.utc)
    local_date = _local(proposed, tz).date()

    slots = calculate_slots_for_date(
        policy, weekly_rules, overrides, bookings, local_date, host_timezone, now=now
    )
    return any(s.start_time_utc == proposed and s.is_available for s in slots)


def _resolve_base_window(
        weekly_rules: Iterable[WeeklyAvailabilityRule],
        day_overrides: List[DateOverride],
        target_date: date
) -> Optional[LocalRange]:
    # Extra availability replaces the weekly window for the day, it does not extend it
    extra = next((o for o in day_overrides if o.is_extra_availability), None)
    if extra is not None:
        return (datetime.combine(target_date, extra.start_time),
                datetime.combine(target_date, extra.end_time))

    rule = next((r for r in weekly_rules if r.day_of_week == target_date.weekday()), None)
    if rule is not None and rule.enabled:
        return (datetime.combine(target_date, rule.start_time),
                datetime.combine(target_date, rule.end_time))

    return None


def _overlaps_any(span: LocalRange, ranges: Iterable[LocalRange]) -> bool:
    start, end = span
    return any(start < other_end and end > other_start for other_start, other_end in ranges)


def _local(instant_utc: datetime, tz: ZoneInfo) -> datetime:
    """Host wall-clock time of a UTC instant, as a naive datetime"""
    if instant_utc.tzinfo is None:
        instant_utc = instant_utc.replace(tzinfo=timezone.utc)
    return instant_utc.astimezone(tz).replace(tzinfo=None)


def _to_utc(wall_clock: datetime, tz: ZoneInfo) -> Optional[datetime]:
    """
    UTC instant for a host wall-clock time, or None if the time does not exist
    on that date. Ambiguous times (clocks falling back) resolve to the first
    occurrence.
    """
    utc = wall_clock.replace(tzinfo=tz, fold=0).astimezone(timezone.utc)
    if _local(utc, tz) != wall_clock:
        return None
    return utc
