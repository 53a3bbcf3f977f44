"""Weekly availability rules and date-specific overrides"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timezone
from typing import List, Optional
from uuid import UUID, uuid4

from slotwise.domain.result import Result

MIN_WINDOW_MINUTES = 15
MAX_REASON_LENGTH = 200

WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def _minutes_between(start: time, end: time) -> int:
    return (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)


def _validate_window(start_time: time, end_time: time, label: str) -> Optional[Result]:
    if end_time <= start_time:
        return Result.failure("End time must be after start time.")
    if _minutes_between(start_time, end_time) < MIN_WINDOW_MINUTES:
        return Result.failure(f"{label} must be at least {MIN_WINDOW_MINUTES} minutes.")
    return None


@dataclass(frozen=True)
class WeeklyAvailabilityRule:
    """A host's recurring hours for one weekday (0=Monday, 6=Sunday)"""
    day_of_week: int
    start_time: time
    end_time: time
    enabled: bool = True

    @classmethod
    def create(
            cls,
            day_of_week: int,
            start_time: time,
            end_time: time,
            enabled: bool = True
    ) -> Result["WeeklyAvailabilityRule"]:
        if day_of_week not in range(7):
            return Result.failure("Day of week must be between 0 (Monday) and 6 (Sunday).")
        invalid = _validate_window(start_time, end_time, "Availability window")
        if invalid:
            return invalid.propagate()
        return Result.success(cls(day_of_week, start_time, end_time, enabled))

    @classmethod
    def default_week(cls) -> List["WeeklyAvailabilityRule"]:
        """Mon-Fri 09:00-17:00 enabled, weekend present but disabled"""
        return [
            cls(day, time(9, 0), time(17, 0), enabled=day < 5)
            for day in range(7)
        ]

    def update(self, start_time: time, end_time: time, enabled: bool) -> Result["WeeklyAvailabilityRule"]:
        invalid = _validate_window(start_time, end_time, "Availability window")
        if invalid:
            return invalid.propagate()
        return Result.success(replace(self, start_time=start_time, end_time=end_time, enabled=enabled))

    def enable(self) -> "WeeklyAvailabilityRule":
        return replace(self, enabled=True)

    def disable(self) -> "WeeklyAvailabilityRule":
        return replace(self, enabled=False)

    @property
    def duration_minutes(self) -> int:
        return _minutes_between(self.start_time, self.end_time)

    def __str__(self) -> str:
        state = "Enabled" if self.enabled else "Disabled"
        return (f"{WEEKDAY_NAMES[self.day_of_week]}: "
                f"{self.start_time:%H:%M} - {self.end_time:%H:%M} ({state})")


@dataclass(frozen=True)
class DateOverride:
    """
    Date-specific exception to the weekly rule.

    Shapes, told apart by ``is_blocked`` and whether a time range is set:
    - full-day block: blocked, no times
    - partial block: blocked, start and end
    - extra availability: not blocked, start and end (replaces the weekly window)
    """
    date: date
    is_blocked: bool
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    reason: Optional[str] = None
    id: UUID = None

    def __post_init__(self):
        if self.id is None:
            object.__setattr__(self, "id", uuid4())

    @classmethod
    def block_day(
            cls,
            override_date: date,
            reason: Optional[str] = None,
            today: Optional[date] = None
    ) -> Result["DateOverride"]:
        invalid = _validate_common(override_date, reason, today)
        if invalid:
            return invalid.propagate()
        return Result.success(cls(override_date, is_blocked=True, reason=_clean(reason)))

    @classmethod
    def block_time_range(
            cls,
            override_date: date,
            start_time: time,
            end_time: time,
            reason: Optional[str] = None,
            today: Optional[date] = None
    ) -> Result["DateOverride"]:
        invalid = _validate_common(override_date, reason, today)
        if invalid:
            return invalid.propagate()
        if end_time <= start_time:
            return Result.failure("End time must be after start time.")
        return Result.success(cls(override_date, True, start_time, end_time, _clean(reason)))

    @classmethod
    def extra_availability(
            cls,
            override_date: date,
            start_time: time,
            end_time: time,
            reason: Optional[str] = None,
            today: Optional[date] = None
    ) -> Result["DateOverride"]:
        invalid = _validate_common(override_date, reason, today)
        if invalid:
            return invalid.propagate()
        invalid = _validate_window(start_time, end_time, "Extra availability")
        if invalid:
            return invalid.propagate()
        return Result.success(cls(override_date, False, start_time, end_time, _clean(reason)))

    @property
    def has_time_range(self) -> bool:
        return self.start_time is not None and self.end_time is not None

    @property
    def is_full_day_block(self) -> bool:
        return self.is_blocked and self.start_time is None and self.end_time is None

    @property
    def is_partial_block(self) -> bool:
        return self.is_blocked and self.has_time_range

    @property
    def is_extra_availability(self) -> bool:
        return not self.is_blocked and self.has_time_range

    def affects_time(self, value: time) -> bool:
        if self.is_full_day_block:
            return True
        if self.has_time_range:
            return self.start_time <= value < self.end_time
        return False

    def __str__(self) -> str:
        reason = self.reason or "No reason"
        if self.is_full_day_block:
            return f"{self.date:%Y-%m-%d}: Blocked (Full Day) - {reason}"
        kind = "Blocked" if self.is_blocked else "Available"
        return f"{self.date:%Y-%m-%d}: {kind} {self.start_time:%H:%M} - {self.end_time:%H:%M} - {reason}"


def _validate_common(override_date: date, reason: Optional[str], today: Optional[date]) -> Optional[Result]:
    today = today or datetime.now(timezone.utc).date()
    if override_date < today:
        return Result.failure("Cannot create override for past dates.")
    if reason and len(reason) > MAX_REASON_LENGTH:
        return Result.failure("Reason is too long.")
    return None


def _clean(reason: Optional[str]) -> Optional[str]:
    return reason.strip() if reason else None


def overrides_for(overrides: List[DateOverride], on_date: date) -> List[DateOverride]:
    return [o for o in overrides if o.date == on_date]
