"""
Validated time-policy quantities used by event types and bookings.

Every ``create`` returns a ``Result``; ``from_minutes``/``from_days``/
``from_storage`` skip validation and are meant for rows loaded from the
database only.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from email_validator import EmailNotValidError, validate_email

from slotwise.domain.result import Result


def is_valid_timezone(name: Optional[str]) -> bool:
    """True if ``name`` is a known IANA timezone identifier"""
    if not name or not name.strip():
        return False
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


@dataclass(frozen=True)
class Duration:
    """Meeting length in minutes"""
    minutes: int

    MIN_MINUTES = 15
    MAX_MINUTES = 480

    @classmethod
    def create(cls, minutes: int) -> Result["Duration"]:
        if minutes < cls.MIN_MINUTES:
            return Result.failure(f"Duration must be at least {cls.MIN_MINUTES} minutes.")
        if minutes > cls.MAX_MINUTES:
            return Result.failure(f"Duration cannot exceed {cls.MAX_MINUTES} minutes (8 hours).")
        if minutes % 5 != 0:
            return Result.failure("Duration must be in 5-minute increments.")
        return Result.success(cls(minutes))

    @classmethod
    def from_minutes(cls, minutes: int) -> "Duration":
        return cls(minutes)

    def to_timedelta(self) -> timedelta:
        return timedelta(minutes=self.minutes)

    def __str__(self) -> str:
        if self.minutes < 60:
            return f"{self.minutes} min"
        if self.minutes == 60:
            return "1 hour"
        if self.minutes % 60 == 0:
            return f"{self.minutes // 60} hours"
        return f"{self.minutes // 60}h {self.minutes % 60}m"


@dataclass(frozen=True)
class BufferTime:
    """Idle time required before or after a meeting"""
    minutes: int

    MAX_MINUTES = 120

    @classmethod
    def create(cls, minutes: int) -> Result["BufferTime"]:
        if minutes < 0:
            return Result.failure("Buffer time cannot be negative.")
        if minutes > cls.MAX_MINUTES:
            return Result.failure(f"Buffer time cannot exceed {cls.MAX_MINUTES} minutes.")
        if minutes % 5 != 0:
            return Result.failure("Buffer time must be in 5-minute increments.")
        return Result.success(cls(minutes))

    @classmethod
    def from_minutes(cls, minutes: int) -> "BufferTime":
        return cls(minutes)

    @classmethod
    def none(cls) -> "BufferTime":
        return cls(0)

    def to_timedelta(self) -> timedelta:
        return timedelta(minutes=self.minutes)

    def __str__(self) -> str:
        return "No buffer" if self.minutes == 0 else f"{self.minutes} min buffer"


@dataclass(frozen=True)
class MinimumNotice:
    """Shortest allowed gap between now and a bookable start time"""
    minutes: int

    MAX_MINUTES = 10080  # 7 days

    @classmethod
    def create(cls, minutes: int) -> Result["MinimumNotice"]:
        if minutes < 0:
            return Result.failure("Minimum notice cannot be negative.")
        if minutes > cls.MAX_MINUTES:
            return Result.failure(f"Minimum notice cannot exceed {cls.MAX_MINUTES} minutes (7 days).")
        return Result.success(cls(minutes))

    @classmethod
    def from_minutes(cls, minutes: int) -> "MinimumNotice":
        return cls(minutes)

    @classmethod
    def none(cls) -> "MinimumNotice":
        return cls(0)

    def to_timedelta(self) -> timedelta:
        return timedelta(minutes=self.minutes)

    def __str__(self) -> str:
        if self.minutes == 0:
            return "No minimum notice"
        if self.minutes < 60:
            return f"{self.minutes} minutes"
        if self.minutes == 60:
            return "1 hour"
        if self.minutes < 1440:
            return f"{self.minutes // 60} hours"
        if self.minutes == 1440:
            return "1 day"
        return f"{self.minutes // 1440} days"


@dataclass(frozen=True)
class BookingWindow:
    """How many days ahead guests may book"""
    days: int

    MIN_DAYS = 1
    MAX_DAYS = 365

    @classmethod
    def create(cls, days: int) -> Result["BookingWindow"]:
        if days < cls.MIN_DAYS:
            return Result.failure(f"Booking window must be at least {cls.MIN_DAYS} day.")
        if days > cls.MAX_DAYS:
            return Result.failure(f"Booking window cannot exceed {cls.MAX_DAYS} days.")
        return Result.success(cls(days))

    @classmethod
    def from_days(cls, days: int) -> "BookingWindow":
        return cls(days)

    def max_bookable_date(self, from_date: date) -> date:
        """Last bookable date, inclusive. A 60-day window opened today spans 61 calendar dates."""
        return from_date + timedelta(days=self.days)

    def __str__(self) -> str:
        labels = {7: "1 week", 14: "2 weeks", 180: "6 months", 365: "1 year"}
        return labels.get(self.days, f"{self.days} days")


@dataclass(frozen=True)
class TimeSlot:
    """A UTC start/end pair"""
    start_time_utc: datetime
    end_time_utc: datetime

    @classmethod
    def create(cls, start_time_utc: datetime, end_time_utc: datetime) -> Result["TimeSlot"]:
        if not _is_utc(start_time_utc):
            return Result.failure("Start time must be in UTC.")
        if not _is_utc(end_time_utc):
            return Result.failure("End time must be in UTC.")
        if end_time_utc <= start_time_utc:
            return Result.failure("End time must be after start time.")
        return Result.success(cls(start_time_utc, end_time_utc))

    @classmethod
    def for_duration(cls, start_time_utc: datetime, duration: Duration) -> Result["TimeSlot"]:
        if not _is_utc(start_time_utc):
            return Result.failure("Start time must be in UTC.")
        return Result.success(cls(start_time_utc, start_time_utc + duration.to_timedelta()))

    @classmethod
    def from_storage(cls, start_time_utc: datetime, end_time_utc: datetime) -> "TimeSlot":
        return cls(ensure_utc(start_time_utc), ensure_utc(end_time_utc))

    @property
    def duration(self) -> timedelta:
        return self.end_time_utc - self.start_time_utc

    def overlaps_with(self, other: "TimeSlot") -> bool:
        return self.start_time_utc < other.end_time_utc and self.end_time_utc > other.start_time_utc

    def contains(self, instant_utc: datetime) -> bool:
        return self.start_time_utc <= instant_utc < self.end_time_utc

    def is_before(self, instant_utc: datetime) -> bool:
        return self.end_time_utc <= instant_utc

    def is_after(self, instant_utc: datetime) -> bool:
        return self.start_time_utc >= instant_utc

    def with_buffers(self, before: BufferTime, after: BufferTime) -> "TimeSlot":
        return TimeSlot(
            self.start_time_utc - before.to_timedelta(),
            self.end_time_utc + after.to_timedelta(),
        )

    def __str__(self) -> str:
        return f"{self.start_time_utc:%Y-%m-%d %H:%M} - {self.end_time_utc:%H:%M} UTC"


@dataclass(frozen=True)
class GuestInfo:
    """Identity of the person booking"""
    name: str
    email: str
    phone: Optional[str]
    timezone: str

    @classmethod
    def create(cls, name: str, email: str, phone: Optional[str], timezone_name: str) -> Result["GuestInfo"]:
        if not name or not name.strip():
            return Result.failure("Guest name is required.")
        if len(name) > 200:
            return Result.failure("Guest name is too long.")

        try:
            normalized_email = validate_email(email or "", check_deliverability=False).normalized
        except EmailNotValidError:
            return Result.failure("Invalid email address.")

        if phone and len(phone) > 50:
            return Result.failure("Phone number is too long.")
        if not timezone_name or not timezone_name.strip():
            return Result.failure("Timezone is required.")
        if not is_valid_timezone(timezone_name):
            return Result.failure(f"Invalid timezone: {timezone_name}")

        return Result.success(cls(
            name=name.strip(),
            email=normalized_email,
            phone=phone.strip() if phone else None,
            timezone=timezone_name,
        ))

    @classmethod
    def from_storage(cls, name: str, email: str, phone: Optional[str], timezone_name: str) -> "GuestInfo":
        return cls(name=name, email=email, phone=phone, timezone=timezone_name)

    def __str__(self) -> str:
        return f"{self.name} ({self.email})"


@dataclass(frozen=True)
class Slug:
    """URL-friendly identifier used on public booking links"""
    value: str

    MIN_LENGTH = 3
    MAX_LENGTH = 100

    _PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

    @classmethod
    def create(cls, slug: Optional[str]) -> Result["Slug"]:
        if not slug or not slug.strip():
            return Result.failure("Slug is required.")
        slug = slug.strip().lower()
        if len(slug) < cls.MIN_LENGTH:
            return Result.failure(f"Slug must be at least {cls.MIN_LENGTH} characters.")
        if len(slug) > cls.MAX_LENGTH:
            return Result.failure(f"Slug cannot exceed {cls.MAX_LENGTH} characters.")
        if not cls._PATTERN.match(slug):
            return Result.failure("Slug can only contain lowercase letters, numbers, and single hyphens between them.")
        return Result.success(cls(slug))

    @classmethod
    def from_name(cls, name: str) -> Result["Slug"]:
        """Derive a slug from a display name ("30 Min Call" becomes 30-min-call)"""
        slug = re.sub(r"[^a-z0-9]+", "-", (name or "").lower()).strip("-")
        slug = slug[:cls.MAX_LENGTH].rstrip("-")
        if len(slug) < cls.MIN_LENGTH:
            return Result.failure(f"Cannot derive a slug from '{name}'; please choose one.")
        return Result.success(cls(slug))

    def with_suffix(self, n: int) -> "Slug":
        suffix = f"-{n}"
        return Slug(self.value[:self.MAX_LENGTH - len(suffix)].rstrip("-") + suffix)

    def first_free(self, taken: Iterable[str]) -> "Slug":
        """This slug, or the first ``-2``, ``-3``... variant not in ``taken``"""
        taken = set(taken)
        candidate, n = self, 1
        while candidate.value in taken:
            n += 1
            candidate = self.with_suffix(n)
        return candidate

    def __str__(self) -> str:
        return self.value


def _is_utc(value: datetime) -> bool:
    return value.tzinfo is not None and value.utcoffset() == timedelta(0)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps (SQLite drops tzinfo) and normalise aware ones"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
