"""
Domain events returned by booking commands.

Commands hand these back alongside their result; the caller decides how to
publish them once the change is committed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CancelledBy(str, Enum):
    HOST = "host"
    GUEST = "guest"
    SYSTEM = "system"


@dataclass(frozen=True)
class DomainEvent:
    pass


@dataclass(frozen=True)
class BookingCreated(DomainEvent):
    booking_id: UUID
    event_type_id: Optional[UUID]
    host_id: Optional[UUID]
    guest_email: str
    start_time_utc: datetime
    occurred_at_utc: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class BookingCancelled(DomainEvent):
    booking_id: UUID
    host_id: Optional[UUID]
    guest_email: str
    start_time_utc: datetime
    cancelled_by: CancelledBy
    reason: Optional[str] = None
    occurred_at_utc: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class BookingRescheduled(DomainEvent):
    booking_id: UUID
    old_start_time_utc: datetime
    new_start_time_utc: datetime
    occurred_at_utc: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class SlotBooked(DomainEvent):
    event_type_id: Optional[UUID]
    start_time_utc: datetime
    occurred_at_utc: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class SlotReleased(DomainEvent):
    event_type_id: Optional[UUID]
    start_time_utc: datetime
    occurred_at_utc: datetime = field(default_factory=_utcnow)
