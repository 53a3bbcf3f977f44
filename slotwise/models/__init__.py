# slotwise/models/__init__.py
from .base import Base
from .host import Host
from .availability import AvailabilityRule, AvailabilityOverride
from .event_type import EventType
from .question import BookingQuestionRecord
from .booking import BookingRecord, BookingAnswer

__all__ = [
    "Base",
    "Host",
    "AvailabilityRule",
    "AvailabilityOverride",
    "EventType",
    "BookingQuestionRecord",
    "BookingRecord",
    "BookingAnswer",
]
