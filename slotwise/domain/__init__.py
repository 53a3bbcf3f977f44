# slotwise/domain/__init__.py
from .result import Result, ErrorKind
from .value_objects import BookingWindow, BufferTime, Duration, GuestInfo, MinimumNotice, Slug, TimeSlot
from .availability import DateOverride, WeeklyAvailabilityRule
from .event_policy import EventPolicy
from .events import (
    BookingCancelled,
    BookingCreated,
    BookingRescheduled,
    CancelledBy,
    DomainEvent,
    SlotBooked,
    SlotReleased,
)
from .booking import Booking, BookingChange, BookingStatus, QuestionResponse
from .questions import BookingQuestion, QuestionType, check_responses, reorder_questions
from .slot_calculator import CalculatedSlot, calculate_slots_for_date, is_slot_available
from .booking_gate import create_booking, reschedule_booking

__all__ = [
    "Result",
    "ErrorKind",
    "BookingWindow",
    "BufferTime",
    "Duration",
    "GuestInfo",
    "MinimumNotice",
    "Slug",
    "TimeSlot",
    "DateOverride",
    "WeeklyAvailabilityRule",
    "EventPolicy",
    "BookingCancelled",
    "BookingCreated",
    "BookingRescheduled",
    "CancelledBy",
    "DomainEvent",
    "SlotBooked",
    "SlotReleased",
    "Booking",
    "BookingChange",
    "BookingStatus",
    "QuestionResponse",
    "BookingQuestion",
    "QuestionType",
    "check_responses",
    "reorder_questions",
    "CalculatedSlot",
    "calculate_slots_for_date",
    "is_slot_available",
    "create_booking",
    "reschedule_booking",
]
