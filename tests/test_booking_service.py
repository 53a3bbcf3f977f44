"""Tests for BookingService against an in-memory database."""

from datetime import date, datetime, time, timezone
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import update

from slotwise.domain import BookingStatus, CancelledBy, ErrorKind, QuestionType
from slotwise.models import BookingRecord
from slotwise.schemas.booking import BookingCreateRequest, QuestionAnswer
from slotwise.schemas.event_type import EventTypeCreate, EventTypeUpdate
from slotwise.schemas.host import HostCreate
from slotwise.schemas.question import QuestionCreate
from slotwise.services.availability.availability_service import AvailabilityService
from slotwise.services.booking.booking_service import BookingService
from slotwise.services.event_type.event_type_service import EventTypeService
from slotwise.services.host.host_service import HostService
from slotwise.services.question.question_service import QuestionService

NOW = datetime(2030, 3, 1, 12, 0, tzinfo=timezone.utc)
MONDAY = date(2030, 3, 4)


def local(hour: int, minute: int = 0, d: date = MONDAY) -> datetime:
    return datetime.combine(d, time(hour, minute), tzinfo=ZoneInfo("America/New_York")).astimezone(timezone.utc)


def request_for(event_type, start: datetime, **overrides) -> BookingCreateRequest:
    data = dict(
        event_type_id=event_type.id,
        start_time_utc=start,
        guest_name="Ada Lovelace",
        guest_email="ada@acme.io",
        guest_timezone="Europe/London",
    )
    data.update(overrides)
    return BookingCreateRequest(**data)


@pytest.fixture
def booked(db, event_type):
    """A confirmed 10:00 Monday booking."""
    result = BookingService.create_booking(db, request_for(event_type, local(10)), now=NOW)
    assert result.is_success, result.error
    return result.value.booking


def open_starts(db, event_type, on_date=MONDAY):
    result = AvailabilityService.get_available_slots(db, event_type.id, on_date, "America/New_York", now=NOW)
    return [s.start_time for s in result.value.slots]


class TestCreate:
    def test_persists_booking(self, db, host, event_type, booked):
        record = db.query(BookingRecord).one()
        assert record.id == booked.id
        assert record.host_id == host.id
        assert record.status == "confirmed"
        assert record.reschedule_token == booked.reschedule_token

    def test_booked_slot_disappears(self, db, event_type, booked):
        starts = open_starts(db, event_type)
        assert "10:00" not in starts
        assert "09:45" not in starts
        assert "09:30" in starts
        assert "10:30" in starts

    def test_second_guest_gets_conflict(self, db, event_type, booked):
        result = BookingService.create_booking(
            db, request_for(event_type, local(10), guest_email="bob@acme.io"), now=NOW
        )
        assert result.kind == ErrorKind.CONFLICT
        assert result.error == "The selected time slot is no longer available."
        assert db.query(BookingRecord).count() == 1

    def test_bookings_of_other_event_types_conflict(self, db, host, event_type, booked):
        long_call = EventTypeService.create_event_type(
            db, host, EventTypeCreate(name="Deep Dive", duration_minutes=60)
        ).value
        result = BookingService.create_booking(db, request_for(long_call, local(9, 30)), now=NOW)
        assert result.kind == ErrorKind.CONFLICT

    def test_beyond_booking_window(self, db, event_type):
        too_far = local(10, d=date(2030, 5, 6))
        result = BookingService.create_booking(db, request_for(event_type, too_far), now=NOW)
        assert result.error == "Cannot book more than 60 days in advance."

    def test_unknown_event_type(self, db, event_type):
        result = BookingService.create_booking(
            db, request_for(event_type, local(10), event_type_id=uuid4()), now=NOW
        )
        assert result.kind == ErrorKind.NOT_FOUND

    def test_invalid_guest(self, db, event_type):
        result = BookingService.create_booking(
            db, request_for(event_type, local(10), guest_timezone="Moon/Base"), now=NOW
        )
        assert result.error == "Invalid timezone: Moon/Base"

    def test_answers_saved(self, db, host, event_type):
        question = QuestionService.add_question(
            db, host.id, event_type.id, QuestionCreate(question_text="What should we cover?")
        ).value
        result = BookingService.create_booking(
            db, request_for(event_type, local(11), answers=[QuestionAnswer(question_id=question.id, value="Pricing")]),
            now=NOW
        )
        record = db.query(BookingRecord).filter(BookingRecord.id == result.value.booking.id).one()
        assert [(a.question_id, a.value) for a in record.answers] == [(question.id, "Pricing")]

    def test_answer_to_unknown_question_rejected(self, db, event_type):
        result = BookingService.create_booking(
            db, request_for(event_type, local(11), answers=[QuestionAnswer(question_id=uuid4(), value="Pricing")]),
            now=NOW
        )
        assert result.error == "Answer refers to an unknown question."
        assert db.query(BookingRecord).count() == 0

    def test_required_question_must_be_answered(self, db, host, event_type):
        QuestionService.add_question(
            db, host.id, event_type.id,
            QuestionCreate(question_text="Plan?", question_type=QuestionType.SINGLE_SELECT,
                           is_required=True, options=["Basic", "Pro"])
        )
        result = BookingService.create_booking(db, request_for(event_type, local(11)), now=NOW)
        assert result.kind == ErrorKind.VALIDATION
        assert result.error == "An answer to 'Plan?' is required."

    def test_daily_cap(self, db, host, event_type):
        EventTypeService.update_event_type(db, host.id, event_type.id, EventTypeUpdate(max_bookings_per_day=1))
        assert BookingService.create_booking(db, request_for(event_type, local(10)), now=NOW).is_success

        assert open_starts(db, event_type) == []
        result = BookingService.create_booking(db, request_for(event_type, local(14)), now=NOW)
        assert result.kind == ErrorKind.CONFLICT

    def test_daily_cap_counts_other_event_types(self, db, host, event_type):
        EventTypeService.update_event_type(db, host.id, event_type.id, EventTypeUpdate(max_bookings_per_day=1))
        long_call = EventTypeService.create_event_type(
            db, host, EventTypeCreate(name="Deep Dive", duration_minutes=60)
        ).value
        assert BookingService.create_booking(db, request_for(long_call, local(10)), now=NOW).is_success

        assert open_starts(db, event_type) == []
        assert open_starts(db, event_type, date(2030, 3, 5)) != []
        result = BookingService.create_booking(db, request_for(event_type, local(14)), now=NOW)
        assert result.kind == ErrorKind.CONFLICT


class TestReschedule:
    def test_host_reschedule(self, db, host, booked):
        result = BookingService.reschedule_booking(db, booked.id, local(15), host_id=host.id, now=NOW)

        assert result.is_success
        record = db.query(BookingRecord).one()
        assert record.to_domain().start_time_utc == local(15)
        assert record.reschedule_token != booked.reschedule_token

    def test_guest_reschedule_with_token(self, db, event_type, booked):
        result = BookingService.reschedule_booking(
            db, booked.id, local(10, 15), token=booked.reschedule_token, now=NOW
        )
        assert result.is_success

        # Old link is dead, new one works
        assert BookingService.get_booking_by_token(db, booked.reschedule_token).kind == ErrorKind.NOT_FOUND
        new_token = result.value.booking.reschedule_token
        assert BookingService.get_booking_by_token(db, new_token).value.id == booked.id

    def test_wrong_token_looks_like_missing_booking(self, db, booked):
        result = BookingService.reschedule_booking(db, booked.id, local(15), token="guess", now=NOW)
        assert result.kind == ErrorKind.NOT_FOUND
        assert result.error == "Booking not found."

    def test_other_host_looks_like_missing_booking(self, db, booked):
        other = HostService.create_host(db, HostCreate(name="Other", email="other@acme.io")).value
        result = BookingService.reschedule_booking(db, booked.id, local(15), host_id=other.id, now=NOW)
        assert result.error == "Booking not found."

    def test_no_actor_unauthorized(self, db, booked):
        result = BookingService.reschedule_booking(db, booked.id, local(15), now=NOW)
        assert result.kind == ErrorKind.UNAUTHORIZED

    def test_cannot_take_someone_elses_slot(self, db, host, event_type, booked):
        BookingService.create_booking(db, request_for(event_type, local(15), guest_email="bob@acme.io"), now=NOW)
        result = BookingService.reschedule_booking(db, booked.id, local(15), host_id=host.id, now=NOW)
        assert result.kind == ErrorKind.CONFLICT


class TestCancel:
    def test_cancel_frees_slot(self, db, host, event_type, booked):
        assert "10:00" not in open_starts(db, event_type)

        result = BookingService.cancel_booking(db, booked.id, "Double booked", host_id=host.id, now=NOW)

        assert result.value.booking.status == BookingStatus.CANCELLED
        assert "10:00" in open_starts(db, event_type)
        record = db.query(BookingRecord).one()
        assert record.status == "cancelled"
        assert record.cancellation_reason == "Double booked"

    def test_guest_cancel_with_token(self, db, booked):
        result = BookingService.cancel_booking(db, booked.id, token=booked.reschedule_token, now=NOW)
        assert result.value.events[0].cancelled_by == CancelledBy.GUEST

    def test_cancel_twice(self, db, host, booked):
        BookingService.cancel_booking(db, booked.id, host_id=host.id, now=NOW)
        result = BookingService.cancel_booking(db, booked.id, host_id=host.id, now=NOW)
        assert result.error == "Booking is already cancelled."


class TestQueries:
    def test_list_bookings_filters_status(self, db, host, event_type, booked):
        second = BookingService.create_booking(db, request_for(event_type, local(14)), now=NOW).value.booking
        BookingService.cancel_booking(db, second.id, host_id=host.id, now=NOW)

        assert [b.id for b in BookingService.list_bookings(db, host.id)] == [booked.id, second.id]
        confirmed = BookingService.list_bookings(db, host.id, status=BookingStatus.CONFIRMED)
        assert [b.id for b in confirmed] == [booked.id]

    def test_get_booking(self, db, host, booked):
        assert BookingService.get_booking(db, booked.id, host.id).value.guest.name == "Ada Lovelace"

    def test_mark_completed_requires_meeting_to_have_ended(self, db, host, booked):
        early = BookingService.mark_completed(db, booked.id, host.id, now=NOW)
        assert early.error == "Cannot mark future bookings as completed."

        done = BookingService.mark_completed(db, booked.id, host.id, now=local(11))
        assert done.value.booking.status == BookingStatus.COMPLETED
        assert db.query(BookingRecord).one().status == "completed"

    def test_mark_no_show(self, db, host, booked):
        result = BookingService.mark_no_show(db, booked.id, host.id, now=local(11))
        assert result.value.booking.status == BookingStatus.NO_SHOW


class TestConcurrentChanges:
    """A write that commits while another is waiting for the host lock"""

    @pytest.fixture
    def cancelled_while_waiting(self, db, monkeypatch, booked):
        """Cancel ``booked`` behind the session's back just before the host lock is granted."""
        original = BookingService._lock_host

        def lock_after_cancel(session, host_id):
            session.execute(
                update(BookingRecord.__table__)
                .where(BookingRecord.__table__.c.id == booked.id)
                .values(status="cancelled")
            )
            session.commit()
            return original(session, host_id)

        monkeypatch.setattr(BookingService, "_lock_host", staticmethod(lock_after_cancel))

    def test_reschedule_sees_cancel(self, db, host, booked, cancelled_while_waiting):
        result = BookingService.reschedule_booking(db, booked.id, local(15), host_id=host.id, now=NOW)

        assert result.error == "Only confirmed bookings can be rescheduled."
        db.expire_all()
        record = db.query(BookingRecord).one()
        assert record.status == "cancelled"
        assert record.to_domain().start_time_utc == local(10)

    def test_guest_reschedule_sees_cancel(self, db, booked, cancelled_while_waiting):
        result = BookingService.reschedule_booking(
            db, booked.id, local(15), token=booked.reschedule_token, now=NOW
        )
        assert result.error == "Only confirmed bookings can be rescheduled."

    def test_cancel_sees_cancel(self, db, host, booked, cancelled_while_waiting):
        result = BookingService.cancel_booking(db, booked.id, "Conflict", host_id=host.id, now=NOW)
        assert result.error == "Booking is already cancelled."

    def test_mark_no_show_sees_cancel(self, db, host, booked, cancelled_while_waiting):
        result = BookingService.mark_no_show(db, booked.id, host.id, now=local(11))
        assert result.error == "Only confirmed bookings can be marked as no-show."

    def test_cancel_takes_host_lock(self, db, monkeypatch, host, booked):
        locked = []
        original = BookingService._lock_host

        def record_lock(session, host_id):
            locked.append(host_id)
            return original(session, host_id)

        monkeypatch.setattr(BookingService, "_lock_host", staticmethod(record_lock))
        assert BookingService.cancel_booking(db, booked.id, host_id=host.id, now=NOW).is_success
        assert locked == [host.id]
