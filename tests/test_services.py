"""Tests for the host, event type and availability services."""

from datetime import date, datetime, time, timedelta, timezone
from uuid import uuid4

import pytest

from slotwise.domain import ErrorKind, QuestionType
from slotwise.models import AvailabilityRule, BookingQuestionRecord, EventType
from slotwise.schemas.availability import OverrideCreate, OverrideType, WeeklyRuleUpdate
from slotwise.schemas.event_type import EventTypeCreate, EventTypeUpdate
from slotwise.schemas.host import HostCreate
from slotwise.schemas.question import QuestionCreate, QuestionUpdate
from slotwise.services.availability.availability_service import AvailabilityService
from slotwise.services.event_type.event_type_service import EventTypeService
from slotwise.services.host.host_service import HostService
from slotwise.services.question.question_service import QuestionService

NOW = datetime(2030, 3, 1, 12, 0, tzinfo=timezone.utc)
MONDAY = date(2030, 3, 4)
SATURDAY = date(2030, 3, 9)


class TestHostService:
    def test_duplicate_email_conflicts(self, db, host):
        result = HostService.create_host(db, HostCreate(name="Someone", email="GRACE@acme.io"))
        assert result.kind == ErrorKind.CONFLICT

    def test_default_timezone(self, db):
        host = HostService.create_host(db, HostCreate(name="Alan", email="alan@acme.io")).value
        assert host.timezone == "UTC"

    def test_slug_derived_from_name(self, db, host):
        assert host.slug == "grace-hopper"
        twin = HostService.create_host(db, HostCreate(name="Grace  Hopper", email="g2@acme.io")).value
        assert twin.slug == "grace-hopper-2"

    def test_requested_slug_must_be_free(self, db, host):
        result = HostService.create_host(db, HostCreate(name="Other", email="other@acme.io", slug="grace-hopper"))
        assert result.kind == ErrorKind.CONFLICT
        assert result.error == "A host with this slug already exists."

    def test_name_without_usable_slug(self, db):
        result = HostService.create_host(db, HostCreate(name="李", email="li@acme.io"))
        assert result.error == "Cannot derive a slug from '李'; please choose one."
        assert HostService.create_host(db, HostCreate(name="李", email="li@acme.io", slug="li-wei")).is_success

    def test_update_timezone(self, db, host):
        assert HostService.update_timezone(db, host, "Europe/Berlin").value.timezone == "Europe/Berlin"
        assert HostService.update_timezone(db, host, "Nowhere/City").error == "Invalid timezone: Nowhere/City"


class TestEventTypeService:
    def test_defaults(self, event_type):
        assert event_type.slug == "intro-call"
        assert event_type.booking_window_days == 60
        assert event_type.max_bookings_per_day is None
        assert event_type.is_active

    def test_invalid_policy_rejected(self, db, host):
        result = EventTypeService.create_event_type(db, host, EventTypeCreate(name="Quick", duration_minutes=10))
        assert result.error == "Duration must be at least 15 minutes."
        assert db.query(EventType).count() == 0

    def test_partial_update(self, db, host, event_type):
        result = EventTypeService.update_event_type(
            db, host.id, event_type.id, EventTypeUpdate(buffer_after_minutes=10, max_bookings_per_day=3)
        )
        assert result.value.buffer_after_minutes == 10
        assert result.value.max_bookings_per_day == 3
        assert result.value.duration_minutes == 30

    def test_invalid_update_changes_nothing(self, db, host, event_type):
        result = EventTypeService.update_event_type(
            db, host.id, event_type.id, EventTypeUpdate(name="Renamed", booking_window_days=400)
        )
        assert result.error == "Booking window cannot exceed 365 days."
        db.refresh(event_type)
        assert event_type.name == "Intro Call"

    def test_other_hosts_event_type_not_found(self, db, event_type):
        other = HostService.create_host(db, HostCreate(name="Other", email="other@acme.io")).value
        result = EventTypeService.set_active(db, other.id, event_type.id, False)
        assert result.kind == ErrorKind.NOT_FOUND

    def test_set_active(self, db, host, event_type):
        assert EventTypeService.set_active(db, host.id, event_type.id, False).value.is_active is False

    def test_derived_slugs_get_a_numeric_suffix(self, db, host, event_type):
        second = EventTypeService.create_event_type(db, host, EventTypeCreate(name="Intro  Call!")).value
        third = EventTypeService.create_event_type(db, host, EventTypeCreate(name="intro call")).value
        assert [second.slug, third.slug] == ["intro-call-2", "intro-call-3"]

    def test_requested_slug_must_be_free(self, db, host, event_type):
        result = EventTypeService.create_event_type(db, host, EventTypeCreate(name="Other", slug="intro-call"))
        assert result.kind == ErrorKind.CONFLICT
        assert result.error == "An event type with this slug already exists."

    def test_same_slug_for_different_hosts(self, db, event_type):
        other = HostService.create_host(db, HostCreate(name="Other", email="other@acme.io")).value
        result = EventTypeService.create_event_type(db, other, EventTypeCreate(name="Intro Call"))
        assert result.value.slug == "intro-call"

    def test_invalid_requested_slug(self, db, host):
        result = EventTypeService.create_event_type(db, host, EventTypeCreate(name="Intro", slug="Intro Call"))
        assert result.error == "Slug can only contain lowercase letters, numbers, and single hyphens between them."

    def test_update_slug(self, db, host, event_type):
        EventTypeService.create_event_type(db, host, EventTypeCreate(name="Deep Dive"))
        taken = EventTypeService.update_event_type(db, host.id, event_type.id, EventTypeUpdate(slug="deep-dive"))
        assert taken.kind == ErrorKind.CONFLICT

        renamed = EventTypeService.update_event_type(db, host.id, event_type.id, EventTypeUpdate(slug="hello"))
        assert renamed.value.slug == "hello"

    def test_delete_hides_event_type(self, db, host, event_type):
        assert EventTypeService.delete_event_type(db, host.id, event_type.id, now=NOW).is_success

        assert EventTypeService.list_event_types(db, host.id) == []
        assert EventTypeService.get_owned(db, host.id, event_type.id).kind == ErrorKind.NOT_FOUND
        slots = AvailabilityService.get_available_slots(db, event_type.id, MONDAY, "UTC", now=NOW)
        assert slots.kind == ErrorKind.NOT_FOUND
        assert EventTypeService.delete_event_type(db, host.id, event_type.id).kind == ErrorKind.NOT_FOUND

    def test_deleted_slug_stays_reserved(self, db, host, event_type):
        EventTypeService.delete_event_type(db, host.id, event_type.id, now=NOW)
        result = EventTypeService.create_event_type(db, host, EventTypeCreate(name="Intro Call"))
        assert result.value.slug == "intro-call-2"


class TestPublicLookup:
    def test_by_host_and_event_slug(self, db, host, event_type):
        result = EventTypeService.get_public_event_type(db, "grace-hopper", "Intro-Call")
        assert result.value.id == event_type.id

    def test_unknown_host_or_event(self, db, event_type):
        assert EventTypeService.get_public_event_type(db, "nobody", "intro-call").error == "Event type not found."
        assert EventTypeService.get_public_event_type(db, "grace-hopper", "nope").error == "Event type not found."

    def test_inactive_event_type(self, db, host, event_type):
        EventTypeService.set_active(db, host.id, event_type.id, False)
        result = EventTypeService.get_public_event_type(db, "grace-hopper", "intro-call")
        assert result.kind == ErrorKind.NOT_FOUND
        assert result.error == "This event type is not accepting bookings."

    def test_deleted_event_type(self, db, host, event_type):
        EventTypeService.delete_event_type(db, host.id, event_type.id, now=NOW)
        result = EventTypeService.get_public_event_type(db, "grace-hopper", "intro-call")
        assert result.error == "Event type not found."


class TestQuestionService:
    def test_added_in_order(self, db, host, event_type):
        for text in ("Company?", "Phone?"):
            QuestionService.add_question(db, host.id, event_type.id, QuestionCreate(question_text=text))

        questions = QuestionService.list_questions(db, host.id, event_type.id).value
        assert [(q.question_text, q.display_order) for q in questions] == [("Company?", 0), ("Phone?", 1)]

    def test_at_most_ten(self, db, host, event_type):
        for n in range(10):
            assert QuestionService.add_question(
                db, host.id, event_type.id, QuestionCreate(question_text=f"Question {n}?")
            ).is_success
        result = QuestionService.add_question(db, host.id, event_type.id, QuestionCreate(question_text="One more?"))
        assert result.error == "Maximum of 10 questions allowed per event type."

    def test_invalid_select(self, db, host, event_type):
        result = QuestionService.add_question(
            db, host.id, event_type.id,
            QuestionCreate(question_text="Plan?", question_type=QuestionType.SINGLE_SELECT, options=["Basic"])
        )
        assert result.error == "Select questions require at least 2 options."
        assert db.query(BookingQuestionRecord).count() == 0

    def test_update(self, db, host, event_type):
        question = QuestionService.add_question(
            db, host.id, event_type.id, QuestionCreate(question_text="Plan?")
        ).value
        result = QuestionService.update_question(
            db, host.id, event_type.id, question.id,
            QuestionUpdate(question_text="Plan?", question_type=QuestionType.MULTI_SELECT,
                           is_required=True, options=["Basic", "Pro"])
        )
        assert result.value.question_type == "multi_select"
        assert result.value.options == ["Basic", "Pro"]
        assert result.value.is_required

    def test_delete_renumbers(self, db, host, event_type):
        first, second, third = [
            QuestionService.add_question(db, host.id, event_type.id, QuestionCreate(question_text=t)).value
            for t in ("A?", "B?", "C?")
        ]
        assert QuestionService.delete_question(db, host.id, event_type.id, first.id).is_success

        questions = QuestionService.list_questions(db, host.id, event_type.id).value
        assert [(q.id, q.display_order) for q in questions] == [(second.id, 0), (third.id, 1)]

    def test_reorder(self, db, host, event_type):
        first, second = [
            QuestionService.add_question(db, host.id, event_type.id, QuestionCreate(question_text=t)).value
            for t in ("A?", "B?")
        ]
        result = QuestionService.reorder(db, host.id, event_type.id, [second.id, first.id])
        assert [q.id for q in result.value] == [second.id, first.id]

        partial = QuestionService.reorder(db, host.id, event_type.id, [second.id])
        assert partial.error == "Must provide all question IDs."

    def test_other_hosts_questions_not_found(self, db, host, event_type):
        question = QuestionService.add_question(
            db, host.id, event_type.id, QuestionCreate(question_text="Company?")
        ).value
        other = HostService.create_host(db, HostCreate(name="Other", email="other@acme.io")).value

        assert QuestionService.list_questions(db, other.id, event_type.id).kind == ErrorKind.NOT_FOUND
        result = QuestionService.delete_question(db, host.id, uuid4(), question.id)
        assert result.kind == ErrorKind.NOT_FOUND
        assert QuestionService.delete_question(db, host.id, event_type.id, uuid4()).error == "Question not found."


class TestWeeklyRules:
    def test_default_week_seeded_once(self, db, host):
        first = AvailabilityService.get_weekly_rules(db, host.id)
        second = AvailabilityService.get_weekly_rules(db, host.id)

        assert len(first) == 7
        assert [r.id for r in first] == [r.id for r in second]
        assert db.query(AvailabilityRule).count() == 7

    def test_update(self, db, host):
        result = AvailabilityService.update_weekly_rules(db, host.id, [
            WeeklyRuleUpdate(day_of_week=5, start_time=time(10), end_time=time(14), is_enabled=True),
        ])
        saturday = result.value[5]
        assert saturday.is_enabled
        assert saturday.start_time == time(10)

    def test_invalid_update_is_all_or_nothing(self, db, host):
        result = AvailabilityService.update_weekly_rules(db, host.id, [
            WeeklyRuleUpdate(day_of_week=0, start_time=time(8), end_time=time(12)),
            WeeklyRuleUpdate(day_of_week=1, start_time=time(12), end_time=time(8)),
        ])
        assert result.error == "End time must be after start time."

        monday = AvailabilityService.get_weekly_rules(db, host.id)[0]
        assert monday.start_time == time(9)


class TestOverrides:
    def test_create_and_list(self, db, host):
        data = OverrideCreate(date=MONDAY, type=OverrideType.BLOCKED_TIME,
                              start_time=time(12), end_time=time(13), reason="Lunch")
        created = AvailabilityService.create_override(db, host, data, now=NOW).value

        assert created.is_blocked
        assert [o.id for o in AvailabilityService.list_overrides(db, host.id)] == [created.id]
        assert AvailabilityService.list_overrides(db, host.id, start_date=MONDAY + timedelta(days=1)) == []

    def test_past_date_rejected(self, db, host):
        data = OverrideCreate(date=date(2030, 2, 28), type=OverrideType.BLOCKED_DAY)
        result = AvailabilityService.create_override(db, host, data, now=NOW)
        assert result.error == "Cannot create override for past dates."

    def test_delete(self, db, host):
        data = OverrideCreate(date=MONDAY, type=OverrideType.BLOCKED_DAY)
        created = AvailabilityService.create_override(db, host, data, now=NOW).value

        assert AvailabilityService.delete_override(db, host.id, created.id).is_success
        assert AvailabilityService.delete_override(db, host.id, created.id).kind == ErrorKind.NOT_FOUND

    def test_times_required_for_partial_shapes(self):
        with pytest.raises(ValueError):
            OverrideCreate(date=MONDAY, type=OverrideType.EXTRA_AVAILABILITY)


class TestSlotQueries:
    def test_slots_labelled_in_guest_timezone(self, db, event_type):
        result = AvailabilityService.get_available_slots(db, event_type.id, MONDAY, "Europe/London", now=NOW)

        slots = result.value.slots
        assert len(slots) == 31
        assert slots[0].start_time == "14:00"
        assert slots[0].end_time == "14:30"
        assert slots[0].start_time_utc == datetime(2030, 3, 4, 14, 0, tzinfo=timezone.utc)

    def test_overrides_applied(self, db, host, event_type):
        AvailabilityService.create_override(
            db, host, OverrideCreate(date=SATURDAY, type=OverrideType.EXTRA_AVAILABILITY,
                                     start_time=time(10), end_time=time(11)), now=NOW
        )
        AvailabilityService.create_override(
            db, host, OverrideCreate(date=MONDAY, type=OverrideType.BLOCKED_DAY), now=NOW
        )

        saturday = AvailabilityService.get_available_slots(db, event_type.id, SATURDAY, "America/New_York", now=NOW)
        monday = AvailabilityService.get_available_slots(db, event_type.id, MONDAY, "America/New_York", now=NOW)

        assert [s.start_time for s in saturday.value.slots] == ["10:00", "10:15", "10:30"]
        assert monday.value.slots == []

    def test_past_date_rejected(self, db, event_type):
        result = AvailabilityService.get_available_slots(db, event_type.id, date(2030, 2, 28), "UTC", now=NOW)
        assert result.error == "Cannot get slots for past dates."

    def test_beyond_window_rejected(self, db, event_type):
        too_far = date(2030, 3, 1) + timedelta(days=61)
        result = AvailabilityService.get_available_slots(db, event_type.id, too_far, "UTC", now=NOW)
        assert result.error == "Cannot book more than 60 days in advance."

    def test_invalid_guest_timezone(self, db, event_type):
        result = AvailabilityService.get_available_slots(db, event_type.id, MONDAY, "Pacific Time", now=NOW)
        assert result.error == "Invalid timezone: Pacific Time"

    def test_inactive_event_type(self, db, host, event_type):
        EventTypeService.set_active(db, host.id, event_type.id, False)
        result = AvailabilityService.get_available_slots(db, event_type.id, MONDAY, "UTC", now=NOW)
        assert result.error == "This event type is not accepting bookings."

    def test_available_dates_cover_booking_window(self, db, event_type):
        result = AvailabilityService.get_available_dates(db, event_type.id, "UTC", now=NOW).value

        assert result.from_date == date(2030, 3, 1)
        assert result.to_date == date(2030, 4, 30)
        assert len(result.dates) == 61

        by_date = {d.date: d for d in result.dates}
        assert by_date[MONDAY].available_slot_count == 31
        assert by_date[SATURDAY].has_availability is False
        assert by_date[SATURDAY].day_of_week == 5

    def test_last_window_date_is_bookable(self, db, event_type):
        """The window bound is inclusive: today plus booking_window_days can still be booked"""
        dates = AvailabilityService.get_available_dates(db, event_type.id, "America/New_York", now=NOW).value
        last = dates.dates[-1].date
        assert last == date(2030, 3, 1) + timedelta(days=60)

        slots = AvailabilityService.get_available_slots(db, event_type.id, last, "America/New_York", now=NOW)
        assert slots.is_success
        assert slots.value.slots
        beyond = AvailabilityService.get_available_slots(
            db, event_type.id, last + timedelta(days=1), "America/New_York", now=NOW
        )
        assert beyond.error == "Cannot book more than 60 days in advance."
