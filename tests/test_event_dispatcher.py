"""Tests for in-process domain event dispatch."""

from datetime import datetime, timezone
from uuid import uuid4

from slotwise.domain import BookingCreated, DomainEvent, SlotBooked, SlotReleased
from slotwise.services.events.event_dispatcher import EventDispatcher

START = datetime(2030, 3, 4, 15, 0, tzinfo=timezone.utc)


def test_handlers_receive_subscribed_events():
    dispatcher = EventDispatcher()
    booked = []
    dispatcher.subscribe(SlotBooked, booked.append)

    events = [SlotBooked(uuid4(), START), SlotReleased(uuid4(), START)]
    assert dispatcher.dispatch(events) == 1
    assert booked == [events[0]]


def test_base_class_subscription_sees_everything():
    dispatcher = EventDispatcher()
    seen = []
    dispatcher.subscribe(DomainEvent, seen.append)

    dispatcher.dispatch([
        BookingCreated(uuid4(), uuid4(), uuid4(), "ada@acme.io", START),
        SlotBooked(uuid4(), START),
    ])
    assert [type(e) for e in seen] == [BookingCreated, SlotBooked]


def test_failing_handler_does_not_stop_others(caplog):
    dispatcher = EventDispatcher()
    seen = []

    def broken(event):
        raise RuntimeError("mail server down")

    dispatcher.subscribe(SlotBooked, broken)
    dispatcher.subscribe(SlotBooked, seen.append)

    assert dispatcher.dispatch([SlotBooked(uuid4(), START)]) == 1
    assert len(seen) == 1
    assert "mail server down" in caplog.text
