# slotwise/services/events/event_dispatcher.py
"""In-process publishing of the domain events returned by booking commands"""
from collections import defaultdict
from dataclasses import asdict
from typing import Callable, Dict, Iterable, List, Type
import logging

from slotwise.domain.events import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class EventDispatcher:
    """
    Handlers subscribe per event class (subclasses included). Dispatch runs
    after the change is committed, so a failing handler is logged and the
    remaining handlers still run.
    """

    def __init__(self):
        self._handlers: Dict[Type[DomainEvent], List[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    def handlers_for(self, event: DomainEvent) -> List[EventHandler]:
        subscribed = []
        for event_type, handlers in self._handlers.items():
            if isinstance(event, event_type):
                subscribed.extend(handlers)
        return subscribed

    def dispatch(self, events: Iterable[DomainEvent]) -> int:
        """Publish events in order; returns how many handler calls succeeded"""
        delivered = 0
        for event in events:
            logger.info(f"Event {type(event).__name__}: {asdict(event)}")
            for handler in self.handlers_for(event):
                try:
                    handler(event)
                    delivered += 1
                except Exception as e:
                    logger.error(f"Handler {getattr(handler, '__name__', handler)} failed "
                                 f"for {type(event).__name__}: {e}", exc_info=True)
        return delivered


event_dispatcher = EventDispatcher()


def get_event_dispatcher() -> EventDispatcher:
    """Dispatcher dependency for FastAPI"""
    return event_dispatcher
