"""Service for managing event types"""
import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Query, Session

from slotwise.config.settings import get_settings
from slotwise.domain.event_policy import EventPolicy
from slotwise.domain.result import Result
from slotwise.domain.value_objects import Slug
from slotwise.models.event_type import EventType
from slotwise.models.host import Host
from slotwise.schemas.event_type import EventTypeCreate, EventTypeUpdate
from slotwise.services.host.host_service import HostService

logger = logging.getLogger(__name__)

EVENT_TYPE_NOT_FOUND = "Event type not found."

POLICY_FIELDS = (
    "duration_minutes",
    "buffer_before_minutes",
    "buffer_after_minutes",
    "minimum_notice_minutes",
    "booking_window_days",
    "max_bookings_per_day",
)
NULLABLE_FIELDS = ("description", "max_bookings_per_day")


def _validate_policy(values: dict) -> Result[EventPolicy]:
    return EventPolicy.create(
        duration_minutes=values["duration_minutes"],
        buffer_before_minutes=values["buffer_before_minutes"],
        buffer_after_minutes=values["buffer_after_minutes"],
        minimum_notice_minutes=values["minimum_notice_minutes"],
        booking_window_days=values["booking_window_days"],
        max_bookings_per_day=values["max_bookings_per_day"],
    )


def live_event_types(db: Session) -> Query:
    """Event types that have not been deleted"""
    return db.query(EventType).filter(EventType.deleted_at.is_(None))


class EventTypeService:
    """Handles event type operations"""

    @staticmethod
    def create_event_type(db: Session, host: Host, data: EventTypeCreate) -> Result[EventType]:
        """Create an event type after validating its booking policy"""
        values = data.model_dump()
        if values["booking_window_days"] is None:
            values["booking_window_days"] = get_settings().DEFAULT_BOOKING_WINDOW_DAYS
        policy = _validate_policy(values)
        if policy.is_failure:
            return policy.propagate()

        slug = EventTypeService._assign_slug(db, host.id, data.slug, data.name)
        if slug.is_failure:
            return slug.propagate()

        event_type = EventType(
            host_id=host.id,
            name=data.name.strip(),
            slug=slug.value.value,
            description=data.description,
            **{name: values[name] for name in POLICY_FIELDS},
        )
        db.add(event_type)
        db.commit()
        db.refresh(event_type)

        logger.info(f"Created event type {event_type.id} ({event_type.slug}) for host {host.id}")
        return Result.success(event_type)

    @staticmethod
    def get_event_type(db: Session, event_type_id: UUID) -> Optional[EventType]:
        return live_event_types(db).filter(EventType.id == event_type_id).first()

    @staticmethod
    def get_owned(db: Session, host_id: UUID, event_type_id: UUID) -> Result[EventType]:
        event_type = live_event_types(db).filter(
            EventType.id == event_type_id,
            EventType.host_id == host_id
        ).first()
        if not event_type:
            return Result.not_found(EVENT_TYPE_NOT_FOUND)
        return Result.success(event_type)

    @staticmethod
    def list_event_types(db: Session, host_id: UUID) -> List[EventType]:
        return live_event_types(db).filter(
            EventType.host_id == host_id
        ).order_by(EventType.created_at.asc(), EventType.name.asc()).all()

    @staticmethod
    def get_public_event_type(db: Session, host_slug: str, event_slug: str) -> Result[EventType]:
        """Resolve a public booking link; inactive event types are hidden from guests"""
        host = HostService.get_host_by_slug(db, host_slug)
        if not host:
            return Result.not_found(EVENT_TYPE_NOT_FOUND)

        event_type = live_event_types(db).filter(
            EventType.host_id == host.id,
            EventType.slug == event_slug.lower()
        ).first()
        if not event_type:
            return Result.not_found(EVENT_TYPE_NOT_FOUND)
        if not event_type.is_active:
            return Result.not_found("This event type is not accepting bookings.")
        return Result.success(event_type)

    @staticmethod
    def update_event_type(
            db: Session,
            host_id: UUID,
            event_type_id: UUID,
            data: EventTypeUpdate
    ) -> Result[EventType]:
        """Apply a partial update; existing bookings are never touched"""
        found = EventTypeService.get_owned(db, host_id, event_type_id)
        if found.is_failure:
            return found
        event_type = found.value

        changes = {
            k: v for k, v in data.model_dump(exclude_unset=True).items()
            if v is not None or k in NULLABLE_FIELDS
        }
        merged = {name: getattr(event_type, name) for name in POLICY_FIELDS}
        merged.update({k: v for k, v in changes.items() if k in POLICY_FIELDS})
        policy = _validate_policy(merged)
        if policy.is_failure:
            return policy.propagate()

        if "slug" in changes:
            slug = Slug.create(changes["slug"])
            if slug.is_failure:
                return slug.propagate()
            if slug.value.value != event_type.slug and EventTypeService._slug_taken(db, host_id, slug.value.value):
                return Result.conflict("An event type with this slug already exists.")
            changes["slug"] = slug.value.value

        for name, value in changes.items():
            if name == "name" and value is not None:
                value = value.strip()
            setattr(event_type, name, value)

        db.commit()
        db.refresh(event_type)
        return Result.success(event_type)

    @staticmethod
    def set_active(db: Session, host_id: UUID, event_type_id: UUID, is_active: bool) -> Result[EventType]:
        return EventTypeService.update_event_type(
            db, host_id, event_type_id, EventTypeUpdate(is_active=is_active)
        )

    @staticmethod
    def delete_event_type(
            db: Session,
            host_id: UUID,
            event_type_id: UUID,
            now: Optional[datetime] = None
    ) -> Result[EventType]:
        """
        Soft delete. The event type disappears from listings and public pages;
        its bookings stay and can still be cancelled or rescheduled.
        The slug stays reserved.
        """
        found = EventTypeService.get_owned(db, host_id, event_type_id)
        if found.is_failure:
            return found
        event_type = found.value

        event_type.is_active = False
        event_type.deleted_at = now or datetime.now(timezone.utc)
        db.commit()

        logger.info(f"Deleted event type {event_type.id} of host {host_id}")
        return Result.success(event_type)

    @staticmethod
    def _slug_taken(db: Session, host_id: UUID, slug: str) -> bool:
        # Deleted event types keep their slug
        return db.query(EventType.id).filter(
            EventType.host_id == host_id,
            EventType.slug == slug
        ).first() is not None

    @staticmethod
    def _assign_slug(db: Session, host_id: UUID, requested: Optional[str], name: str) -> Result[Slug]:
        if requested:
            slug = Slug.create(requested)
            if slug.is_failure:
                return slug
            if EventTypeService._slug_taken(db, host_id, slug.value.value):
                return Result.conflict("An event type with this slug already exists.")
            return slug

        slug = Slug.from_name(name)
        if slug.is_failure:
            return slug
        taken = db.query(EventType.slug).filter(
            EventType.host_id == host_id,
            EventType.slug.like(f"{slug.value.value}%")
        ).all()
        return Result.success(slug.value.first_free(row.slug for row in taken))
