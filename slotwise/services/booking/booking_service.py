# slotwise/services/booking/booking_service.py
"""
Booking commands.

Every write locks the host row before it reads the state it is about to
change, then re-validates and commits inside the same transaction. Two guests
racing for one slot are serialized on that lock; the second one sees the
first one's booking and gets a conflict. A reschedule racing a cancel sees the
cancellation and is rejected.
"""
from typing import Callable, List, Optional, Tuple
from datetime import date, datetime, timezone
from uuid import UUID
from zoneinfo import ZoneInfo
from sqlalchemy.orm import Session
import logging

from slotwise.domain import booking_gate
from slotwise.domain.booking import Booking, BookingChange, BookingStatus
from slotwise.domain.events import CancelledBy
from slotwise.domain.result import Result
from slotwise.domain.value_objects import GuestInfo
from slotwise.models.booking import BookingRecord
from slotwise.models.event_type import EventType
from slotwise.models.host import Host
from slotwise.schemas.booking import BookingCreateRequest
from slotwise.services.availability.availability_service import AvailabilityService, host_today

logger = logging.getLogger(__name__)

BOOKING_NOT_FOUND = "Booking not found."


class BookingService:
    """Handles booking lifecycle"""

    @staticmethod
    def create_booking(
            db: Session,
            request: BookingCreateRequest,
            now: Optional[datetime] = None
    ) -> Result[BookingChange]:
        """Validate the requested slot against the current booking set and persist it"""
        now = now or datetime.now(timezone.utc)

        event_type = db.query(EventType).filter(
            EventType.id == request.event_type_id,
            EventType.deleted_at.is_(None)
        ).first()
        if not event_type:
            return Result.not_found("Event type not found.")

        guest = GuestInfo.create(request.guest_name, request.guest_email,
                                 request.guest_phone, request.guest_timezone)
        if guest.is_failure:
            return guest.propagate()

        try:
            host = BookingService._lock_host(db, event_type.host_id)
            local_date = BookingService._check_window(event_type, host, request.start_time_utc, now)
            if local_date.is_failure:
                db.rollback()
                return local_date.propagate()

            schedule = AvailabilityService.load_schedule(
                db, event_type, host, local_date.value, local_date.value
            )
            result = booking_gate.create_booking(
                schedule.policy,
                schedule.weekly_rules,
                schedule.overrides,
                schedule.bookings,
                request.start_time_utc,
                guest.value,
                host.timezone,
                proposed_end_utc=request.end_time_utc,
                notes=request.notes,
                responses=[(a.question_id, a.value) for a in request.answers],
                questions=[q.to_domain() for q in event_type.questions],
                now=now,
            )
            if result.is_failure:
                db.rollback()
                logger.warning(
                    f"Booking rejected for event type {event_type.id} at "
                    f"{request.start_time_utc.isoformat()}: {result.error}"
                )
                return result

            db.add(BookingRecord.from_domain(result.value.booking))
            db.commit()
        except Exception:
            db.rollback()
            raise

        booking = result.value.booking
        logger.info(f"Booking {booking.id} confirmed for {booking.start_time_utc.isoformat()}")
        return result

    @staticmethod
    def reschedule_booking(
            db: Session,
            booking_id: UUID,
            new_start_utc: datetime,
            host_id: Optional[UUID] = None,
            token: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> Result[BookingChange]:
        """Move a booking; the host must own it or the guest must hold its reschedule token"""
        now = now or datetime.now(timezone.utc)

        try:
            found = BookingService._find_locked(db, booking_id, host_id, token)
            if found.is_failure:
                db.rollback()
                return found.propagate()
            record, host = found.value

            event_type = db.query(EventType).filter(EventType.id == record.event_type_id).first()
            local_date = BookingService._check_window(event_type, host, new_start_utc, now)
            if local_date.is_failure:
                db.rollback()
                return local_date.propagate()

            schedule = AvailabilityService.load_schedule(
                db, event_type, host, local_date.value, local_date.value
            )
            old_start = record.start_time_utc
            result = booking_gate.reschedule_booking(
                record.to_domain(),
                schedule.policy,
                schedule.weekly_rules,
                schedule.overrides,
                schedule.bookings,
                new_start_utc,
                host.timezone,
                now=now,
            )
            if result.is_failure:
                db.rollback()
                logger.warning(f"Reschedule of booking {booking_id} rejected: {result.error}")
                return result

            record.apply(result.value.booking)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(f"Booking {booking_id} moved from {old_start} to {new_start_utc.isoformat()}")
        return result

    @staticmethod
    def cancel_booking(
            db: Session,
            booking_id: UUID,
            reason: Optional[str] = None,
            host_id: Optional[UUID] = None,
            token: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> Result[BookingChange]:
        """Cancel a booking and free its slot. Never consults availability."""
        cancelled_by = CancelledBy.HOST if host_id is not None else CancelledBy.GUEST
        result = BookingService._transition(
            db, booking_id, host_id, token,
            lambda booking: booking.cancel(reason, cancelled_by, now=now)
        )
        if result.is_success:
            logger.info(f"Booking {booking_id} cancelled by {cancelled_by.value}")
        return result

    @staticmethod
    def mark_completed(db: Session, booking_id: UUID, host_id: UUID,
                       now: Optional[datetime] = None) -> Result[BookingChange]:
        return BookingService._transition(
            db, booking_id, host_id, None, lambda booking: booking.mark_completed(now=now)
        )

    @staticmethod
    def mark_no_show(db: Session, booking_id: UUID, host_id: UUID,
                     now: Optional[datetime] = None) -> Result[BookingChange]:
        return BookingService._transition(
            db, booking_id, host_id, None, lambda booking: booking.mark_no_show(now=now)
        )

    @staticmethod
    def get_booking(db: Session, booking_id: UUID, host_id: UUID) -> Result[Booking]:
        record = BookingService._find_authorized(db, booking_id, host_id, None)
        if record.is_failure:
            return record.propagate()
        return Result.success(record.value.to_domain())

    @staticmethod
    def get_booking_by_token(db: Session, token: str) -> Result[Booking]:
        """Look a booking up by its reschedule token (guest self-service)"""
        record = db.query(BookingRecord).filter(BookingRecord.reschedule_token == token).first()
        if not record:
            return Result.not_found(BOOKING_NOT_FOUND)
        booking = record.to_domain()
        if not booking.validate_reschedule_token(token):
            return Result.not_found(BOOKING_NOT_FOUND)
        return Result.success(booking)

    @staticmethod
    def list_bookings(
            db: Session,
            host_id: UUID,
            status: Optional[BookingStatus] = None,
            start_date: Optional[datetime] = None,
            end_date: Optional[datetime] = None,
            limit: int = 100
    ) -> List[Booking]:
        query = db.query(BookingRecord).filter(BookingRecord.host_id == host_id)
        if status:
            query = query.filter(BookingRecord.status == status.value)
        if start_date:
            query = query.filter(BookingRecord.start_time_utc >= start_date)
        if end_date:
            query = query.filter(BookingRecord.start_time_utc < end_date)

        records = query.order_by(BookingRecord.start_time_utc.asc()).limit(limit).all()
        return [record.to_domain() for record in records]

    @staticmethod
    def _lock_host(db: Session, host_id: UUID) -> Host:
        # FOR UPDATE holds until commit/rollback; SQLite ignores it and serializes writers itself
        return db.query(Host).filter(Host.id == host_id).with_for_update().one()

    @staticmethod
    def _check_window(
            event_type: EventType,
            host: Host,
            start_utc: datetime,
            now: datetime
    ) -> Result[date]:
        """Host-local date of ``start_utc``, if it lies inside the booking window"""
        local_date = start_utc.astimezone(ZoneInfo(host.timezone)).date()
        today = host_today(host.timezone, now)
        if local_date > event_type.to_domain().booking_window.max_bookable_date(today):
            return Result.failure(f"Cannot book more than {event_type.booking_window_days} days in advance.")
        return Result.success(local_date)

    @staticmethod
    def _find_authorized(
            db: Session,
            booking_id: UUID,
            host_id: Optional[UUID],
            token: Optional[str]
    ) -> Result[BookingRecord]:
        """Unknown bookings and failed ownership/token checks are indistinguishable"""
        if host_id is None and not token:
            return Result.unauthorized("Unauthorized.")

        record = db.query(BookingRecord).filter(BookingRecord.id == booking_id).first()
        if not record or not BookingService._is_authorized(record, host_id, token):
            return Result.not_found(BOOKING_NOT_FOUND)
        return Result.success(record)

    @staticmethod
    def _find_locked(
            db: Session,
            booking_id: UUID,
            host_id: Optional[UUID],
            token: Optional[str]
    ) -> Result[Tuple[BookingRecord, Host]]:
        """
        Lock the owning host, then re-read the booking, so its status and token
        are those of the last committed write. The caller must commit or roll back.
        """
        if host_id is None and not token:
            return Result.unauthorized("Unauthorized.")

        record = db.query(BookingRecord).filter(BookingRecord.id == booking_id).first()
        if not record:
            return Result.not_found(BOOKING_NOT_FOUND)

        host = BookingService._lock_host(db, record.host_id)
        db.refresh(record)

        if not BookingService._is_authorized(record, host_id, token):
            return Result.not_found(BOOKING_NOT_FOUND)
        return Result.success((record, host))

    @staticmethod
    def _is_authorized(record: BookingRecord, host_id: Optional[UUID], token: Optional[str]) -> bool:
        if host_id is not None:
            return record.host_id == host_id
        return record.to_domain().validate_reschedule_token(token)

    @staticmethod
    def _transition(
            db: Session,
            booking_id: UUID,
            host_id: Optional[UUID],
            token: Optional[str],
            change: Callable[[Booking], Result[BookingChange]]
    ) -> Result[BookingChange]:
        """Apply a status change to the booking as it stands under the host lock"""
        try:
            found = BookingService._find_locked(db, booking_id, host_id, token)
            if found.is_failure:
                db.rollback()
                return found.propagate()
            record, _ = found.value

            result = change(record.to_domain())
            if result.is_failure:
                db.rollback()
                return result

            record.apply(result.value.booking)
            db.commit()
        except Exception:
            db.rollback()
            raise

        return result
