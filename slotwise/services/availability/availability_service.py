# slotwise/services/availability/availability_service.py
from typing import List, Optional, Tuple
from datetime import date, datetime, time, timedelta, timezone
from uuid import UUID
from zoneinfo import ZoneInfo
from sqlalchemy.orm import Session
import logging

from slotwise.domain.availability import DateOverride, WeeklyAvailabilityRule
from slotwise.domain.booking import Booking, BookingStatus
from slotwise.domain.event_policy import EventPolicy
from slotwise.domain.result import Result
from slotwise.domain.slot_calculator import CalculatedSlot, calculate_slots_for_date
from slotwise.domain.value_objects import is_valid_timezone
from slotwise.models.availability import AvailabilityRule, AvailabilityOverride
from slotwise.models.booking import BookingRecord
from slotwise.models.event_type import EventType
from slotwise.models.host import Host
from slotwise.schemas.availability import (
    AvailableDatesResponse,
    AvailableSlotsResponse,
    DateAvailability,
    OverrideCreate,
    OverrideType,
    SlotResponse,
    WeeklyRuleUpdate,
)

logger = logging.getLogger(__name__)


def host_today(host_timezone: str, now: Optional[datetime] = None) -> date:
    """Current calendar date in the host's timezone"""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(ZoneInfo(host_timezone)).date()


class Schedule:
    """Everything the slot calculator needs for one host, loaded in one go"""

    def __init__(
            self,
            policy: EventPolicy,
            host_timezone: str,
            weekly_rules: List[WeeklyAvailabilityRule],
            overrides: List[DateOverride],
            bookings: List[Booking]
    ):
        self.policy = policy
        self.host_timezone = host_timezone
        self.weekly_rules = weekly_rules
        self.overrides = overrides
        self.bookings = bookings

    def slots_for(self, target_date: date, now: Optional[datetime] = None) -> List[CalculatedSlot]:
        return calculate_slots_for_date(
            self.policy, self.weekly_rules, self.overrides, self.bookings,
            target_date, self.host_timezone, now=now
        )


class AvailabilityService:
    """Weekly hours, date overrides and the public slot queries"""

    @staticmethod
    def get_weekly_rules(db: Session, host_id: UUID) -> List[AvailabilityRule]:
        """Weekly rules for a host, seeding the default Mon-Fri 09:00-17:00 week on first access"""
        rules = db.query(AvailabilityRule).filter(
            AvailabilityRule.host_id == host_id
        ).order_by(AvailabilityRule.day_of_week).all()

        if rules:
            return rules

        rules = [
            AvailabilityRule(
                host_id=host_id,
                day_of_week=rule.day_of_week,
                start_time=rule.start_time,
                end_time=rule.end_time,
                is_enabled=rule.enabled,
            )
            for rule in WeeklyAvailabilityRule.default_week()
        ]
        db.add_all(rules)
        db.commit()

        logger.info(f"Created default weekly availability for host {host_id}")
        return rules

    @staticmethod
    def update_weekly_rules(
            db: Session,
            host_id: UUID,
            updates: List[WeeklyRuleUpdate]
    ) -> Result[List[AvailabilityRule]]:
        """Replace the hours of the given weekdays; all or nothing"""
        rows = {row.day_of_week: row for row in AvailabilityService.get_weekly_rules(db, host_id)}

        for update in updates:
            row = rows.get(update.day_of_week)
            if row is None:
                created = WeeklyAvailabilityRule.create(
                    update.day_of_week, update.start_time, update.end_time, update.is_enabled
                )
                if created.is_failure:
                    db.rollback()
                    return created.propagate()
                row = AvailabilityRule(host_id=host_id, day_of_week=update.day_of_week)
                db.add(row)
                rows[update.day_of_week] = row
                rule = created.value
            else:
                updated = row.to_domain().update(update.start_time, update.end_time, update.is_enabled)
                if updated.is_failure:
                    db.rollback()
                    return updated.propagate()
                rule = updated.value

            row.start_time = rule.start_time
            row.end_time = rule.end_time
            row.is_enabled = rule.enabled

        db.commit()
        logger.info(f"Updated {len(updates)} weekly rule(s) for host {host_id}")
        return Result.success([rows[day] for day in sorted(rows)])

    @staticmethod
    def list_overrides(
            db: Session,
            host_id: UUID,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None
    ) -> List[AvailabilityOverride]:
        query = db.query(AvailabilityOverride).filter(AvailabilityOverride.host_id == host_id)
        if start_date:
            query = query.filter(AvailabilityOverride.date >= start_date)
        if end_date:
            query = query.filter(AvailabilityOverride.date <= end_date)
        return query.order_by(AvailabilityOverride.date, AvailabilityOverride.start_time).all()

    @staticmethod
    def create_override(
            db: Session,
            host: Host,
            data: OverrideCreate,
            now: Optional[datetime] = None
    ) -> Result[AvailabilityOverride]:
        """Block a day, block part of a day, or open extra hours on a date"""
        today = host_today(host.timezone, now)

        if data.type == OverrideType.BLOCKED_DAY:
            created = DateOverride.block_day(data.date, data.reason, today=today)
        elif data.type == OverrideType.BLOCKED_TIME:
            created = DateOverride.block_time_range(data.date, data.start_time, data.end_time, data.reason, today=today)
        else:
            created = DateOverride.extra_availability(data.date, data.start_time, data.end_time, data.reason, today=today)

        if created.is_failure:
            return created.propagate()

        override = created.value
        row = AvailabilityOverride(
            id=override.id,
            host_id=host.id,
            date=override.date,
            is_blocked=override.is_blocked,
            start_time=override.start_time,
            end_time=override.end_time,
            reason=override.reason,
        )
        db.add(row)
        db.commit()
        db.refresh(row)

        logger.info(f"Host {host.id} added override: {override}")
        return Result.success(row)

    @staticmethod
    def delete_override(db: Session, host_id: UUID, override_id: UUID) -> Result[None]:
        row = db.query(AvailabilityOverride).filter(
            AvailabilityOverride.id == override_id,
            AvailabilityOverride.host_id == host_id
        ).first()
        if not row:
            return Result.not_found("Override not found.")

        db.delete(row)
        db.commit()
        return Result.success()

    @staticmethod
    def load_schedule(
            db: Session,
            event_type: EventType,
            host: Host,
            start_date: date,
            end_date: date
    ) -> Schedule:
        """
        Load rules, overrides and the host's active bookings covering
        ``start_date``..``end_date`` (host-local dates).

        Bookings are fetched a day either side in UTC so that every booking
        whose local date falls in the range is included whatever the offset.
        """
        rules = [row.to_domain() for row in AvailabilityService.get_weekly_rules(db, host.id)]
        overrides = [
            row.to_domain()
            for row in AvailabilityService.list_overrides(db, host.id, start_date, end_date)
        ]

        range_start = datetime.combine(start_date - timedelta(days=1), time.min, tzinfo=timezone.utc)
        range_end = datetime.combine(end_date + timedelta(days=2), time.min, tzinfo=timezone.utc)
        records = db.query(BookingRecord).filter(
            BookingRecord.host_id == host.id,
            BookingRecord.status != BookingStatus.CANCELLED.value,
            BookingRecord.start_time_utc >= range_start,
            BookingRecord.start_time_utc < range_end
        ).all()

        return Schedule(
            policy=event_type.to_domain(),
            host_timezone=host.timezone,
            weekly_rules=rules,
            overrides=overrides,
            bookings=[record.to_domain() for record in records],
        )

    @staticmethod
    def get_available_slots(
            db: Session,
            event_type_id: UUID,
            on_date: date,
            guest_timezone: str,
            now: Optional[datetime] = None
    ) -> Result[AvailableSlotsResponse]:
        """Available slots for one host-local date, labelled in the guest's timezone"""
        checked = AvailabilityService._check_public_query(db, event_type_id, guest_timezone)
        if checked.is_failure:
            return checked.propagate()
        event_type, host = checked.value

        today = host_today(host.timezone, now)
        if on_date < today:
            return Result.failure("Cannot get slots for past dates.")
        max_date = event_type.to_domain().booking_window.max_bookable_date(today)
        if on_date > max_date:
            return Result.failure(f"Cannot book more than {event_type.booking_window_days} days in advance.")

        schedule = AvailabilityService.load_schedule(db, event_type, host, on_date, on_date)
        guest_tz = ZoneInfo(guest_timezone)
        slots = [
            SlotResponse(
                start_time=slot.start_time_utc.astimezone(guest_tz).strftime("%H:%M"),
                end_time=slot.end_time_utc.astimezone(guest_tz).strftime("%H:%M"),
                start_time_utc=slot.start_time_utc,
                end_time_utc=slot.end_time_utc,
            )
            for slot in schedule.slots_for(on_date, now=now)
            if slot.is_available
        ]

        logger.debug(f"{len(slots)} slot(s) available for event type {event_type_id} on {on_date}")
        return Result.success(AvailableSlotsResponse(
            event_type_id=event_type.id,
            date=on_date,
            timezone=guest_timezone,
            slots=slots,
        ))

    @staticmethod
    def get_available_dates(
            db: Session,
            event_type_id: UUID,
            guest_timezone: str,
            now: Optional[datetime] = None
    ) -> Result[AvailableDatesResponse]:
        """
        Per-date availability summary from host-local today through
        ``max_bookable_date`` inclusive, so a 60-day window lists 61 dates.
        """
        checked = AvailabilityService._check_public_query(db, event_type_id, guest_timezone)
        if checked.is_failure:
            return checked.propagate()
        event_type, host = checked.value

        today = host_today(host.timezone, now)
        max_date = event_type.to_domain().booking_window.max_bookable_date(today)
        schedule = AvailabilityService.load_schedule(db, event_type, host, today, max_date)

        dates = []
        current = today
        while current <= max_date:
            count = sum(1 for slot in schedule.slots_for(current, now=now) if slot.is_available)
            dates.append(DateAvailability(
                date=current,
                day_of_week=current.weekday(),
                has_availability=count > 0,
                available_slot_count=count,
            ))
            current += timedelta(days=1)

        return Result.success(AvailableDatesResponse(
            event_type_id=event_type.id,
            from_date=today,
            to_date=max_date,
            timezone=guest_timezone,
            dates=dates,
        ))

    @staticmethod
    def _check_public_query(
            db: Session,
            event_type_id: UUID,
            guest_timezone: str
    ) -> Result[Tuple[EventType, Host]]:
        event_type = db.query(EventType).filter(
            EventType.id == event_type_id,
            EventType.deleted_at.is_(None)
        ).first()
        if not event_type:
            return Result.not_found("Event type not found.")
        if not event_type.is_active:
            return Result.failure("This event type is not accepting bookings.")
        if not is_valid_timezone(guest_timezone):
            return Result.failure(f"Invalid timezone: {guest_timezone}")

        host = db.query(Host).filter(Host.id == event_type.host_id).first()
        return Result.success((event_type, host))
