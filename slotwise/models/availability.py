# slotwise/models/availability.py
from sqlalchemy import Column, String, Integer, Boolean, Time, Date, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from slotwise.domain.availability import DateOverride, WeeklyAvailabilityRule
from slotwise.models.base import Base


class AvailabilityRule(Base):
    """Host's recurring hours for one weekday"""
    __tablename__ = "availability_rules"
    __table_args__ = (
        UniqueConstraint("host_id", "day_of_week", name="uq_availability_rules_host_day"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    host_id = Column(Uuid, ForeignKey("hosts.id"), nullable=False, index=True)

    day_of_week = Column(Integer, nullable=False)  # 0=Monday, 6=Sunday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_enabled = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    host = relationship("Host", back_populates="availability_rules")

    def to_domain(self) -> WeeklyAvailabilityRule:
        return WeeklyAvailabilityRule(
            day_of_week=self.day_of_week,
            start_time=self.start_time,
            end_time=self.end_time,
            enabled=self.is_enabled,
        )


class AvailabilityOverride(Base):
    """Specific date overrides (vacations, partial blocks, extra hours)"""
    __tablename__ = "availability_overrides"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    host_id = Column(Uuid, ForeignKey("hosts.id"), nullable=False, index=True)

    date = Column(Date, nullable=False, index=True)
    is_blocked = Column(Boolean, nullable=False)  # True = time off
    start_time = Column(Time, nullable=True)  # both null = whole day
    end_time = Column(Time, nullable=True)
    reason = Column(String(200), nullable=True)  # "Vacation", "Dentist", etc.

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_domain(self) -> DateOverride:
        return DateOverride(
            date=self.date,
            is_blocked=self.is_blocked,
            start_time=self.start_time,
            end_time=self.end_time,
            reason=self.reason,
            id=self.id,
        )
