# slotwise/models/event_type.py
from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from slotwise.domain.event_policy import EventPolicy
from slotwise.domain.value_objects import BookingWindow, BufferTime, Duration, MinimumNotice
from slotwise.models.base import Base


class EventType(Base):
    """Bookable meeting type published by a host"""
    __tablename__ = "event_types"
    __table_args__ = (
        UniqueConstraint("host_id", "slug", name="uq_event_types_host_slug"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    host_id = Column(Uuid, ForeignKey("hosts.id"), nullable=False, index=True)

    name = Column(String(200), nullable=False)
    slug = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    # Booking policy
    duration_minutes = Column(Integer, nullable=False, default=30)
    buffer_before_minutes = Column(Integer, nullable=False, default=0)
    buffer_after_minutes = Column(Integer, nullable=False, default=0)
    minimum_notice_minutes = Column(Integer, nullable=False, default=0)
    booking_window_days = Column(Integer, nullable=False, default=60)
    max_bookings_per_day = Column(Integer, nullable=True)  # null = unlimited

    is_active = Column(Boolean, default=True, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)  # soft delete; bookings keep their event type

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    host = relationship("Host", back_populates="event_types")
    questions = relationship("BookingQuestionRecord", back_populates="event_type", cascade="all, delete-orphan",
                             order_by="BookingQuestionRecord.display_order")

    def to_domain(self) -> EventPolicy:
        return EventPolicy(
            duration=Duration.from_minutes(self.duration_minutes),
            buffer_before=BufferTime.from_minutes(self.buffer_before_minutes),
            buffer_after=BufferTime.from_minutes(self.buffer_after_minutes),
            minimum_notice=MinimumNotice.from_minutes(self.minimum_notice_minutes),
            booking_window=BookingWindow.from_days(self.booking_window_days),
            max_bookings_per_day=self.max_bookings_per_day,
            is_active=self.is_active,
            id=self.id,
            host_id=self.host_id,
            name=self.name,
        )
