# slotwise/models/booking.py
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from slotwise.domain.booking import Booking, BookingStatus, QuestionResponse
from slotwise.domain.value_objects import GuestInfo, ensure_utc
from slotwise.models.base import Base


class BookingRecord(Base):
    __tablename__ = "bookings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # References
    event_type_id = Column(Uuid, ForeignKey("event_types.id"), nullable=False, index=True)
    host_id = Column(Uuid, ForeignKey("hosts.id"), nullable=False, index=True)

    # Guest info
    guest_name = Column(String(200), nullable=False)
    guest_email = Column(String(320), nullable=False)
    guest_phone = Column(String(50), nullable=True)
    guest_timezone = Column(String(64), nullable=False)
    guest_notes = Column(Text, nullable=True)

    # Scheduled interval, always UTC
    start_time_utc = Column(DateTime(timezone=True), nullable=False, index=True)
    end_time_utc = Column(DateTime(timezone=True), nullable=False)

    # Status tracking
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value)  # confirmed, cancelled, completed, no_show
    reschedule_token = Column(String(64), nullable=True, unique=True, index=True)
    cancellation_reason = Column(Text, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    answers = relationship("BookingAnswer", back_populates="booking", cascade="all, delete-orphan",
                           order_by="BookingAnswer.created_at")

    def to_domain(self) -> Booking:
        return Booking(
            id=self.id,
            event_type_id=self.event_type_id,
            host_id=self.host_id,
            guest=GuestInfo.from_storage(self.guest_name, self.guest_email, self.guest_phone, self.guest_timezone),
            start_time_utc=ensure_utc(self.start_time_utc),
            end_time_utc=ensure_utc(self.end_time_utc),
            status=BookingStatus(self.status),
            reschedule_token=self.reschedule_token,
            notes=self.guest_notes,
            cancellation_reason=self.cancellation_reason,
            cancelled_at_utc=ensure_utc(self.cancelled_at) if self.cancelled_at else None,
            responses=tuple(QuestionResponse(a.question_id, a.value) for a in self.answers),
        )

    @classmethod
    def from_domain(cls, booking: Booking) -> "BookingRecord":
        record = cls(id=booking.id)
        record.apply(booking)
        return record

    def apply(self, booking: Booking) -> None:
        """Copy the aggregate's state onto this row"""
        self.event_type_id = booking.event_type_id
        self.host_id = booking.host_id
        self.guest_name = booking.guest.name
        self.guest_email = booking.guest.email
        self.guest_phone = booking.guest.phone
        self.guest_timezone = booking.guest.timezone
        self.guest_notes = booking.notes
        self.start_time_utc = booking.start_time_utc
        self.end_time_utc = booking.end_time_utc
        self.status = booking.status.value
        self.reschedule_token = booking.reschedule_token
        self.cancellation_reason = booking.cancellation_reason
        self.cancelled_at = booking.cancelled_at_utc

        known = {a.question_id for a in self.answers}
        for response in booking.responses:
            if response.question_id not in known:
                self.answers.append(BookingAnswer(question_id=response.question_id, value=response.value))


class BookingAnswer(Base):
    """Guest's answer to one of the event type's booking questions"""
    __tablename__ = "booking_answers"
    __table_args__ = (
        UniqueConstraint("booking_id", "question_id", name="uq_booking_answers_question"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_id = Column(Uuid, ForeignKey("bookings.id"), nullable=False, index=True)
    question_id = Column(Uuid, nullable=False)
    value = Column(Text, nullable=False, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    booking = relationship("BookingRecord", back_populates="answers")
