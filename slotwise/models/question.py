# slotwise/models/question.py
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from slotwise.domain.questions import BookingQuestion, QuestionType
from slotwise.models.base import Base


class BookingQuestionRecord(Base):
    """Question a guest answers when booking an event type"""
    __tablename__ = "booking_questions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    event_type_id = Column(Uuid, ForeignKey("event_types.id"), nullable=False, index=True)

    question_text = Column(String(500), nullable=False)
    question_type = Column(String(20), nullable=False)  # text, multiline_text, single_select, multi_select, checkbox
    is_required = Column(Boolean, nullable=False, default=False)
    options = Column(JSON, nullable=False, default=list)  # select types only
    display_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    event_type = relationship("EventType", back_populates="questions")

    def to_domain(self) -> BookingQuestion:
        return BookingQuestion(
            id=self.id,
            event_type_id=self.event_type_id,
            text=self.question_text,
            type=QuestionType(self.question_type),
            is_required=self.is_required,
            options=tuple(self.options or ()),
            display_order=self.display_order,
        )

    @classmethod
    def from_domain(cls, question: BookingQuestion) -> "BookingQuestionRecord":
        record = cls(id=question.id, event_type_id=question.event_type_id)
        record.apply(question)
        return record

    def apply(self, question: BookingQuestion) -> None:
        self.question_text = question.text
        self.question_type = question.type.value
        self.is_required = question.is_required
        self.options = list(question.options)
        self.display_order = question.display_order
