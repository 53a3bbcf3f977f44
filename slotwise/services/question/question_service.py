# slotwise/services/question/question_service.py
"""Booking form questions of an event type"""
from typing import List
from uuid import UUID
from sqlalchemy.orm import Session
import logging

from slotwise.domain.questions import MAX_QUESTIONS_PER_EVENT_TYPE, BookingQuestion, reorder_questions
from slotwise.domain.result import Result
from slotwise.models.event_type import EventType
from slotwise.models.question import BookingQuestionRecord
from slotwise.schemas.question import QuestionCreate, QuestionUpdate
from slotwise.services.event_type.event_type_service import EventTypeService

logger = logging.getLogger(__name__)

QUESTION_NOT_FOUND = "Question not found."


class QuestionService:
    """Add, edit, remove and reorder the questions guests answer when booking"""

    @staticmethod
    def list_questions(db: Session, host_id: UUID, event_type_id: UUID) -> Result[List[BookingQuestionRecord]]:
        found = EventTypeService.get_owned(db, host_id, event_type_id)
        if found.is_failure:
            return found.propagate()
        return Result.success(list(found.value.questions))

    @staticmethod
    def add_question(
            db: Session,
            host_id: UUID,
            event_type_id: UUID,
            data: QuestionCreate
    ) -> Result[BookingQuestionRecord]:
        found = EventTypeService.get_owned(db, host_id, event_type_id)
        if found.is_failure:
            return found.propagate()
        event_type = found.value

        if len(event_type.questions) >= MAX_QUESTIONS_PER_EVENT_TYPE:
            return Result.failure(
                f"Maximum of {MAX_QUESTIONS_PER_EVENT_TYPE} questions allowed per event type."
            )

        question = BookingQuestion.create(
            event_type.id,
            data.question_text,
            data.question_type,
            is_required=data.is_required,
            options=data.options,
            display_order=len(event_type.questions),
        )
        if question.is_failure:
            return question.propagate()

        record = BookingQuestionRecord.from_domain(question.value)
        event_type.questions.append(record)
        db.commit()
        db.refresh(record)

        logger.info(f"Added {record.question_type} question {record.id} to event type {event_type.id}")
        return Result.success(record)

    @staticmethod
    def update_question(
            db: Session,
            host_id: UUID,
            event_type_id: UUID,
            question_id: UUID,
            data: QuestionUpdate
    ) -> Result[BookingQuestionRecord]:
        """Replace a question. Answers already given to it are left as they are."""
        found = QuestionService._find(db, host_id, event_type_id, question_id)
        if found.is_failure:
            return found
        record = found.value

        updated = record.to_domain().update(
            data.question_text, data.question_type, data.is_required, data.options
        )
        if updated.is_failure:
            return updated.propagate()

        record.apply(updated.value)
        db.commit()
        db.refresh(record)
        return Result.success(record)

    @staticmethod
    def delete_question(db: Session, host_id: UUID, event_type_id: UUID, question_id: UUID) -> Result[None]:
        found = QuestionService._find(db, host_id, event_type_id, question_id)
        if found.is_failure:
            return found.propagate()
        record = found.value

        event_type = record.event_type
        event_type.questions.remove(record)
        for position, remaining in enumerate(sorted(event_type.questions, key=lambda q: q.display_order)):
            remaining.display_order = position
        db.commit()
        return Result.success()

    @staticmethod
    def reorder(
            db: Session,
            host_id: UUID,
            event_type_id: UUID,
            question_ids: List[UUID]
    ) -> Result[List[BookingQuestionRecord]]:
        found = EventTypeService.get_owned(db, host_id, event_type_id)
        if found.is_failure:
            return found.propagate()
        event_type: EventType = found.value

        records = {record.id: record for record in event_type.questions}
        reordered = reorder_questions([r.to_domain() for r in records.values()], question_ids)
        if reordered.is_failure:
            return reordered.propagate()

        for question in reordered.value:
            records[question.id].display_order = question.display_order
        db.commit()
        db.refresh(event_type)
        return Result.success(list(event_type.questions))

    @staticmethod
    def _find(
            db: Session,
            host_id: UUID,
            event_type_id: UUID,
            question_id: UUID
    ) -> Result[BookingQuestionRecord]:
        found = EventTypeService.get_owned(db, host_id, event_type_id)
        if found.is_failure:
            return found.propagate()

        record = next((q for q in found.value.questions if q.id == question_id), None)
        if record is None:
            return Result.not_found(QUESTION_NOT_FOUND)
        return Result.success(record)
