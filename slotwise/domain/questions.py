"""
Custom questions a host asks guests at booking time.

Answers are plain strings. A multi-select answer lists the chosen options
separated by commas; a checkbox answer is ``"true"`` or ``"false"``.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID, uuid4

from slotwise.domain.result import Result

MAX_QUESTIONS_PER_EVENT_TYPE = 10
MAX_QUESTION_TEXT_LENGTH = 500
MIN_SELECT_OPTIONS = 2
MAX_SELECT_OPTIONS = 20

CHECKBOX_VALUES = ("true", "false")


class QuestionType(str, Enum):
    TEXT = "text"
    MULTILINE_TEXT = "multiline_text"
    SINGLE_SELECT = "single_select"
    MULTI_SELECT = "multi_select"
    CHECKBOX = "checkbox"

    @property
    def is_select(self) -> bool:
        return self in (QuestionType.SINGLE_SELECT, QuestionType.MULTI_SELECT)


@dataclass(frozen=True)
class BookingQuestion:
    event_type_id: UUID
    text: str
    type: QuestionType
    is_required: bool = False
    options: Tuple[str, ...] = ()
    display_order: int = 0
    id: UUID = field(default_factory=uuid4)

    @classmethod
    def create(
            cls,
            event_type_id: UUID,
            text: str,
            type: QuestionType,
            is_required: bool = False,
            options: Optional[Sequence[str]] = None,
            display_order: int = 0
    ) -> Result["BookingQuestion"]:
        checked = _validate(text, type, options)
        if checked.is_failure:
            return checked.propagate()
        cleaned_text, cleaned_options = checked.value
        return Result.success(cls(event_type_id, cleaned_text, type, is_required,
                                  cleaned_options, display_order))

    def update(
            self,
            text: str,
            type: QuestionType,
            is_required: bool,
            options: Optional[Sequence[str]] = None
    ) -> Result["BookingQuestion"]:
        checked = _validate(text, type, options)
        if checked.is_failure:
            return checked.propagate()
        cleaned_text, cleaned_options = checked.value
        return Result.success(replace(self, text=cleaned_text, type=type,
                                      is_required=is_required, options=cleaned_options))

    def check_answer(self, value: Optional[str]) -> Result[str]:
        """Normalized answer, or a failure naming the question"""
        value = (value or "").strip()

        if self.type == QuestionType.CHECKBOX:
            value = value.lower() or "false"
            if value not in CHECKBOX_VALUES:
                return Result.failure(f"Answer to '{self.text}' must be true or false.")
            if self.is_required and value != "true":
                return Result.failure(f"'{self.text}' must be checked.")
            return Result.success(value)

        if not value:
            if self.is_required:
                return Result.failure(f"An answer to '{self.text}' is required.")
            return Result.success(value)

        if self.type == QuestionType.SINGLE_SELECT and value not in self.options:
            return Result.failure(f"'{value}' is not an option for '{self.text}'.")
        if self.type == QuestionType.MULTI_SELECT:
            chosen = [part.strip() for part in value.split(",") if part.strip()]
            unknown = [c for c in chosen if c not in self.options]
            if unknown:
                return Result.failure(f"'{unknown[0]}' is not an option for '{self.text}'.")
            value = ",".join(chosen)

        return Result.success(value)


def _validate(
        text: str,
        type: QuestionType,
        options: Optional[Sequence[str]]
) -> Result[Tuple[str, Tuple[str, ...]]]:
    if not text or not text.strip():
        return Result.failure("Question text is required.")
    if len(text) > MAX_QUESTION_TEXT_LENGTH:
        return Result.failure("Question text is too long.")

    if not type.is_select:
        return Result.success((text.strip(), ()))

    options = list(options or [])
    if len(options) < MIN_SELECT_OPTIONS:
        return Result.failure(f"Select questions require at least {MIN_SELECT_OPTIONS} options.")
    if len(options) > MAX_SELECT_OPTIONS:
        return Result.failure(f"Maximum of {MAX_SELECT_OPTIONS} options allowed.")
    if any(not o or not o.strip() for o in options):
        return Result.failure("Options cannot be empty.")
    cleaned = tuple(o.strip() for o in options)
    if type == QuestionType.MULTI_SELECT and any("," in o for o in cleaned):
        return Result.failure("Multi-select options cannot contain commas.")
    if len(set(cleaned)) != len(cleaned):
        return Result.failure("Options must be unique.")
    return Result.success((text.strip(), cleaned))


def reorder_questions(
        questions: Sequence[BookingQuestion],
        ordered_ids: Sequence[UUID]
) -> Result[List[BookingQuestion]]:
    """Assign display orders from ``ordered_ids``, which must name every question exactly once"""
    by_id = {q.id: q for q in questions}
    if len(ordered_ids) != len(by_id) or set(ordered_ids) != set(by_id):
        return Result.failure("Must provide all question IDs.")
    return Result.success([
        replace(by_id[question_id], display_order=position)
        for position, question_id in enumerate(ordered_ids)
    ])


def check_responses(
        questions: Sequence[BookingQuestion],
        responses: Iterable[Tuple[UUID, Optional[str]]]
) -> Result[List[Tuple[UUID, str]]]:
    """
    Match guest answers against the event type's questions.

    Every answer must name one of ``questions``; every required question must
    be answered. Returns the normalized answers in question display order.
    """
    by_id = {q.id: q for q in questions}
    given: Dict[UUID, Optional[str]] = {}
    for question_id, value in responses:
        if question_id not in by_id:
            return Result.failure("Answer refers to an unknown question.")
        if question_id in given:
            return Result.failure("Response for this question already exists.")
        given[question_id] = value

    answers = []
    for question in sorted(questions, key=lambda q: q.display_order):
        if question.id not in given and not question.is_required:
            continue
        checked = question.check_answer(given.get(question.id))
        if checked.is_failure:
            return checked.propagate()
        answers.append((question.id, checked.value))
    return Result.success(answers)
