from pydantic import BaseModel, Field, ConfigDict
from typing import List
from uuid import UUID

from slotwise.domain.questions import QuestionType


class QuestionCreate(BaseModel):
    """A question asked on the booking form. Select types need 2-20 options."""
    question_text: str = Field(..., min_length=1, max_length=500)
    question_type: QuestionType = QuestionType.TEXT
    is_required: bool = False
    options: List[str] = Field(default_factory=list)


class QuestionUpdate(QuestionCreate):
    """Full replacement of a question's text, type, required flag and options"""


class QuestionReorder(BaseModel):
    question_ids: List[UUID] = Field(..., min_length=1, description="Every question of the event type, in the new order")


class QuestionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_type_id: UUID
    question_text: str
    question_type: QuestionType
    is_required: bool
    options: List[str] = Field(default_factory=list)
    display_order: int
