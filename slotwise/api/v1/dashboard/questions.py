"""
Booking Question Routes
Custom questions guests answer on the booking form
"""
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from slotwise.config.database import get_db
from slotwise.models.host import Host
from slotwise.api.dependencies import get_current_host, raise_for_failure
from slotwise.schemas.question import QuestionCreate, QuestionReorder, QuestionResponse, QuestionUpdate
from slotwise.services.question.question_service import QuestionService

router = APIRouter(prefix="/event-types/{event_type_id}/questions", tags=["questions"])


@router.get("", response_model=List[QuestionResponse])
async def list_questions(
        event_type_id: UUID = Path(..., description="The event type ID"),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    result = QuestionService.list_questions(db, current_host.id, event_type_id)
    raise_for_failure(result)
    return result.value


@router.post("", response_model=QuestionResponse, status_code=status.HTTP_201_CREATED)
async def add_question(
        data: QuestionCreate,
        event_type_id: UUID = Path(..., description="The event type ID"),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    """Appended after the existing questions. At most 10 per event type."""
    result = QuestionService.add_question(db, current_host.id, event_type_id, data)
    raise_for_failure(result)
    return result.value


@router.post("/reorder", response_model=List[QuestionResponse])
async def reorder_questions(
        data: QuestionReorder,
        event_type_id: UUID = Path(..., description="The event type ID"),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    result = QuestionService.reorder(db, current_host.id, event_type_id, data.question_ids)
    raise_for_failure(result)
    return result.value


@router.put("/{question_id}", response_model=QuestionResponse)
async def update_question(
        data: QuestionUpdate,
        event_type_id: UUID = Path(..., description="The event type ID"),
        question_id: UUID = Path(..., description="The question ID"),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    result = QuestionService.update_question(db, current_host.id, event_type_id, question_id, data)
    raise_for_failure(result)
    return result.value


@router.delete("/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(
        event_type_id: UUID = Path(..., description="The event type ID"),
        question_id: UUID = Path(..., description="The question ID"),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    result = QuestionService.delete_question(db, current_host.id, event_type_id, question_id)
    raise_for_failure(result)
