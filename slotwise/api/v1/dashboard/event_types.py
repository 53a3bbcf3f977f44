"""
Event Type Routes
Host-managed bookable meeting types
"""
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from slotwise.config.database import get_db
from slotwise.models.host import Host
from slotwise.api.dependencies import get_current_host, raise_for_failure
from slotwise.schemas.event_type import EventTypeCreate, EventTypeResponse, EventTypeUpdate
from slotwise.services.event_type.event_type_service import EventTypeService

router = APIRouter(prefix="/event-types", tags=["event-types"])


@router.get("", response_model=List[EventTypeResponse])
async def list_event_types(
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    return EventTypeService.list_event_types(db, current_host.id)


@router.post("", response_model=EventTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_event_type(
        data: EventTypeCreate,
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    result = EventTypeService.create_event_type(db, current_host, data)
    raise_for_failure(result)
    return result.value


@router.get("/{event_type_id}", response_model=EventTypeResponse)
async def get_event_type(
        event_type_id: UUID = Path(..., description="The event type ID"),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    result = EventTypeService.get_owned(db, current_host.id, event_type_id)
    raise_for_failure(result)
    return result.value


@router.patch("/{event_type_id}", response_model=EventTypeResponse)
async def update_event_type(
        data: EventTypeUpdate,
        event_type_id: UUID = Path(..., description="The event type ID"),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    """
    Partial update, including activation (`is_active`).
    Existing bookings keep the policy they were made under.
    """
    result = EventTypeService.update_event_type(db, current_host.id, event_type_id, data)
    raise_for_failure(result)
    return result.value


@router.post("/{event_type_id}/activate", response_model=EventTypeResponse)
async def activate_event_type(
        event_type_id: UUID = Path(..., description="The event type ID"),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    result = EventTypeService.set_active(db, current_host.id, event_type_id, True)
    raise_for_failure(result)
    return result.value


@router.post("/{event_type_id}/deactivate", response_model=EventTypeResponse)
async def deactivate_event_type(
        event_type_id: UUID = Path(..., description="The event type ID"),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    """Stop accepting new bookings. Slots disappear; existing bookings stay."""
    result = EventTypeService.set_active(db, current_host.id, event_type_id, False)
    raise_for_failure(result)
    return result.value


@router.delete("/{event_type_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event_type(
        event_type_id: UUID = Path(..., description="The event type ID"),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    """Remove the event type from listings and public pages. Existing bookings are kept."""
    result = EventTypeService.delete_event_type(db, current_host.id, event_type_id)
    raise_for_failure(result)
