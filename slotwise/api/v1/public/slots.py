"""
Public Slot Routes
Unauthenticated availability queries for the guest booking page
"""
from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.orm import Session
from datetime import date
from uuid import UUID

from slotwise.config.database import get_db
from slotwise.api.dependencies import raise_for_failure
from slotwise.schemas.availability import AvailableDatesResponse, AvailableSlotsResponse
from slotwise.services.availability.availability_service import AvailabilityService

router = APIRouter(prefix="/public/event-types", tags=["public"])


@router.get("/{event_type_id}/slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
        event_type_id: UUID = Path(..., description="The event type ID"),
        on_date: date = Query(..., alias="date", description="Host-local calendar date, YYYY-MM-DD"),
        timezone: str = Query(..., description="Guest IANA timezone used for slot labels"),
        db: Session = Depends(get_db)
):
    """
    Available slots for one date.
    Times are labelled in the guest's timezone; the UTC instants are what gets booked.
    """
    result = AvailabilityService.get_available_slots(db, event_type_id, on_date, timezone)
    raise_for_failure(result)
    return result.value


@router.get("/{event_type_id}/dates", response_model=AvailableDatesResponse)
async def get_available_dates(
        event_type_id: UUID = Path(..., description="The event type ID"),
        timezone: str = Query(..., description="Guest IANA timezone"),
        db: Session = Depends(get_db)
):
    """Which dates inside the booking window still have open slots"""
    result = AvailabilityService.get_available_dates(db, event_type_id, timezone)
    raise_for_failure(result)
    return result.value
