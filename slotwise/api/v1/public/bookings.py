"""
Public Booking Routes
Guests book, and later reschedule or cancel with the token from their confirmation
"""
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from slotwise.config.database import get_db
from slotwise.config.settings import get_settings
from slotwise.api.dependencies import raise_for_failure
from slotwise.schemas.booking import (
    BookingConfirmation,
    BookingCreateRequest,
    BookingResponse,
    CancelRequest,
    RescheduleRequest,
)
from slotwise.services.booking.booking_service import BookingService
from slotwise.services.events.event_dispatcher import EventDispatcher, get_event_dispatcher

router = APIRouter(prefix="/public/bookings", tags=["public"])


def _reschedule_url(token: str) -> str:
    return f"{get_settings().FRONTEND_URL.rstrip('/')}/reschedule/{token}"


@router.post("", response_model=BookingConfirmation, status_code=status.HTTP_201_CREATED)
async def create_booking(
        data: BookingCreateRequest,
        db: Session = Depends(get_db),
        dispatcher: EventDispatcher = Depends(get_event_dispatcher)
):
    """
    Book a slot.
    Returns 409 if someone else took the slot since it was listed.
    """
    result = BookingService.create_booking(db, data)
    raise_for_failure(result)

    booking = result.value.booking
    dispatcher.dispatch(result.value.events)
    return BookingConfirmation(
        **BookingResponse.from_domain(booking).model_dump(),
        reschedule_url=_reschedule_url(booking.reschedule_token),
    )


@router.get("/reschedule/{token}", response_model=BookingResponse)
async def get_booking_by_token(
        token: str = Path(..., description="Reschedule token from the confirmation"),
        db: Session = Depends(get_db)
):
    result = BookingService.get_booking_by_token(db, token)
    raise_for_failure(result)
    return BookingResponse.from_domain(result.value)


@router.post("/reschedule/{token}", response_model=BookingConfirmation)
async def reschedule_booking(
        data: RescheduleRequest,
        token: str = Path(..., description="Reschedule token from the confirmation"),
        db: Session = Depends(get_db),
        dispatcher: EventDispatcher = Depends(get_event_dispatcher)
):
    """Move the booking. The old token stops working; a new link is returned."""
    found = BookingService.get_booking_by_token(db, token)
    raise_for_failure(found)

    result = BookingService.reschedule_booking(db, found.value.id, data.new_start_time_utc, token=token)
    raise_for_failure(result)

    booking = result.value.booking
    dispatcher.dispatch(result.value.events)
    return BookingConfirmation(
        **BookingResponse.from_domain(booking).model_dump(),
        reschedule_url=_reschedule_url(booking.reschedule_token),
    )


@router.post("/cancel/{token}", response_model=BookingResponse)
async def cancel_booking(
        data: CancelRequest,
        token: str = Path(..., description="Reschedule token from the confirmation"),
        db: Session = Depends(get_db),
        dispatcher: EventDispatcher = Depends(get_event_dispatcher)
):
    found = BookingService.get_booking_by_token(db, token)
    raise_for_failure(found)

    result = BookingService.cancel_booking(db, found.value.id, reason=data.reason, token=token)
    raise_for_failure(result)

    dispatcher.dispatch(result.value.events)
    return BookingResponse.from_domain(result.value.booking)
