# ============================================================================
# FILE: slotwise/api/v1/dashboard/bookings.py
# Host booking management - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.orm import Session
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional
from uuid import UUID

from slotwise.config.database import get_db
from slotwise.domain.booking import BookingStatus
from slotwise.models.host import Host
from slotwise.api.dependencies import get_current_host, raise_for_failure
from slotwise.schemas.booking import BookingResponse, CancelRequest, RescheduleRequest
from slotwise.services.booking.booking_service import BookingService
from slotwise.services.events.event_dispatcher import EventDispatcher, get_event_dispatcher

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _utc_midnight(value: Optional[date]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


@router.get("", response_model=List[BookingResponse])
async def list_bookings(
        status: Optional[BookingStatus] = Query(None, description="confirmed, cancelled, completed or no_show"),
        start_date: Optional[date] = Query(None, description="Bookings starting on or after this UTC date"),
        end_date: Optional[date] = Query(None, description="Bookings starting on or before this UTC date"),
        limit: int = Query(100, ge=1, le=500),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    bookings = BookingService.list_bookings(
        db=db,
        host_id=current_host.id,
        status=status,
        start_date=_utc_midnight(start_date),
        end_date=_utc_midnight(end_date + timedelta(days=1)) if end_date else None,
        limit=limit
    )
    return [BookingResponse.from_domain(b) for b in bookings]


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
        booking_id: UUID = Path(..., description="The booking ID"),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    result = BookingService.get_booking(db, booking_id, current_host.id)
    raise_for_failure(result)
    return BookingResponse.from_domain(result.value)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
        data: CancelRequest,
        booking_id: UUID = Path(..., description="The booking ID"),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db),
        dispatcher: EventDispatcher = Depends(get_event_dispatcher)
):
    result = BookingService.cancel_booking(db, booking_id, reason=data.reason, host_id=current_host.id)
    raise_for_failure(result)
    dispatcher.dispatch(result.value.events)
    return BookingResponse.from_domain(result.value.booking)


@router.post("/{booking_id}/reschedule", response_model=BookingResponse)
async def reschedule_booking(
        data: RescheduleRequest,
        booking_id: UUID = Path(..., description="The booking ID"),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db),
        dispatcher: EventDispatcher = Depends(get_event_dispatcher)
):
    """Move a booking to another available slot of the same event type"""
    result = BookingService.reschedule_booking(
        db, booking_id, data.new_start_time_utc, host_id=current_host.id
    )
    raise_for_failure(result)
    dispatcher.dispatch(result.value.events)
    return BookingResponse.from_domain(result.value.booking)


@router.post("/{booking_id}/complete", response_model=BookingResponse)
async def mark_completed(
        booking_id: UUID = Path(..., description="The booking ID"),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    result = BookingService.mark_completed(db, booking_id, current_host.id)
    raise_for_failure(result)
    return BookingResponse.from_domain(result.value.booking)


@router.post("/{booking_id}/no-show", response_model=BookingResponse)
async def mark_no_show(
        booking_id: UUID = Path(..., description="The booking ID"),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    result = BookingService.mark_no_show(db, booking_id, current_host.id)
    raise_for_failure(result)
    return BookingResponse.from_domain(result.value.booking)
