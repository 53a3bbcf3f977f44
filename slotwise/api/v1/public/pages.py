"""
Public Booking Page Routes
Resolve a shareable /{host slug}/{event slug} link to the event type a guest can book
"""
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from slotwise.config.database import get_db
from slotwise.api.dependencies import raise_for_failure
from slotwise.schemas.event_type import PublicEventTypeResponse
from slotwise.services.event_type.event_type_service import EventTypeService

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/{host_slug}/{event_slug}", response_model=PublicEventTypeResponse)
async def get_public_event_type(
        host_slug: str = Path(..., description="The host's slug"),
        event_slug: str = Path(..., description="The event type's slug"),
        db: Session = Depends(get_db)
):
    """Event type details and booking questions. 404 if unknown, deleted or inactive."""
    result = EventTypeService.get_public_event_type(db, host_slug, event_slug)
    raise_for_failure(result)
    return PublicEventTypeResponse.from_event_type(result.value)
