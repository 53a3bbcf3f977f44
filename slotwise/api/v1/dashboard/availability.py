# ============================================================================
# FILE: slotwise/api/v1/dashboard/availability.py
# Weekly hours and date overrides - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path, status
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional
from uuid import UUID

from slotwise.config.database import get_db
from slotwise.models.host import Host
from slotwise.api.dependencies import get_current_host, raise_for_failure
from slotwise.schemas.availability import (
    OverrideCreate,
    OverrideResponse,
    WeeklyAvailabilityUpdate,
    WeeklyRuleResponse,
)
from slotwise.services.availability.availability_service import AvailabilityService

router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("/weekly", response_model=List[WeeklyRuleResponse])
async def get_weekly_availability(
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    """Weekly hours, Monday first. A default Mon-Fri 09:00-17:00 week is created on first access."""
    return AvailabilityService.get_weekly_rules(db, current_host.id)


@router.put("/weekly", response_model=List[WeeklyRuleResponse])
async def update_weekly_availability(
        data: WeeklyAvailabilityUpdate,
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    result = AvailabilityService.update_weekly_rules(db, current_host.id, data.days)
    raise_for_failure(result)
    return result.value


@router.get("/overrides", response_model=List[OverrideResponse])
async def list_overrides(
        start_date: Optional[date] = Query(None, description="Only overrides on or after this date"),
        end_date: Optional[date] = Query(None, description="Only overrides on or before this date"),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    return AvailabilityService.list_overrides(db, current_host.id, start_date, end_date)


@router.post("/overrides", response_model=OverrideResponse, status_code=status.HTTP_201_CREATED)
async def create_override(
        data: OverrideCreate,
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    """Block a whole day, block a time range, or add extra hours on a specific date"""
    result = AvailabilityService.create_override(db, current_host, data)
    raise_for_failure(result)
    return result.value


@router.delete("/overrides/{override_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_override(
        override_id: UUID = Path(..., description="The override ID"),
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    result = AvailabilityService.delete_override(db, current_host.id, override_id)
    raise_for_failure(result)
