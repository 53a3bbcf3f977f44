"""
Host Routes
Registration is open; the rest acts on the host named by X-Host-ID
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from slotwise.config.database import get_db
from slotwise.models.host import Host
from slotwise.api.dependencies import get_current_host, raise_for_failure
from slotwise.schemas.host import HostCreate, HostResponse, HostTimezoneUpdate
from slotwise.services.host.host_service import HostService

router = APIRouter(prefix="/hosts", tags=["hosts"])


@router.post("", response_model=HostResponse, status_code=status.HTTP_201_CREATED)
async def create_host(
        data: HostCreate,
        db: Session = Depends(get_db)
):
    """Register a new host"""
    result = HostService.create_host(db, data)
    raise_for_failure(result)
    return result.value


@router.get("/me", response_model=HostResponse)
async def get_me(current_host: Host = Depends(get_current_host)):
    return current_host


@router.patch("/me/timezone", response_model=HostResponse)
async def update_timezone(
        data: HostTimezoneUpdate,
        current_host: Host = Depends(get_current_host),
        db: Session = Depends(get_db)
):
    """
    Change the host's timezone.
    Weekly hours keep their wall-clock values in the new zone.
    """
    result = HostService.update_timezone(db, current_host, data.timezone)
    raise_for_failure(result)
    return result.value
