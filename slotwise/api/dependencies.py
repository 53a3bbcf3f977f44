# ============================================================================
# FILE: slotwise/api/dependencies.py
# Host identification and Result -> HTTP translation
# ============================================================================
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from slotwise.config.database import get_db
from slotwise.domain.result import ErrorKind, Result
from slotwise.models.host import Host
from slotwise.services.host.host_service import HostService

ERROR_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
}


def raise_for_failure(result: Result) -> None:
    """
    Raise the HTTPException matching a failed result; does nothing on success.

    The domain message is passed through as ``detail`` unchanged.
    """
    if result.is_failure:
        raise HTTPException(
            status_code=ERROR_STATUS.get(result.kind, status.HTTP_400_BAD_REQUEST),
            detail=result.error,
        )


async def get_current_host(
        x_host_id: Optional[str] = Header(None, alias="X-Host-ID"),
        db: Session = Depends(get_db)
) -> Host:
    """
    Resolve the acting host from the X-Host-ID header.

    Authentication happens upstream; this only checks the host exists.
    """
    if not x_host_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Host-ID header",
        )

    try:
        host_id = UUID(x_host_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid X-Host-ID header",
        )

    host = HostService.get_host(db, host_id)
    if not host:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown host",
        )

    return host
