# slotwise/schemas/host.py
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from datetime import datetime
from typing import Optional
from uuid import UUID

from slotwise.domain.value_objects import is_valid_timezone


def _check_timezone(v: str) -> str:
    if not is_valid_timezone(v):
        raise ValueError(f"Invalid timezone: {v}")
    return v


class HostCreate(BaseModel):
    """Register a host"""
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    slug: Optional[str] = Field(None, max_length=100, description="Public link name, derived from the name if omitted")
    timezone: Optional[str] = Field(None, description="IANA timezone, e.g. America/New_York")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        return _check_timezone(v) if v is not None else v


class HostTimezoneUpdate(BaseModel):
    timezone: str = Field(..., description="IANA timezone, e.g. America/New_York")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        return _check_timezone(v)


class HostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    slug: str
    timezone: str
    created_at: Optional[datetime] = None
