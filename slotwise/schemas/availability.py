# slotwise/schemas/availability.py
from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional, List
from datetime import date, datetime, time
from enum import Enum
from uuid import UUID


class WeeklyRuleUpdate(BaseModel):
    """Hours for one weekday"""
    day_of_week: int = Field(..., ge=0, le=6, description="0=Monday, 6=Sunday")
    start_time: time = Field(..., description="Host-local start, HH:MM")
    end_time: time = Field(..., description="Host-local end, HH:MM")
    is_enabled: bool = Field(True)


class WeeklyAvailabilityUpdate(BaseModel):
    days: List[WeeklyRuleUpdate] = Field(..., min_length=1, max_length=7)


class WeeklyRuleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    day_of_week: int
    start_time: time
    end_time: time
    is_enabled: bool


class OverrideType(str, Enum):
    BLOCKED_DAY = "blocked_day"
    BLOCKED_TIME = "blocked_time"
    EXTRA_AVAILABILITY = "extra_availability"


class OverrideCreate(BaseModel):
    """Date-specific override"""
    date: date
    type: OverrideType
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    reason: Optional[str] = Field(None, max_length=200)

    @model_validator(mode="after")
    def times_match_type(self) -> "OverrideCreate":
        if self.type != OverrideType.BLOCKED_DAY and (self.start_time is None or self.end_time is None):
            raise ValueError("Start and end time are required for this override type")
        return self


class OverrideResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    date: date
    is_blocked: bool
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    reason: Optional[str] = None


class SlotResponse(BaseModel):
    """Available slot, labelled in the guest's timezone"""
    start_time: str = Field(..., description="Guest-local start, HH:MM")
    end_time: str = Field(..., description="Guest-local end, HH:MM")
    start_time_utc: datetime
    end_time_utc: datetime
    is_available: bool = True


class AvailableSlotsResponse(BaseModel):
    event_type_id: UUID
    date: date
    timezone: str
    slots: List[SlotResponse] = Field(default_factory=list)


class DateAvailability(BaseModel):
    date: date
    day_of_week: int
    has_availability: bool
    available_slot_count: int


class AvailableDatesResponse(BaseModel):
    event_type_id: UUID
    from_date: date
    to_date: date
    timezone: str
    dates: List[DateAvailability] = Field(default_factory=list)
