from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

HH_MM = r"^([01]\d|2[0-3]):[0-5]\d$"


class ScheduleSlotIn(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday .. 6 = Saturday")
    start_time: str = Field(..., pattern=HH_MM, description="Start time in HH:MM format")
    end_time: str = Field(..., pattern=HH_MM, description="End time in HH:MM format")


class CreateScheduleRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    timezone: str = "UTC"
    is_default: bool = False
    slots: List[ScheduleSlotIn] = Field(default_factory=list)


class UpdateScheduleRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    timezone: Optional[str] = None
    is_default: Optional[bool] = None
    # Replaces all slots when given
    slots: Optional[List[ScheduleSlotIn]] = None


class ScheduleSlotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    day_of_week: int
    start_time: str
    end_time: str


class ScheduleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    name: str
    timezone: str
    is_default: bool
    slots: List[ScheduleSlotResponse]
    created_at: datetime
    updated_at: datetime


class DuplicateScheduleRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
