from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from services.scheduling.models import LocationKind


class CreateEventTypeRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    slug: str = Field(..., min_length=1, max_length=100)
    duration: int = Field(..., description="Meeting duration in minutes")
    buffer_time: int = Field(0, ge=0, le=240, description="Buffer around meetings")
    max_bookings_per_day: Optional[int] = Field(None, ge=1)
    location_kind: LocationKind = LocationKind.meet
    location_value: Optional[str] = Field(None, max_length=500)
    is_active: bool = True
    schedule_id: Optional[UUID] = None


class UpdateEventTypeRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    slug: Optional[str] = Field(None, min_length=1, max_length=100)
    duration: Optional[int] = None
    buffer_time: Optional[int] = Field(None, ge=0, le=240)
    max_bookings_per_day: Optional[int] = Field(None, ge=1)
    location_kind: Optional[LocationKind] = None
    location_value: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None
    schedule_id: Optional[UUID] = None


class EventTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    title: str
    description: Optional[str]
    slug: str
    duration: int
    buffer_time: int
    max_bookings_per_day: Optional[int]
    location_kind: LocationKind
    location_value: Optional[str]
    is_active: bool
    schedule_id: Optional[UUID]
    created_at: datetime
    updated_at: datetime
