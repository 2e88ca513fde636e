import datetime as dt
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from services.scheduling.models import BookingStatus, LocationKind
from services.scheduling.schemas.common import to_naive_utc


class CreateBookingRequest(BaseModel):
    # Filled from the public URL when booking through /public/{username}/{slug}
    event_type_slug: Optional[str] = None
    booker_name: str = Field(..., min_length=1, max_length=255)
    booker_email: EmailStr
    booker_phone: Optional[str] = Field(None, max_length=50)
    start_time: datetime
    end_time: datetime
    timezone: str = "UTC"
    location_kind: Optional[LocationKind] = None
    location_value: Optional[str] = Field(None, max_length=500)
    guests: List[EmailStr] = Field(default_factory=list)
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, v: datetime) -> datetime:
        return to_naive_utc(v)


class RescheduleBookingRequest(BaseModel):
    booker_email: EmailStr
    start_time: datetime
    end_time: datetime
    reason: Optional[str] = Field(None, max_length=500)

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, v: datetime) -> datetime:
        return to_naive_utc(v)


class CancelBookingRequest(BaseModel):
    booker_email: EmailStr


class UpdateLocationRequest(BaseModel):
    location_kind: LocationKind
    location_value: Optional[str] = Field(None, max_length=500)


class AddGuestsRequest(BaseModel):
    guests: List[EmailStr] = Field(..., min_length=1)


class BookingEventTypeSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    slug: str
    duration: int


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_type_id: Optional[UUID]
    user_id: UUID
    booker_name: str
    booker_email: str
    booker_phone: Optional[str]
    start_time: datetime
    end_time: datetime
    timezone: str
    location_kind: LocationKind
    location_value: Optional[str]
    guests: List[str]
    notes: Optional[str]
    status: BookingStatus
    created_at: datetime
    updated_at: datetime
    event_type: Optional[BookingEventTypeSummary] = None


class AvailableSlotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    start_time: datetime
    end_time: datetime
    available: bool


class SlotsResponse(BaseModel):
    event_type_id: UUID
    date: dt.date
    timezone: str
    duration: int
    slots: List[AvailableSlotResponse]


class SlotAvailabilityResponse(BaseModel):
    available: bool
    reason: Optional[str] = None
    code: Optional[str] = None
