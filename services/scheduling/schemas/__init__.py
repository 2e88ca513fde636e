"""
Scheduling service request and response schemas.
"""

from services.scheduling.schemas.bookings import (
    AddGuestsRequest,
    AvailableSlotResponse,
    BookingResponse,
    CancelBookingRequest,
    CreateBookingRequest,
    RescheduleBookingRequest,
    SlotAvailabilityResponse,
    SlotsResponse,
    UpdateLocationRequest,
)
from services.scheduling.schemas.common import DataResponse, MessageResponse
from services.scheduling.schemas.event_types import (
    CreateEventTypeRequest,
    EventTypeResponse,
    UpdateEventTypeRequest,
)
from services.scheduling.schemas.schedules import (
    CreateScheduleRequest,
    DuplicateScheduleRequest,
    ScheduleResponse,
    ScheduleSlotIn,
    UpdateScheduleRequest,
)
from services.scheduling.schemas.users import (
    CreateUserRequest,
    UpdateUserRequest,
    UserResponse,
)

__all__ = [
    "AddGuestsRequest",
    "AvailableSlotResponse",
    "BookingResponse",
    "CancelBookingRequest",
    "CreateBookingRequest",
    "CreateEventTypeRequest",
    "CreateScheduleRequest",
    "CreateUserRequest",
    "DataResponse",
    "DuplicateScheduleRequest",
    "EventTypeResponse",
    "MessageResponse",
    "RescheduleBookingRequest",
    "ScheduleResponse",
    "ScheduleSlotIn",
    "SlotAvailabilityResponse",
    "SlotsResponse",
    "UpdateEventTypeRequest",
    "UpdateLocationRequest",
    "UpdateScheduleRequest",
    "UpdateUserRequest",
    "UserResponse",
]
