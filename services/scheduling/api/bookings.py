import uuid
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from services.scheduling.api.auth import get_user_id_from_request
from services.scheduling.container import ServiceContainer, get_container
from services.scheduling.models import BookingStatus
from services.scheduling.schemas import (
    AddGuestsRequest,
    AvailableSlotResponse,
    BookingResponse,
    CancelBookingRequest,
    CreateBookingRequest,
    DataResponse,
    RescheduleBookingRequest,
    SlotAvailabilityResponse,
    SlotsResponse,
    UpdateLocationRequest,
)
from services.scheduling.schemas.common import to_naive_utc
from services.scheduling.services.repository import BookingFilters
from services.scheduling.utils.validation import validate_timezone

router = APIRouter()


@router.get("", response_model=DataResponse[List[BookingResponse]])
def list_bookings(
    status: Optional[BookingStatus] = None,
    attendee_name: Optional[str] = None,
    attendee_email: Optional[str] = None,
    event_type_id: Optional[uuid.UUID] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    booking_id: Optional[uuid.UUID] = None,
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[List[BookingResponse]]:
    """List the host's bookings, newest first, with optional filters."""
    filters = BookingFilters(
        status=status,
        attendee_name=attendee_name,
        attendee_email=attendee_email,
        event_type_id=event_type_id,
        start_from=to_naive_utc(date_from) if date_from else None,
        start_to=to_naive_utc(date_to) if date_to else None,
        booking_id=booking_id,
    )
    return DataResponse(data=container.bookings.list_bookings(user_id, filters))


@router.get("/upcoming", response_model=DataResponse[List[BookingResponse]])
def list_upcoming_bookings(
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[List[BookingResponse]]:
    return DataResponse(data=container.bookings.list_upcoming(user_id))


@router.get("/past", response_model=DataResponse[List[BookingResponse]])
def list_past_bookings(
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[List[BookingResponse]]:
    return DataResponse(data=container.bookings.list_past(user_id))


# Public booking page


@router.get("/public/{username}/{slug}/slots", response_model=DataResponse[SlotsResponse])
def get_available_slots(
    username: str,
    slug: str,
    slot_date: date = Query(..., alias="date"),
    timezone: str = "UTC",
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[SlotsResponse]:
    validate_timezone(timezone)
    event_type = container.event_types.get_public_event_type(username, slug)
    slots = container.resolver.generate_slots(event_type.id, slot_date, timezone)
    return DataResponse(
        data=SlotsResponse(
            event_type_id=event_type.id,
            date=slot_date,
            timezone=timezone,
            duration=event_type.duration,
            slots=[AvailableSlotResponse.model_validate(s) for s in slots],
        )
    )


@router.get(
    "/public/{username}/{slug}/check",
    response_model=DataResponse[SlotAvailabilityResponse],
)
def check_slot(
    username: str,
    slug: str,
    start: datetime,
    end: datetime,
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[SlotAvailabilityResponse]:
    """Tell whether an interval could be booked right now, without booking it."""
    event_type = container.event_types.get_public_event_type(username, slug)
    result = container.validator.is_slot_available(
        event_type.id, to_naive_utc(start), to_naive_utc(end)
    )
    return DataResponse(
        data=SlotAvailabilityResponse(
            available=result.available, reason=result.reason, code=result.code
        )
    )


@router.post(
    "/public/{username}/{slug}",
    response_model=DataResponse[BookingResponse],
    status_code=201,
)
def create_booking(
    username: str,
    slug: str,
    data: CreateBookingRequest,
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[BookingResponse]:
    user = container.users.get_user_by_username(username)
    booking = container.validator.validate_and_create(
        user.id, data.model_copy(update={"event_type_slug": slug})
    )
    return DataResponse(
        data=BookingResponse.model_validate(booking),
        message="Booking created successfully",
    )


# Single booking


@router.get("/{booking_id}", response_model=DataResponse[BookingResponse])
def get_booking(
    booking_id: uuid.UUID,
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[BookingResponse]:
    booking = container.bookings.get_booking(booking_id)
    return DataResponse(data=BookingResponse.model_validate(booking))


@router.put("/{booking_id}/cancel", response_model=DataResponse[BookingResponse])
def cancel_booking(
    booking_id: uuid.UUID,
    data: CancelBookingRequest,
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[BookingResponse]:
    booking = container.validator.cancel(booking_id, str(data.booker_email))
    return DataResponse(
        data=BookingResponse.model_validate(booking),
        message="Booking cancelled successfully",
    )


@router.put("/{booking_id}/reschedule", response_model=DataResponse[BookingResponse])
def reschedule_booking(
    booking_id: uuid.UUID,
    data: RescheduleBookingRequest,
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[BookingResponse]:
    booking = container.validator.reschedule(booking_id, str(data.booker_email), data)
    return DataResponse(
        data=BookingResponse.model_validate(booking),
        message="Booking rescheduled successfully",
    )


@router.put("/{booking_id}/location", response_model=DataResponse[BookingResponse])
def update_booking_location(
    booking_id: uuid.UUID,
    data: UpdateLocationRequest,
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[BookingResponse]:
    booking = container.bookings.update_location(user_id, booking_id, data)
    return DataResponse(
        data=BookingResponse.model_validate(booking),
        message="Booking location updated successfully",
    )


@router.post("/{booking_id}/guests", response_model=DataResponse[BookingResponse])
def add_booking_guests(
    booking_id: uuid.UUID,
    data: AddGuestsRequest,
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[BookingResponse]:
    booking = container.bookings.add_guests(user_id, booking_id, data)
    return DataResponse(
        data=BookingResponse.model_validate(booking),
        message="Guests added successfully",
    )
