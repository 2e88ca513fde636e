"""
Booking queries and host-side booking edits.

The unfiltered, upcoming and past lists are read through the booking cache.
Every write invalidates the owning user's cached lists.
"""

import uuid
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from services.common.http_errors import ForbiddenError, NotFoundError
from services.common.logging_config import get_logger
from services.scheduling.models import Booking, utc_now
from services.scheduling.schemas.bookings import (
    AddGuestsRequest,
    BookingResponse,
    UpdateLocationRequest,
)
from services.scheduling.services.booking_validator import resolve_location
from services.scheduling.services.cache import (
    BookingCache,
    booking_list_key,
    booking_list_keys,
)
from services.scheduling.services.repository import BookingFilters, SchedulingStore

logger = get_logger(__name__)


class BookingService:
    def __init__(
        self,
        store: SchedulingStore,
        cache: BookingCache,
        clock: Callable[[], datetime] = utc_now,
        cache_ttl_seconds: int = 60,
    ):
        self._store = store
        self._cache = cache
        self._clock = clock
        self._ttl = cache_ttl_seconds

    def get_booking(self, booking_id: uuid.UUID) -> Booking:
        with self._store.session() as session:
            booking = self._store.get_booking(session, booking_id)
            if booking is None:
                raise NotFoundError("Booking", str(booking_id))
            return booking

    def list_bookings(
        self, user_id: uuid.UUID, filters: Optional[BookingFilters] = None
    ) -> List[BookingResponse]:
        if filters is None or filters == BookingFilters():
            return self._cached(user_id, "all")
        with self._store.session() as session:
            bookings = self._store.list_bookings(session, user_id, filters)
            return [BookingResponse.model_validate(b) for b in bookings]

    def list_upcoming(self, user_id: uuid.UUID) -> List[BookingResponse]:
        return self._cached(user_id, "upcoming")

    def list_past(self, user_id: uuid.UUID) -> List[BookingResponse]:
        return self._cached(user_id, "past")

    def update_location(
        self, host_id: uuid.UUID, booking_id: uuid.UUID, data: UpdateLocationRequest
    ) -> Booking:
        with self._store.session() as session:
            booking = self._host_booking(session, host_id, booking_id)
            kind, value = resolve_location(
                booking.event_type, data.location_kind, data.location_value
            )
            booking.location_kind = kind
            booking.location_value = value
            session.flush()

        self._invalidate(booking.user_id)
        logger.info(
            "Booking location updated",
            booking_id=str(booking_id),
            location_kind=booking.location_kind.value,
        )
        return booking

    def add_guests(
        self, host_id: uuid.UUID, booking_id: uuid.UUID, data: AddGuestsRequest
    ) -> Booking:
        with self._store.session() as session:
            booking = self._host_booking(session, host_id, booking_id)
            guests = list(booking.guests or [])
            seen = {guest.lower() for guest in guests}
            for guest in data.guests:
                email = str(guest)
                if email.lower() not in seen:
                    seen.add(email.lower())
                    guests.append(email)
            # Reassign so the JSON column is marked dirty
            booking.guests = guests
            session.flush()

        self._invalidate(booking.user_id)
        logger.info(
            "Booking guests added", booking_id=str(booking_id), guests=len(guests)
        )
        return booking

    def _host_booking(
        self, session: Session, host_id: uuid.UUID, booking_id: uuid.UUID
    ) -> Booking:
        booking = self._store.get_booking(session, booking_id)
        if booking is None:
            raise NotFoundError("Booking", str(booking_id))
        if booking.user_id != host_id:
            raise ForbiddenError("Only the host can modify this booking")
        return booking

    def _cached(self, user_id: uuid.UUID, kind: str) -> List[BookingResponse]:
        key = booking_list_key(user_id, kind)
        cached = self._cache.get(key)
        if cached is not None:
            return [BookingResponse.model_validate(item) for item in cached]

        with self._store.session() as session:
            if kind == "upcoming":
                bookings = self._store.list_upcoming(session, user_id, self._clock())
            elif kind == "past":
                bookings = self._store.list_past(session, user_id, self._clock())
            else:
                bookings = self._store.list_bookings(session, user_id)
            responses = [BookingResponse.model_validate(b) for b in bookings]

        self._cache.set(
            key, [r.model_dump(mode="json") for r in responses], self._ttl
        )
        return responses

    def _invalidate(self, user_id: uuid.UUID) -> None:
        for key in booking_list_keys(user_id):
            self._cache.invalidate(key)
