"""
Booking conflict validation and the booking state transitions.

Two validation profiles exist and are deliberately different:

``ValidationProfile.CREATE``
    Event type bookable, start in the future, duration, slot membership,
    overlap with the user's confirmed bookings, per-day cap, buffer margin
    and location.

``ValidationProfile.RESCHEDULE``
    Ownership, not cancelled, and overlap with the other confirmed bookings of
    the same event type. Slot membership and the per-day cap are not checked
    again when a booking is moved.

Every write runs in one store session that first takes the owning user's
booking lock, so the checks and the insert or update see a stable set of
bookings.
"""

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Callable, Optional, Tuple

from sqlalchemy.orm import Session

from services.common.http_errors import (
    CadenceAPIException,
    ErrorCode,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from services.common.logging_config import get_logger
from services.scheduling.models import (
    Booking,
    BookingStatus,
    EventType,
    LocationKind,
    Schedule,
    utc_now,
)
from services.scheduling.schemas.bookings import (
    CreateBookingRequest,
    RescheduleBookingRequest,
)
from services.scheduling.services.cache import BookingCache, booking_list_keys
from services.scheduling.services.repository import SchedulingStore
from services.scheduling.services.slot_rules import (
    day_of_week,
    is_within_availability,
    minutes_of_day,
    slots_for_day,
)

logger = get_logger(__name__)

LOCATION_REQUIRED_KINDS = (LocationKind.in_person, LocationKind.phone)


class ValidationProfile(str, enum.Enum):
    CREATE = "create"
    RESCHEDULE = "reschedule"


@dataclass(frozen=True)
class SlotAvailability:
    available: bool
    reason: Optional[str] = None
    code: Optional[str] = None


def resolve_location(
    event_type: Optional[EventType],
    kind: Optional[LocationKind],
    value: Optional[str],
) -> Tuple[LocationKind, Optional[str]]:
    """
    Pick the booking location, defaulting to the event type's.

    The event type's location value is only inherited when the kind is
    inherited or unchanged.
    """
    default_kind = event_type.location_kind if event_type else LocationKind.meet
    resolved_kind = kind or default_kind
    if value is None and event_type is not None and resolved_kind == default_kind:
        value = event_type.location_value
    if resolved_kind in LOCATION_REQUIRED_KINDS and not (value or "").strip():
        raise ValidationError(
            "Location is required for in-person and phone meetings",
            field="location_value",
            code=ErrorCode.LOCATION_REQUIRED,
        )
    return resolved_kind, value


class BookingConflictValidator:
    def __init__(
        self,
        store: SchedulingStore,
        cache: BookingCache,
        clock: Callable[[], datetime] = utc_now,
        duration_tolerance_minutes: int = 1,
    ):
        self._store = store
        self._cache = cache
        self._clock = clock
        self._tolerance = duration_tolerance_minutes

    def validate_and_create(
        self, user_id: uuid.UUID, data: CreateBookingRequest
    ) -> Booking:
        """Run the create profile and persist a confirmed booking."""
        try:
            with self._store.session() as session:
                if not self._store.lock_user(session, user_id):
                    raise NotFoundError("User", str(user_id))
                if not data.event_type_slug:
                    raise ValidationError(
                        "Event type slug is required", field="event_type_slug"
                    )
                event_type = self._store.get_event_type_by_slug(
                    session, user_id, data.event_type_slug
                )
                if event_type is None:
                    raise NotFoundError("Event type", data.event_type_slug)

                schedule = self._bookable_schedule(session, event_type)
                self._check_time_range(data.start_time, data.end_time)
                self._check_create_rules(
                    session, event_type, schedule, data.start_time, data.end_time
                )
                location_kind, location_value = resolve_location(
                    event_type, data.location_kind, data.location_value
                )

                booking = Booking(
                    event_type=event_type,
                    user_id=user_id,
                    booker_name=data.booker_name,
                    booker_email=str(data.booker_email),
                    booker_phone=data.booker_phone,
                    start_time=data.start_time,
                    end_time=data.end_time,
                    timezone=data.timezone,
                    location_kind=location_kind,
                    location_value=location_value,
                    guests=[str(guest) for guest in data.guests],
                    notes=data.notes,
                    status=BookingStatus.confirmed,
                )
                self._store.add(session, booking)
        except CadenceAPIException as e:
            logger.info(
                "Booking rejected",
                profile=ValidationProfile.CREATE.value,
                user_id=str(user_id),
                event_type_slug=data.event_type_slug,
                code=e.code,
                reason=e.message,
            )
            raise

        self.invalidate_user_cache(user_id)
        logger.info(
            "Booking created",
            booking_id=str(booking.id),
            user_id=str(user_id),
            event_type_id=str(booking.event_type_id),
            start_time=booking.start_time.isoformat(),
        )
        return booking

    def is_slot_available(
        self, event_type_id: uuid.UUID, start: datetime, end: datetime
    ) -> SlotAvailability:
        """Dry run of the create profile for an interval, without writing."""
        try:
            with self._store.session() as session:
                event_type = self._store.get_event_type(session, event_type_id)
                if event_type is None:
                    raise NotFoundError("Event type", str(event_type_id))
                schedule = self._bookable_schedule(session, event_type)
                self._check_time_range(start, end)
                self._check_create_rules(session, event_type, schedule, start, end)
        except CadenceAPIException as e:
            return SlotAvailability(available=False, reason=e.message, code=e.code)
        return SlotAvailability(available=True)

    def reschedule(
        self,
        booking_id: uuid.UUID,
        booker_email: str,
        data: RescheduleBookingRequest,
    ) -> Booking:
        """Run the reschedule profile and move the booking."""
        with self._store.session() as session:
            booking = self._locked_booking(session, booking_id)
            self._check_ownership(booking, booker_email)
            if booking.status == BookingStatus.cancelled:
                raise InvalidStateError(
                    "Cannot reschedule a cancelled booking",
                    details={"booking_id": str(booking_id)},
                    code=ErrorCode.BOOKING_ALREADY_CANCELLED,
                )
            self._check_time_range(data.start_time, data.end_time)

            conflict = self._store.find_overlapping_confirmed(
                session,
                data.start_time,
                data.end_time,
                user_id=booking.user_id,
                event_type_id=booking.event_type_id,
                exclude_booking_id=booking.id,
            )
            if conflict is not None:
                raise ValidationError(
                    "This time slot is already booked",
                    field="start_time",
                    code=ErrorCode.SLOT_ALREADY_BOOKED,
                )

            booking.start_time = data.start_time
            booking.end_time = data.end_time
            booking.status = BookingStatus.rescheduled
            if data.reason:
                prefix = f"[Rescheduled] {data.reason}"
                booking.notes = f"{prefix}\n\n{booking.notes}" if booking.notes else prefix
            session.flush()

        self.invalidate_user_cache(booking.user_id)
        logger.info(
            "Booking rescheduled",
            booking_id=str(booking.id),
            start_time=booking.start_time.isoformat(),
        )
        return booking

    def cancel(self, booking_id: uuid.UUID, booker_email: str) -> Booking:
        with self._store.session() as session:
            booking = self._locked_booking(session, booking_id)
            self._check_ownership(booking, booker_email)
            if booking.status == BookingStatus.cancelled:
                raise InvalidStateError(
                    "Booking is already cancelled",
                    details={"booking_id": str(booking_id)},
                    code=ErrorCode.BOOKING_ALREADY_CANCELLED,
                )
            if booking.start_time <= self._clock():
                raise InvalidStateError(
                    "Cannot cancel a booking that has already started",
                    details={"booking_id": str(booking_id)},
                    code=ErrorCode.BOOKING_ALREADY_STARTED,
                )
            booking.status = BookingStatus.cancelled
            session.flush()

        self.invalidate_user_cache(booking.user_id)
        logger.info("Booking cancelled", booking_id=str(booking.id))
        return booking

    def invalidate_user_cache(self, user_id: uuid.UUID) -> None:
        for key in booking_list_keys(user_id):
            self._cache.invalidate(key)

    def _locked_booking(self, session: Session, booking_id: uuid.UUID) -> Booking:
        owner_id = self._store.get_booking_owner(session, booking_id)
        if owner_id is None:
            raise NotFoundError("Booking", str(booking_id))
        self._store.lock_user(session, owner_id)
        booking = self._store.get_booking(session, booking_id)
        if booking is None:
            raise NotFoundError("Booking", str(booking_id))
        return booking

    def _check_ownership(self, booking: Booking, booker_email: str) -> None:
        if booking.booker_email.lower() != (booker_email or "").lower():
            raise ForbiddenError(
                "Booker email does not match this booking",
                details={"booking_id": str(booking.id)},
                code=ErrorCode.BOOKER_EMAIL_MISMATCH,
            )

    def _bookable_schedule(self, session: Session, event_type: EventType) -> Schedule:
        if not event_type.is_active:
            raise InvalidStateError(
                "Event type is not active",
                details={"event_type_id": str(event_type.id)},
                code=ErrorCode.EVENT_TYPE_INACTIVE,
            )
        schedule = None
        if event_type.schedule_id is not None:
            schedule = self._store.get_schedule(session, event_type.schedule_id)
        if schedule is None:
            raise InvalidStateError(
                "Event type has no availability schedule",
                details={"event_type_id": str(event_type.id)},
                code=ErrorCode.EVENT_TYPE_NO_SCHEDULE,
            )
        return schedule

    def _check_time_range(self, start: datetime, end: datetime) -> None:
        if end <= start:
            raise ValidationError(
                "End time must be after start time",
                field="end_time",
                code=ErrorCode.INVALID_TIME_RANGE,
            )

    def _check_create_rules(
        self,
        session: Session,
        event_type: EventType,
        schedule: Schedule,
        start: datetime,
        end: datetime,
    ) -> None:
        if start <= self._clock():
            raise ValidationError(
                "Cannot book in the past",
                field="start_time",
                value=start.isoformat(),
                code=ErrorCode.BOOKING_IN_PAST,
            )

        length = (end - start).total_seconds() / 60
        if abs(length - event_type.duration) > self._tolerance:
            raise ValidationError(
                f"Booking duration must be {event_type.duration} minutes",
                details={"expected": event_type.duration, "actual": length},
                code=ErrorCode.DURATION_MISMATCH,
            )

        dow = day_of_week(start.date())
        if not slots_for_day(schedule.slots, dow):
            raise ValidationError(
                "No availability on this day of week",
                field="start_time",
                code=ErrorCode.NO_AVAILABILITY_ON_DAY,
            )
        start_minute = minutes_of_day(start)
        end_minute = start_minute + int((end - start).total_seconds() // 60)
        if not is_within_availability(dow, start_minute, end_minute, schedule.slots):
            raise ValidationError(
                "Booking time is outside available slots for this day",
                field="start_time",
                code=ErrorCode.OUTSIDE_AVAILABILITY,
            )

        if self._store.find_overlapping_confirmed(
            session, start, end, user_id=event_type.user_id
        ):
            raise ValidationError(
                "This time slot is already booked",
                field="start_time",
                code=ErrorCode.SLOT_ALREADY_BOOKED,
            )

        if event_type.max_bookings_per_day:
            day_start = datetime.combine(start.date(), time.min)
            day_end = datetime.combine(start.date(), time.max)
            booked = self._store.count_confirmed_for_event_type(
                session, event_type.id, day_start, day_end
            )
            if booked >= event_type.max_bookings_per_day:
                raise ValidationError(
                    f"Maximum bookings per day ({event_type.max_bookings_per_day}) "
                    "reached for this event type",
                    details={"limit": event_type.max_bookings_per_day},
                    code=ErrorCode.MAX_BOOKINGS_PER_DAY,
                )

        if event_type.buffer_time > 0:
            buffer = timedelta(minutes=event_type.buffer_time)
            if self._store.find_overlapping_confirmed(
                session, start - buffer, end + buffer, user_id=event_type.user_id
            ):
                raise ValidationError(
                    f"Booking must be at least {event_type.buffer_time} minutes "
                    "away from other bookings",
                    details={"buffer_time": event_type.buffer_time},
                    code=ErrorCode.BUFFER_CONFLICT,
                )
