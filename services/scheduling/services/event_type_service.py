"""
Event type management.
"""

import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from services.common.http_errors import (
    ConflictError,
    ErrorCode,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from services.common.logging_config import get_logger
from services.scheduling.models import EventType, LocationKind, Schedule, utc_now
from services.scheduling.schemas.event_types import (
    CreateEventTypeRequest,
    UpdateEventTypeRequest,
)
from services.scheduling.services.booking_validator import LOCATION_REQUIRED_KINDS
from services.scheduling.services.repository import SchedulingStore
from services.scheduling.services.slot_rules import duration_fits_any_slot
from services.scheduling.utils.validation import validate_duration, validate_slug

logger = get_logger(__name__)

NON_NULLABLE_FIELDS = (
    "title",
    "slug",
    "duration",
    "buffer_time",
    "location_kind",
    "is_active",
)


class EventTypeService:
    def __init__(
        self, store: SchedulingStore, clock: Callable[[], datetime] = utc_now
    ):
        self._store = store
        self._clock = clock

    def create_event_type(
        self, user_id: uuid.UUID, data: CreateEventTypeRequest
    ) -> EventType:
        validate_slug(data.slug)
        validate_duration(data.duration)
        self._check_location(data.location_kind, data.location_value)

        with self._store.session() as session:
            if self._store.get_user(session, user_id) is None:
                raise NotFoundError("User", str(user_id))
            self._check_slug_free(session, user_id, data.slug)

            if data.schedule_id is not None:
                schedule = self._owned_schedule(session, user_id, data.schedule_id)
            else:
                schedule = self._store.get_default_schedule(session, user_id)
            if schedule is not None:
                self._check_duration_fits(data.duration, schedule)

            event_type = EventType(
                user_id=user_id,
                title=data.title,
                description=data.description,
                slug=data.slug,
                duration=data.duration,
                buffer_time=data.buffer_time,
                max_bookings_per_day=data.max_bookings_per_day,
                location_kind=data.location_kind,
                location_value=data.location_value,
                is_active=data.is_active,
                schedule_id=schedule.id if schedule is not None else None,
            )
            self._store.add(session, event_type)
            logger.info(
                "Event type created",
                event_type_id=str(event_type.id),
                slug=event_type.slug,
                schedule_id=str(event_type.schedule_id),
            )
            return event_type

    def list_event_types(self, user_id: uuid.UUID) -> List[EventType]:
        with self._store.session() as session:
            return self._store.list_event_types(session, user_id)

    def get_event_type(
        self, user_id: uuid.UUID, event_type_id: uuid.UUID
    ) -> EventType:
        with self._store.session() as session:
            return self._owned(session, user_id, event_type_id)

    def get_public_event_type(self, username: str, slug: str) -> EventType:
        with self._store.session() as session:
            user = self._store.get_user_by_username(session, username)
            if user is None:
                raise NotFoundError("User", username)
            event_type = self._store.get_event_type_by_slug(session, user.id, slug)
            if event_type is None:
                raise NotFoundError("Event type", slug)
            return event_type

    def update_event_type(
        self,
        user_id: uuid.UUID,
        event_type_id: uuid.UUID,
        data: UpdateEventTypeRequest,
    ) -> EventType:
        changes: Dict[str, Any] = data.model_dump(exclude_unset=True)
        for field in NON_NULLABLE_FIELDS:
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be null", field=field)
        if "slug" in changes:
            validate_slug(changes["slug"])
        if "duration" in changes:
            validate_duration(changes["duration"])

        with self._store.session() as session:
            event_type = self._owned(session, user_id, event_type_id)
            if "slug" in changes and changes["slug"] != event_type.slug:
                self._check_slug_free(session, user_id, changes["slug"])

            location_kind = changes.get("location_kind", event_type.location_kind)
            location_value = changes.get("location_value", event_type.location_value)
            self._check_location(location_kind, location_value)

            schedule_id = changes.get("schedule_id", event_type.schedule_id)
            if schedule_id is not None and (
                "schedule_id" in changes or "duration" in changes
            ):
                schedule = self._owned_schedule(session, user_id, schedule_id)
                self._check_duration_fits(
                    changes.get("duration", event_type.duration), schedule
                )

            for field, value in changes.items():
                setattr(event_type, field, value)
            session.flush()
            logger.info(
                "Event type updated",
                event_type_id=str(event_type_id),
                fields=sorted(changes),
            )
            return event_type

    def delete_event_type(self, user_id: uuid.UUID, event_type_id: uuid.UUID) -> None:
        with self._store.session() as session:
            event_type = self._owned(session, user_id, event_type_id)
            upcoming = self._store.count_upcoming_confirmed(
                session, event_type.id, self._clock()
            )
            if upcoming:
                raise InvalidStateError(
                    f"Cannot delete event type with {upcoming} upcoming booking(s)",
                    details={"upcoming_bookings": upcoming},
                    code=ErrorCode.EVENT_TYPE_HAS_UPCOMING_BOOKINGS,
                )
            session.delete(event_type)
            logger.info("Event type deleted", event_type_id=str(event_type_id))

    def _owned(
        self, session: Session, user_id: uuid.UUID, event_type_id: uuid.UUID
    ) -> EventType:
        event_type = self._store.get_event_type(session, event_type_id)
        if event_type is None:
            raise NotFoundError("Event type", str(event_type_id))
        if event_type.user_id != user_id:
            raise ForbiddenError("Event type belongs to another user")
        return event_type

    def _owned_schedule(
        self, session: Session, user_id: uuid.UUID, schedule_id: uuid.UUID
    ) -> Schedule:
        schedule = self._store.get_schedule(session, schedule_id)
        if schedule is None or schedule.user_id != user_id:
            raise NotFoundError("Schedule", str(schedule_id))
        return schedule

    def _check_slug_free(self, session: Session, user_id: uuid.UUID, slug: str) -> None:
        if self._store.get_event_type_by_slug(session, user_id, slug) is not None:
            raise ConflictError(
                "Event type with this slug already exists",
                details={"slug": slug},
            )

    @staticmethod
    def _check_location(kind: LocationKind, value: Optional[str]) -> None:
        if kind in LOCATION_REQUIRED_KINDS and not (value or "").strip():
            raise ValidationError(
                "Location is required for in-person and phone meetings",
                field="location_value",
                code=ErrorCode.LOCATION_REQUIRED,
            )

    @staticmethod
    def _check_duration_fits(duration: int, schedule: Schedule) -> None:
        if not duration_fits_any_slot(duration, schedule.slots):
            raise ValidationError(
                f"Duration of {duration} minutes does not fit in any slot of "
                f"schedule '{schedule.name}'",
                field="duration",
                value=duration,
                code=ErrorCode.DURATION_DOES_NOT_FIT,
            )
