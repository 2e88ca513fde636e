"""
Availability schedule management.

A user has at most one default schedule. Writes that make a schedule default
clear the flag on the user's other schedules in the same transaction, and
deleting the default promotes the oldest remaining schedule.
"""

import uuid
from typing import List, Sequence

from sqlalchemy.orm import Session

from services.common.http_errors import (
    ErrorCode,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from services.common.logging_config import get_logger
from services.scheduling.models import Schedule, ScheduleSlot
from services.scheduling.schemas.schedules import (
    CreateScheduleRequest,
    ScheduleSlotIn,
    UpdateScheduleRequest,
)
from services.scheduling.services.repository import SchedulingStore
from services.scheduling.services.slot_rules import SlotLike, validate_slots
from services.scheduling.utils.validation import validate_timezone

logger = get_logger(__name__)


def check_slots(slots: Sequence[SlotLike]) -> None:
    errors = validate_slots(slots)
    if errors:
        raise ValidationError(
            f"Slot validation failed: {', '.join(errors)}",
            field="slots",
            details={"errors": errors},
            code=ErrorCode.INVALID_SCHEDULE_SLOTS,
        )


def build_slots(slots: Sequence[SlotLike]) -> List[ScheduleSlot]:
    return [
        ScheduleSlot(
            day_of_week=slot.day_of_week,
            start_time=slot.start_time,
            end_time=slot.end_time,
        )
        for slot in slots
    ]


class ScheduleService:
    def __init__(self, store: SchedulingStore):
        self._store = store

    def create_schedule(
        self, user_id: uuid.UUID, data: CreateScheduleRequest
    ) -> Schedule:
        timezone = validate_timezone(data.timezone or "UTC")
        if data.slots:
            check_slots(data.slots)

        with self._store.session() as session:
            if self._store.get_user(session, user_id) is None:
                raise NotFoundError("User", str(user_id))
            return self.add_schedule(
                session,
                user_id,
                name=data.name,
                timezone=timezone,
                is_default=data.is_default,
                slots=data.slots,
            )

    def add_schedule(
        self,
        session: Session,
        user_id: uuid.UUID,
        *,
        name: str,
        timezone: str,
        is_default: bool,
        slots: Sequence[SlotLike],
    ) -> Schedule:
        """Insert a schedule in an open session; the first one becomes default."""
        if not is_default and not self._store.list_schedules(session, user_id):
            is_default = True
        if is_default:
            self._store.clear_default_schedules(session, user_id)

        schedule = Schedule(
            user_id=user_id,
            name=name,
            timezone=timezone,
            is_default=is_default,
            slots=build_slots(slots),
        )
        self._store.add(session, schedule)
        logger.info(
            "Schedule created",
            schedule_id=str(schedule.id),
            user_id=str(user_id),
            is_default=is_default,
            slots=len(schedule.slots),
        )
        return schedule

    def list_schedules(self, user_id: uuid.UUID) -> List[Schedule]:
        with self._store.session() as session:
            return self._store.list_schedules(session, user_id)

    def get_schedule(self, user_id: uuid.UUID, schedule_id: uuid.UUID) -> Schedule:
        with self._store.session() as session:
            return self._owned(session, user_id, schedule_id)

    def update_schedule(
        self,
        user_id: uuid.UUID,
        schedule_id: uuid.UUID,
        data: UpdateScheduleRequest,
    ) -> Schedule:
        if data.timezone is not None:
            validate_timezone(data.timezone)
        if data.slots is not None:
            if not data.slots:
                raise ValidationError(
                    "At least one time slot is required",
                    field="slots",
                    code=ErrorCode.INVALID_SCHEDULE_SLOTS,
                )
            check_slots(data.slots)

        with self._store.session() as session:
            schedule = self._owned(session, user_id, schedule_id)
            if data.is_default:
                self._store.clear_default_schedules(
                    session, schedule.user_id, keep_id=schedule.id
                )
                schedule.is_default = True
            elif data.is_default is False:
                schedule.is_default = False
            if data.name is not None:
                schedule.name = data.name
            if data.timezone is not None:
                schedule.timezone = data.timezone
            if data.slots is not None:
                # Replaced wholesale; delete-orphan removes the old rows
                schedule.slots = build_slots(data.slots)
            session.flush()
            logger.info("Schedule updated", schedule_id=str(schedule_id))
            return schedule

    def duplicate_schedule(
        self, user_id: uuid.UUID, schedule_id: uuid.UUID, name: str | None = None
    ) -> Schedule:
        with self._store.session() as session:
            original = self._owned(session, user_id, schedule_id)
            copy = Schedule(
                user_id=original.user_id,
                name=name or f"{original.name} (Copy)",
                timezone=original.timezone,
                is_default=False,
                slots=build_slots(original.slots),
            )
            self._store.add(session, copy)
            logger.info(
                "Schedule duplicated",
                schedule_id=str(schedule_id),
                copy_id=str(copy.id),
            )
            return copy

    def delete_schedule(self, user_id: uuid.UUID, schedule_id: uuid.UUID) -> None:
        with self._store.session() as session:
            schedule = self._owned(session, user_id, schedule_id)
            was_default = schedule.is_default
            self._store.unlink_schedule(session, schedule_id)
            session.delete(schedule)
            session.flush()

            promoted = None
            if was_default:
                remaining = sorted(
                    self._store.list_schedules(session, user_id),
                    key=lambda s: s.created_at,
                )
                if remaining:
                    promoted = remaining[0]
                    promoted.is_default = True
            logger.info(
                "Schedule deleted",
                schedule_id=str(schedule_id),
                promoted_id=str(promoted.id) if promoted else None,
            )

    def set_default(self, user_id: uuid.UUID, schedule_id: uuid.UUID) -> Schedule:
        with self._store.session() as session:
            schedule = self._owned(session, user_id, schedule_id)
            self._store.clear_default_schedules(
                session, schedule.user_id, keep_id=schedule.id
            )
            schedule.is_default = True
            session.flush()
            logger.info("Default schedule set", schedule_id=str(schedule_id))
            return schedule

    def _owned(
        self, session: Session, user_id: uuid.UUID, schedule_id: uuid.UUID
    ) -> Schedule:
        schedule = self._store.get_schedule(session, schedule_id)
        if schedule is None:
            raise NotFoundError("Schedule", str(schedule_id))
        if schedule.user_id != user_id:
            raise ForbiddenError("Schedule belongs to another user")
        return schedule


def default_working_hours() -> List[ScheduleSlotIn]:
    """Monday to Friday, 09:00 to 17:00."""
    return [
        ScheduleSlotIn(day_of_week=day, start_time="09:00", end_time="17:00")
        for day in range(1, 6)
    ]
