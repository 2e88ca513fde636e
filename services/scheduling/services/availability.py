"""
Bookable slot generation for an event type on a given date.

Slot boundaries are wall-clock times on the requested date and are compared
with stored booking times as naive datetimes. The ``timezone`` argument is
validated and carried through for display only.
"""

import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Callable, List

from services.common.http_errors import NotFoundError
from services.common.logging_config import get_logger
from services.scheduling.models import utc_now
from services.scheduling.services.repository import SchedulingStore
from services.scheduling.services.slot_rules import (
    day_of_week,
    is_within_availability,
    parse_time,
    slots_for_day,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class AvailableSlot:
    start_time: datetime
    end_time: datetime
    available: bool = True


class AvailabilityResolver:
    def __init__(
        self,
        store: SchedulingStore,
        clock: Callable[[], datetime] = utc_now,
        slot_step_minutes: int = 15,
    ):
        if slot_step_minutes <= 0:
            raise ValueError("slot_step_minutes must be positive")
        self._store = store
        self._clock = clock
        self._step = slot_step_minutes

    def generate_slots(
        self, event_type_id: uuid.UUID, day: date, timezone: str = "UTC"
    ) -> List[AvailableSlot]:
        """
        Return the available slots of an event type on ``day``, sorted by start.

        An inactive event type, one without a schedule, or a weekday without
        schedule slots yields an empty list. A missing event type raises
        NotFoundError. ``timezone`` is expected to be validated by the caller.
        """
        with self._store.session() as session:
            event_type = self._store.get_event_type(session, event_type_id)
            if event_type is None:
                raise NotFoundError("Event type", str(event_type_id))
            if not event_type.is_active or event_type.schedule_id is None:
                return []

            schedule = self._store.get_schedule(session, event_type.schedule_id)
            if schedule is None:
                return []

            dow = day_of_week(day)
            ranges = slots_for_day(schedule.slots, dow)
            if not ranges:
                return []

            day_start = datetime.combine(day, time.min)
            day_end = datetime.combine(day, time.max)
            bookings = self._store.confirmed_starting_between(
                session, event_type.user_id, day_start, day_end
            )
            duration = event_type.duration
            buffer = timedelta(minutes=event_type.buffer_time or 0)

        now = self._clock()
        candidates: List[AvailableSlot] = []
        for slot_range in ranges:
            start_minute = parse_time(slot_range.start_time)
            while is_within_availability(
                dow, start_minute, start_minute + duration, [slot_range]
            ):
                start = day_start + timedelta(minutes=start_minute)
                end = start + timedelta(minutes=duration)
                start_minute += self._step
                if start <= now:
                    continue
                buffered_start = start - buffer
                buffered_end = end + buffer
                available = not any(
                    booking.start_time < buffered_end
                    and booking.end_time > buffered_start
                    for booking in bookings
                )
                candidates.append(AvailableSlot(start, end, available))

        candidates.sort(key=lambda slot: slot.start_time)
        available_slots = [slot for slot in candidates if slot.available]
        logger.debug(
            "Generated slots",
            event_type_id=str(event_type_id),
            date=day.isoformat(),
            candidates=len(candidates),
            available=len(available_slots),
        )
        return available_slots
