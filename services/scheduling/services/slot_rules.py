"""
Pure time and slot rules shared by the resolver, the validator and the
schedule/event type services.

Schedule slots hold wall-clock ``HH:MM`` strings and a day of week where
Sunday is 0. Everything here works on minutes since midnight so that slot
generation and booking validation agree on what "inside a slot" means.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Protocol, Sequence

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

DAY_NAMES = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]


class SlotLike(Protocol):
    day_of_week: int
    start_time: str
    end_time: str


@dataclass(frozen=True)
class SlotRange:
    day_of_week: int
    start_time: str
    end_time: str


def parse_time(value: str) -> int:
    """Convert ``HH:MM`` to minutes since midnight."""
    match = TIME_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def day_of_week(day: date) -> int:
    """Day of week with Sunday = 0 .. Saturday = 6."""
    # date.weekday() is Monday = 0
    return (day.weekday() + 1) % 7


def minutes_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def slots_for_day(slots: Iterable[SlotLike], dow: int) -> List[SlotLike]:
    return sorted(
        (slot for slot in slots if slot.day_of_week == dow),
        key=lambda slot: parse_time(slot.start_time),
    )


def is_within_availability(
    dow: int, start_minute: int, end_minute: int, slots: Iterable[SlotLike]
) -> bool:
    """True when ``[start_minute, end_minute]`` lies inside one slot of ``dow``."""
    for slot in slots_for_day(slots, dow):
        if start_minute >= parse_time(slot.start_time) and end_minute <= parse_time(
            slot.end_time
        ):
            return True
    return False


def duration_fits_any_slot(duration: int, slots: Iterable[SlotLike]) -> bool:
    return any(
        parse_time(slot.end_time) - parse_time(slot.start_time) >= duration
        for slot in slots
    )


def intervals_overlap(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    """Strict intersection; touching intervals do not overlap."""
    return start_a < end_b and end_a > start_b


def validate_slots(slots: Sequence[SlotLike], require_any: bool = True) -> List[str]:
    """
    Check a full set of schedule slots and return every problem found.

    An empty result means the slots are valid. Per day the slots are sorted by
    start time and each one must end after it starts and must not overlap the
    next one.
    """
    errors: List[str] = []
    if require_any and not slots:
        errors.append("At least one day must be active")
        return errors

    for slot in slots:
        if slot.day_of_week < 0 or slot.day_of_week > 6:
            errors.append(f"Invalid day of week: {slot.day_of_week}")

    for dow in range(7):
        day_slots: List[SlotLike] = []
        for slot in slots:
            if slot.day_of_week != dow:
                continue
            bad = [
                value
                for value in (slot.start_time, slot.end_time)
                if not TIME_PATTERN.match(value or "")
            ]
            if bad:
                errors.append(f"Day {dow}: Invalid time format: {bad[0]}")
                continue
            day_slots.append(slot)

        day_slots.sort(key=lambda s: parse_time(s.start_time))
        for slot in day_slots:
            if parse_time(slot.end_time) <= parse_time(slot.start_time):
                errors.append(
                    f"Day {dow}: End time ({slot.end_time}) must be greater than "
                    f"start time ({slot.start_time})"
                )
        for current, following in zip(day_slots, day_slots[1:]):
            if parse_time(current.end_time) > parse_time(following.start_time):
                errors.append(
                    f"Day {dow}: Time slots overlap: {current.start_time}-"
                    f"{current.end_time} and {following.start_time}-{following.end_time}"
                )
    return errors
