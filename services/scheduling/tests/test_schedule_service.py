"""
Tests for schedule management and the default schedule rules.
"""

import uuid

import pytest

from services.common.http_errors import ForbiddenError, NotFoundError, ValidationError
from services.scheduling.schemas import (
    CreateScheduleRequest,
    ScheduleSlotIn,
    UpdateScheduleRequest,
)
from services.scheduling.services.user_service import DEFAULT_SCHEDULE_NAME
from services.scheduling.tests.scheduling_test_base import BaseSchedulingTest


def slot(day, start, end):
    return ScheduleSlotIn(day_of_week=day, start_time=start, end_time=end)


class TestScheduleService(BaseSchedulingTest):
    def setup_method(self, method):
        super().setup_method(method)
        self.user = self.create_user()
        self.schedules = self.container.schedules

    def defaults(self):
        return [s for s in self.schedules.list_schedules(self.user.id) if s.is_default]

    def test_new_user_has_working_hours(self):
        schedules = self.schedules.list_schedules(self.user.id)

        assert len(schedules) == 1
        default = schedules[0]
        assert default.name == DEFAULT_SCHEDULE_NAME
        assert default.is_default
        assert [(s.day_of_week, s.start_time, s.end_time) for s in default.slots] == [
            (day, "09:00", "17:00") for day in range(1, 6)
        ]

    def test_create_schedule(self):
        schedule = self.create_schedule(
            self.user, name="Evenings", slots=[("18:00", "21:00", 3)]
        )

        assert schedule.name == "Evenings"
        assert not schedule.is_default
        assert len(schedule.slots) == 1
        assert len(self.schedules.list_schedules(self.user.id)) == 2

    def test_create_default_schedule_clears_previous_default(self):
        schedule = self.create_schedule(self.user, name="New default", is_default=True)

        defaults = self.defaults()
        assert [s.id for s in defaults] == [schedule.id]

    def test_list_puts_default_first(self):
        self.create_schedule(self.user, name="Second")
        schedules = self.schedules.list_schedules(self.user.id)
        assert schedules[0].is_default

    def test_create_rejects_overlapping_slots(self):
        with pytest.raises(ValidationError) as exc_info:
            self.schedules.create_schedule(
                self.user.id,
                CreateScheduleRequest(
                    name="Broken",
                    slots=[slot(1, "09:00", "12:00"), slot(1, "11:00", "13:00")],
                ),
            )
        error = exc_info.value
        assert error.code == "INVALID_SCHEDULE_SLOTS"
        assert error.details["errors"] == [
            "Day 1: Time slots overlap: 09:00-12:00 and 11:00-13:00"
        ]

    def test_create_rejects_end_before_start(self):
        with pytest.raises(ValidationError):
            self.schedules.create_schedule(
                self.user.id,
                CreateScheduleRequest(name="Broken", slots=[slot(2, "12:00", "09:00")]),
            )

    def test_create_rejects_invalid_timezone(self):
        with pytest.raises(ValidationError) as exc_info:
            self.schedules.create_schedule(
                self.user.id, CreateScheduleRequest(name="X", timezone="Not/AZone")
            )
        assert exc_info.value.code == "INVALID_TIMEZONE"

    def test_create_for_unknown_user(self):
        with pytest.raises(NotFoundError):
            self.schedules.create_schedule(
                uuid.uuid4(), CreateScheduleRequest(name="Orphan")
            )

    def test_update_replaces_slots(self):
        schedule = self.create_schedule(self.user)

        updated = self.schedules.update_schedule(
            self.user.id,
            schedule.id,
            UpdateScheduleRequest(
                name="Renamed",
                timezone="Europe/Berlin",
                slots=[slot(4, "10:00", "11:00"), slot(4, "13:00", "14:00")],
            ),
        )

        assert updated.name == "Renamed"
        assert updated.timezone == "Europe/Berlin"
        stored = self.schedules.get_schedule(self.user.id, schedule.id)
        assert [(s.day_of_week, s.start_time) for s in stored.slots] == [
            (4, "10:00"),
            (4, "13:00"),
        ]

    def test_update_rejects_empty_slots(self):
        schedule = self.create_schedule(self.user)
        with pytest.raises(ValidationError) as exc_info:
            self.schedules.update_schedule(
                self.user.id, schedule.id, UpdateScheduleRequest(slots=[])
            )
        assert exc_info.value.message == "At least one time slot is required"

    def test_update_to_default(self):
        schedule = self.create_schedule(self.user)
        self.schedules.update_schedule(
            self.user.id, schedule.id, UpdateScheduleRequest(is_default=True)
        )
        assert [s.id for s in self.defaults()] == [schedule.id]

    def test_set_default(self):
        schedule = self.create_schedule(self.user)
        self.schedules.set_default(self.user.id, schedule.id)
        assert [s.id for s in self.defaults()] == [schedule.id]

    def test_duplicate(self):
        original = self.schedules.list_schedules(self.user.id)[0]

        copy = self.schedules.duplicate_schedule(self.user.id, original.id)

        assert copy.id != original.id
        assert copy.name == f"{DEFAULT_SCHEDULE_NAME} (Copy)"
        assert not copy.is_default
        assert len(copy.slots) == len(original.slots)

    def test_duplicate_with_name(self):
        original = self.schedules.list_schedules(self.user.id)[0]
        copy = self.schedules.duplicate_schedule(self.user.id, original.id, "Summer")
        assert copy.name == "Summer"

    def test_delete_default_promotes_oldest(self):
        default = self.schedules.list_schedules(self.user.id)[0]
        second = self.create_schedule(self.user, name="Second")
        self.create_schedule(self.user, name="Third")

        self.schedules.delete_schedule(self.user.id, default.id)

        assert [s.id for s in self.defaults()] == [second.id]
        assert len(self.schedules.list_schedules(self.user.id)) == 2

    def test_delete_unlinks_event_types(self):
        schedule = self.create_schedule(self.user)
        event_type = self.create_event_type(self.user, schedule_id=schedule.id)

        self.schedules.delete_schedule(self.user.id, schedule.id)

        stored = self.container.event_types.get_event_type(self.user.id, event_type.id)
        assert stored.schedule_id is None

    def test_other_users_schedule_is_forbidden(self):
        other = self.create_user("mallory")
        schedule = self.schedules.list_schedules(other.id)[0]

        with pytest.raises(ForbiddenError):
            self.schedules.get_schedule(self.user.id, schedule.id)
        with pytest.raises(ForbiddenError):
            self.schedules.delete_schedule(self.user.id, schedule.id)

    def test_missing_schedule(self):
        with pytest.raises(NotFoundError):
            self.schedules.get_schedule(self.user.id, uuid.uuid4())
