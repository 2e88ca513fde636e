"""
Tests for slot generation.
"""

import uuid
from datetime import timedelta

import pytest

from services.common.http_errors import NotFoundError
from services.scheduling.schemas import CreateBookingRequest, UpdateEventTypeRequest
from services.scheduling.services.availability import AvailabilityResolver
from services.scheduling.tests.scheduling_test_base import (
    TOMORROW,
    BaseSchedulingTest,
    at,
)


class TestAvailabilityResolver(BaseSchedulingTest):
    def setup_method(self, method):
        super().setup_method(method)
        self.user = self.create_user()
        self.event_type = self.create_event_type(self.user)
        self.resolver = self.container.resolver

    def book(self, start, event_type=None, email="bob@example.com"):
        event_type = event_type or self.event_type
        return self.container.validator.validate_and_create(
            self.user.id,
            CreateBookingRequest(
                event_type_slug=event_type.slug,
                booker_name="Bob",
                booker_email=email,
                start_time=start,
                end_time=start + timedelta(minutes=event_type.duration),
            ),
        )

    def test_full_working_day(self):
        slots = self.resolver.generate_slots(self.event_type.id, TOMORROW)

        # 09:00 through 16:30 every 15 minutes
        assert len(slots) == 31
        assert slots[0].start_time == at(9, 0)
        assert slots[0].end_time == at(9, 30)
        assert slots[-1].start_time == at(16, 30)
        assert slots[-1].end_time == at(17, 0)
        assert all(slot.available for slot in slots)
        starts = [slot.start_time for slot in slots]
        assert starts == sorted(starts)

    def test_buffer_excludes_neighbouring_slots(self):
        buffered = self.create_event_type(self.user, slug="buffered", buffer_time=10)
        self.book(at(10, 0), event_type=buffered)

        slots = self.resolver.generate_slots(buffered.id, TOMORROW)
        starts = {slot.start_time for slot in slots}

        for excluded in (at(9, 30), at(9, 45), at(10, 0), at(10, 15), at(10, 30)):
            assert excluded not in starts
        assert at(9, 15) in starts
        assert at(10, 45) in starts
        assert len(slots) == 26

    def test_booking_of_another_event_type_blocks_slots(self):
        other = self.create_event_type(self.user, slug="other")
        self.book(at(9, 0), event_type=other)

        starts = {
            slot.start_time
            for slot in self.resolver.generate_slots(self.event_type.id, TOMORROW)
        }
        assert at(9, 0) not in starts
        assert at(9, 15) not in starts
        assert at(9, 30) in starts

    def test_cancelled_booking_frees_slot(self):
        booking = self.book(at(11, 0))
        self.container.validator.cancel(booking.id, "bob@example.com")

        slots = self.resolver.generate_slots(self.event_type.id, TOMORROW)
        assert len(slots) == 31

    def test_past_slots_are_skipped(self):
        self.now = at(12, 0)

        slots = self.resolver.generate_slots(self.event_type.id, TOMORROW)
        assert slots[0].start_time == at(12, 15)
        assert len(slots) == 18

    def test_day_without_schedule_slots(self):
        sunday = TOMORROW + timedelta(days=5)
        assert self.resolver.generate_slots(self.event_type.id, sunday) == []

    def test_inactive_event_type(self):
        self.container.event_types.update_event_type(
            self.user.id, self.event_type.id, UpdateEventTypeRequest(is_active=False)
        )
        assert self.resolver.generate_slots(self.event_type.id, TOMORROW) == []

    def test_event_type_without_schedule(self):
        schedule = self.container.schedules.list_schedules(self.user.id)[0]
        self.container.schedules.delete_schedule(self.user.id, schedule.id)

        assert self.resolver.generate_slots(self.event_type.id, TOMORROW) == []

    def test_missing_event_type(self):
        with pytest.raises(NotFoundError):
            self.resolver.generate_slots(uuid.uuid4(), TOMORROW)

    def test_timezone_does_not_shift_slots(self):
        utc = self.resolver.generate_slots(self.event_type.id, TOMORROW)
        tokyo = self.resolver.generate_slots(
            self.event_type.id, TOMORROW, "Asia/Tokyo"
        )
        assert tokyo == utc

    def test_repeated_calls_return_same_slots(self):
        self.book(at(13, 0))

        first = self.resolver.generate_slots(self.event_type.id, TOMORROW)
        second = self.resolver.generate_slots(self.event_type.id, TOMORROW)

        assert first == second
        assert len(first) == 28

    def test_custom_step(self):
        resolver = AvailabilityResolver(
            self.container.store, clock=lambda: self.now, slot_step_minutes=30
        )
        slots = resolver.generate_slots(self.event_type.id, TOMORROW)
        assert len(slots) == 16

    def test_step_must_be_positive(self):
        with pytest.raises(ValueError):
            AvailabilityResolver(self.container.store, slot_step_minutes=0)

    def test_split_day_ranges(self):
        schedule = self.create_schedule(
            self.user,
            name="Split",
            slots=[("09:00", "10:00", 2), ("14:00", "15:00", 2)],
        )
        event_type = self.create_event_type(
            self.user, slug="split", schedule_id=schedule.id
        )

        slots = self.resolver.generate_slots(event_type.id, TOMORROW)
        assert [slot.start_time for slot in slots] == [
            at(9, 0),
            at(9, 15),
            at(9, 30),
            at(14, 0),
            at(14, 15),
            at(14, 30),
        ]
