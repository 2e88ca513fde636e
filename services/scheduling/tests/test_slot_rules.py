"""
Unit tests for the pure time and slot rules.
"""

from datetime import date, datetime

import pytest

from services.scheduling.services.slot_rules import (
    DAY_NAMES,
    SlotRange,
    day_of_week,
    duration_fits_any_slot,
    format_time,
    intervals_overlap,
    is_within_availability,
    minutes_of_day,
    parse_time,
    slots_for_day,
    validate_slots,
)


class TestTimeHelpers:
    def test_parse_time(self):
        assert parse_time("00:00") == 0
        assert parse_time("09:30") == 570
        assert parse_time("23:59") == 1439

    @pytest.mark.parametrize("value", ["9:00", "24:00", "12:60", "noon", "", None])
    def test_parse_time_rejects_bad_input(self, value):
        with pytest.raises(ValueError):
            parse_time(value)

    def test_format_time(self):
        assert format_time(0) == "00:00"
        assert format_time(570) == "09:30"

    def test_day_of_week_starts_on_sunday(self):
        assert day_of_week(date(2025, 1, 5)) == 0
        assert DAY_NAMES[day_of_week(date(2025, 1, 5))] == "Sunday"
        assert day_of_week(date(2025, 1, 6)) == 1
        assert day_of_week(date(2025, 1, 11)) == 6

    def test_minutes_of_day(self):
        assert minutes_of_day(datetime(2025, 1, 6, 14, 45)) == 14 * 60 + 45


class TestAvailability:
    def setup_method(self):
        self.slots = [
            SlotRange(1, "13:00", "17:00"),
            SlotRange(1, "09:00", "12:00"),
            SlotRange(3, "10:00", "11:00"),
        ]

    def test_slots_for_day_sorted_by_start(self):
        monday = slots_for_day(self.slots, 1)
        assert [s.start_time for s in monday] == ["09:00", "13:00"]
        assert slots_for_day(self.slots, 0) == []

    def test_within_one_slot(self):
        assert is_within_availability(1, 9 * 60, 9 * 60 + 30, self.slots)
        # End touching the slot end is allowed
        assert is_within_availability(1, 11 * 60 + 30, 12 * 60, self.slots)

    def test_spanning_two_slots_is_outside(self):
        assert not is_within_availability(1, 11 * 60 + 30, 13 * 60 + 30, self.slots)

    def test_other_day_is_outside(self):
        assert not is_within_availability(2, 9 * 60, 9 * 60 + 30, self.slots)

    def test_duration_fits_any_slot(self):
        assert duration_fits_any_slot(240, self.slots)
        assert not duration_fits_any_slot(241, self.slots)

    def test_intervals_overlap_is_strict(self):
        a = datetime(2025, 1, 7, 10, 0)
        b = datetime(2025, 1, 7, 10, 30)
        c = datetime(2025, 1, 7, 11, 0)
        assert intervals_overlap(a, c, b, c)
        assert not intervals_overlap(a, b, b, c)


class TestValidateSlots:
    def test_valid_slots(self):
        slots = [SlotRange(1, "09:00", "12:00"), SlotRange(1, "12:00", "17:00")]
        assert validate_slots(slots) == []

    def test_empty_slots(self):
        assert validate_slots([]) == ["At least one day must be active"]
        assert validate_slots([], require_any=False) == []

    def test_invalid_day(self):
        errors = validate_slots([SlotRange(7, "09:00", "10:00")])
        assert "Invalid day of week: 7" in errors

    def test_invalid_time_format(self):
        errors = validate_slots([SlotRange(2, "9am", "10:00")])
        assert errors == ["Day 2: Invalid time format: 9am"]

    def test_end_before_start(self):
        errors = validate_slots([SlotRange(1, "17:00", "09:00")])
        assert errors == [
            "Day 1: End time (09:00) must be greater than start time (17:00)"
        ]

    def test_overlap_reported_after_sorting(self):
        errors = validate_slots(
            [SlotRange(4, "11:00", "13:00"), SlotRange(4, "09:00", "12:00")]
        )
        assert errors == ["Day 4: Time slots overlap: 09:00-12:00 and 11:00-13:00"]

    def test_all_errors_collected(self):
        errors = validate_slots(
            [
                SlotRange(1, "10:00", "09:00"),
                SlotRange(2, "09:00", "12:00"),
                SlotRange(2, "10:00", "11:00"),
            ]
        )
        assert len(errors) == 2
