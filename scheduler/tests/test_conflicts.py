"""Tests for the conflict detector."""

from __future__ import annotations

import random
from datetime import date

import pytest

from scheduler.engine import (
    BusinessHours,
    CalendarAppointment,
    TimeGrid,
    describe_conflict,
    find_conflicting_appointment,
    has_conflict,
    overlapping_pairs,
)
from scheduler.engine.timegrid import to_12_hour
from scheduler.tests.conftest import make_appointment

MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)


@pytest.fixture
def grid(hours: BusinessHours) -> TimeGrid:
    return TimeGrid.from_hours(hours)


class TestSameStaff:
    def test_overlap_detected(self, grid):
        existing = make_appointment("a", time="10:00 AM", duration=60)
        moving = make_appointment("b", time="2:00 PM", duration=30)
        assert has_conflict(moving, MONDAY, "10:30", [existing, moving], grid) is True
        assert find_conflicting_appointment(moving, MONDAY, "10:30", [existing, moving], grid) is existing

    def test_touching_end_does_not_conflict(self, grid):
        existing = make_appointment("a", time="10:00 AM", duration=60)
        moving = make_appointment("b", time="2:00 PM", duration=30)
        assert has_conflict(moving, MONDAY, "11:00", [existing, moving], grid) is False

    def test_touching_start_does_not_conflict(self, grid):
        existing = make_appointment("a", time="10:00 AM", duration=60)
        moving = make_appointment("b", time="2:00 PM", duration=30)
        assert has_conflict(moving, MONDAY, "09:30", [existing, moving], grid) is False

    def test_one_minute_over_conflicts(self, grid):
        # 61 minutes occupies five slots, so a 11:00 start now collides
        existing = make_appointment("a", time="10:00 AM", duration=61)
        moving = make_appointment("b", time="2:00 PM", duration=30)
        assert has_conflict(moving, MONDAY, "11:00", [existing, moving], grid) is True

    def test_moving_ending_into_existing_conflicts(self, grid):
        existing = make_appointment("a", time="10:00 AM", duration=30)
        moving = make_appointment("b", time="2:00 PM", duration=45)
        assert has_conflict(moving, MONDAY, "09:30", [existing, moving], grid) is True

    def test_other_date_does_not_conflict(self, grid):
        existing = make_appointment("a", time="10:00 AM")
        moving = make_appointment("b", time="2:00 PM")
        assert has_conflict(moving, TUESDAY, "10:00", [existing, moving], grid) is False

    def test_moving_within_own_range_is_fine(self, grid):
        moving = make_appointment("a", time="10:00 AM", duration=60)
        assert has_conflict(moving, MONDAY, "10:15", [moving], grid) is False

    def test_irregular_stored_time_still_blocks(self, grid):
        existing = make_appointment("a", time="10:05 AM", duration=30)
        moving = make_appointment("b", time="2:00 PM", duration=30)
        assert has_conflict(moving, MONDAY, "10:15", [existing, moving], grid) is True


class TestExclusions:
    def test_different_staff_can_double_book(self, grid):
        existing = make_appointment("a", staff_id="staff-sam", staff_name="Sam")
        moving = make_appointment("b", time="2:00 PM")
        assert has_conflict(moving, MONDAY, "10:00", [existing, moving], grid) is False

    def test_cancelled_never_blocks(self, grid):
        existing = make_appointment("a", status="cancelled", duration=240)
        moving = make_appointment("b", time="2:00 PM")
        for slot in grid.slots:
            assert has_conflict(moving, MONDAY, slot, [existing, moving], grid) is False

    def test_other_location_ignored_when_scoped(self, grid):
        existing = make_appointment("a", location_id="loc-2")
        moving = make_appointment("b", time="2:00 PM", location_id="loc-1")
        appts = [existing, moving]
        assert has_conflict(moving, MONDAY, "10:00", appts, grid, active_location_id="loc-1") is False
        assert has_conflict(moving, MONDAY, "10:00", appts, grid) is True

    def test_unparseable_candidate_date_ignored(self, grid):
        existing = make_appointment("a", date="??")
        moving = make_appointment("b", time="2:00 PM")
        assert has_conflict(moving, MONDAY, "10:00", [existing, moving], grid) is False

    def test_slot_off_grid_raises(self, grid):
        moving = make_appointment("b")
        with pytest.raises(ValueError):
            has_conflict(moving, MONDAY, "10:07", [moving], grid)


class TestResourceKey:
    def test_staff_id_wins_over_shared_name(self, grid):
        # Two different people who happen to share a display name
        existing = make_appointment("a", staff_id="staff-alex-1", staff_name="Alex")
        moving = make_appointment("b", time="2:00 PM", staff_id="staff-alex-2", staff_name="Alex")
        assert has_conflict(moving, MONDAY, "10:00", [existing, moving], grid) is False

    def test_renamed_staff_still_matched_by_id(self, grid):
        existing = make_appointment("a", staff_id="staff-alex", staff_name="Alexandra")
        moving = make_appointment("b", time="2:00 PM", staff_id="staff-alex", staff_name="Alex")
        assert has_conflict(moving, MONDAY, "10:00", [existing, moving], grid) is True

    def test_name_fallback_without_ids(self, grid):
        existing = make_appointment("a", staff_id=None, staff_name="Alex")
        moving = make_appointment("b", time="2:00 PM", staff_id="staff-alex", staff_name="Alex")
        assert has_conflict(moving, MONDAY, "10:00", [existing, moving], grid) is True


class TestBuffer:
    def test_buffer_blocks_following_slot(self, grid):
        existing = make_appointment("a", time="10:00 AM", duration=30, buffer_time=15)
        moving = make_appointment("b", time="2:00 PM", duration=30)
        appts = [existing, moving]
        assert has_conflict(moving, MONDAY, "10:30", appts, grid) is True
        assert has_conflict(moving, MONDAY, "10:45", appts, grid) is False

    def test_buffer_rounds_up_to_whole_slots(self, grid):
        existing = make_appointment("a", time="10:00 AM", duration=30, buffer_time=5)
        moving = make_appointment("b", time="2:00 PM", duration=30)
        assert has_conflict(moving, MONDAY, "10:30", [existing, moving], grid) is True
        assert has_conflict(moving, MONDAY, "10:45", [existing, moving], grid) is False

    def test_moving_appointments_own_buffer_not_applied(self, grid):
        # Pins current behaviour: the moved appointment's buffer (15 min) would
        # run into the 10:30 booking, but only the stationary booking's buffer
        # is considered. Revisit if buffer should mean clearance before the
        # next client.
        later = make_appointment("a", time="10:30 AM", duration=30)
        moving = make_appointment("b", time="2:00 PM", duration=30, buffer_time=15)
        assert has_conflict(moving, MONDAY, "10:00", [later, moving], grid) is False


class TestDocumentValues:
    """Durations and buffers loaded from JSON documents may be strings."""

    def test_string_duration_blocks_full_length(self, grid):
        existing = CalendarAppointment.from_dict({
            "id": "a", "date": "2030-01-07", "time": "10:00 AM",
            "duration": "90", "staffName": "Alex",
        })
        moving = make_appointment("b", time="2:00 PM", staff_id=None, duration=30)
        assert existing.effective_duration == 90
        assert has_conflict(moving, MONDAY, "11:00", [existing, moving], grid) is True
        assert has_conflict(moving, MONDAY, "11:30", [existing, moving], grid) is False

    def test_string_buffer_blocks_following_slot(self, grid):
        existing = CalendarAppointment.from_dict({
            "id": "a", "date": "2030-01-07", "time": "10:00 AM",
            "duration": "30", "bufferTime": "15", "staffName": "Alex",
        })
        moving = make_appointment("b", time="2:00 PM", staff_id=None, duration=30)
        assert existing.effective_buffer == 15
        assert has_conflict(moving, MONDAY, "10:30", [existing, moving], grid) is True

    @pytest.mark.parametrize("raw, expected", [
        ("45", 45),
        ("45.5", 46),
        (" 20 ", 20),
        (30.0, 30),
        ("0", 60),
        ("-15", 60),
        ("abc", 60),
        (None, 60),
        (True, 60),
    ])
    def test_duration_coercion(self, raw, expected):
        assert make_appointment("a", duration=raw).effective_duration == expected

    @pytest.mark.parametrize("raw, expected", [("10", 10), ("", 0), (None, 0), ("-5", 0), ("x", 0)])
    def test_buffer_coercion(self, raw, expected):
        assert make_appointment("a", buffer_time=raw).effective_buffer == expected


class TestMessages:
    def test_names_staff_and_blocking_appointment(self, grid):
        existing = make_appointment("a", time="10:00 AM", duration=60, client_name="Jordan")
        moving = make_appointment("b", time="2:00 PM", duration=30, client_name="Riley")
        conflicting = find_conflicting_appointment(moving, MONDAY, "10:30", [existing, moving], grid)
        message = describe_conflict(moving, conflicting, "10:30")
        assert "Alex" in message
        assert "10:00 AM (60 min)" in message
        assert message.startswith("Cannot move Riley's appointment")

    def test_generic_message(self):
        moving = make_appointment("b", client_name="Riley")
        message = describe_conflict(moving, None, "10:30")
        assert "Alex has a scheduling conflict at 10:30" in message


class TestOverlappingPairs:
    def test_reports_same_staff_overlap(self, grid):
        a = make_appointment("a", time="10:00 AM", duration=60)
        b = make_appointment("b", time="10:30 AM", duration=30)
        c = make_appointment("c", time="10:30 AM", staff_id="staff-sam", staff_name="Sam")
        pairs = overlapping_pairs([a, b, c], grid)
        assert [(x.id, y.id) for x, y in pairs] == [("a", "b")]

    def test_buffer_intrusions_only_on_request(self, grid):
        a = make_appointment("a", time="10:00 AM", duration=30, buffer_time=15)
        b = make_appointment("b", time="10:30 AM", duration=30)
        assert overlapping_pairs([a, b], grid) == []
        pairs = overlapping_pairs([a, b], grid, include_buffers=True)
        assert [(x.id, y.id) for x, y in pairs] == [("a", "b")]

    def test_accepted_move_is_not_reported(self, grid):
        # The move check ignores the moving appointment's own buffer, so the
        # default audit must not flag the result either.
        later = make_appointment("a", time="10:30 AM", duration=30)
        moving = make_appointment("b", time="2:00 PM", duration=30, buffer_time=15)
        appts = [later, moving]
        assert has_conflict(moving, MONDAY, "10:00", appts, grid) is False

        moving.time = "10:00 AM"
        assert overlapping_pairs(appts, grid) == []
        assert len(overlapping_pairs(appts, grid, include_buffers=True)) == 1

    def test_clean_schedule(self, grid):
        a = make_appointment("a", time="10:00 AM", duration=30)
        b = make_appointment("b", time="10:30 AM", duration=30)
        assert overlapping_pairs([a, b], grid) == []


def _occupied_minutes(start_slot: str, duration: int, buffer: int = 0) -> tuple[int, int]:
    hours, minutes = start_slot.split(":")
    start = int(hours) * 60 + int(minutes)
    # round duration and buffer up to whole quarter hours independently
    length = -(-duration // 15) * 15 + -(-buffer // 15) * 15
    return start, start + length


class TestRandomizedSchedules:
    """Compare the detector against a minute-level model on random schedules."""

    SEEDS = range(25)

    @pytest.mark.parametrize("seed", SEEDS)
    def test_accepts_exactly_the_non_overlapping_moves(self, grid, seed):
        rng = random.Random(seed)
        staff = [("staff-alex", "Alex"), ("staff-sam", "Sam"), ("staff-kim", "Kim")]
        days = [MONDAY, TUESDAY]
        open_slots = [s for s in grid.slots if "09:00" <= s < "17:00"]

        appointments = []
        for i in range(12):
            staff_id, staff_name = rng.choice(staff)
            appointments.append(make_appointment(
                f"a{i}",
                date=rng.choice(days),
                time=to_12_hour(rng.choice(open_slots)),
                duration=rng.choice([15, 20, 30, 45, 60, 90]),
                buffer_time=rng.choice([0, 0, 10, 15]),
                staff_id=staff_id,
                staff_name=staff_name,
                status=rng.choice(["confirmed", "confirmed", "arrived", "cancelled"]),
            ))

        for _ in range(40):
            moving = rng.choice(appointments)
            new_date = rng.choice(days)
            new_slot = rng.choice(open_slots)

            expected = False
            new_start, new_end = _occupied_minutes(new_slot, moving.duration)
            for other in appointments:
                if other.id == moving.id or other.is_cancelled:
                    continue
                if other.staff_id != moving.staff_id or other.day != new_date:
                    continue
                start, end = _occupied_minutes(
                    grid.slots[grid.resolve_start(other)], other.duration, other.buffer_time
                )
                if new_start < end and new_end > start:
                    expected = True

            assert has_conflict(moving, new_date, new_slot, appointments, grid) is expected

    @pytest.mark.parametrize("seed", SEEDS)
    def test_accepted_moves_keep_schedule_clean(self, grid, seed):
        rng = random.Random(1000 + seed)
        open_slots = [s for s in grid.slots if "09:00" <= s < "17:00"]

        # Build a clean single-staff day by only adding non-conflicting bookings
        appointments = []
        for i in range(30):
            candidate = make_appointment(
                f"a{i}",
                time="12:00 AM",
                duration=rng.choice([15, 30, 45, 60]),
                buffer_time=rng.choice([0, 0, 5, 15, 30]),
            )
            slot = rng.choice(open_slots)
            if not has_conflict(candidate, MONDAY, slot, appointments, grid):
                candidate.time = to_12_hour(slot)
                appointments.append(candidate)
        assert overlapping_pairs(appointments, grid) == []

        for _ in range(40):
            moving = rng.choice(appointments)
            slot = rng.choice(open_slots)
            if not has_conflict(moving, MONDAY, slot, appointments, grid):
                moving.time = to_12_hour(slot)
            assert overlapping_pairs(appointments, grid) == []
