from datetime import date, datetime

from clinic_schedule.conflicts import (
    blocked_ranges,
    is_time_blocked,
    max_duration_before_next,
    overlaps,
    slot_availability,
    slot_conflicts,
    time_range,
)


def test_touching_ranges_do_not_overlap():
    nine, half, ten = datetime(2025, 3, 10, 9), datetime(2025, 3, 10, 9, 30), datetime(2025, 3, 10, 10)
    assert overlaps(nine, ten, half, ten)
    assert not overlaps(nine, half, half, ten)


def test_time_range_uses_default_duration(make_record):
    span = time_range(make_record(time_of_day="09:00"))
    assert span.end == datetime(2025, 3, 10, 9, 30)
    assert time_range(make_record(calendar_date="bad")) is None


def test_slot_conflicts_ignore_open_slots_and_cancelled(make_record):
    booked = make_record(time_of_day="09:00")
    slot = make_record(time_of_day="09:00", subject_name="Available Slot")
    cancelled = make_record(time_of_day="09:00", status="cancelled")
    start = datetime(2025, 3, 10, 9, 15)

    assert slot_conflicts(start, 30, [booked, slot, cancelled]) == [booked]
    assert slot_conflicts(start, 30, [booked, cancelled], exclude_cancelled=False) == [booked, cancelled]
    assert slot_conflicts(datetime(2025, 3, 10, 9, 30), 30, [booked]) == []


def test_blocked_ranges_merge_adjacent_bookings(make_record):
    a = make_record(time_of_day="09:00")
    b = make_record(time_of_day="09:33")
    c = make_record(time_of_day="11:00")

    ranges = blocked_ranges([c, a, b])

    assert len(ranges) == 2
    assert ranges[0].start == datetime(2025, 3, 10, 9)
    assert ranges[0].end == datetime(2025, 3, 10, 10, 3)
    assert ranges[0].records == [a, b]
    assert ranges[1].records == [c]


def test_time_blocking_and_max_duration(make_record):
    ranges = blocked_ranges([make_record(time_of_day="10:00"), make_record(time_of_day="10:30")])
    day = date(2025, 3, 10)

    assert is_time_blocked("09:45", day, 30, ranges) == (True, "Conflicts with 2 consecutive appointments")
    assert is_time_blocked("09:00", day, 60, ranges) == (False, None)
    assert max_duration_before_next("09:00", day, ranges) == 60
    assert max_duration_before_next("12:00", day, ranges) is None


def test_slot_availability(make_record):
    records = [make_record(time_of_day="09:00"), make_record(calendar_date="2025-03-11", time_of_day="08:00")]

    slots = slot_availability("2025-03-10", records, slot_duration=30, first_hour=8, last_hour=10)

    assert [s.time for s in slots] == ["08:00", "08:30", "09:00", "09:30"]
    assert [s.is_blocked for s in slots] == [False, False, True, False]
    assert slots[0].max_duration == 60
    assert slots[2].reason == "Conflicts with existing appointment"
    assert slot_availability("nope", records) == []
