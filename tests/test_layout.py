from datetime import date

import pytest
from pydantic import ValidationError

from clinic_schedule.classify import Category
from clinic_schedule.layout import GridConfig, height, hour_labels, layout_day, layout_week, position

GRID = GridConfig(start_hour=8, end_hour=21, pixels_per_hour=60, min_height=40, max_height=240)


def test_position_clamps_to_the_window():
    assert position("07:00", GRID) == 0
    assert position("08:00", GRID) == 0
    assert position("9:30", GRID) == 90
    assert position("22:00", GRID) == GRID.total_height == 780
    assert position("garbage", GRID) == 0


def test_position_scales_with_pixels_per_hour():
    grid = GridConfig(start_hour=8, end_hour=18, pixels_per_hour=120)
    assert position("09:15", grid) == 150


def test_height_floor_cap_and_default():
    assert height(15, GRID) == 40
    assert height(90, GRID) == 90
    assert height(10_000, GRID) == 240
    assert height(None, GRID) == 40  # nominal 30 minutes, then the floor
    assert height(None, GridConfig(min_height=10)) == 30


def test_grid_config_rejects_inverted_window():
    with pytest.raises(ValidationError):
        GridConfig(start_hour=18, end_hour=8)


def test_layout_day_lists_bookings_before_slots(make_record):
    slot = make_record(time_of_day="09:00", subject_id="0")
    late_booking = make_record(time_of_day="11:00")
    early_booking = make_record(time_of_day="09:00", duration_minutes=60)
    overlapping = make_record(time_of_day="09:30")
    other_day = make_record(calendar_date="2025-03-11")

    column = layout_day([slot, late_booking, early_booking, overlapping, other_day], date(2025, 3, 10), GRID)

    assert column.key == "2025-03-10"
    assert [b.record.id for b in column.bands] == [early_booking.id, overlapping.id, late_booking.id, slot.id]
    assert [b.category for b in column.bands][-1] is Category.OPEN_SLOT
    # overlapping bookings are positioned independently
    assert (column.bands[0].top, column.bands[0].height) == (60, 60)
    assert (column.bands[1].top, column.bands[1].height) == (90, 40)


def test_layout_week_has_seven_monday_first_columns(make_record):
    records = [make_record(calendar_date="2025-03-12"), make_record(calendar_date="2025-03-17")]

    week = layout_week(records, date(2025, 3, 14), GRID, today=date(2025, 3, 12))

    assert [c.day for c in week.columns][0] == date(2025, 3, 10)
    assert len(week.columns) == 7
    assert week.end == date(2025, 3, 16)
    assert week.label == "Mar 10–16, 2025"
    assert [len(c.bands) for c in week.columns] == [0, 0, 1, 0, 0, 0, 0]
    assert week.columns[2].is_today
    assert week.total_height == 780


def test_hour_labels():
    labels = hour_labels(GridConfig(start_hour=8, end_hour=10))
    assert labels == ["08:00", "09:00", "10:00"]
