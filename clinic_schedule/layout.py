"""Week time-grid layout: time of day and duration to vertical pixel bands.

Overlapping records get independent bands; there is no lane packing.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable

from pydantic import BaseModel, model_validator

from . import config
from .classify import Category
from .grouping import format_week_range, sort_by_instant, week_start
from .models import AppointmentRecord, Band, DayColumn, WeekGrid
from .temporal import day_key, effective_duration, minutes_of_day


class GridConfig(BaseModel):
    start_hour: int = config.GRID_START_HOUR
    end_hour: int = config.GRID_END_HOUR
    pixels_per_hour: float = config.GRID_PIXELS_PER_HOUR
    min_height: float = config.GRID_MIN_BAND_PX
    max_height: float = config.GRID_MAX_BAND_PX
    default_duration: int = config.DEFAULT_APPOINTMENT_DURATION

    @model_validator(mode="after")
    def _check_window(self):
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise ValueError("grid window must satisfy 0 <= start_hour < end_hour <= 24")
        if self.min_height > self.max_height:
            raise ValueError("min_height cannot exceed max_height")
        return self

    @property
    def total_height(self) -> float:
        return (self.end_hour - self.start_hour) * self.pixels_per_hour

    @property
    def pixels_per_minute(self) -> float:
        return self.pixels_per_hour / 60


def position(time_of_day: str | None, grid: GridConfig | None = None) -> float:
    """Top offset in pixels, clamped to the visible window."""
    grid = grid or GridConfig()
    minutes = minutes_of_day(time_of_day)
    if minutes is None:
        return 0.0
    offset = (minutes - grid.start_hour * 60) * grid.pixels_per_minute
    return float(min(max(offset, 0.0), grid.total_height))


def height(duration_minutes: int | float | None, grid: GridConfig | None = None) -> float:
    """Band height in pixels, kept between the configured minimum and maximum."""
    grid = grid or GridConfig()
    minutes = effective_duration(duration_minutes, grid.default_duration)
    return float(min(max(minutes * grid.pixels_per_minute, grid.min_height), grid.max_height))


def band(record: AppointmentRecord, grid: GridConfig | None = None) -> Band:
    grid = grid or GridConfig()
    # the canonical instant wins over the raw time string when it parses
    instant = record.instant
    time_of_day = f"{instant:%H:%M}" if instant else record.time_of_day
    return Band(
        record=record,
        top=position(time_of_day, grid),
        height=height(record.duration_minutes, grid),
        category=record.category,
    )


def layout_day(
    records: Iterable[AppointmentRecord],
    day: date,
    grid: GridConfig | None = None,
    today: date | None = None,
) -> DayColumn:
    """Bands for one day; bookings come first, open slots after them."""
    grid = grid or GridConfig()
    ordered = sort_by_instant(r for r in records if r.instant is not None and r.instant.date() == day)
    bookings = [band(r, grid) for r in ordered if r.category is Category.BOOKED]
    slots = [band(r, grid) for r in ordered if r.category is Category.OPEN_SLOT]
    return DayColumn(
        key=day_key(day),
        day=day,
        is_today=day == (today or date.today()),
        bands=bookings + slots,
    )


def hour_labels(grid: GridConfig | None = None) -> list[str]:
    grid = grid or GridConfig()
    return [f"{hour:02d}:00" for hour in range(grid.start_hour, grid.end_hour + 1)]


def layout_week(
    records: Iterable[AppointmentRecord],
    reference: date | datetime,
    grid: GridConfig | None = None,
    today: date | None = None,
) -> WeekGrid:
    """Seven Monday-first columns for the week containing ``reference``."""
    grid = grid or GridConfig()
    records = list(records)
    start = week_start(reference)
    days = [start + timedelta(days=offset) for offset in range(7)]
    return WeekGrid(
        start=start,
        end=days[-1],
        label=format_week_range(start, days[-1]),
        total_height=grid.total_height,
        hour_labels=hour_labels(grid),
        columns=[layout_day(records, day, grid, today) for day in days],
    )
