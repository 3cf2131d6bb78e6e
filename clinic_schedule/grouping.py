"""Chronological ordering, day buckets and Monday-start week windows."""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable

from .models import AppointmentRecord, WeekWindow
from .temporal import as_day, day_key

NOT_FOUND = -1


def sort_by_instant(records: Iterable[AppointmentRecord]) -> list[AppointmentRecord]:
    """Stable ascending sort; unparseable records keep their order at the end."""
    return sorted(records, key=lambda r: (r.instant is None, r.instant or datetime.min))


def group_by_day(records: Iterable[AppointmentRecord]) -> dict[str, list[AppointmentRecord]]:
    """Map ``YYYY-MM-DD`` keys to records, in first-seen key order."""
    buckets: dict[str, list[AppointmentRecord]] = {}
    for record in records:
        instant = record.instant
        if instant is None:
            continue
        buckets.setdefault(day_key(instant), []).append(record)
    return buckets


def week_start(value: date | datetime) -> date:
    day = value.date() if isinstance(value, datetime) else value
    return day - timedelta(days=day.weekday())


def week_end(value: date | datetime) -> date:
    return week_start(value) + timedelta(days=6)


def shift_week(start: date, weeks: int) -> date:
    return week_start(start) + timedelta(weeks=weeks)


def records_for_week(records: Iterable[AppointmentRecord], reference: date | datetime) -> list[AppointmentRecord]:
    first, last = week_start(reference), week_end(reference)
    return [r for r in records if r.instant is not None and first <= r.instant.date() <= last]


def weeks_with_records(records: Iterable[AppointmentRecord], descending: bool = False) -> list[WeekWindow]:
    """Partition records into week windows, keeping only windows that hold records.

    Future-looking views use ascending order (soonest first); past-looking views
    pass ``descending=True`` (most recent first). ``index`` follows that order.
    """
    windows: dict[date, list[AppointmentRecord]] = {}
    for record in records:
        instant = record.instant
        if instant is None:
            continue
        windows.setdefault(week_start(instant), []).append(record)

    starts = sorted(windows, reverse=descending)
    return [
        WeekWindow(start=start, end=start + timedelta(days=6), index=index, records=windows[start])
        for index, start in enumerate(starts)
    ]


def find_current_week_index(weeks: list[WeekWindow], reference: date | datetime | str) -> int:
    """Index of the window containing ``reference``, or ``NOT_FOUND``."""
    day = as_day(reference)
    if day is None:
        return NOT_FOUND
    for index, week in enumerate(weeks):
        if week.start <= day <= week.end:
            return index
    return NOT_FOUND


def resolve_week_index(weeks: list[WeekWindow], reference: date | datetime | str) -> int:
    """Current week if it has records, otherwise the nearest available window (0)."""
    index = find_current_week_index(weeks, reference)
    return 0 if index == NOT_FOUND else index


def format_week_range(start: date, end: date) -> str:
    """``Dec 16–22, 2025``-style label; year repeated only when it changes."""
    end_label = f"{end:%b} {end.day}, {end.year}"
    if start.year != end.year:
        return f"{start:%b} {start.day}, {start.year}–{end_label}"
    if start.month == end.month:
        return f"{start:%b} {start.day}–{end.day}, {end.year}"
    return f"{start:%b} {start.day}–{end_label}"
