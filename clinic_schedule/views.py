"""View models for the dashboard pages.

Day, week and month calendars, plus the week-by-week upcoming and past lists,
all derive from one snapshot through the same classification and query code.
Navigation state (selected day, week index) is always passed in by the caller.
"""
from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Iterable

from .classify import Category, Status
from .grouping import (
    format_week_range,
    group_by_day,
    resolve_week_index,
    sort_by_instant,
    week_end,
    week_start,
    weeks_with_records,
)
from .layout import GridConfig, layout_week
from .models import AppointmentRecord, DayBucket, DayView, MonthCell, MonthView, WeekGrid, WeekPageView
from .queries import in_range, on_date, past_due, upcoming, with_status
from .temporal import as_day, day_key


def day_view(
    records: Iterable[AppointmentRecord],
    day: date | datetime | str,
    status: Status | str | None = None,
) -> DayView | None:
    target = as_day(day)
    if target is None:
        return None
    ordered = sort_by_instant(with_status(on_date(records, target), status))
    return DayView(
        key=day_key(target),
        day=target,
        bookings=[r for r in ordered if r.category is Category.BOOKED],
        open_slots=[r for r in ordered if r.category is Category.OPEN_SLOT],
    )


def week_view(
    records: Iterable[AppointmentRecord],
    reference: date | datetime | str,
    status: Status | str | None = None,
    grid: GridConfig | None = None,
    today: date | None = None,
) -> WeekGrid | None:
    target = as_day(reference)
    if target is None:
        return None
    visible = in_range(with_status(records, status), week_start(target), week_end(target))
    return layout_week(visible, target, grid, today)


def month_view(
    records: Iterable[AppointmentRecord],
    reference: date | datetime | str,
    status: Status | str | None = None,
    today: date | None = None,
) -> MonthView | None:
    """Monday-start grid covering the whole month, padded to full weeks.

    Returns None when ``reference`` is not a readable date.
    """
    reference = as_day(reference)
    if reference is None:
        return None
    today = today or date.today()
    first = reference.replace(day=1)
    last = first.replace(day=calendar.monthrange(first.year, first.month)[1])
    grid_start, grid_end = week_start(first), week_end(last)
    buckets = group_by_day(sort_by_instant(in_range(with_status(records, status), grid_start, grid_end)))

    weeks: list[list[MonthCell]] = []
    day = grid_start
    while day <= grid_end:
        week = []
        for _ in range(7):
            day_records = buckets.get(day_key(day), [])
            open_count = sum(1 for r in day_records if r.category is Category.OPEN_SLOT)
            week.append(
                MonthCell(
                    key=day_key(day),
                    day=day,
                    in_month=day.month == first.month,
                    is_today=day == today,
                    booked_count=len(day_records) - open_count,
                    open_slot_count=open_count,
                    records=day_records,
                )
            )
            day += timedelta(days=1)
        weeks.append(week)
    return MonthView(year=first.year, month=first.month, title=f"{first:%B %Y}", weeks=weeks)


def _week_page(weeks, week_index: int) -> WeekPageView:
    if not weeks:
        return WeekPageView(week_count=0, week_index=0)
    week_index = min(max(week_index, 0), len(weeks) - 1)
    window = weeks[week_index]
    ordered = sort_by_instant(window.records)
    days = [
        DayBucket(key=key, day=date.fromisoformat(key), records=bucket)
        for key, bucket in group_by_day(ordered).items()
    ]
    return WeekPageView(
        week_count=len(weeks),
        week_index=week_index,
        label=format_week_range(window.start, window.end),
        window=window.model_copy(update={"records": ordered}),
        days=days,
        has_previous=week_index > 0,
        has_next=week_index < len(weeks) - 1,
    )


def upcoming_weeks_view(
    records: Iterable[AppointmentRecord],
    now: datetime | None = None,
    week_index: int | None = None,
    grace_period: timedelta | None = None,
) -> WeekPageView:
    """Future weeks, soonest first; opens on the current week when it has records.

    Anything :func:`past_weeks_view` would list for the same ``now`` and
    ``grace_period`` is left out.
    """
    now = now or datetime.now()
    weeks = weeks_with_records(upcoming(records, now, grace_period=grace_period))
    if week_index is None:
        week_index = resolve_week_index(weeks, now)
    return _week_page(weeks, week_index)


def past_weeks_view(
    records: Iterable[AppointmentRecord],
    today: date | datetime | None = None,
    week_index: int = 0,
    **past_due_options,
) -> WeekPageView:
    """Past weeks, most recent first (index 0)."""
    today = as_day(today) or date.today()
    weeks = weeks_with_records(past_due(records, today, **past_due_options), descending=True)
    return _week_page(weeks, week_index)
