"""Pure filters over an appointment snapshot.

Every function returns a new list and leaves its input untouched. Records whose
date/time cannot be normalized are left out of any date-based result.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable

from . import config
from .classify import Status, has_status, is_booked, is_open_slot
from .models import AppointmentRecord, DashboardStats
from .temporal import as_day, end_of, start_of_day

ALL_STATUSES = "All"


def on_date(records: Iterable[AppointmentRecord], day: date | datetime | str) -> list[AppointmentRecord]:
    """Records whose canonical instant falls on ``day``."""
    target = as_day(day)
    if target is None:
        return []
    return [r for r in records if r.instant is not None and r.instant.date() == target]


def in_range(
    records: Iterable[AppointmentRecord],
    start: date | datetime | str,
    end: date | datetime | str,
) -> list[AppointmentRecord]:
    """Records from ``start`` through ``end`` inclusive, compared by day only."""
    first, last = as_day(start), as_day(end)
    if first is None or last is None:
        return []
    return [r for r in records if r.instant is not None and first <= r.instant.date() <= last]


def is_all_statuses(status: Status | str | None) -> bool:
    """True for a missing or blank filter and for any spelling of ``All``."""
    if status is None:
        return True
    if isinstance(status, Status):
        return False
    text = str(status).strip()
    return not text or text.lower() == ALL_STATUSES.lower()


def with_status(records: Iterable[AppointmentRecord], status: Status | str | None) -> list[AppointmentRecord]:
    if is_all_statuses(status):
        return list(records)
    return [r for r in records if has_status(r.status, status)]


def today(
    records: Iterable[AppointmentRecord],
    now: datetime | None = None,
    *,
    grace_period: timedelta | None = None,
) -> list[AppointmentRecord]:
    """Scheduled records on the current day.

    With ``grace_period`` set, bookings that :func:`past_due` would claim as
    overrun are left out so the two lists never share a record.
    """
    now = now or datetime.now()
    return [
        r
        for r in with_status(on_date(records, now), Status.SCHEDULED)
        if not is_past_due(r, now.date(), now=now, grace_period=grace_period)
    ]


def upcoming_within_hours(
    records: Iterable[AppointmentRecord], now: datetime, hours: float
) -> list[AppointmentRecord]:
    """Scheduled records starting after ``now`` and no later than ``now + hours``."""
    horizon = now + timedelta(hours=hours)
    window = in_range(records, now, horizon)
    return [r for r in with_status(window, Status.SCHEDULED) if now < r.instant <= horizon]


def is_in_future(record: AppointmentRecord, now: datetime | None = None) -> bool:
    instant = record.instant
    return instant is not None and instant > (now or datetime.now())


def upcoming(
    records: Iterable[AppointmentRecord],
    now: datetime | None = None,
    *,
    grace_period: timedelta | None = None,
) -> list[AppointmentRecord]:
    """Records later than the start of the current day that are not past due."""
    now = now or datetime.now()
    cutoff = start_of_day(now)
    return [
        r
        for r in records
        if r.instant is not None
        and r.instant > cutoff
        and not is_past_due(r, now.date(), now=now, grace_period=grace_period)
    ]


def _is_missed(record: AppointmentRecord, day: date) -> bool:
    if record.instant is None or record.instant.date() >= day:
        return False
    if has_status(record.status, Status.SCHEDULED) and is_booked(record):
        return True
    return has_status(record.status, Status.COMPLETED) or has_status(record.status, Status.CANCELLED)


def _overran_grace(record: AppointmentRecord, now: datetime, grace_period: timedelta) -> bool:
    instant = record.instant
    if instant is None or instant.date() != now.date():
        return False
    if not (has_status(record.status, Status.SCHEDULED) and is_booked(record)):
        return False
    return end_of(instant, record.duration_minutes) + grace_period <= now


def is_past_due(
    record: AppointmentRecord,
    day: date,
    *,
    now: datetime | None = None,
    grace_period: timedelta | None = None,
) -> bool:
    if record.instant is None:
        return False
    if has_status(record.status, Status.EXPIRED) or _is_missed(record, day):
        return True
    return now is not None and grace_period is not None and _overran_grace(record, now, grace_period)


def past_due(
    records: Iterable[AppointmentRecord],
    today: date | datetime | str,
    *,
    now: datetime | None = None,
    grace_period: timedelta | None = None,
) -> list[AppointmentRecord]:
    """Past records: Expired, or from an earlier day and booked-Scheduled/Completed/Cancelled.

    A booked Scheduled appointment from a previous day counts as missed even if
    upstream never marked it Expired. Same-day appointments only count when both
    ``now`` and ``grace_period`` are given and the appointment ended at least
    ``grace_period`` ago.
    """
    day = as_day(today)
    if day is None:
        return []
    return [r for r in records if is_past_due(r, day, now=now, grace_period=grace_period)]


def due_for_auto_complete(
    records: Iterable[AppointmentRecord],
    now: datetime | None = None,
    grace_period: timedelta | None = None,
) -> list[AppointmentRecord]:
    """Booked Scheduled records whose end time plus the grace period has passed."""
    now = now or datetime.now()
    if grace_period is None:
        grace_period = timedelta(minutes=config.AUTO_COMPLETE_GRACE_MINUTES)
    result = []
    for record in records:
        if record.instant is None or not is_booked(record):
            continue
        if not has_status(record.status, Status.SCHEDULED):
            continue
        if now >= end_of(record.instant, record.duration_minutes) + grace_period:
            result.append(record)
    return result


def expired_slots(records: Iterable[AppointmentRecord], now: datetime | None = None) -> list[AppointmentRecord]:
    """Open Scheduled slots whose end time has passed without a booking."""
    now = now or datetime.now()
    return [
        r
        for r in records
        if r.instant is not None
        and is_open_slot(r)
        and has_status(r.status, Status.SCHEDULED)
        and end_of(r.instant, r.duration_minutes) < now
    ]


def _percent(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole else 0


def dashboard_stats(records: Iterable[AppointmentRecord], now: datetime | None = None) -> DashboardStats:
    records = list(records)
    now = now or datetime.now()
    todays = on_date(records, now)
    completed = with_status(records, Status.COMPLETED)
    expired = with_status(records, Status.EXPIRED)
    booked = [
        r
        for r in with_status(records, Status.SCHEDULED)
        if is_booked(r) and is_in_future(r, now)
    ]
    slot_total = sum(1 for r in records if is_open_slot(r))
    return DashboardStats(
        total_appointments=len(records),
        today_appointments_count=len(todays),
        today_scheduled_count=len(with_status(todays, Status.SCHEDULED)),
        completed_count=len(completed),
        booked_count=len(booked),
        expired_count=len(expired),
        completed_percentage=_percent(len(completed), len(records)),
        expired_percentage=_percent(len(expired), slot_total),
    )
