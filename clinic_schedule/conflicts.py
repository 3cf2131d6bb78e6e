"""Overlap checks used when a doctor opens new slots.

Only booked appointments block time. Open slots can be replaced, and cancelled
appointments are ignored unless the caller asks otherwise.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable

from .classify import Status, has_status, is_open_slot
from .models import AppointmentRecord, BlockedRange, SlotAvailability, TimeRange
from .temporal import as_day, effective_duration, parse_hhmm

ADJACENT_GAP_MINUTES = 5


def time_range(record: AppointmentRecord, default_duration: int | None = None) -> TimeRange | None:
    start = record.instant
    if start is None:
        return None
    minutes = effective_duration(record.duration_minutes, default_duration)
    return TimeRange(start=start, end=start + timedelta(minutes=minutes))


def overlaps(start1: datetime, end1: datetime, start2: datetime, end2: datetime) -> bool:
    """Ranges that only touch (``end1 == start2``) do not overlap."""
    return start1 < end2 and start2 < end1


def _blocking(records: Iterable[AppointmentRecord], exclude_cancelled: bool) -> list[tuple[TimeRange, AppointmentRecord]]:
    result = []
    for record in records:
        if is_open_slot(record):
            continue
        if exclude_cancelled and has_status(record.status, Status.CANCELLED):
            continue
        span = time_range(record)
        if span is not None:
            result.append((span, record))
    return result


def slot_conflicts(
    slot_start: datetime,
    slot_duration: int,
    records: Iterable[AppointmentRecord],
    exclude_cancelled: bool = True,
) -> list[AppointmentRecord]:
    """Booked records overlapping a new slot of ``slot_duration`` minutes."""
    slot_end = slot_start + timedelta(minutes=slot_duration)
    return [
        record
        for span, record in _blocking(records, exclude_cancelled)
        if overlaps(slot_start, slot_end, span.start, span.end)
    ]


def blocked_ranges(
    records: Iterable[AppointmentRecord],
    exclude_cancelled: bool = True,
    gap_minutes: int = ADJACENT_GAP_MINUTES,
) -> list[BlockedRange]:
    """Merge booked appointments that overlap or sit within ``gap_minutes`` of each other."""
    spans = sorted(_blocking(records, exclude_cancelled), key=lambda item: item[0].start)
    merged: list[BlockedRange] = []
    for span, record in spans:
        current = merged[-1] if merged else None
        if current is not None and span.start - current.end <= timedelta(minutes=gap_minutes):
            current.end = max(current.end, span.end)
            current.records.append(record)
        else:
            merged.append(BlockedRange(start=span.start, end=span.end, records=[record]))
    return merged


def _slot_start(day: date, time_of_day: str) -> datetime | None:
    parsed = parse_hhmm(time_of_day)
    if parsed is None:
        return None
    return datetime(day.year, day.month, day.day, parsed[0], parsed[1])


def is_time_blocked(
    time_of_day: str, day: date, slot_duration: int, ranges: list[BlockedRange]
) -> tuple[bool, str | None]:
    start = _slot_start(day, time_of_day)
    if start is None:
        return False, None
    end = start + timedelta(minutes=slot_duration)
    for blocked in ranges:
        if overlaps(start, end, blocked.start, blocked.end):
            count = len(blocked.records)
            if count == 1:
                return True, "Conflicts with existing appointment"
            return True, f"Conflicts with {count} consecutive appointments"
    return False, None


def max_duration_before_next(time_of_day: str, day: date, ranges: list[BlockedRange]) -> int | None:
    """Minutes available from ``time_of_day`` until the next blocked range starts."""
    start = _slot_start(day, time_of_day)
    if start is None:
        return None
    following = [blocked.start for blocked in ranges if blocked.start > start]
    if not following:
        return None
    return int((min(following) - start).total_seconds() // 60)


def slot_availability(
    day: date | datetime | str,
    records: Iterable[AppointmentRecord],
    slot_duration: int = 30,
    first_hour: int = 8,
    last_hour: int = 18,
    step_minutes: int = 30,
) -> list[SlotAvailability]:
    """Availability of every candidate start time between ``first_hour`` and ``last_hour``."""
    target = as_day(day)
    if target is None:
        return []
    same_day = [r for r in records if r.instant is not None and r.instant.date() == target]
    ranges = blocked_ranges(same_day)
    result = []
    for minute in range(first_hour * 60, last_hour * 60, step_minutes):
        label = f"{minute // 60:02d}:{minute % 60:02d}"
        blocked, reason = is_time_blocked(label, target, slot_duration, ranges)
        result.append(
            SlotAvailability(
                time=label,
                is_blocked=blocked,
                max_duration=max_duration_before_next(label, target, ranges),
                reason=reason,
            )
        )
    return result
