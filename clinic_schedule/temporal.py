"""Date/time normalization for appointment records.

Backend records arrive either with a bare ``YYYY-MM-DD`` date plus a separate
``HH:MM`` time, or with a full timestamp (``2025-03-10T14:30:00``). Everything
downstream works on one naive, local-time ``datetime`` produced here.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from . import config

logger = logging.getLogger(__name__)

_TIME_SEPARATORS = ("T", " ")


def _parse_timestamp(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    stamp = datetime.fromisoformat(value)
    if stamp.tzinfo is not None:
        # aware values are shown on the local wall clock
        stamp = stamp.astimezone().replace(tzinfo=None)
    return stamp


def parse_hhmm(value: str | None) -> tuple[int, int] | None:
    """Parse ``HH:MM`` (``9:5`` and ``09:05:00`` are accepted too)."""
    if not value or not isinstance(value, str):
        return None
    parts = value.strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hour = int(parts[0])
        minute = int(parts[1])
    except ValueError:
        return None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour, minute


def minutes_of_day(value: str | None) -> int | None:
    parsed = parse_hhmm(value)
    if parsed is None:
        return None
    return parsed[0] * 60 + parsed[1]


def normalize(calendar_date: str | None, time_of_day: str | None = None) -> datetime | None:
    """Return the canonical local instant for a date/time pair, or None if unparseable.

    A date containing a time separator is read as a full timestamp and only its
    calendar day is kept when ``time_of_day`` is given; otherwise the date is
    split on ``-`` and taken as local midnight. ``time_of_day`` is overlaid last.
    """
    if not calendar_date or not isinstance(calendar_date, str):
        return None
    value = calendar_date.strip()
    try:
        if any(sep in value for sep in _TIME_SEPARATORS):
            base = _parse_timestamp(value)
        else:
            year, month, day = (int(part) for part in value.split("-"))
            base = datetime(year, month, day)
    except (ValueError, OverflowError):
        logger.debug("Unparseable appointment date %r", calendar_date)
        return None

    if time_of_day is None or not str(time_of_day).strip():
        return base

    parsed = parse_hhmm(time_of_day)
    if parsed is None:
        logger.debug("Unparseable appointment time %r on %s", time_of_day, calendar_date)
        return None
    hour, minute = parsed
    return base.replace(hour=hour, minute=minute, second=0, microsecond=0)


def as_day(value: date | datetime | str | None) -> date | None:
    """Coerce a date, datetime or date string to a calendar day."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    instant = normalize(value)
    return instant.date() if instant else None


def day_key(value: date | datetime) -> str:
    """Canonical ``YYYY-MM-DD`` bucket key in local time."""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def start_of_day(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        value = value.date()
    return datetime(value.year, value.month, value.day)


# Durations -----------------------------------------------------------------


def effective_duration(duration_minutes: int | float | None, default: int | None = None) -> int:
    """Duration used for layout and end-time math; missing or invalid values use the default."""
    if default is None:
        default = config.DEFAULT_APPOINTMENT_DURATION
    if not isinstance(duration_minutes, (int, float)) or isinstance(duration_minutes, bool):
        return default
    if duration_minutes != duration_minutes or duration_minutes <= 0:
        return default
    return round(duration_minutes)


def end_of(instant: datetime, duration_minutes: int | float | None, default: int | None = None) -> datetime:
    return instant + timedelta(minutes=effective_duration(duration_minutes, default))


def format_duration(minutes: int | float | None) -> str:
    """Human readable duration: ``45 min``, ``1 hour``, ``2 hours``, ``1h 30m``."""
    if not isinstance(minutes, (int, float)) or minutes != minutes or minutes < 0:
        return "N/A"
    total = round(minutes)
    if total == 0:
        return "0 min"
    if total < 60:
        return f"{total} min"
    hours, rest = divmod(total, 60)
    if rest == 0:
        return f"{hours} {'hour' if hours == 1 else 'hours'}"
    return f"{hours}h {rest}m"


def end_time(start: str, duration_minutes: int) -> str | None:
    """``HH:MM`` end of a block starting at ``start``; wraps past midnight."""
    start_minutes = minutes_of_day(start)
    if start_minutes is None or duration_minutes is None or duration_minutes < 0:
        return None
    total = start_minutes + int(duration_minutes)
    return f"{(total // 60) % 24:02d}:{total % 60:02d}"


def duration_between(start: str, end: str) -> int | None:
    """Minutes from ``start`` to ``end``; an earlier end is taken as the next day."""
    start_minutes = minutes_of_day(start)
    end_minutes = minutes_of_day(end)
    if start_minutes is None or end_minutes is None:
        return None
    duration = end_minutes - start_minutes
    if duration < 0:
        duration += 24 * 60
    return duration
