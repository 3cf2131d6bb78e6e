from datetime import date, datetime, timedelta, timezone

import pytest

from clinic_schedule.temporal import (
    as_day,
    day_key,
    duration_between,
    effective_duration,
    end_time,
    format_duration,
    normalize,
    parse_hhmm,
)


def test_bare_date_and_local_midnight_timestamp_share_day_key():
    bare = normalize("2025-03-10", "14:30")
    stamped = normalize("2025-03-10T00:00:00", "14:30")
    assert bare == stamped == datetime(2025, 3, 10, 14, 30)
    assert day_key(bare) == day_key(stamped) == "2025-03-10"


@pytest.mark.parametrize("value", ["2025-03-10T09:15:00", "2025-03-10T09:15:00.000", "2025-03-10 09:15"])
def test_timestamp_keeps_its_own_time_without_time_of_day(value):
    assert normalize(value) == datetime(2025, 3, 10, 9, 15)


def test_unpadded_time_is_tolerated():
    assert normalize("2025-3-9", "9:5") == datetime(2025, 3, 9, 9, 5)
    assert parse_hhmm("09:05:00") == (9, 5)


def test_aware_timestamp_is_converted_to_local_wall_clock():
    instant = normalize("2025-03-10T12:00:00Z")
    expected = datetime(2025, 3, 10, 12, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert instant == expected
    assert instant.tzinfo is None


@pytest.mark.parametrize(
    "calendar_date,time_of_day",
    [
        ("", "10:00"),
        (None, "10:00"),
        ("2025-xx-10", "10:00"),
        ("2025-02-30", "10:00"),
        ("2025-03", "10:00"),
        ("2025-03-10", "ab:cd"),
        ("2025-03-10", "25:00"),
        ("2025-03-10", "1000"),
        ("2025-03-10Tgarbage", None),
    ],
)
def test_unparseable_inputs_return_none(calendar_date, time_of_day):
    assert normalize(calendar_date, time_of_day) is None


def test_missing_time_means_midnight():
    assert normalize("2025-03-10", "") == datetime(2025, 3, 10)


def test_as_day_accepts_strings_dates_and_datetimes():
    assert as_day("2025-03-10") == date(2025, 3, 10)
    assert as_day(datetime(2025, 3, 10, 23, 59)) == date(2025, 3, 10)
    assert as_day(date(2025, 3, 10)) == date(2025, 3, 10)
    assert as_day("nope") is None


def test_effective_duration_never_touches_the_stored_value():
    assert effective_duration(None) == 30
    assert effective_duration(0) == 30
    assert effective_duration(-5) == 30
    assert effective_duration(45) == 45
    assert effective_duration(None, default=15) == 15


@pytest.mark.parametrize(
    "minutes,expected",
    [(None, "N/A"), (-1, "N/A"), (0, "0 min"), (45, "45 min"), (60, "1 hour"), (120, "2 hours"), (90, "1h 30m")],
)
def test_format_duration(minutes, expected):
    assert format_duration(minutes) == expected


def test_end_time_and_duration_between_wrap_midnight():
    assert end_time("23:30", 45) == "00:15"
    assert end_time("9:00", 30) == "09:30"
    assert end_time("bad", 30) is None
    assert duration_between("23:00", "01:00") == 120
    assert duration_between("09:00", "09:45") == 45
    assert duration_between("09:00", None) is None
