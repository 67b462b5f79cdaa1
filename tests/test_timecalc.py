from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

import pytest

from app.services.timecalc import (
    elapsed_hours,
    format_elapsed,
    format_hours,
    parse_iso,
    parse_wall_time,
    resolve_manual_window,
    to_iso,
)


def test_to_iso_is_fixed_width_utc():
    cairo = ZoneInfo("Africa/Cairo")
    value = datetime(2024, 1, 1, 2, 0, tzinfo=cairo)

    stored = to_iso(value)

    assert stored == "2024-01-01T00:00:00.000000Z"
    assert parse_iso(stored) == value


def test_to_iso_rejects_naive_datetimes():
    with pytest.raises(ValueError):
        to_iso(datetime(2024, 1, 1, 12, 0))


def test_manual_window_same_day():
    tz = ZoneInfo("UTC")
    start, end = resolve_manual_window(date(2024, 3, 1), time(14, 0), time(15, 30), tz)

    assert start == datetime(2024, 3, 1, 14, 0, tzinfo=tz)
    assert elapsed_hours(start, end) == pytest.approx(1.5)


def test_manual_window_crosses_midnight():
    tz = ZoneInfo("UTC")
    start, end = resolve_manual_window(date(2024, 3, 1), time(23, 0), time(1, 0), tz)

    assert end == datetime(2024, 3, 2, 1, 0, tzinfo=tz)
    assert elapsed_hours(start, end) == pytest.approx(2.0)


def test_elapsed_hours_across_offsets():
    start = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
    end = datetime(2024, 3, 1, 13, 0, tzinfo=ZoneInfo("Africa/Cairo"))  # 11:00 UTC

    assert elapsed_hours(start, end) == pytest.approx(1.0)


def test_parse_wall_time():
    assert parse_wall_time("09:05") == time(9, 5)
    assert parse_wall_time(" 23:59:30 ") == time(23, 59, 30)
    with pytest.raises(ValueError):
        parse_wall_time("")
    with pytest.raises(ValueError):
        parse_wall_time("25:00")


def test_format_hours_and_elapsed():
    assert format_hours(0) == "00h 00m"
    assert format_hours(2.5) == "02h 30m"
    assert format_hours(1.999) == "02h 00m"
    assert format_hours(None) == "00h 00m"
    assert format_elapsed(3661) == "01:01:01"
    assert format_elapsed(-5) == "00:00:00"
