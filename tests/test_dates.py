# tests/test_dates.py

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from todo_agenda.core import dates


def test_week_range_monday_and_sunday_share_the_same_week() -> None:
    monday = dates.week_range("2024-01-01")
    assert (monday.start, monday.end) == ("2024-01-01", "2024-01-07")

    sunday = dates.week_range("2024-01-07")
    assert sunday == monday


def test_week_range_crosses_year_boundary() -> None:
    week = dates.week_range("2025-01-01")  # Wednesday
    assert (week.start, week.end) == ("2024-12-30", "2025-01-05")
    assert week.contains("2024-12-31")
    assert not week.contains("2025-01-06")
    assert not week.contains(None)


@pytest.mark.parametrize(
    ("iso", "delta", "expected"),
    [
        ("2024-01-31", 1, "2024-02-01"),
        ("2024-12-31", 1, "2025-01-01"),
        ("2024-03-01", -1, "2024-02-29"),
        ("2024-03-10", 1, "2024-03-11"),  # US DST switch
        ("2024-10-27", 1, "2024-10-28"),  # EU DST switch
    ],
)
def test_add_days(iso: str, delta: int, expected: str) -> None:
    assert dates.add_days(iso, delta) == expected


def test_today_uses_local_calendar_date() -> None:
    assert dates.today(datetime(2024, 3, 1, 23, 30)) == "2024-03-01"
    assert dates.today() == date.today().isoformat()


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2024-03-01", "2024-03-01"),
        ("  2024-03-01 ", "2024-03-01"),
        ("2024-03-01T10:15:00", "2024-03-01"),
        ("2024/03/05", "2024-03-05"),
        ("05.03.2024", "2024-03-05"),
        ("Mar 5, 2024", "2024-03-05"),
        (date(2024, 3, 5), "2024-03-05"),
        (datetime(2024, 3, 5, 8, 0), "2024-03-05"),
        ("", None),
        ("   ", None),
        (None, None),
        ("not a date", None),
        ("2024-02-30", None),
        (20240305, None),
        (True, None),
    ],
)
def test_normalize_date_fails_soft(value, expected) -> None:
    assert dates.normalize_date(value) == expected


def test_timestamps_format_and_order() -> None:
    ts = dates.format_timestamp(datetime(2024, 1, 1, 12, 0, 0, 123456, tzinfo=timezone.utc))
    assert ts == "2024-01-01T12:00:00.123Z"

    later = dates.format_timestamp(datetime(2024, 1, 1, 12, 0, 1, tzinfo=timezone.utc))
    assert dates.timestamp_key(later) > dates.timestamp_key(ts)
    assert dates.timestamp_key("garbage") == 0.0
    assert dates.timestamp_key(None) == 0.0


def test_due_date_display() -> None:
    assert dates.format_due_date("2024-03-01", today_iso="2024-03-05") == "Mar 1 (past due)"
    assert dates.format_due_date("2024-03-09", today_iso="2024-03-05") == "Mar 9"
    assert dates.format_due_date("2024-03-05", today_iso="2024-03-05") == "Mar 5"
    assert dates.format_due_date(None) == ""
