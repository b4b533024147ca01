# src/todo_agenda/core/dates.py

"""
Calendar-date helpers.

All due dates and agenda anchors are plain `YYYY-MM-DD` strings interpreted
in the local calendar. Arithmetic goes through `datetime.date`, so month/year
roll-over is exact and DST never shifts a day.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any

Clock = Callable[[], datetime]

# Extra input formats accepted by normalize_date() besides ISO.
_DATE_FORMATS = (
    "%Y/%m/%d",
    "%d.%m.%Y",
    "%d/%m/%Y",
    "%b %d %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
)


@dataclass(frozen=True, slots=True)
class WeekRange:
    start: str
    end: str

    def contains(self, iso: str | None) -> bool:
        if not iso:
            return False
        return self.start <= iso <= self.end


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def today(now: datetime | None = None) -> str:
    """Today's date in the local time zone (not UTC)."""
    if now is None:
        return date.today().isoformat()
    if now.tzinfo is not None:
        now = now.astimezone()
    return now.date().isoformat()


def _parse_iso_date(iso: str | None) -> date | None:
    if not iso or not isinstance(iso, str):
        return None
    try:
        return date.fromisoformat(iso.strip()[:10])
    except ValueError:
        return None


def add_days(iso: str, delta: int) -> str:
    """Shift a `YYYY-MM-DD` date by `delta` days. Unparseable input counts as today."""
    d = _parse_iso_date(iso) or date.today()
    return (d + timedelta(days=int(delta))).isoformat()


def week_range(iso: str) -> WeekRange:
    """
    Monday..Sunday span (inclusive) containing `iso`.

    Sunday is the last day of its week, never the first.
    """
    d = _parse_iso_date(iso) or date.today()
    monday = d - timedelta(days=d.weekday())
    sunday = monday + timedelta(days=6)
    return WeekRange(start=monday.isoformat(), end=sunday.isoformat())


def normalize_date(value: Any) -> str | None:
    """
    Coerce any reasonable date-like input to `YYYY-MM-DD`.

    Returns None for empty or unparseable input; never raises.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date().isoformat()

    if isinstance(value, date):
        return value.isoformat()

    if not isinstance(value, str):
        return None

    raw = value.strip()
    if not raw:
        return None

    try:
        return date.fromisoformat(raw).isoformat()
    except ValueError:
        pass

    try:
        dt = datetime.fromisoformat(raw)
    except ValueError:
        dt = None
    if dt is not None:
        if dt.tzinfo is not None:
            dt = dt.astimezone()
        return dt.date().isoformat()

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date().isoformat()
        except ValueError:
            continue

    return None


def is_past_due(iso: str | None, *, today_iso: str | None = None) -> bool:
    if not iso:
        return False
    ref = today_iso or today()
    return iso < ref


def format_timestamp(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a `Z` suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def timestamp_key(raw: str | None) -> float:
    """Sortable epoch seconds for a stored timestamp; 0.0 when unparseable."""
    if not raw:
        return 0.0
    try:
        dt = datetime.fromisoformat(raw.strip())
    except ValueError:
        return 0.0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def format_due_date(iso: str | None, *, today_iso: str | None = None) -> str:
    """Short display form (`Mar 1`), suffixed with `(past due)` when overdue."""
    d = _parse_iso_date(iso)
    if d is None:
        return ""
    text = f"{d.strftime('%b')} {d.day}"
    if is_past_due(d.isoformat(), today_iso=today_iso):
        return f"{text} (past due)"
    return text
