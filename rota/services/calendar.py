"""Calendar range generation for the weekly grid and reporting views."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List

import pandas as pd

from rota.domain.entities import DAYS_OF_WEEK

MAX_RANGE_DAYS = 62


@dataclass(frozen=True)
class CalendarDay:
    day: date
    iso: str  # YYYY-MM-DD, the identity of the day
    weekday: str  # Mon..Sun
    weekday_long: str  # Monday..Sunday


def to_day(value) -> date:
    """Normalize any date-like value to a calendar date, dropping time of day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return pd.Timestamp(value).date()


def make_day(value) -> CalendarDay:
    d = to_day(value)
    return CalendarDay(
        day=d,
        iso=d.isoformat(),
        weekday=DAYS_OF_WEEK[d.weekday()],
        weekday_long=d.strftime("%A"),
    )


def week_days(start) -> List[CalendarDay]:
    """Seven consecutive days beginning at start."""
    first = to_day(start)
    return [make_day(first + timedelta(days=i)) for i in range(7)]


def date_range(start, end, max_days: int = MAX_RANGE_DAYS) -> List[CalendarDay]:
    """Inclusive day sequence from start to end, capped at max_days.

    Returns an empty list when end is before start.
    """
    first, last = to_day(start), to_day(end)
    if last < first or max_days < 1:
        return []
    span = min((last - first).days + 1, max_days)
    return [make_day(first + timedelta(days=i)) for i in range(span)]


def week_start(value) -> date:
    """Return the Monday of the week containing value."""
    d = to_day(value)
    return d - timedelta(days=d.weekday())


def shift_week(start, weeks: int) -> date:
    """Move a week start forwards or backwards by whole weeks."""
    return to_day(start) + timedelta(days=7 * weeks)


def month_range(month: str) -> List[CalendarDay]:
    """All days of a YYYY-MM month."""
    period = pd.Period(month, freq="M")
    return date_range(period.start_time, period.end_time)


def week_label(start) -> str:
    """Header string such as '1 Jan - 7 Jan 2024'."""
    first = to_day(start)
    last = first + timedelta(days=6)
    return f"{first.day} {first.strftime('%b')} - {last.day} {last.strftime('%b')} {last.year}"
