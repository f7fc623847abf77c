"""Services: calendar ranges, hours aggregation and reports."""

from .calendar import CalendarDay, date_range, month_range, week_days, week_start
from .hours import HoursStatus, hours_summary
from .reports import build_report, location_day_board

__all__ = [
    "CalendarDay",
    "date_range",
    "month_range",
    "week_days",
    "week_start",
    "HoursStatus",
    "hours_summary",
    "build_report",
    "location_day_board",
]
