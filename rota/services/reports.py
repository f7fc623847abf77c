"""Date-range and per-location views over the assignment set."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import pandas as pd

from rota.domain.entities import Employee, Shift, Unresolved
from rota.store.entity_store import EntityStore

from .calendar import MAX_RANGE_DAYS, date_range, week_days

REPORT_COLUMNS = [
    "date",
    "day",
    "location",
    "employee",
    "category",
    "role",
    "shift",
    "start_time",
    "end_time",
    "hours",
    "assignment_id",
]


def _matches(term: str, *values: str) -> bool:
    return any(term in (v or "").lower() for v in values)


def build_report(
    store: EntityStore,
    start,
    end,
    search: Optional[str] = None,
    location_name: Optional[str] = None,
    max_days: int = MAX_RANGE_DAYS,
) -> pd.DataFrame:
    """
    One row per assignment dated within [start, end].

    Args:
        store: Entity store to read from
        start, end: Inclusive range (capped at max_days)
        search: Case-insensitive substring matched against employee name, role, category
        location_name: Keep only rows at the location with this name

    Returns:
        DataFrame with REPORT_COLUMNS, sorted by date, location name, shift start time.
        Dangling references show as "Unknown".
    """
    days = {d.iso: d for d in date_range(start, end, max_days=max_days)}
    term = (search or "").strip().lower()
    wanted_location = (location_name or "").strip().lower()

    rows = []
    for a in store.assignments:
        day = days.get(a.date)
        if day is None:
            continue
        emp = store.lookup_employee(a.employee_id)
        shift = store.lookup_shift(a.shift_id)
        loc = store.lookup_location(a.location_id)

        category = emp.category.value if isinstance(emp, Employee) else ""
        role = emp.role if isinstance(emp, Employee) else ""
        name = emp.name if isinstance(emp, Employee) else ""
        if term and not _matches(term, name, role, category):
            continue
        if wanted_location and loc.name.lower() != wanted_location:
            continue

        rows.append(
            {
                "date": a.date,
                "day": day.weekday_long,
                "location": loc.name,
                "employee": emp.name,
                "category": category,
                "role": role,
                "shift": shift.name,
                "start_time": shift.start_time if isinstance(shift, Shift) else "",
                "end_time": shift.end_time if isinstance(shift, Shift) else "",
                "hours": float(shift.hours) if isinstance(shift, Shift) else 0.0,
                "assignment_id": a.id,
            }
        )

    report = pd.DataFrame(rows, columns=REPORT_COLUMNS)
    if report.empty:
        return report
    return report.sort_values(
        ["date", "location", "start_time"], kind="mergesort"
    ).reset_index(drop=True)


def location_day_board(
    store: EntityStore,
    week_start,
) -> Dict[str, Dict[str, List[Tuple["Employee | Unresolved", "Shift | Unresolved"]]]]:
    """Per location, per day of the week: who is working which shift."""
    dates = [d.iso for d in week_days(week_start)]
    board = {loc.id: {iso: [] for iso in dates} for loc in store.locations}
    for a in store.assignments:
        if a.location_id in board and a.date in board[a.location_id]:
            board[a.location_id][a.date].append(
                (store.lookup_employee(a.employee_id), store.lookup_shift(a.shift_id))
            )
    return board


def format_board(store: EntityStore, week_start) -> str:
    days = week_days(week_start)
    board = location_day_board(store, week_start)
    lines = []
    for loc in store.locations:
        lines.append(f"{loc.name}:")
        for day in days:
            entries = board[loc.id][day.iso]
            names = ", ".join(f"{emp.name} ({shift.name})" for emp, shift in entries) or "-"
            lines.append(f"  {day.weekday} {day.iso}: {names}")
    return "\n".join(lines) if lines else "No locations."
